# promptadmin/constants.py

# Conversation states
(
    WAITING_CATEGORY_NAME,
    WAITING_CATEGORY_DESCRIPTION,
    WAITING_CATEGORY_SORT_ORDER,
    WAITING_PARENT_CATEGORY,
    WAITING_EDIT_VALUE,
    CONFIRM_DELETE_CATEGORY,
) = range(6)

# Callback data
MANAGE_CATEGORIES = "manage_categories"
ADD_CATEGORY = "add_category"
ADD_SUBCATEGORY = "add_subcategory_"
VIEW_CATEGORY = "view_category_"
EDIT_CATEGORY = "edit_category_"
EDIT_FIELD = "edit_field_"
DELETE_CATEGORY = "delete_category_"
CONFIRM_DELETE = "confirm_delete_category"
MOVE_UP = "move_up_"
MOVE_DOWN = "move_down_"
MOVE_TOP = "move_top_"
PARENT_CATEGORY = "parent_category_"
PARENT_NONE = "parent_category_none"
REPAIR_SORT_ORDERS = "repair_sort_orders"
CANCEL = "cancel"

EDITABLE_FIELDS = ('name', 'description', 'sort_order')
