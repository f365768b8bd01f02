# promptadmin/exceptions.py
from typing import Dict


class StoreError(Exception):
    """Failure reported by the record store (connection, SQL, permission)"""


class CategoryValidationError(Exception):
    """Field-scoped validation failure for category forms"""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{field}: {message}" for field, message in self.errors.items()))
