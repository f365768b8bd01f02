# promptadmin/models/base.py
from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict

class StoredRecord(BaseModel):
    """Row as returned by a RecordStore: id and created_at are assigned
    by the store, updated_at is set on every update"""
    id: UUID
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class OrderedRecord(StoredRecord):
    """Named record ordered within its sibling group by sort_order"""
    name: str
    description: Optional[str] = None
    sort_order: int
