from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional

class Record(BaseModel):
    """One row of the remote table: opaque id, free-form fields, creation time."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    fields: Dict[str, Any] = Field(default_factory=dict)
    created_time: str = Field("", alias="createdTime")

class RecordsPage(BaseModel):
    records: List[Record] = []
    offset: Optional[str] = None
