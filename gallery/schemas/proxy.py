from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

GET_ALL_RECORDS = "getAllRecords"
GET_RECORD = "getRecord"

class ProxyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: str = GET_ALL_RECORDS
    record_id: Optional[str] = Field(None, alias="recordId")

    @property
    def wants_single_record(self) -> bool:
        return self.action == GET_RECORD and bool(self.record_id)
