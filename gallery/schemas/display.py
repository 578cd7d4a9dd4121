from pydantic import BaseModel
from typing import List

class DisplayModel(BaseModel):
    id: str
    title: str
    description: str = ""
    location: str = ""
    price: str = ""
    status: str = ""
    status_tone: str = ""
    property_type: str = ""
    bhk_type: str = ""
    furnished: str = ""
    area_sqft: str = ""
    amenities: List[str] = []
    highlights: List[str] = []
    image_url: str
    created_date: str = ""

class RecordListResponse(BaseModel):
    source: str
    count: int
    records: List[DisplayModel] = []
