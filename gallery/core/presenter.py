"""
Pure mapping from loosely-typed records to display fields.

The table schema has changed over time, so each display field is read from an
ordered list of candidate keys and the first non-empty value wins.
"""
from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence
from gallery.schemas.display import DisplayModel
from gallery.schemas.record import Record

PLACEHOLDER_IMAGE_URL = "https://images.unsplash.com/photo-1560518883-ce09059eeffa?auto=format&fit=crop&w=800&q=80"
PLACEHOLDER_TITLE = "Untitled"
PLACEHOLDER_PRICE = "Price on request"

TITLE_KEYS = ("title", "Title", "name", "Name")
DESCRIPTION_KEYS = ("description", "Description", "summary", "notes", "Notes")
LOCATION_KEYS = ("location", "Attachment Summary")
PRICE_KEYS = ("price_estimate", "price", "Price")
STATUS_KEYS = ("status", "status 2", "Status")
PROPERTY_TYPE_KEYS = ("property_type", "category", "Category", "Status")
BHK_TYPE_KEYS = ("bhk_type", "Assignee")
FURNISHED_KEYS = ("furnished_status",)
AREA_KEYS = ("area_sqft", "Attachments")
AMENITY_KEYS = ("amenities",)
HIGHLIGHT_KEYS = ("highlights",)
IMAGE_KEYS = ("screenshot_refs", "image", "Image", "photo", "Photo")

LIST_SEPARATOR = ", "

def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False

def first_present(fields: Mapping[str, Any], keys: Sequence[str]) -> Optional[Any]:
    for key in keys:
        value = fields.get(key)
        if not _is_empty(value):
            return value
    return None

def extract_image(value: Any) -> str:
    """Attachment array -> first url; bare string -> itself; else placeholder."""
    if isinstance(value, (list, tuple)):
        if value and isinstance(value[0], Mapping):
            url = value[0].get("url")
            if isinstance(url, str) and url.strip():
                return url
        return PLACEHOLDER_IMAGE_URL
    if isinstance(value, str) and value.strip():
        return value
    return PLACEHOLDER_IMAGE_URL

def as_list(value: Any) -> List[str]:
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    if isinstance(value, str) and value:
        return value.split(LIST_SEPARATOR)
    return []

def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, (list, tuple)):
        return LIST_SEPARATOR.join(str(v) for v in value)
    return str(value)

def status_tone(status: str) -> str:
    if not status:
        return ""
    if status == "Available":
        return "available"
    if status == "Sold":
        return "sold"
    return "pending"

def format_created(created_time: str) -> str:
    if not created_time:
        return ""
    try:
        return datetime.fromisoformat(created_time.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return created_time

def present(record: Record) -> DisplayModel:
    fields = record.fields
    status = _text(first_present(fields, STATUS_KEYS))
    return DisplayModel(
        id=record.id,
        title=_text(first_present(fields, TITLE_KEYS), PLACEHOLDER_TITLE),
        description=_text(first_present(fields, DESCRIPTION_KEYS)),
        location=_text(first_present(fields, LOCATION_KEYS)),
        price=_text(first_present(fields, PRICE_KEYS), PLACEHOLDER_PRICE),
        status=status,
        status_tone=status_tone(status),
        property_type=_text(first_present(fields, PROPERTY_TYPE_KEYS)),
        bhk_type=_text(first_present(fields, BHK_TYPE_KEYS)),
        furnished=_text(first_present(fields, FURNISHED_KEYS)),
        area_sqft=_text(first_present(fields, AREA_KEYS)),
        amenities=as_list(first_present(fields, AMENITY_KEYS)),
        highlights=as_list(first_present(fields, HIGHLIGHT_KEYS)),
        image_url=extract_image(first_present(fields, IMAGE_KEYS)),
        created_date=format_created(record.created_time),
    )

def present_all(records: Sequence[Record]) -> List[DisplayModel]:
    return [present(r) for r in records]
