from enum import Enum
from pydantic import BaseModel, ConfigDict
from typing import Any, Dict, List, NamedTuple, Optional
import logging
from gallery.schemas.record import Record
from gallery.schemas.upload import UploadJob

logger = logging.getLogger(__name__)

class ActionType(str, Enum):
    SET_LOADING = "SET_LOADING"
    SET_RECORDS = "SET_RECORDS"
    SET_SELECTED_RECORD = "SET_SELECTED_RECORD"
    SET_ERROR = "SET_ERROR"
    RESET = "RESET"

class Action(NamedTuple):
    type: ActionType
    payload: Any = None

class AppState(BaseModel):
    model_config = ConfigDict(frozen=True)

    records: List[Record] = []
    selected_record: Optional[Record] = None
    loading: bool = False
    error: Optional[str] = None

INITIAL_STATE = AppState()

def reduce(state: AppState, action: Action) -> AppState:
    """Pure transition function: returns a new state, never mutates `state`."""
    if action.type == ActionType.SET_LOADING:
        loading = bool(action.payload)
        return state.model_copy(update={"loading": loading, "error": None if loading else state.error})
    if action.type == ActionType.SET_RECORDS:
        return state.model_copy(update={"records": list(action.payload), "loading": False, "error": None})
    if action.type == ActionType.SET_SELECTED_RECORD:
        return state.model_copy(update={"selected_record": action.payload})
    if action.type == ActionType.SET_ERROR:
        return state.model_copy(update={"error": action.payload, "loading": False})
    if action.type == ActionType.RESET:
        return INITIAL_STATE
    raise ValueError(f"Unknown action: {action.type!r}")

class RecordStore:
    """Application State holder. The only way in is `dispatch`."""

    def __init__(self, state: AppState = INITIAL_STATE):
        self._state = state

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, action: Action) -> AppState:
        self._state = reduce(self._state, action)
        logger.debug(f"Store dispatch {action.type.value}: loading={self._state.loading}, error={self._state.error}")
        return self._state

# In-memory upload job registry, keyed by upload_id.
# Jobs are ephemeral: dropped on dismiss or when a new file is picked.
UPLOAD_JOBS: Dict[str, UploadJob] = {}
