from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Optional, Dict, Any, Mapping, Union

MINUTES_PER_DAY = 1440


@dataclass(frozen=True)
class TimeOfDay:
    """Minutes since midnight UTC, 0 <= minutes < 1440."""
    minutes: int

    @property
    def hhmm(self) -> str:
        return f"{self.minutes // 60:02d}:{self.minutes % 60:02d}"

    def __str__(self) -> str:
        return self.hhmm


@dataclass(frozen=True)
class DndWindow:
    start: TimeOfDay
    end: TimeOfDay

    def to_dict(self) -> Dict[str, str]:
        return {"start": self.start.hhmm, "end": self.end.hhmm}


@dataclass(frozen=True)
class EventFlag:
    enabled: bool

    def to_dict(self) -> Dict[str, bool]:
        return {"enabled": self.enabled}


@dataclass(frozen=True)
class PreferenceRecord:
    event_settings: Mapping[str, EventFlag]
    dnd: Optional[DndWindow] = None

    def __post_init__(self):
        if not isinstance(self.event_settings, MappingProxyType):
            object.__setattr__(self, "event_settings", MappingProxyType(dict(self.event_settings)))

    def flag_for(self, event_type: str) -> Optional[EventFlag]:
        return self.event_settings.get(event_type)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dnd": self.dnd.to_dict() if self.dnd else None,
            "eventSettings": {k: v.to_dict() for k, v in self.event_settings.items()},
        }


@dataclass(frozen=True)
class EventPayload:
    event_id: str
    user_id: str
    event_type: str
    timestamp: datetime   # tz-aware, UTC


class Reason(str, Enum):
    DND_ACTIVE = "DND_ACTIVE"
    USER_UNSUBSCRIBED_FROM_EVENT = "USER_UNSUBSCRIBED_FROM_EVENT"


@dataclass(frozen=True)
class ProcessNotification:
    def to_dict(self) -> Dict[str, str]:
        return {"decision": "PROCESS_NOTIFICATION"}


@dataclass(frozen=True)
class DoNotNotify:
    reason: Reason

    def to_dict(self) -> Dict[str, str]:
        return {"decision": "DO_NOT_NOTIFY", "reason": self.reason.value}


Decision = Union[ProcessNotification, DoNotNotify]


class ErrorCategory(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_TIMESTAMP = "INVALID_TIMESTAMP"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass(frozen=True)
class ValidationError:
    """First violation found in an untrusted payload. Returned, not raised."""
    category: ErrorCategory = ErrorCategory.VALIDATION_ERROR
    field: Optional[str] = None
    details: Optional[str] = None
    code: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        body = {"error": self.category.value}
        if self.code:
            body["code"] = self.code
        if self.field:
            body["field"] = self.field
        if self.details:
            body["details"] = self.details
        return body
