"""
Validator — turns untrusted, already-deserialized payloads into engine values.

Wire shapes are pydantic models (strict types, no extra keys). Only the first
violation is reported, ranked: structure (missing / unknown keys) before
field format, field format before cross-field rules. A timestamp that has
the right shape but names an impossible instant is reported separately
as INVALID_TIMESTAMP.
"""

import re
from datetime import datetime, timezone
from typing import Annotated, Optional, Dict, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.functional_validators import AfterValidator
from pydantic.types import Strict
from pydantic_core import PydanticCustomError

from notification_prefs.engine.models import (
    DndWindow, EventFlag, EventPayload, PreferenceRecord,
    ErrorCategory, ValidationError,
)
from notification_prefs.engine.window import HHMM_RX, parse_time_of_day

EVENT_KEY_RX = re.compile(r"[A-Za-z0-9_.]+")
ISO_UTC_RX = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2})T([0-9]{2}):([0-9]{2}):([0-9]{2})(?:\.([0-9]+))?Z"
)


# ─── Restricted string types ─────────────────────────────────

def _hhmm(value: str) -> str:
    if not HHMM_RX.fullmatch(value):
        raise PydanticCustomError("invalid_format", "must match HH:MM (00:00-23:59)")
    return value


def _event_key(value: str) -> str:
    if not EVENT_KEY_RX.fullmatch(value):
        raise PydanticCustomError("invalid_format", "invalid event key")
    return value


def _trimmed_event_key(value: str) -> str:
    return _event_key(value.strip())


def _iso_utc(value: str) -> str:
    if not ISO_UTC_RX.fullmatch(value):
        raise PydanticCustomError(
            "invalid_format", "must be ISO8601 UTC like 2025-07-28T23:00:00Z"
        )
    return value


def _required(value: str) -> str:
    value = value.strip()
    if not value:
        raise PydanticCustomError("too_short", "is required")
    return value


HhmmString = Annotated[str, Strict(), AfterValidator(_hhmm)]
EventTypeKey = Annotated[str, Strict(), AfterValidator(_event_key)]
TrimmedEventTypeKey = Annotated[str, Strict(), AfterValidator(_trimmed_event_key)]
IsoUtcString = Annotated[str, Strict(), AfterValidator(_iso_utc)]
RequiredString = Annotated[str, Strict(), AfterValidator(_required)]


# ─── Wire Schemas ────────────────────────────────────────────

class WireModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class DndBody(WireModel):
    start: HhmmString
    end: HhmmString

    @field_validator("end")
    @classmethod
    def _not_equal_to_start(cls, end: str, info: ValidationInfo) -> str:
        if info.data.get("start") == end:
            raise PydanticCustomError("equal_window", "start and end cannot be equal")
        return end


class EventFlagBody(WireModel):
    enabled: StrictBool


class PreferenceBody(WireModel):
    dnd: Optional[DndBody] = None
    event_settings: Dict[EventTypeKey, EventFlagBody] = Field(alias="eventSettings")

    @field_validator("event_settings")
    @classmethod
    def _not_empty(cls, settings: Dict[str, EventFlagBody]) -> Dict[str, EventFlagBody]:
        if not settings:
            raise PydanticCustomError("empty_collection", "cannot be empty")
        return settings


class EventBody(WireModel):
    event_id: RequiredString = Field(alias="eventId")
    user_id: RequiredString = Field(alias="userId")
    event_type: TrimmedEventTypeKey = Field(alias="eventType")
    timestamp: IsoUtcString


# ─── Error Mapping ───────────────────────────────────────────

STRUCTURAL = {"missing", "extra_forbidden"}
CROSS_FIELD = {"empty_collection", "equal_window"}

CODES = {
    "missing": "MISSING_FIELD",
    "extra_forbidden": "EXTRA_PROPERTY",
    "invalid_format": "INVALID_FORMAT",
    "too_short": "TOO_SHORT",
    "empty_collection": "EMPTY_COLLECTION",
    "equal_window": "EQUAL_WINDOW",
}

DETAILS = {
    "missing": "is required",
    "extra_forbidden": "unrecognized field",
    "model_type": "must be an object",
    "model_attributes_type": "must be an object",
    "dict_type": "must be an object",
    "string_type": "must be a string",
    "bool_type": "must be a boolean",
}


def _rank(error: dict) -> int:
    if error["type"] in STRUCTURAL:
        return 0
    if error["type"] in CROSS_FIELD:
        return 2
    return 1


def _field_path(loc) -> Optional[str]:
    parts = [str(p) for p in loc if p != "[key]"]
    return ".".join(parts) or None


def first_violation(exc: PydanticValidationError) -> ValidationError:
    """Collapse a pydantic error list to the single highest-priority violation."""
    errors = sorted(exc.errors(include_url=False), key=_rank)
    err = errors[0]
    kind = err["type"]
    code = CODES.get(kind, "INVALID_TYPE" if kind.endswith("_type") else kind.upper())
    return ValidationError(
        category=ErrorCategory.VALIDATION_ERROR,
        field=_field_path(err["loc"]),
        details=DETAILS.get(kind, err["msg"]),
        code=code,
    )


# ─── Timestamps ──────────────────────────────────────────────

def parse_utc_timestamp(value: str) -> datetime:
    """
    Parse an already format-checked 'YYYY-MM-DDTHH:MM:SS[.fff]Z' string.
    Raises ValueError when the fields do not name a real instant.
    """
    match = ISO_UTC_RX.fullmatch(value)
    if match is None:
        raise ValueError(f"not an ISO8601 UTC timestamp: {value!r}")
    year, month, day, hour, minute, second, fraction = match.groups()
    micros = int((fraction or "")[:6].ljust(6, "0"))
    return datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second),
        micros, tzinfo=timezone.utc,
    )


# ─── Entry Points ────────────────────────────────────────────

def parse_preference_update(raw) -> Union[PreferenceRecord, ValidationError]:
    try:
        body = PreferenceBody.model_validate(raw)
    except PydanticValidationError as e:
        return first_violation(e)

    dnd = None
    if body.dnd is not None:
        dnd = DndWindow(
            start=parse_time_of_day(body.dnd.start),
            end=parse_time_of_day(body.dnd.end),
        )
    settings = {key: EventFlag(enabled=flag.enabled) for key, flag in body.event_settings.items()}
    return PreferenceRecord(event_settings=settings, dnd=dnd)


def parse_event_payload(raw) -> Union[EventPayload, ValidationError]:
    try:
        body = EventBody.model_validate(raw)
    except PydanticValidationError as e:
        return first_violation(e)

    try:
        instant = parse_utc_timestamp(body.timestamp)
    except ValueError:
        return ValidationError(
            category=ErrorCategory.INVALID_TIMESTAMP,
            field="timestamp",
            details="Unparsable date",
            code="INVALID_DATE",
        )

    return EventPayload(
        event_id=body.event_id,
        user_id=body.user_id,
        event_type=body.event_type,
        timestamp=instant,
    )


def parse_user_id(raw) -> Union[str, ValidationError]:
    if not isinstance(raw, str):
        return ValidationError(field="userId", details="must be a string", code="INVALID_TYPE")
    if not raw.strip():
        return ValidationError(field="userId", details="userId is required", code="TOO_SHORT")
    return raw
