"""
FastAPI server — preference and event endpoints.
Run: uvicorn notification_prefs.api.server:create_app --factory --port 3000
  or: notification-prefs (uses NOTIFY_HOST / NOTIFY_PORT)
"""

from typing import Any, Optional

import uvicorn
from fastapi import APIRouter, Body, FastAPI, Request
from fastapi.responses import JSONResponse

from notification_prefs.api.errors import ApiError, install_error_handlers
from notification_prefs.api.middleware import RequestContextMiddleware
from notification_prefs.config import Settings, get_settings
from notification_prefs.engine.decision import NotificationGate
from notification_prefs.engine.models import Decision, ProcessNotification, ValidationError
from notification_prefs.engine.store import InMemoryStore, PreferenceStore
from notification_prefs.engine.validator import parse_user_id
from notification_prefs.logs import configure_logging

# 202: will be processed; 200: explicitly decided not to notify
STATUS_ACCEPTED = 202
STATUS_DECIDED = 200

router = APIRouter()


def _gate(request: Request) -> NotificationGate:
    return request.app.state.gate


def _user_id(raw: str) -> str:
    user_id = parse_user_id(raw)
    if isinstance(user_id, ValidationError):
        raise ApiError.from_validation(user_id)
    return user_id


def decision_response(decision: Decision) -> JSONResponse:
    status = STATUS_ACCEPTED if isinstance(decision, ProcessNotification) else STATUS_DECIDED
    return JSONResponse(decision.to_dict(), status_code=status)


# ─── Endpoints ───────────────────────────────────────────────

@router.get("/health")
def health():
    return {"ok": True}


@router.post("/events")
def submit_event(request: Request, payload: Any = Body(None)):
    result = _gate(request).submit_event(payload)
    if isinstance(result, ValidationError):
        raise ApiError.from_validation(result)
    return decision_response(result)


@router.get("/preferences/{user_id}")
def read_preferences(user_id: str, request: Request):
    record = _gate(request).get_preferences(_user_id(user_id))
    if record is None:
        raise ApiError.not_found()
    return record.to_dict()


@router.api_route("/preferences/{user_id}", methods=["POST", "PUT"])
def replace_preferences(user_id: str, request: Request, payload: Any = Body(None)):
    user_id = _user_id(user_id)
    result = _gate(request).replace_preferences(user_id, payload)
    if isinstance(result, ValidationError):
        raise ApiError.from_validation(result)
    return {"ok": True, "userId": user_id}


# ─── App ─────────────────────────────────────────────────────

def create_app(settings: Optional[Settings] = None,
               store: Optional[PreferenceStore] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(title="Notification Preferences Service", version="1.0.0")
    app.state.settings = settings
    app.state.gate = NotificationGate(store if store is not None else InMemoryStore())

    app.add_middleware(RequestContextMiddleware, access_log=not settings.is_test)
    install_error_handlers(app)
    app.include_router(router)
    return app


def main():
    settings = get_settings()
    uvicorn.run(
        "notification_prefs.api.server:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
