"""Exception handlers for the FastAPI app."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from workshop_hub.events_engine.service import EventNotFoundError
from workshop_hub.services.notifications import NotificationNotFoundError
from workshop_hub.services.registrations import (
    DuplicateRegistrationError,
    RegistrationNotFoundError,
    WorkshopFullError,
    WorkshopStateError,
)
from workshop_hub.services.store import WorkshopNotFoundError, WorkshopServiceError


def _error_response(status_code: int, exc: WorkshopServiceError) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "code": exc.code})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    @app.exception_handler(WorkshopNotFoundError)
    async def workshop_not_found_handler(request: Request, exc: WorkshopNotFoundError) -> JSONResponse:  # noqa: WPS430
        return _error_response(404, exc)

    @app.exception_handler(RegistrationNotFoundError)
    async def registration_not_found_handler(request: Request, exc: RegistrationNotFoundError) -> JSONResponse:  # noqa: WPS430
        return _error_response(404, exc)

    @app.exception_handler(NotificationNotFoundError)
    async def notification_not_found_handler(request: Request, exc: NotificationNotFoundError) -> JSONResponse:  # noqa: WPS430
        return _error_response(404, exc)

    @app.exception_handler(EventNotFoundError)
    async def event_not_found_handler(request: Request, exc: EventNotFoundError) -> JSONResponse:  # noqa: WPS430
        return _error_response(404, exc)

    @app.exception_handler(WorkshopStateError)
    async def workshop_state_handler(request: Request, exc: WorkshopStateError) -> JSONResponse:  # noqa: WPS430
        return _error_response(409, exc)

    @app.exception_handler(WorkshopFullError)
    async def workshop_full_handler(request: Request, exc: WorkshopFullError) -> JSONResponse:  # noqa: WPS430
        return _error_response(409, exc)

    @app.exception_handler(DuplicateRegistrationError)
    async def duplicate_registration_handler(request: Request, exc: DuplicateRegistrationError) -> JSONResponse:  # noqa: WPS430
        return _error_response(409, exc)

    @app.exception_handler(WorkshopServiceError)
    async def workshop_service_handler(request: Request, exc: WorkshopServiceError) -> JSONResponse:  # noqa: WPS430
        return _error_response(400, exc)
