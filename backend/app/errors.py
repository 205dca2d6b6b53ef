"""Error taxonomy and FastAPI exception handlers."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FieldError:
    """One violated input rule."""

    field: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class SearchValidationError(ValueError):
    """Raised with every violated rule of a request, never just the first."""

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = list(errors)
        summary = "; ".join(f"{error.field}: {error.message}" for error in self.errors)
        super().__init__(summary or "Invalid request")


class StoreUnavailableError(RuntimeError):
    """Raised when the record store cannot be reached or times out.

    Retryable by the caller; this layer never retries on its own.
    """

    retryable = True

    def __init__(self, message: str = "Record store unavailable") -> None:
        super().__init__(message)


@contextmanager
def translate_store_errors() -> Iterator[None]:
    """Surface connectivity failures as StoreUnavailableError with an opaque message."""

    try:
        yield
    except (OperationalError, InterfaceError, PoolTimeoutError) as exc:
        logger.warning("Record store call failed: %s", exc.__class__.__name__)
        raise StoreUnavailableError() from exc


class SelfReferenceError(ValueError):
    """Raised when a decision is linked to itself."""


def _validation_payload(errors: list[dict[str, str]]) -> dict[str, object]:
    count = len(errors)
    return {
        "error": {
            "code": "validation_error",
            "message": f"{count} invalid field{'s' if count != 1 else ''}",
            "errors": errors,
        }
    }


def _request_field_name(location: tuple[object, ...]) -> str:
    parts = [str(part) for part in location if part not in {"body", "query", "path"}]
    return ".".join(parts) or "body"


def register_exception_handlers(app: FastAPI) -> None:
    """Attach JSON error handlers for the error taxonomy."""

    @app.exception_handler(SearchValidationError)
    async def _handle_search_validation(_: Request, exc: SearchValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content=_validation_payload([error.as_dict() for error in exc.errors]),
        )

    @app.exception_handler(RequestValidationError)
    async def _handle_request_validation(_: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"field": _request_field_name(tuple(item.get("loc", ()))), "message": str(item.get("msg", ""))}
            for item in exc.errors()
        ]
        return JSONResponse(status_code=400, content=_validation_payload(errors))

    @app.exception_handler(SelfReferenceError)
    async def _handle_self_reference(_: Request, exc: SelfReferenceError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": {"code": "bad_request", "message": str(exc)}},
        )

    @app.exception_handler(StoreUnavailableError)
    async def _handle_store_unavailable(request: Request, exc: StoreUnavailableError) -> JSONResponse:
        logger.warning("Record store unavailable while serving %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=503,
            content={
                "error": {
                    "code": "store_unavailable",
                    "message": str(exc),
                    "retryable": exc.retryable,
                }
            },
        )
