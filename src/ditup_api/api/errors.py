"""
ditup_api.api.errors

JSON:API error envelopes.

Responsibilities:
- Define `ValidationFailed` for request checks that pydantic cannot express
  (cross-field rules, rules that depend on the caller).
- Install exception handlers that turn `HTTPException`, `RequestValidationError`
  and `ValidationFailed` into `{"errors": [...]}` documents.
"""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_500_INTERNAL_SERVER_ERROR

from ditup_api.api.jsonapi import JsonApiResponse
from ditup_api.observability.logging import get_logger

log = get_logger(__name__)

# Values of these parameters are never echoed back in error documents.
_SECRET_PARAMS = frozenset({"password", "code", "emailVerificationCode"})


@dataclass(frozen=True, slots=True)
class Issue:
    msg: str
    param: str | None = None
    value: Any = None
    pointer: str | None = None


class ValidationFailed(Exception):
    def __init__(self, issues: list[Issue]) -> None:
        super().__init__("; ".join(i.msg for i in issues))
        self.issues = issues


def error_object(
    status: int,
    *,
    detail: str | None = None,
    source: dict[str, str] | None = None,
    meta: dict[str, Any] | None = None,
) -> dict[str, Any]:
    obj: dict[str, Any] = {"status": str(status), "title": HTTPStatus(status).phrase}
    if detail is not None:
        obj["detail"] = detail
    if source:
        obj["source"] = source
    if meta is not None:
        obj["meta"] = meta
    return obj


def _issue_object(issue: Issue) -> dict[str, Any]:
    value = None if issue.param in _SECRET_PARAMS else issue.value
    source: dict[str, str] | None = None
    if issue.pointer is not None:
        source = {"pointer": issue.pointer}
    elif issue.param is not None:
        source = {"parameter": issue.param}
    return error_object(
        HTTP_400_BAD_REQUEST,
        detail=issue.msg,
        source=source,
        meta={"param": issue.param, "msg": issue.msg, "value": jsonable_encoder(value)},
    )


def issues_from_pydantic(errors: list[dict[str, Any]]) -> list[Issue]:
    issues: list[Issue] = []
    for err in errors:
        loc = tuple(err.get("loc", ()))
        where = loc[0] if loc else "body"
        param = str(loc[-1]) if len(loc) > 1 else str(where)
        # A missing field's "input" is the enclosing object; don't echo it back.
        value = None if err.get("type") == "missing" else err.get("input")
        pointer = None
        if where == "body":
            pointer = "/" + "/".join(str(p) for p in loc[1:])
        issues.append(Issue(msg=err.get("msg", "invalid"), param=param, value=value, pointer=pointer))
    return issues


def issues_from_validation_error(exc: ValidationError) -> list[Issue]:
    """Issues of a request document validated inside a route (located in the body)."""
    return issues_from_pydantic([{**err, "loc": ("body", *err["loc"])} for err in exc.errors()])


def errors_response(status: int, errors: list[dict[str, Any]], headers=None) -> JsonApiResponse:
    return JsonApiResponse({"errors": errors}, status_code=status, headers=headers)


async def _http_exception_handler(_: Request, exc: StarletteHTTPException) -> JsonApiResponse:
    return errors_response(
        exc.status_code,
        [error_object(exc.status_code, detail=str(exc.detail))],
        headers=getattr(exc, "headers", None),
    )


async def _request_validation_handler(_: Request, exc: RequestValidationError) -> JsonApiResponse:
    issues = issues_from_pydantic(list(exc.errors()))
    return errors_response(HTTP_400_BAD_REQUEST, [_issue_object(i) for i in issues])


async def _validation_failed_handler(_: Request, exc: ValidationFailed) -> JsonApiResponse:
    return errors_response(HTTP_400_BAD_REQUEST, [_issue_object(i) for i in exc.issues])


async def _unhandled_handler(_: Request, exc: Exception) -> JsonApiResponse:
    log.exception("unhandled_error", error=str(exc))
    return errors_response(
        HTTP_500_INTERNAL_SERVER_ERROR, [error_object(HTTP_500_INTERNAL_SERVER_ERROR)]
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(ValidationFailed, _validation_failed_handler)
    app.add_exception_handler(Exception, _unhandled_handler)
