"""Unit tests for the response classifier."""

from __future__ import annotations

import json

import pytest

from xero_client.classifier import classify, parse_retry_after
from xero_client.errors import (
    ApiError,
    ErrorType,
    ForbiddenError,
    NotFoundError,
    RateLimitedError,
    RateLimitType,
    UnexpectedResponseError,
)

URL = "https://api.xero.com/api.xro/2.0/Invoices"

KNOWN_TYPES = [t for t in ErrorType if t is not ErrorType.OTHER]


def _envelope(error_type: str, message: str = "boom", **extra) -> str:
    return json.dumps({"ErrorNumber": 10, "Type": error_type, "Message": message, **extra})


def test_fourteen_known_types() -> None:
    assert len(KNOWN_TYPES) == 14


@pytest.mark.parametrize("error_type", KNOWN_TYPES, ids=lambda t: t.value)
def test_every_known_type_maps_to_its_variant(error_type: ErrorType) -> None:
    error = classify(400, _envelope(error_type.value), entity="Invoice", url=URL)
    assert isinstance(error, ApiError)
    assert error.error_type is error_type
    assert error.response.raw_type == error_type.value
    assert error.response.error_number == 10
    assert error.status_code == 400


def test_unknown_type_is_other_with_raw_string_kept() -> None:
    error = classify(400, _envelope("BrandNewException", "odd"), url=URL)
    assert isinstance(error, ApiError)
    assert error.error_type is ErrorType.OTHER
    assert error.response.raw_type == "BrandNewException"
    assert "BrandNewException" in str(error)


def test_validation_messages_are_collected() -> None:
    body = _envelope(
        "ValidationException",
        "A validation exception occurred",
        Elements=[
            {"ValidationErrors": [{"Message": "Email address must be valid."}]},
            {"ValidationErrors": [{"Message": "Contact name is required."}]},
        ],
    )
    error = classify(400, body, url=URL)
    assert isinstance(error, ApiError)
    assert error.error_type is ErrorType.VALIDATION
    assert [e.message for e in error.validation_errors] == [
        "Email address must be valid.",
        "Contact name is required.",
    ]
    assert error.to_payload()["validation_errors"] == [e.message for e in error.validation_errors]


def test_payroll_problem_is_validation() -> None:
    body = json.dumps(
        {
            "problem": {
                "type": "application/problem+json",
                "title": "BadRequest",
                "status": 400,
                "detail": "Validation error",
                "invalidFields": [{"name": "FirstName", "reason": "The First Name is required."}],
            }
        }
    )
    error = classify(400, body, url=URL)
    assert isinstance(error, ApiError)
    assert error.error_type is ErrorType.VALIDATION
    assert error.validation_errors[0].field == "FirstName"


def test_404_is_not_found_with_entity() -> None:
    error = classify(404, b"The resource you're looking for cannot be found", entity="Invoice", url=URL)
    assert isinstance(error, NotFoundError)
    assert error.entity == "Invoice"
    assert error.url == URL
    assert error.status_code == 404


def test_403_carries_problem_detail() -> None:
    body = json.dumps(
        {"Title": "Forbidden", "Status": 403, "Detail": "AuthenticationUnsuccessful", "Instance": "abc"}
    )
    error = classify(403, body, url=URL)
    assert isinstance(error, ForbiddenError)
    assert error.detail is not None
    assert error.detail.title == "Forbidden"
    assert error.detail.status == 403
    assert error.detail.detail == "AuthenticationUnsuccessful"


def test_403_without_body() -> None:
    error = classify(403, "", url=URL)
    assert isinstance(error, ForbiddenError)
    assert error.detail is None


@pytest.mark.parametrize(
    "header,expected",
    [
        ("minute", RateLimitType.MINUTE),
        ("day", RateLimitType.DAILY),
        ("AppMinute", RateLimitType.APP_MINUTE),
        ("concurrent", RateLimitType.CONCURRENT),
        ("weekly", RateLimitType.UNKNOWN),
        (None, RateLimitType.UNKNOWN),
    ],
)
def test_429_limit_type(header, expected) -> None:
    headers = {"Retry-After": "27", "X-MinLimit-Remaining": "0", "X-DayLimit-Remaining": "4211"}
    if header is not None:
        headers["X-Rate-Limit-Problem"] = header
    error = classify(429, "", headers, url=URL)
    assert isinstance(error, RateLimitedError)
    assert error.limit_type is expected
    assert error.retry_after == 27.0
    assert error.remaining == {"day": 4211, "minute": 0}


def test_401_is_unauthorised_api_error() -> None:
    body = json.dumps({"Title": "Unauthorized", "Status": 401, "Detail": "TokenExpired: token expired"})
    error = classify(401, body, url=URL)
    assert isinstance(error, ApiError)
    assert error.error_type is ErrorType.UNAUTHORISED
    assert error.status_code == 401
    assert "TokenExpired" in str(error)


def test_non_json_error_body_is_unexpected_response() -> None:
    error = classify(502, "<html>Bad gateway</html>", url=URL)
    assert isinstance(error, UnexpectedResponseError)
    assert error.status_code == 502
    assert error.response_body == "<html>Bad gateway</html>"


def test_retry_after_parsing() -> None:
    assert parse_retry_after("5") == 5.0
    assert parse_retry_after("-3") == 0.0
    assert parse_retry_after(None) is None
    assert parse_retry_after("not a date") is None
    # HTTP-date in the past clamps to zero
    assert parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT") == 0.0
