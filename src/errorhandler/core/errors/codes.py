"""Normalized error identifiers and their English reference messages.

This module provides:
- NormalizedError: Stable identifiers for known remote-service errors
- ERROR_CATALOG: Read-only mapping of identifier to English reference text
- NO_RETRY_ERRORS: Identifiers for which retrying never helps

Identifiers are persisted and compared by log consumers, so a published
value never changes. The catalog is append-only.

Retry Taxonomy
==============

**Terminal (in NO_RETRY_ERRORS)**
    Permission, validation and configuration problems, daily quotas and
    missing documents. The retry executor stops at the first occurrence.

**Retryable**
    Server errors, short-window rate limits, transport timeouts and
    ``NOT_FOUND`` (often returned transiently by eventually-consistent
    backends).

**Retryable with known wait**
    ``USER_RATE_LIMIT_EXCEEDED_RETRY_AFTER_SPECIFIED_TIME`` carries a resume
    timestamp; the executor waits exactly until then.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType


class NormalizedError(str, Enum):
    """Stable, language-independent identifier for a known error.

    The enum value is the identifier itself, so members compare equal to
    plain strings and serialize without conversion.
    """

    # Spreadsheets / documents / drive
    CONDITIONAL_RULE_REFERENCE_DIF_SHEET = "CONDITIONAL_RULE_REFERENCE_DIF_SHEET"
    TRYING_TO_EDIT_PROTECTED_CELL = "TRYING_TO_EDIT_PROTECTED_CELL"
    SHEET_ALREADY_EXISTS_PLEASE_ENTER_ANOTHER_NAME = "SHEET_ALREADY_EXISTS_PLEASE_ENTER_ANOTHER_NAME"
    RANGE_COORDINATES_INVALID = "RANGE_COORDINATES_INVALID"
    RANGE_NOT_FOUND = "RANGE_NOT_FOUND"
    DOCUMENT_MISSING = "DOCUMENT_MISSING"
    NO_ITEM_WITH_GIVEN_ID = "NO_ITEM_WITH_GIVEN_ID"
    ACCESS_DENIED_DRIVEAPP = "ACCESS_DENIED_DRIVEAPP"

    # Mail
    SERVICE_INVOKED_TOO_MANY_TIMES_EMAIL = "SERVICE_INVOKED_TOO_MANY_TIMES_EMAIL"
    LIMIT_EXCEEDED_MAX_RECIPIENTS_PER_MESSAGE = "LIMIT_EXCEEDED_MAX_RECIPIENTS_PER_MESSAGE"
    LIMIT_EXCEEDED_EMAIL_BODY_SIZE = "LIMIT_EXCEEDED_EMAIL_BODY_SIZE"
    LIMIT_EXCEEDED_EMAIL_TOTAL_ATTACHMENTS_SIZE = "LIMIT_EXCEEDED_EMAIL_TOTAL_ATTACHMENTS_SIZE"
    MAIL_SERVICE_NOT_ENABLED = "MAIL_SERVICE_NOT_ENABLED"
    GMAIL_OPERATION_NOT_ALLOWED = "GMAIL_OPERATION_NOT_ALLOWED"
    INVALID_EMAIL = "INVALID_EMAIL"

    # Quotas / rate limits
    USER_RATE_LIMIT_EXCEEDED = "USER_RATE_LIMIT_EXCEEDED"
    USER_RATE_LIMIT_EXCEEDED_RETRY_AFTER_SPECIFIED_TIME = (
        "USER_RATE_LIMIT_EXCEEDED_RETRY_AFTER_SPECIFIED_TIME"
    )
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    DAILY_LIMIT_EXCEEDED = "DAILY_LIMIT_EXCEEDED"
    SERVICE_INVOKED_TOO_MANY_TIMES_FOR_ONE_DAY = "SERVICE_INVOKED_TOO_MANY_TIMES_FOR_ONE_DAY"
    TOO_MANY_SIMULTANEOUS_INVOCATIONS = "TOO_MANY_SIMULTANEOUS_INVOCATIONS"

    # Server / transport
    SERVER_ERROR_RETRY_LATER = "SERVER_ERROR_RETRY_LATER"
    SERVER_ERROR_PLEASE_TRY_AGAIN = "SERVER_ERROR_PLEASE_TRY_AGAIN"
    AN_INTERNAL_ERROR_HAS_OCCURRED = "AN_INTERNAL_ERROR_HAS_OCCURRED"
    INTERNAL_ERROR_ENCOUNTERED = "INTERNAL_ERROR_ENCOUNTERED"
    BACKEND_ERROR = "BACKEND_ERROR"
    SERVICE_ERROR = "SERVICE_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    EMPTY_RESPONSE = "EMPTY_RESPONSE"
    ADDRESS_UNAVAILABLE = "ADDRESS_UNAVAILABLE"
    URL_FETCH_TIMEOUT = "URL_FETCH_TIMEOUT"
    NOT_FOUND = "NOT_FOUND"

    # Authorization / request validation
    AUTHORIZATION_REQUIRED = "AUTHORIZATION_REQUIRED"
    ACCESS_DENIED_SECURITY_POLICY = "ACCESS_DENIED_SECURITY_POLICY"
    INSUFFICIENT_PERMISSION = "INSUFFICIENT_PERMISSION"
    NO_PERMISSION_TO_CALL = "NO_PERMISSION_TO_CALL"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    LOGIN_REQUIRED = "LOGIN_REQUIRED"
    ACTION_NOT_ALLOWED = "ACTION_NOT_ALLOWED"
    INVALID_REQUESTS = "INVALID_REQUESTS"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    BAD_VALUE = "BAD_VALUE"

    @property
    def message(self) -> str:
        """English reference text for this error."""
        return ERROR_CATALOG[self]

    @property
    def is_retriable(self) -> bool:
        """Whether retrying an operation that failed with this error can help."""
        return self not in NO_RETRY_ERRORS


_N = NormalizedError

ERROR_CATALOG: MappingProxyType[NormalizedError, str] = MappingProxyType({
    _N.CONDITIONAL_RULE_REFERENCE_DIF_SHEET:
        "Conditional format rule cannot reference a different sheet.",
    _N.TRYING_TO_EDIT_PROTECTED_CELL:
        "You are trying to edit a protected cell or object. Please contact the "
        "spreadsheet owner to remove protection if you need to edit.",
    _N.SHEET_ALREADY_EXISTS_PLEASE_ENTER_ANOTHER_NAME:
        "A sheet with this name already exists. Please enter another name.",
    _N.RANGE_COORDINATES_INVALID:
        "The coordinates or dimensions of the range are invalid.",
    _N.RANGE_NOT_FOUND: "Range not found",
    _N.DOCUMENT_MISSING:
        "Document is missing (perhaps it was deleted, or you don't have read access?)",
    _N.NO_ITEM_WITH_GIVEN_ID:
        "No item with the given ID could be found, or you do not have permission to access it.",
    _N.ACCESS_DENIED_DRIVEAPP: "Access denied: DriveApp.",
    _N.SERVICE_INVOKED_TOO_MANY_TIMES_EMAIL: "Service invoked too many times for one day: email.",
    _N.LIMIT_EXCEEDED_MAX_RECIPIENTS_PER_MESSAGE: "Limit Exceeded: Email Recipients Per Message.",
    _N.LIMIT_EXCEEDED_EMAIL_BODY_SIZE: "Limit Exceeded: Email Body Size.",
    _N.LIMIT_EXCEEDED_EMAIL_TOTAL_ATTACHMENTS_SIZE: "Limit Exceeded: Email Total Attachments Size.",
    _N.MAIL_SERVICE_NOT_ENABLED: "Mail service not enabled",
    _N.GMAIL_OPERATION_NOT_ALLOWED: "Gmail operation not allowed.",
    _N.INVALID_EMAIL: "Invalid email",
    _N.USER_RATE_LIMIT_EXCEEDED: "User Rate Limit Exceeded",
    _N.USER_RATE_LIMIT_EXCEEDED_RETRY_AFTER_SPECIFIED_TIME:
        "User-rate limit exceeded. Retry after specified time.",
    _N.RATE_LIMIT_EXCEEDED: "Rate Limit Exceeded",
    _N.DAILY_LIMIT_EXCEEDED: "Daily Limit Exceeded",
    _N.SERVICE_INVOKED_TOO_MANY_TIMES_FOR_ONE_DAY: "Service invoked too many times for one day.",
    _N.TOO_MANY_SIMULTANEOUS_INVOCATIONS: "Too many simultaneous invocations.",
    _N.SERVER_ERROR_RETRY_LATER:
        "We're sorry, a server error occurred. Please wait a bit and try again.",
    _N.SERVER_ERROR_PLEASE_TRY_AGAIN: "Server error. Please try again.",
    _N.AN_INTERNAL_ERROR_HAS_OCCURRED: "An internal error has occurred",
    _N.INTERNAL_ERROR_ENCOUNTERED: "Internal error encountered.",
    _N.BACKEND_ERROR: "Backend Error",
    _N.SERVICE_ERROR: "Service error",
    _N.SERVICE_UNAVAILABLE: "Service unavailable. Try again later.",
    _N.EMPTY_RESPONSE: "Empty response",
    _N.ADDRESS_UNAVAILABLE: "Address unavailable",
    _N.URL_FETCH_TIMEOUT: "Timeout",
    _N.NOT_FOUND: "Not Found",
    _N.AUTHORIZATION_REQUIRED: "Authorization is required to perform that action.",
    _N.ACCESS_DENIED_SECURITY_POLICY:
        "Access denied by a security policy established by the administrator of your "
        "organization. Please contact your administrator for further assistance.",
    _N.INSUFFICIENT_PERMISSION: "Insufficient Permission",
    _N.NO_PERMISSION_TO_CALL: "You do not have permission to call this method.",
    _N.INVALID_CREDENTIALS: "Invalid Credentials",
    _N.LOGIN_REQUIRED: "Login Required",
    _N.ACTION_NOT_ALLOWED: "Action not allowed",
    _N.INVALID_REQUESTS: "Invalid requests",
    _N.INVALID_ARGUMENT: "Invalid argument",
    _N.BAD_VALUE: "Bad value",
})

NO_RETRY_ERRORS: frozenset[NormalizedError] = frozenset({
    _N.CONDITIONAL_RULE_REFERENCE_DIF_SHEET,
    _N.TRYING_TO_EDIT_PROTECTED_CELL,
    _N.SHEET_ALREADY_EXISTS_PLEASE_ENTER_ANOTHER_NAME,
    _N.RANGE_COORDINATES_INVALID,
    _N.RANGE_NOT_FOUND,
    _N.DOCUMENT_MISSING,
    _N.NO_ITEM_WITH_GIVEN_ID,
    _N.ACCESS_DENIED_DRIVEAPP,
    _N.SERVICE_INVOKED_TOO_MANY_TIMES_EMAIL,
    _N.LIMIT_EXCEEDED_MAX_RECIPIENTS_PER_MESSAGE,
    _N.LIMIT_EXCEEDED_EMAIL_BODY_SIZE,
    _N.LIMIT_EXCEEDED_EMAIL_TOTAL_ATTACHMENTS_SIZE,
    _N.MAIL_SERVICE_NOT_ENABLED,
    _N.GMAIL_OPERATION_NOT_ALLOWED,
    _N.INVALID_EMAIL,
    _N.DAILY_LIMIT_EXCEEDED,
    _N.SERVICE_INVOKED_TOO_MANY_TIMES_FOR_ONE_DAY,
    _N.AUTHORIZATION_REQUIRED,
    _N.ACCESS_DENIED_SECURITY_POLICY,
    _N.INSUFFICIENT_PERMISSION,
    _N.NO_PERMISSION_TO_CALL,
    _N.INVALID_CREDENTIALS,
    _N.LOGIN_REQUIRED,
    _N.ACTION_NOT_ALLOWED,
    _N.INVALID_REQUESTS,
    _N.INVALID_ARGUMENT,
    _N.BAD_VALUE,
})

del _N
