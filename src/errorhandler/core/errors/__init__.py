"""Error normalization, catalog and structured error models.

Re-exports all public symbols.
"""

from errorhandler.core.errors.codes import ERROR_CATALOG, NO_RETRY_ERRORS, NormalizedError
from errorhandler.core.errors.exceptions import (
    HttpResponseError,
    RemoteScriptError,
    ReportedError,
)
from errorhandler.core.errors.models import (
    ErrorContext,
    ExactTranslation,
    ExtractedVariable,
    Normalization,
    PartialMatchRule,
    ReportLocation,
)
from errorhandler.core.errors.normalizer import (
    ErrorNormalizer,
    default_normalizer,
    get_error_locale,
    get_normalized_error,
)
from errorhandler.core.errors.stack import FormattedStack, format_stack
from errorhandler.core.errors.translations import EXACT_TRANSLATIONS, PARTIAL_MATCH_RULES

__all__ = [
    "ERROR_CATALOG",
    "EXACT_TRANSLATIONS",
    "NO_RETRY_ERRORS",
    "PARTIAL_MATCH_RULES",
    "ErrorContext",
    "ErrorNormalizer",
    "ExactTranslation",
    "ExtractedVariable",
    "FormattedStack",
    "HttpResponseError",
    "NormalizedError",
    "Normalization",
    "PartialMatchRule",
    "RemoteScriptError",
    "ReportLocation",
    "ReportedError",
    "default_normalizer",
    "format_stack",
    "get_error_locale",
    "get_normalized_error",
]
