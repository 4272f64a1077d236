"""Locale-independent error normalization.

Maps a raw, possibly localized error message to a NormalizedError:

1. Exact lookup of the full message in the translation table.
2. Otherwise, if the message is a string, the ordered partial-match rules;
   the first matching rule wins and its capture groups become variables.

The normalizer only reads immutable tables, so one instance is safely
shared across threads.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from .codes import NormalizedError
from .models import ExactTranslation, ExtractedVariable, Normalization, PartialMatchRule
from .translations import EXACT_TRANSLATIONS, PARTIAL_MATCH_RULES

_NO_MATCH = Normalization(error=None)


class ErrorNormalizer:
    """Classifies error messages against translation tables.

    Example:
        normalizer = ErrorNormalizer()
        result = normalizer.normalize("Document 1x2y is missing (perhaps it was "
                                      "deleted, or you don't have read access?)")
        result.error      # NormalizedError.DOCUMENT_MISSING
        result.variables  # (ExtractedVariable(name='document_id', value='1x2y'),)
        result.locale     # 'en'
    """

    def __init__(
        self,
        exact_translations: Mapping[str, ExactTranslation] | None = None,
        partial_rules: Sequence[PartialMatchRule] | None = None,
    ) -> None:
        """Initialize with translation tables.

        Args:
            exact_translations: Full-message table. Defaults to the built-in table.
            partial_rules: Ordered rules. Defaults to the built-in rules.
        """
        self._exact = EXACT_TRANSLATIONS if exact_translations is None else exact_translations
        self._rules = PARTIAL_MATCH_RULES if partial_rules is None else tuple(partial_rules)

    def normalize(self, message: Any) -> Normalization:
        """Normalize a message, returning error, variables and locale together.

        Never raises; an unrecognized or non-string message yields a
        Normalization whose ``error`` is None.
        """
        if not isinstance(message, str):
            return _NO_MATCH

        exact = self._exact.get(message)
        if exact is not None:
            return Normalization(error=exact.error, locale=exact.locale)

        for rule in self._rules:
            match = rule.pattern.search(message)
            if match is None:
                continue
            variables = tuple(
                ExtractedVariable(name, value or "")
                for name, value in zip(rule.variables, match.groups(), strict=True)
            )
            return Normalization(error=rule.error, variables=variables, locale=rule.locale)

        return _NO_MATCH

    def get_normalized_error(
        self,
        message: Any,
        variables: list[ExtractedVariable] | None = None,
    ) -> NormalizedError | str:
        """Return the NormalizedError for ``message``, or ``""`` if unknown.

        Args:
            message: The raw error message.
            variables: Optional list extended in place with the variables
                extracted by a partial match.
        """
        result = self.normalize(message)
        if result.error is None:
            return ""
        if variables is not None:
            variables.extend(result.variables)
        return result.error

    def get_error_locale(self, message: Any) -> str:
        """Return the locale the message was written in, or ``""`` if unknown."""
        return self.normalize(message).locale or ""


default_normalizer = ErrorNormalizer()


def get_normalized_error(
    message: Any,
    variables: list[ExtractedVariable] | None = None,
) -> NormalizedError | str:
    """Normalize ``message`` with the built-in tables. See ErrorNormalizer."""
    return default_normalizer.get_normalized_error(message, variables)


def get_error_locale(message: Any) -> str:
    """Infer the locale of ``message`` with the built-in tables."""
    return default_normalizer.get_error_locale(message)
