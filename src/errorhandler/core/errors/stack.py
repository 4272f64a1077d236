"""Stack trace normalization.

Re-renders stack frames as ``at <function>(<file>:<line>)`` so stacks
from different environments compare equal in log aggregation. Two
native formats are understood, and frames keep their encounter order:

- Python tracebacks: ``File "<file>", line <n>, in <function>``
- Remote script hosts: ``at <file>[ (<addon>)]:<line>[ (<function>)]``
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import NamedTuple

from errorhandler.core.constants import UNKNOWN_FUNCTION

_PYTHON_FRAME = r'File "(?P<py_file>[^"]+)", line (?P<py_line>\d+)(?:, in (?P<py_func>\S+))?'


class FormattedStack(NamedTuple):
    """Normalized frames plus the function name of the first frame."""

    frames: tuple[str, ...]
    first_function_name: str

    @property
    def text(self) -> str:
        """Frames joined for appending to an indented log message."""
        return "\n    ".join(self.frames)


@lru_cache(maxsize=32)
def _frame_pattern(addon_name: str) -> re.Pattern[str]:
    addon = rf"(?:\s\({re.escape(addon_name)}\))?" if addon_name else ""
    remote = (
        rf"\bat\s(?P<at_file>[^:\n]+?){addon}:(?P<at_line>\d+)"
        r"(?:\s\((?P<at_func>[^)\n]+)\))?"
    )
    return re.compile(f"{_PYTHON_FRAME}|{remote}", re.MULTILINE)


def format_stack(raw_stack: str, addon_name: str | None = None) -> FormattedStack:
    """Parse a raw stack and re-render its frames.

    Args:
        raw_stack: Stack text as produced by the host.
        addon_name: Project name the host appended to file names
            (``Code (My Addon):12``); stripped from the output.

    Returns:
        FormattedStack. A stack with no recognizable frame yields no frames
        and an empty function name. Frames without a function name are
        skipped when picking ``first_function_name``.
    """
    frames: list[str] = []
    first_function_name = ""

    for match in _frame_pattern(addon_name or "").finditer(raw_stack):
        if match.group("py_file") is not None:
            file_name, line, function = match.group("py_file", "py_line", "py_func")
        else:
            file_name, line, function = match.group("at_file", "at_line", "at_func")

        if not first_function_name:
            first_function_name = function or ""

        frames.append(f"at {function or UNKNOWN_FUNCTION}({file_name}:{line})")

    return FormattedStack(frames=tuple(frames), first_function_name=first_function_name)
