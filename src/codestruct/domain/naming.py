"""Name and hierarchical-path validation.

Pure functions, no I/O. FAIL-FIRST: violations raise immediately.

A simple name is a Python-style identifier. A hierarchical name joins
simple names with "." and encodes ancestry: "pkg.Service.run".
"""

from __future__ import annotations

import re

from codestruct.domain.exceptions import InvalidDepthError, InvalidNameError

NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
FORBIDDEN_CHARS = frozenset('<>:"/\\|?*')
SEPARATOR = "."
DEFAULT_MAX_NAME_LENGTH = 100
DEFAULT_MAX_DEPTH = 5


def validate_name(name: str, *, max_length: int = DEFAULT_MAX_NAME_LENGTH) -> None:
    """Validate simple (local) name.

    Args:
        name: Name to check.
        max_length: Longest accepted name.

    Raises:
        InvalidNameError: Empty, too long, forbidden characters,
            leading digit, or not an identifier.
    """
    if not isinstance(name, str) or not name.strip():
        raise InvalidNameError(str(name), "name must not be empty")

    if len(name) > max_length:
        raise InvalidNameError(name, f"name must be at most {max_length} characters")

    bad = sorted(FORBIDDEN_CHARS.intersection(name))
    if bad:
        raise InvalidNameError(name, f"name contains forbidden characters {''.join(bad)!r}")

    if name[0].isdigit():
        raise InvalidNameError(name, "name must not start with a digit")

    if NAME_PATTERN.fullmatch(name) is None:
        raise InvalidNameError(name, "name must contain only letters, digits and underscores")


def validate_hierarchical_name(
    path: str,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_length: int = DEFAULT_MAX_NAME_LENGTH,
) -> None:
    """Validate dotted path.

    Depth is checked before segments, so "a.b.c.d.e.f" reports depth
    even if a segment is also malformed.

    Raises:
        InvalidDepthError: More than max_depth segments.
        InvalidNameError: Any segment fails validate_name.
    """
    if not isinstance(path, str) or not path:
        raise InvalidNameError(str(path), "hierarchical name must not be empty")

    segments = path.split(SEPARATOR)
    if len(segments) > max_depth:
        raise InvalidDepthError(path, len(segments), max_depth)

    for segment in segments:
        try:
            validate_name(segment, max_length=max_length)
        except InvalidNameError as e:
            raise InvalidNameError(path, f"segment {segment!r}: {e.reason}") from e


def hierarchical_name_for(name: str, parent: str | None) -> str:
    """Join local name under parent path."""
    return f"{parent}{SEPARATOR}{name}" if parent else name


def depth_of(path: str) -> int:
    """Number of segments in hierarchical name."""
    return len(path.split(SEPARATOR))


def local_name_of(path: str) -> str:
    """Last segment of hierarchical name."""
    return path.rsplit(SEPARATOR, 1)[-1]
