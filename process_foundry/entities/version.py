"""
Version parsing helpers shared by queries, instances and adapters.
"""

import re
from typing import Optional

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

from process_foundry.exceptions import ConversionError

_DOTTED_VERSION = re.compile(r"(\d+(?:\.\d+){0,3})")


def parse_version(text: str, context: str) -> Version:
    """
    Parse a version string.

    Args:
        text: Raw version text (e.g. "1.25.0")
        context: Who the version belongs to, used in the error message

    Raises:
        ConversionError: If the text is not a valid version
    """
    try:
        return Version(str(text).strip())
    except InvalidVersion as e:
        raise ConversionError(f"{context} has an invalid version number '{text}'") from e


def parse_requirement(text: str, context: str) -> SpecifierSet:
    """Parse a version requirement such as '>=1.25,<2'."""
    try:
        return SpecifierSet(str(text).strip())
    except InvalidSpecifier as e:
        raise ConversionError(
            f"{context} has an invalid version requirement '{text}'"
        ) from e


def extract_version(
    output: str, context: str, pattern: Optional[str] = None
) -> Version:
    """
    Pull a version out of a tool's version banner.

    The first dotted number in the output is used unless a pattern with one
    capture group is supplied.
    """
    regex = re.compile(pattern) if pattern else _DOTTED_VERSION
    match = regex.search(output or "")
    if not match:
        raise ConversionError(
            f"Could not find a version number for {context} in output: {output!r}"
        )
    return parse_version(match.group(1), context)
