import re
from typing import Set

# Matches {name} and {{name}}, optionally with whitespace around the name.
PLACEHOLDER_REGEX = re.compile(r'\{\{?\s*([^{}]+?)\s*\}\}?')


def extract_placeholders(text) -> Set[str]:
    """
    Extract the interpolation placeholder names used in ``text``.

    Args:
        text: A translated value. Non-string input yields an empty set.

    Returns:
        Set[str]: The unique, trimmed placeholder names.
    """
    if not isinstance(text, str):
        return set()
    return {match.strip() for match in PLACEHOLDER_REGEX.findall(text)}
