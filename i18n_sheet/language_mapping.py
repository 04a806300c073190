from typing import Dict, Optional


def create_reverse_language_map(language_map: Optional[Dict[str, str]]) -> Dict[str, str]:
    """
    Invert a ``{code: display_name}`` mapping.

    Args:
        language_map (Optional[Dict[str, str]]): Language code to display name.

    Returns:
        Dict[str, str]: Display name to language code.
    """
    reverse_map: Dict[str, str] = {}
    for code, name in (language_map or {}).items():
        reverse_map[name] = code
    return reverse_map


def display_name(code: str, language_map: Optional[Dict[str, str]]) -> str:
    """Return the header label for ``code``, falling back to the code itself."""
    if language_map and language_map.get(code):
        return language_map[code]
    return code
