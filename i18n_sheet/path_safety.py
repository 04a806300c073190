import os
import re

from i18n_sheet.errors import InvalidLanguageCodeError, UnsafeOutputPathError

_IS_ALNUM = re.compile(r'^[0-9A-Za-z]+$')
_SEGMENT_SPLIT = re.compile(r'[_-]')


def validate_language_code(code) -> str:
    """
    Validate a language code such as ``en``, ``pt-BR`` or ``zh_CN``.

    The first segment must be 2-3 alphanumeric characters; any further
    ``-``/``_`` separated segments must be non-empty and alphanumeric.
    Anything containing dots or slashes (e.g. ``../en``) is rejected.

    Args:
        code: The candidate language code.

    Returns:
        str: The code, unchanged.

    Raises:
        InvalidLanguageCodeError: If the code does not match the pattern.
    """
    if not isinstance(code, str):
        raise InvalidLanguageCodeError(code)

    parts = _SEGMENT_SPLIT.split(code)
    first = parts[0]
    if len(first) < 2 or len(first) > 3 or not _IS_ALNUM.match(first):
        raise InvalidLanguageCodeError(code)

    for part in parts[1:]:
        if not part or not _IS_ALNUM.match(part):
            raise InvalidLanguageCodeError(code)

    return code


def safe_join_within(base_dir: str, filename: str) -> str:
    """
    Join ``filename`` onto ``base_dir`` and make sure the result stays inside it.

    Args:
        base_dir: The directory all output must stay in.
        filename: A file name (or relative path) to place inside ``base_dir``.

    Returns:
        str: The absolute candidate path.

    Raises:
        UnsafeOutputPathError: If the joined path escapes ``base_dir``.
    """
    resolved_base = os.path.abspath(base_dir)
    candidate = os.path.abspath(os.path.join(resolved_base, filename))

    try:
        rel = os.path.relpath(candidate, resolved_base)
    except ValueError:
        # Different drives on Windows
        raise UnsafeOutputPathError(candidate)

    if rel == os.curdir:
        return candidate

    first_segment = rel.split(os.sep, 1)[0]
    if first_segment == os.pardir or os.path.isabs(rel):
        raise UnsafeOutputPathError(candidate)

    return candidate
