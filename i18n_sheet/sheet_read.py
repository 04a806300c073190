"""
Reading translation tables from worksheet rows.

Expected layout:
- Row 1: ``Key`` in column 1, language codes or display names in columns 2..N.
- Row 2+: dotted translation key in column 1, one value per language column.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from i18n_sheet.errors import DuplicateLanguageColumnError, EmptyHeaderError
from i18n_sheet.language_mapping import create_reverse_language_map
from i18n_sheet.path_safety import validate_language_code
from i18n_sheet.structure import KEY_SEPARATOR, set_nested_value

logger = logging.getLogger("i18n_sheet.sheet_read")

# Language columns start after the key column (1-based column numbers).
FIRST_LANGUAGE_COLUMN = 2


@dataclass
class SheetReadResult:
    languages: List[str]
    translations_by_language: Dict[str, Dict[str, Any]]
    duplicates: List[str] = field(default_factory=list)


def _cell_to_text(value: Any) -> str:
    return '' if value is None else str(value).strip()


def parse_headers(raw_headers: Sequence[Any], reverse_language_map: Dict[str, str]) -> List[str]:
    """
    Turn the language header cells into validated language codes.

    Args:
        raw_headers: Header cell values starting at column 2.
        reverse_language_map: Display name to language code.

    Returns:
        List[str]: One language code per column, in column order.

    Raises:
        EmptyHeaderError: If a header cell is blank.
        InvalidLanguageCodeError: If a resolved code is not a valid language code.
        DuplicateLanguageColumnError: If two columns resolve to the same code.
    """
    names = []
    for index, raw in enumerate(raw_headers):
        name = _cell_to_text(raw)
        if not name:
            raise EmptyHeaderError(index + FIRST_LANGUAGE_COLUMN)
        names.append(name)

    codes = [reverse_language_map.get(name, name) for name in names]

    seen_codes: Dict[str, int] = {}
    for index, code in enumerate(codes):
        column = index + FIRST_LANGUAGE_COLUMN
        validate_language_code(code)
        if code in seen_codes:
            raise DuplicateLanguageColumnError(code, seen_codes[code], column)
        seen_codes[code] = column

    return codes


def read_translation_rows(
        rows: Iterable[Sequence[Any]],
        languages: List[str]
) -> Tuple[Dict[str, Dict[str, Any]], List[str]]:
    """
    Accumulate data rows into one nested tree per language.

    Rows without a key are skipped. A key seen more than once is reported as a
    duplicate and the last row wins. ``None`` cells are left out, empty strings
    are kept.

    Args:
        rows: Data rows (row 2 onwards), each a sequence of cell values.
        languages: Language code for each value column, in column order.

    Returns:
        Tuple of the per-language trees and the duplicate keys in detection order.
    """
    translations_by_language: Dict[str, Dict[str, Any]] = {lang: {} for lang in languages}
    seen = set()
    duplicates: Dict[str, None] = {}

    for row in rows:
        if not row:
            continue
        key = row[0]
        if key is None or key == '':
            continue
        key = str(key)
        if key in seen:
            duplicates.setdefault(key, None)
        else:
            seen.add(key)

        path_parts = key.split(KEY_SEPARATOR)
        for index, lang in enumerate(languages):
            column_index = index + 1
            value = row[column_index] if column_index < len(row) else None
            if value is None:
                continue
            if not isinstance(value, str):
                value = str(value)
            set_nested_value(translations_by_language[lang], path_parts, value)

    if duplicates:
        logger.debug("Duplicate keys found while reading rows: %s", ', '.join(duplicates))

    return translations_by_language, list(duplicates)


def stored_cell_value(cell) -> Any:
    """
    Return the value a cell was saved with.

    openpyxl writes an empty string as a text cell without content and loads
    it back as ``None``; such cells read as ``''`` here. Blank cells stay ``None``.
    """
    if cell.value is None and cell.data_type == 'inlineStr':
        return ''
    return cell.value


def read_translations_from_worksheet(worksheet, language_map: Optional[Dict[str, str]] = None) -> SheetReadResult:
    """
    Read an openpyxl worksheet into per-language translation trees.

    Args:
        worksheet: An openpyxl worksheet (read-only worksheets work too).
        language_map: Language code to display name, used to resolve headers.

    Returns:
        SheetReadResult: The language codes, their trees and any duplicate keys.
    """
    reverse_language_map = create_reverse_language_map(language_map)
    row_iter = ([stored_cell_value(cell) for cell in row] for row in worksheet.iter_rows())
    header_cells = list(next(row_iter, ()))
    # The sheet's used range may extend past the header; trailing blanks are not columns.
    while header_cells and header_cells[-1] is None:
        header_cells.pop()
    languages = parse_headers(header_cells[1:], reverse_language_map)

    translations_by_language, duplicates = read_translation_rows(row_iter, languages)
    return SheetReadResult(
        languages=languages,
        translations_by_language=translations_by_language,
        duplicates=duplicates,
    )
