from typing import Any, Dict, List, Optional

from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from i18n_sheet.errors import InvalidCellValueError
from i18n_sheet.language_mapping import display_name

KEY_HEADER = 'Key'
COLUMN_WIDTH = 40
HEADER_FILL = PatternFill(start_color="D3D3D3", end_color="D3D3D3", fill_type="solid")
HEADER_FONT = Font(bold=True)
# Excel's limit; openpyxl truncates longer strings without telling.
MAX_CELL_LENGTH = 32767


def build_translation_rows(
        translations,
        language_codes: List[str],
        language_map: Optional[Dict[str, str]] = None,
        missing_value: Any = ''
) -> List[List[Any]]:
    """
    Build the header and data rows for a translation table.

    Columns follow ``language_codes`` exactly; rows are sorted by key. Missing
    values are rendered as ``missing_value`` (an empty string by default).

    Args:
        translations: Mapping (or TranslationTable) of key to ``{lang: value}``.
        language_codes (List[str]): Column order.
        language_map (Optional[Dict[str, str]]): Language code to display name for the header.
        missing_value: What to put in cells that have no translation.

    Returns:
        List[List[Any]]: The header row followed by one row per key.
    """
    header = [KEY_HEADER] + [display_name(code, language_map) for code in language_codes]
    rows = [header]
    for key in sorted(translations.keys()):
        lang_values = translations.get(key) or {}
        row = [key]
        for lang in language_codes:
            value = lang_values.get(lang)
            row.append(missing_value if value is None else value)
        rows.append(row)
    return rows


def check_cell_value(value: Any, key: str, lang: Optional[str] = None) -> None:
    """
    Make sure a string can be stored in a worksheet cell unchanged.

    Raises:
        InvalidCellValueError: If the value holds control characters Excel
            rejects or exceeds the cell length limit.
    """
    if not isinstance(value, str):
        return
    if ILLEGAL_CHARACTERS_RE.search(value):
        raise InvalidCellValueError(key, lang, "contains control characters that worksheets cannot store")
    if len(value) > MAX_CELL_LENGTH:
        raise InvalidCellValueError(key, lang, f"is longer than {MAX_CELL_LENGTH} characters")


def create_translation_worksheet(
        workbook,
        sheet_name: str,
        translations,
        language_codes: List[str],
        language_map: Optional[Dict[str, str]] = None
):
    """
    Add a styled translation worksheet to an openpyxl workbook.

    Cells without a translation are left blank, while explicit empty strings
    are stored as empty text cells.

    Returns:
        The created worksheet.

    Raises:
        InvalidCellValueError: If a key or value cannot be stored as is.
    """
    rows = build_translation_rows(translations, language_codes, language_map, missing_value=None)
    for row in rows[1:]:
        key = row[0]
        check_cell_value(key, key)
        for lang, value in zip(language_codes, row[1:]):
            check_cell_value(value, key, lang)

    worksheet = workbook.create_sheet(title=sheet_name)
    for row in rows:
        worksheet.append(row)

    # Values starting with '=' are text, not formulas.
    for row_cells in worksheet.iter_rows(min_row=2):
        for cell in row_cells:
            if isinstance(cell.value, str) and cell.value.startswith('='):
                cell.data_type = 's'

    for column_index in range(1, len(rows[0]) + 1):
        worksheet.column_dimensions[get_column_letter(column_index)].width = COLUMN_WIDTH

    for cell in worksheet[1]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL

    return worksheet
