"""
AI auto-translation of a translation workbook.

Fills every empty cell of each target language column whose source-language
cell has text, then saves the workbook in place.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from tqdm import tqdm

from i18n_sheet import file_io
from i18n_sheet.translator import TranslationProvider

logger = logging.getLogger("i18n_sheet.translate")

HEADER_ROW_INDEX = 1
KEY_COLUMN = 1


@dataclass
class HeaderColumn:
    header: str
    column: int


@dataclass
class MissingCell:
    row: int
    source_text: str


def _to_trimmed_string(value: Any) -> str:
    return '' if value is None else str(value).strip()


def collect_headers(worksheet) -> List[HeaderColumn]:
    headers = []
    for cell in worksheet[HEADER_ROW_INDEX]:
        header = _to_trimmed_string(cell.value)
        if header:
            headers.append(HeaderColumn(header=header, column=cell.column))
    return headers


def resolve_column(headers: List[HeaderColumn], lang_code: str,
                   language_map: Optional[Dict[str, str]] = None) -> Optional[int]:
    """
    Find the column for ``lang_code``.

    Tries, case-insensitively: the exact code, the exact display name, a header
    containing the code, a header containing the display name.
    """
    mapped_name = (language_map or {}).get(lang_code)
    candidates = [lang_code] + ([mapped_name] if mapped_name else [])

    for candidate in candidates:
        for item in headers:
            if item.header.lower() == candidate.lower():
                return item.column
    for candidate in candidates:
        for item in headers:
            if candidate.lower() in item.header.lower():
                return item.column
    return None


def derive_target_lang(header: str, language_map: Optional[Dict[str, str]] = None) -> str:
    """Map a header back to a language code via its display name, else use the header."""
    for code, name in (language_map or {}).items():
        if name.lower() == header.lower():
            return code
    return header


def collect_missing_for_target(worksheet, source_column: int, target_column: int) -> List[MissingCell]:
    missing = []
    for row in range(HEADER_ROW_INDEX + 1, worksheet.max_row + 1):
        source_text = _to_trimmed_string(worksheet.cell(row=row, column=source_column).value)
        target_text = _to_trimmed_string(worksheet.cell(row=row, column=target_column).value)
        if source_text and not target_text:
            missing.append(MissingCell(row=row, source_text=source_text))
    return missing


def apply_translations(worksheet, target_column: int, cells: List[MissingCell], translated: List[str]) -> int:
    changes = 0
    for cell_meta, text in zip(cells, translated):
        if text is None:
            continue
        worksheet.cell(row=cell_meta.row, column=target_column).value = text
        changes += 1
    return changes


async def translate_worksheet(worksheet, provider: TranslationProvider, source_lang: str = 'en',
                              language_map: Optional[Dict[str, str]] = None) -> int:
    """
    Translate the missing cells of every target column in ``worksheet``.

    Returns:
        int: Number of cells updated.

    Raises:
        ValueError: If the header row is empty or the source column is not found.
    """
    headers = collect_headers(worksheet)
    if not headers:
        raise ValueError("Worksheet header row is empty or missing.")

    source_column = resolve_column(headers, source_lang, language_map)
    if source_column is None:
        available = ', '.join(item.header for item in headers)
        raise ValueError(f'Source header for "{source_lang}" not found. Available headers: {available}')

    targets = [item for item in headers if item.column not in (KEY_COLUMN, source_column)]
    if not targets:
        logger.info("No target language columns detected.")
        return 0

    changes = 0
    for target in tqdm(targets, desc="Translating languages", unit="lang"):
        target_lang = derive_target_lang(target.header, language_map)
        missing = collect_missing_for_target(worksheet, source_column, target.column)
        if not missing:
            logger.debug("No missing translations for '%s'.", target_lang)
            continue
        logger.info("Translating %d missing value(s) into '%s'.", len(missing), target_lang)
        translated = await provider.translate_batch(
            [cell.source_text for cell in missing], source_lang, target_lang
        )
        changes += apply_translations(worksheet, target.column, missing, translated)
    return changes


async def translate_workbook(input_file: str, provider: TranslationProvider, source_lang: str = 'en',
                             language_map: Optional[Dict[str, str]] = None,
                             sheet_name: Optional[str] = None) -> int:
    """
    Auto-translate missing values in ``input_file`` and save it in place.

    Args:
        input_file: The ``.xlsx`` workbook.
        provider: The translation provider to use.
        source_lang: Language code of the source column.
        language_map: Language code to display name.
        sheet_name: Worksheet to translate; the first sheet when omitted.

    Returns:
        int: Number of cells updated.
    """
    if not isinstance(input_file, str) or not input_file.strip():
        raise ValueError("input must be a non-empty string")
    if not isinstance(source_lang, str) or not source_lang.strip():
        raise ValueError("source_lang must be a non-empty string")

    file_io.check_file_exists(input_file)
    workbook = file_io.load_workbook(input_file)
    if sheet_name:
        worksheet = file_io.get_worksheet(workbook, sheet_name)
    elif workbook.worksheets:
        worksheet = workbook.worksheets[0]
    else:
        raise ValueError("Workbook does not contain a worksheet to translate.")

    changes = await translate_worksheet(worksheet, provider, source_lang, language_map)
    if changes > 0:
        file_io.save_workbook(workbook, input_file)
        logger.info("Updated %d cells in %s", changes, input_file)
    else:
        logger.info("No missing translations found.")
    return changes
