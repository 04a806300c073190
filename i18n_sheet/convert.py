"""
Conversion between per-language JSON files and a translation workbook.

``convert_to_excel`` reads every ``<lang>.json`` in a directory into one
table and writes it as a worksheet; ``convert_to_json`` reads a worksheet
back into one JSON file per language column.
"""
import logging
import os
from typing import Any, Dict, Iterable, List, Optional, Tuple

from i18n_sheet import file_io
from i18n_sheet.errors import ConversionError, DuplicateKeyError, ErrorKind
from i18n_sheet.path_safety import safe_join_within, validate_language_code
from i18n_sheet.reporters import ConsoleReporter
from i18n_sheet.sheet_read import SheetReadResult, read_translations_from_worksheet
from i18n_sheet.sheet_write import create_translation_worksheet
from i18n_sheet.structure import flatten_translations, validate_structure
from i18n_sheet.translation_report import TranslationReport, generate_translation_report
from i18n_sheet.translation_table import TranslationTable

logger = logging.getLogger("i18n_sheet.convert")

DEFAULT_SHEET_NAME = 'Translations'


def language_from_filename(filename: str) -> str:
    """Derive the language code from a file name such as ``de.json``."""
    base = os.path.basename(filename)
    if base.endswith(file_io.JSON_SUFFIX):
        base = base[:-len(file_io.JSON_SUFFIX)]
    return validate_language_code(base)


def collect_translations(files: Iterable[Tuple[str, Any]]) -> Tuple[TranslationTable, List[str]]:
    """
    Validate and flatten language files into one translation table.

    Args:
        files: ``(file name, parsed JSON)`` pairs, one per language.

    Returns:
        Tuple[TranslationTable, List[str]]: The table and the sorted language codes.
    """
    table = TranslationTable()
    languages = set()
    for filename, data in files:
        lang = language_from_filename(filename)
        languages.add(lang)
        validate_structure(data)
        flatten_translations(data, '', lambda key, value, lang=lang: table.add(key, lang, value))
        logger.debug("Collected translations for '%s' from %s.", lang, filename)
    return table, sorted(languages)


def handle_duplicates(duplicates: List[str], fail_on_duplicates: bool, reporter) -> None:
    """Raise or warn about duplicate keys depending on ``fail_on_duplicates``."""
    if not duplicates:
        return
    if fail_on_duplicates:
        raise DuplicateKeyError(duplicates)
    reporter.warn(f"Duplicate keys detected in Excel: {', '.join(duplicates)}")


def convert_to_excel(
        source_path: str,
        target_file: str,
        sheet_name: str = DEFAULT_SHEET_NAME,
        dry_run: bool = False,
        language_map: Optional[Dict[str, str]] = None,
        report: bool = True,
        reporter=None
) -> Tuple[TranslationTable, Optional[TranslationReport]]:
    """
    Convert a directory of language JSON files into an Excel workbook.

    Args:
        source_path: Directory containing ``<lang>.json`` files.
        target_file: The ``.xlsx`` file to write.
        sheet_name: Name of the worksheet to create.
        dry_run: If True, nothing is written.
        language_map: Language code to display name for the header row.
        report: Whether a dry run prints a translation report.
        reporter: Receives the report; defaults to a ConsoleReporter.

    Returns:
        The collected table and the report (only produced on a reporting dry run).
    """
    reporter = reporter or ConsoleReporter()
    file_io.check_file_exists(source_path)
    files = file_io.read_dir_json_files(source_path)
    if not files:
        raise ConversionError(f"No JSON files found in directory: {source_path}", kind=ErrorKind.NO_INPUT_FILES)

    table, languages = collect_translations(files)
    logger.info("Collected %d keys in %d language(s): %s", len(table), len(languages), ', '.join(languages))

    if dry_run:
        translation_report = None
        if report:
            translation_report = generate_translation_report(table, languages)
            reporter.print(translation_report)
        return table, translation_report

    workbook = file_io.new_workbook()
    create_translation_worksheet(workbook, sheet_name, table, languages, language_map)
    file_io.save_workbook(workbook, target_file)
    logger.info("Wrote worksheet '%s' to %s", sheet_name, target_file)
    return table, None


def write_languages(target_path: str, result: SheetReadResult) -> List[str]:
    """
    Write one JSON file per language into ``target_path``.

    Every output path is validated before the first file is written.

    Returns:
        List[str]: The written file paths.
    """
    planned = []
    for lang in result.languages:
        validate_language_code(lang)
        planned.append((lang, safe_join_within(target_path, f"{lang}.json")))

    os.makedirs(target_path, exist_ok=True)
    for lang, file_path in planned:
        file_io.write_json_file(file_path, result.translations_by_language[lang])
        logger.debug("Wrote %s", file_path)
    return [file_path for _, file_path in planned]


def convert_to_json(
        source_file: str,
        target_path: str,
        sheet_name: str = DEFAULT_SHEET_NAME,
        dry_run: bool = False,
        language_map: Optional[Dict[str, str]] = None,
        fail_on_duplicates: bool = False,
        reporter=None
) -> SheetReadResult:
    """
    Convert a translation worksheet into one JSON file per language.

    Args:
        source_file: The ``.xlsx`` workbook to read.
        target_path: Directory for the ``<lang>.json`` files.
        sheet_name: Worksheet to read.
        dry_run: If True, the sheet is read and checked but nothing is written.
        language_map: Language code to display name, used to resolve headers.
        fail_on_duplicates: Abort on duplicate keys instead of warning.
        reporter: Receives duplicate-key warnings; defaults to a ConsoleReporter.

    Returns:
        SheetReadResult: What was read from the worksheet.
    """
    reporter = reporter or ConsoleReporter()
    file_io.check_file_exists(source_file)

    workbook = file_io.load_workbook(source_file)
    worksheet = file_io.get_worksheet(workbook, sheet_name)
    result = read_translations_from_worksheet(worksheet, language_map)
    logger.info("Read %d language column(s) from '%s': %s",
                len(result.languages), sheet_name, ', '.join(result.languages))

    handle_duplicates(result.duplicates, fail_on_duplicates, reporter)
    if dry_run:
        return result

    write_languages(target_path, result)
    return result
