"""
End-to-end tests for JSON <-> Excel conversion through real .xlsx files.
"""
import json
import os
from unittest.mock import MagicMock

import openpyxl
import pytest

from i18n_sheet.convert import collect_translations, convert_to_excel, convert_to_json, write_languages
from i18n_sheet.errors import (
    ConversionError,
    DuplicateKeyError,
    ErrorKind,
    InvalidCellValueError,
    InvalidLanguageCodeError,
    InvalidStructureError,
    MissingWorksheetError,
    UnsafeOutputPathError
)
from i18n_sheet.sheet_read import SheetReadResult


def _read_json(path):
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def _write_json(path, data):
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f)


class TestCollectTranslations:
    def test_languages_sorted_and_keys_flattened(self):
        table, languages = collect_translations([
            ("en.json", {"a": {"b": "Hello"}}),
            ("de.json", {"a": {"b": "Hallo"}}),
        ])
        assert languages == ["de", "en"]
        assert table.to_dict() == {"a.b": {"en": "Hello", "de": "Hallo"}}
        assert table.duplicates == []

    def test_colliding_dotted_keys_are_duplicates(self):
        table, _ = collect_translations([("en.json", {"a.b": "x", "a": {"b": "y"}})])
        assert table.duplicates == ["a.b"]
        assert table.get("a.b") == {"en": "y"}

    def test_invalid_structure_aborts(self):
        with pytest.raises(InvalidStructureError):
            collect_translations([("en.json", {"a": ["list"]})])

    def test_invalid_filename_language(self):
        with pytest.raises(InvalidLanguageCodeError):
            collect_translations([("english-language.json", {"a": "b"})])


class TestConvertToExcel:
    def test_end_to_end_rows(self, tmp_path, language_map):
        source = tmp_path / "src"
        os.makedirs(source)
        _write_json(source / "en.json", {"a": {"b": "Hello"}})
        _write_json(source / "de.json", {"a": {"b": "Hallo"}})
        target = tmp_path / "out" / "translations.xlsx"

        convert_to_excel(str(source), str(target), language_map=language_map)

        workbook = openpyxl.load_workbook(target)
        assert workbook.sheetnames == ["Translations"]
        rows = list(workbook["Translations"].iter_rows(values_only=True))
        assert rows == [("Key", "German", "English"), ("a.b", "Hallo", "Hello")]

    def test_dry_run_reports_without_writing(self, i18n_dir, tmp_path):
        reporter = MagicMock()
        target = tmp_path / "never.xlsx"

        table, report = convert_to_excel(str(i18n_dir), str(target), dry_run=True, reporter=reporter)

        assert not target.exists()
        reporter.print.assert_called_once_with(report)
        assert len(table) == 3
        assert not report.has_issues

    def test_dry_run_without_report(self, i18n_dir, tmp_path):
        reporter = MagicMock()
        _, report = convert_to_excel(str(i18n_dir), str(tmp_path / "x.xlsx"), dry_run=True,
                                     report=False, reporter=reporter)
        assert report is None
        reporter.print.assert_not_called()

    def test_missing_source_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            convert_to_excel(str(tmp_path / "missing"), str(tmp_path / "x.xlsx"))

    def test_no_json_files(self, tmp_path):
        with pytest.raises(ConversionError) as exc_info:
            convert_to_excel(str(tmp_path), str(tmp_path / "x.xlsx"))
        assert exc_info.value.kind == ErrorKind.NO_INPUT_FILES

    def test_invalid_json(self, tmp_path):
        (tmp_path / "en.json").write_text("{not json", encoding='utf-8')
        with pytest.raises(ConversionError) as exc_info:
            convert_to_excel(str(tmp_path), str(tmp_path / "x.xlsx"))
        assert exc_info.value.kind == ErrorKind.INVALID_JSON

    def test_control_character_stops_export(self, tmp_path):
        _write_json(tmp_path / "en.json", {"a": "x\u0001y"})
        target = tmp_path / "out" / "t.xlsx"

        with pytest.raises(InvalidCellValueError) as exc_info:
            convert_to_excel(str(tmp_path), str(target))

        assert (exc_info.value.key, exc_info.value.lang) == ("a", "en")
        assert not target.exists()


class TestConvertToJson:
    def test_round_trip_through_workbook(self, i18n_dir, tmp_path, language_map):
        workbook_path = tmp_path / "t.xlsx"
        out_dir = tmp_path / "out"
        convert_to_excel(str(i18n_dir), str(workbook_path), language_map=language_map)

        result = convert_to_json(str(workbook_path), str(out_dir), language_map=language_map)

        assert result.languages == ["de", "en"]
        assert _read_json(out_dir / "en.json") == _read_json(i18n_dir / "en.json")
        assert _read_json(out_dir / "de.json") == _read_json(i18n_dir / "de.json")

    def test_round_trip_keeps_empty_strings_and_gaps(self, tmp_path):
        source = tmp_path / "src"
        os.makedirs(source)
        _write_json(source / "en.json", {"a": "", "b": "B", "c": {"d": ""}})
        _write_json(source / "de.json", {"b": "Bx"})
        workbook_path = tmp_path / "t.xlsx"
        out_dir = tmp_path / "out"

        convert_to_excel(str(source), str(workbook_path))
        convert_to_json(str(workbook_path), str(out_dir))

        assert _read_json(out_dir / "en.json") == {"a": "", "b": "B", "c": {"d": ""}}
        assert _read_json(out_dir / "de.json") == {"b": "Bx"}

    def test_duplicates_warn_and_last_row_wins(self, make_workbook, tmp_path):
        source = make_workbook([["Key", "en"], ["k", "A"], ["k", "B"]])
        reporter = MagicMock()

        result = convert_to_json(source, str(tmp_path / "out"), reporter=reporter)

        assert result.duplicates == ["k"]
        reporter.warn.assert_called_once_with("Duplicate keys detected in Excel: k")
        assert _read_json(tmp_path / "out" / "en.json") == {"k": "B"}

    def test_fail_on_duplicates_writes_nothing(self, make_workbook, tmp_path):
        source = make_workbook([["Key", "en"], ["k", "A"], ["k", "B"], ["k", "C"]])
        out_dir = tmp_path / "out"

        with pytest.raises(DuplicateKeyError) as exc_info:
            convert_to_json(source, str(out_dir), fail_on_duplicates=True)

        assert exc_info.value.keys == ["k"]
        assert not out_dir.exists()

    def test_dry_run_does_not_create_target(self, make_workbook, tmp_path):
        source = make_workbook([["Key", "en"], ["k", "v"]])
        out_dir = tmp_path / "out"
        convert_to_json(source, str(out_dir), dry_run=True)
        assert not out_dir.exists()

    def test_missing_worksheet(self, make_workbook, tmp_path):
        source = make_workbook([["Key", "en"]], sheet_name="Other")
        with pytest.raises(MissingWorksheetError) as exc_info:
            convert_to_json(source, str(tmp_path / "out"))
        assert exc_info.value.kind == ErrorKind.MISSING_WORKSHEET

    def test_traversal_header_is_rejected_before_writing(self, make_workbook, tmp_path):
        source = make_workbook([["Key", "en", "../evil"], ["k", "v", "x"]])
        out_dir = tmp_path / "out"
        with pytest.raises(InvalidLanguageCodeError):
            convert_to_json(source, str(out_dir))
        assert not out_dir.exists()
        assert not (tmp_path / "evil.json").exists()

    def test_unicode_values_written_unescaped(self, make_workbook, tmp_path):
        source = make_workbook([["Key", "de"], ["menu.open", "Öffnen"]])
        convert_to_json(source, str(tmp_path / "out"))
        content = (tmp_path / "out" / "de.json").read_text(encoding='utf-8')
        assert "Öffnen" in content


def test_write_languages_checks_paths(tmp_path, monkeypatch):
    result = SheetReadResult(languages=["en"], translations_by_language={"en": {"k": "v"}})
    monkeypatch.setattr(
        "i18n_sheet.convert.safe_join_within",
        MagicMock(side_effect=UnsafeOutputPathError("/elsewhere/en.json"))
    )
    with pytest.raises(UnsafeOutputPathError):
        write_languages(str(tmp_path / "out"), result)
    assert not (tmp_path / "out").exists()
