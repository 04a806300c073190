import io
import json
import os
import tempfile
import unittest

from i18n_sheet.placeholders import extract_placeholders
from i18n_sheet.reporters import ConsoleReporter, JsonFileReporter
from i18n_sheet.translation_report import MissingEntry, generate_translation_report
from i18n_sheet.translation_table import TranslationTable


class TestExtractPlaceholders(unittest.TestCase):
    def test_single_and_double_braces(self):
        self.assertEqual(extract_placeholders("Hi {name}"), {"name"})
        self.assertEqual(extract_placeholders("Hi {{ name }}"), {"name"})
        self.assertEqual(extract_placeholders("Hi {{name}}, {count} items"), {"name", "count"})

    def test_duplicates_collapse(self):
        self.assertEqual(extract_placeholders("{a} and {a} and { a }"), {"a"})

    def test_no_placeholders_or_non_string(self):
        self.assertEqual(extract_placeholders("plain text"), set())
        self.assertEqual(extract_placeholders(None), set())
        self.assertEqual(extract_placeholders(42), set())


class TestTranslationTable(unittest.TestCase):
    def test_reinserting_same_language_records_duplicate(self):
        table = TranslationTable()
        table.add("a.b", "en", "x")
        table.add("a.b", "de", "y")
        table.add("c", "en", "1")
        table.add("a.b", "en", "z")
        self.assertEqual(table.duplicates, ["a.b"])
        self.assertEqual(table.get("a.b"), {"en": "z", "de": "y"})
        self.assertEqual(table.keys(), ["a.b", "c"])


class TestGenerateTranslationReport(unittest.TestCase):
    def test_missing_detection(self):
        table = TranslationTable({"a.b": {"en": "Hi"}})
        report = generate_translation_report(table, ["en", "de"])
        self.assertIn(MissingEntry(key="a.b", lang="de"), report.missing)
        self.assertNotIn(MissingEntry(key="a.b", lang="en"), report.missing)

    def test_empty_string_counts_as_missing(self):
        table = TranslationTable({"k": {"en": "Hi", "de": ""}})
        report = generate_translation_report(table, ["de", "en"])
        self.assertEqual(report.missing, [MissingEntry(key="k", lang="de")])

    def test_placeholder_inconsistency(self):
        table = TranslationTable({"greet": {"de": "Hallo {name}, {count}", "en": "Hello {name}"}})
        report = generate_translation_report(table, ["de", "en"])
        self.assertEqual(len(report.placeholder_inconsistencies), 1)
        item = report.placeholder_inconsistencies[0]
        self.assertEqual(item.key, "greet")
        self.assertEqual(item.placeholders, {"de": {"name", "count"}, "en": {"name"}})

    def test_consistent_placeholders_in_any_style(self):
        table = TranslationTable({"greet": {"de": "Hallo {{ name }}", "en": "Hello {name}"}})
        report = generate_translation_report(table, ["de", "en"])
        self.assertEqual(report.placeholder_inconsistencies, [])
        self.assertFalse(report.has_issues)

    def test_missing_language_counts_as_empty_placeholder_set(self):
        table = TranslationTable({"greet": {"en": "Hello {name}"}})
        report = generate_translation_report(table, ["de", "en"])
        self.assertEqual(report.placeholder_inconsistencies[0].placeholders, {"de": set(), "en": {"name"}})

    def test_duplicates_come_from_table(self):
        table = TranslationTable()
        table.add("k", "en", "a")
        table.add("k", "en", "b")
        report = generate_translation_report(table, ["en"])
        self.assertEqual(report.duplicates, ["k"])

    def test_to_dict_is_json_serializable(self):
        table = TranslationTable({"greet": {"de": "{b} {a}", "en": ""}})
        data = generate_translation_report(table, ["de", "en"]).to_dict()
        self.assertEqual(data["missing"], [{"key": "greet", "lang": "en"}])
        self.assertEqual(data["placeholderInconsistencies"][0]["placeholders"], {"de": ["a", "b"], "en": []})
        json.dumps(data)


class TestReporters(unittest.TestCase):
    def test_console_reporter_no_issues(self):
        stream = io.StringIO()
        ConsoleReporter(stream).print(generate_translation_report(TranslationTable({"k": {"en": "v"}}), ["en"]))
        self.assertIn("No missing, duplicate translations or placeholder issues found.", stream.getvalue())

    def test_console_reporter_lists_issues(self):
        table = TranslationTable({"greet": {"de": "Hallo {name}", "en": ""}})
        stream = io.StringIO()
        ConsoleReporter(stream).print(generate_translation_report(table, ["de", "en"]))
        output = stream.getvalue()
        self.assertIn("Missing translations:", output)
        self.assertIn("  - greet (en)", output)
        self.assertIn("Inconsistent placeholders between languages:", output)
        self.assertIn("[de]: {name}", output)
        self.assertIn("[en]: {}", output)

    def test_json_file_reporter_writes_report(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = os.path.join(temp_dir, "report.json")
            table = TranslationTable({"k": {"en": "v"}})
            JsonFileReporter(path).print(generate_translation_report(table, ["en", "de"]))
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        self.assertEqual(data["missing"], [{"key": "k", "lang": "de"}])
        self.assertEqual(data["duplicates"], [])

    def test_json_file_reporter_requires_path(self):
        with self.assertRaises(TypeError):
            JsonFileReporter("")


if __name__ == '__main__':
    unittest.main()
