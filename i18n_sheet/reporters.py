"""Reporters that output translation reports."""
import json
import logging
import os
import sys

from i18n_sheet.translation_report import TranslationReport

logger = logging.getLogger("i18n_sheet.report")


class ConsoleReporter:
    """Prints translation reports as readable text."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout

    def _write(self, line: str) -> None:
        self.stream.write(line + "\n")

    def print(self, report: TranslationReport) -> None:
        if not report.has_issues:
            self._write("✅ No missing, duplicate translations or placeholder issues found.")
            return

        if report.missing:
            self._write("⚠️ Missing translations:")
            for entry in report.missing:
                self._write(f"  - {entry.key} ({entry.lang})")

        if report.duplicates:
            self._write("⚠️ Duplicate keys:")
            for key in report.duplicates:
                self._write(f"  - {key}")

        if report.placeholder_inconsistencies:
            self._write("⚠️ Inconsistent placeholders between languages:")
            for item in report.placeholder_inconsistencies:
                self._write(f"  - {item.key}:")
                for lang, names in item.placeholders.items():
                    self._write(f"      [{lang}]: {{{', '.join(sorted(names))}}}")

    def warn(self, message: str) -> None:
        logger.warning(message)


class JsonFileReporter:
    """Writes translation reports to a JSON file."""

    def __init__(self, file_path: str):
        if not isinstance(file_path, str) or not file_path:
            raise TypeError("file_path must be a non-empty string")
        self.file_path = os.path.abspath(file_path)

    def print(self, report: TranslationReport) -> None:
        with open(self.file_path, 'w', encoding='utf-8') as f:
            json.dump(report.to_dict(), f, ensure_ascii=False, indent=2)
        logger.info("Wrote translation report to %s", self.file_path)

    def warn(self, message: str) -> None:
        logger.warning(message)
