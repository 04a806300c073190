import json
import os

import openpyxl
import pytest


@pytest.fixture
def language_map():
    """Language code to display name mapping used across tests."""
    return {"de": "German", "en": "English"}


@pytest.fixture
def i18n_dir(tmp_path):
    """A directory with en.json and de.json sharing the same keys."""
    source_dir = tmp_path / "i18n"
    os.makedirs(source_dir)
    files = {
        "en.json": {"app": {"title": "Hello", "greeting": "Hi {name}"}, "menu": {"file": "File"}},
        "de.json": {"app": {"title": "Hallo", "greeting": "Hallo {name}"}, "menu": {"file": "Datei"}},
    }
    for filename, content in files.items():
        with open(source_dir / filename, 'w', encoding='utf-8') as f:
            json.dump(content, f, ensure_ascii=False, indent=2)
    return source_dir


@pytest.fixture
def make_workbook(tmp_path):
    """Factory writing rows to a single-sheet workbook and returning its path."""
    def _make(rows, sheet_name="Translations", filename="translations.xlsx"):
        workbook = openpyxl.Workbook()
        worksheet = workbook.active
        worksheet.title = sheet_name
        for row in rows:
            worksheet.append(row)
        path = tmp_path / filename
        workbook.save(path)
        return str(path)
    return _make
