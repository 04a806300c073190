import json
import os

import pytest

from i18n_sheet.analyzer import (
    analyze_keys,
    analyze_project,
    extract_keys_from_codebase,
    extract_keys_from_content
)
from i18n_sheet.errors import ConversionError, ErrorKind


def test_extract_keys_from_content_patterns():
    content = """
        <h1>{{ 'app.title' | translate }}</h1>
        this.translate.instant('app.greeting');
        translate.get("menu.file")
        <span translate="menu.edit"></span>
        <span [translate]="'menu.view'"></span>
        <span *translate="'menu.help'"></span>
    """
    assert extract_keys_from_content(content) == {
        "app.title", "app.greeting", "menu.file", "menu.edit", "menu.view", "menu.help"
    }


def test_analyze_keys_sorted_missing_and_unused():
    result = analyze_keys({"b", "a", "c"}, {"c", "d", "e"})
    assert result == {"missing": ["a", "b"], "unused": ["d", "e"]}


def test_extract_keys_from_codebase_skips_node_modules(tmp_path):
    src = tmp_path / "src"
    modules = tmp_path / "node_modules" / "lib"
    os.makedirs(src)
    os.makedirs(modules)
    (src / "app.html").write_text("{{ 'used.key' | translate }}", encoding='utf-8')
    (modules / "lib.html").write_text("{{ 'vendor.key' | translate }}", encoding='utf-8')

    keys = extract_keys_from_codebase(str(tmp_path / "**" / "*.html"))

    assert keys == {"used.key"}


def test_analyze_project_reports_per_file(i18n_dir):
    result = analyze_project(str(i18n_dir), "unused", extract_keys=lambda pattern: {"app.title", "app.unknown"})
    assert result["total_code_keys"] == 2
    assert set(result["file_reports"]) == {"de.json", "en.json"}
    assert result["file_reports"]["en.json"] == {
        "missing": ["app.unknown"],
        "unused": ["app.greeting", "menu.file"],
    }


def test_analyze_project_requires_json_files(tmp_path):
    with pytest.raises(ConversionError) as exc_info:
        analyze_project(str(tmp_path), "*.ts", extract_keys=lambda pattern: set())
    assert exc_info.value.kind == ErrorKind.NO_INPUT_FILES
