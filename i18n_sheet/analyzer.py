"""Compare translation keys used in source code with keys defined in JSON files."""
import glob
import logging
import os
import re
from typing import Callable, Dict, Iterable, Set

from i18n_sheet import file_io
from i18n_sheet.errors import ConversionError, ErrorKind
from i18n_sheet.structure import iter_flat_items

logger = logging.getLogger("i18n_sheet.analyzer")

# Angular-style usages of translation keys.
KEY_PATTERNS = [
    # 'KEY' | translate
    re.compile(r'''['"]([^'"]+)['"]\s*\|\s*translate'''),
    # translate.get('KEY'), .instant('KEY'), .stream('KEY')
    re.compile(r'''translate\.(?:get|instant|stream)\(\s*['"]([^'"]+)['"]\s*\)'''),
    # translate="KEY"
    re.compile(r'''translate=['"]([^'"]+)['"]'''),
    # [translate]="'KEY'"
    re.compile(r'''\[translate\]=['"]'([^']+)'['"]'''),
    # *translate="'KEY'"
    re.compile(r'''\*translate=['"]'([^']+)'['"]'''),
]

IGNORED_DIR = 'node_modules'


def extract_keys_from_content(content: str) -> Set[str]:
    keys = set()
    for pattern in KEY_PATTERNS:
        for match in pattern.findall(content):
            if match:
                keys.add(match)
    return keys


def extract_keys_from_codebase(pattern: str) -> Set[str]:
    """
    Collect translation keys from every file matching the glob ``pattern``.

    Files under ``node_modules`` are ignored; unreadable files are logged and skipped.
    """
    keys: Set[str] = set()
    for path in glob.glob(pattern, recursive=True):
        if IGNORED_DIR in path.split(os.sep) or not os.path.isfile(path):
            continue
        try:
            with open(path, 'r', encoding='utf-8') as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read file %s: %s", path, e)
            continue
        keys |= extract_keys_from_content(content)
    return keys


def analyze_keys(code_keys: Iterable[str], json_keys: Iterable[str]) -> Dict[str, list]:
    """
    Returns:
        Dict[str, list]: ``missing`` (used in code, not defined) and
        ``unused`` (defined, never used), both sorted.
    """
    code_keys = set(code_keys)
    json_keys = set(json_keys)
    return {
        "missing": sorted(code_keys - json_keys),
        "unused": sorted(json_keys - code_keys),
    }


def analyze_project(source_path: str, code_pattern: str,
                    extract_keys: Callable[[str], Set[str]] = extract_keys_from_codebase) -> Dict:
    """
    Analyze every language file in ``source_path`` against keys used in code.

    Returns:
        Dict: ``total_code_keys`` and a ``file_reports`` entry per JSON file.
    """
    try:
        json_files = file_io.read_dir_json_files(source_path)
    except OSError as e:
        raise ConversionError(f"Could not read i18n files from {source_path}: {e}", kind=ErrorKind.NO_INPUT_FILES)
    if not json_files:
        raise ConversionError(f"No JSON files found in {source_path}", kind=ErrorKind.NO_INPUT_FILES)

    code_keys = extract_keys(code_pattern)
    file_reports = {}
    for filename, data in json_files:
        json_keys = [key for key, _ in iter_flat_items(data)] if isinstance(data, dict) else []
        file_reports[filename] = analyze_keys(code_keys, json_keys)

    return {
        "total_code_keys": len(code_keys),
        "file_reports": file_reports,
    }
