"""Filesystem and workbook input/output helpers."""
import json
import os
from typing import Any, List, Tuple

import openpyxl

from i18n_sheet.errors import ConversionError, ErrorKind, MissingWorksheetError

JSON_SUFFIX = '.json'


def check_file_exists(file_path: str) -> None:
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File does not exist: {file_path}")


def load_json_file(file_path: str) -> Any:
    """
    Load and parse a JSON file.

    Raises:
        ConversionError: If the file does not contain valid JSON.
    """
    with open(file_path, 'r', encoding='utf-8') as f:
        content = f.read()
    try:
        return json.loads(content)
    except json.JSONDecodeError as json_exc:
        raise ConversionError(f"Invalid JSON in {file_path}: {json_exc}", kind=ErrorKind.INVALID_JSON)


def write_json_file(file_path: str, data: Any) -> None:
    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
        f.write('\n')


def read_dir_json_files(directory: str) -> List[Tuple[str, Any]]:
    """
    Read every ``*.json`` file in ``directory`` (not recursive).

    Returns:
        List[Tuple[str, Any]]: ``(file name, parsed data)`` pairs sorted by file name.
    """
    results = []
    for filename in sorted(os.listdir(directory)):
        full_path = os.path.join(directory, filename)
        if filename.endswith(JSON_SUFFIX) and os.path.isfile(full_path):
            results.append((filename, load_json_file(full_path)))
    return results


def load_workbook(file_path: str):
    return openpyxl.load_workbook(file_path)


def get_worksheet(workbook, sheet_name: str):
    if sheet_name not in workbook.sheetnames:
        raise MissingWorksheetError(sheet_name)
    return workbook[sheet_name]


def new_workbook():
    """Create an empty workbook (without openpyxl's default sheet)."""
    workbook = openpyxl.Workbook()
    workbook.remove(workbook.active)
    return workbook


def save_workbook(workbook, file_path: str) -> None:
    target_dir = os.path.dirname(os.path.abspath(file_path))
    os.makedirs(target_dir, exist_ok=True)
    workbook.save(file_path)
