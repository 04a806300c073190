"""Error types raised by the conversion core."""
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Category of a conversion failure."""
    INVALID_STRUCTURE = "InvalidStructure"
    INVALID_LANGUAGE_CODE = "InvalidLanguageCode"
    EMPTY_HEADER = "EmptyHeader"
    DUPLICATE_LANGUAGE_COLUMN = "DuplicateLanguageColumn"
    UNSAFE_OUTPUT_PATH = "UnsafeOutputPath"
    DUPLICATE_KEY = "DuplicateKey"
    MISSING_WORKSHEET = "MissingWorksheet"
    INVALID_JSON = "InvalidJson"
    NO_INPUT_FILES = "NoInputFiles"
    INVALID_CELL_VALUE = "InvalidCellValue"


class ConversionError(Exception):
    """
    Base class for every error raised while converting translations.

    Callers can either catch a specific subclass or branch on ``kind``.
    Subclasses fix their kind; the base class must be given one.
    """
    kind: Optional[ErrorKind] = None

    def __init__(self, message: str, kind: Optional[ErrorKind] = None):
        super().__init__(message)
        if kind is not None:
            self.kind = kind
        if self.kind is None:
            raise TypeError(f"{self.__class__.__name__} requires an error kind")


class InvalidStructureError(ConversionError):
    kind = ErrorKind.INVALID_STRUCTURE

    def __init__(self, message: str, path: str, found_type: Optional[str] = None):
        super().__init__(message)
        self.path = path
        self.found_type = found_type


class InvalidLanguageCodeError(ConversionError):
    kind = ErrorKind.INVALID_LANGUAGE_CODE

    def __init__(self, code):
        super().__init__(f"Invalid language code: {code}")
        self.code = code


class EmptyHeaderError(ConversionError):
    kind = ErrorKind.EMPTY_HEADER

    def __init__(self, column: int):
        super().__init__(f"Empty language header at column {column}")
        self.column = column


class DuplicateLanguageColumnError(ConversionError):
    kind = ErrorKind.DUPLICATE_LANGUAGE_COLUMN

    def __init__(self, code: str, first_column: int, second_column: int):
        super().__init__(
            f'Duplicate language columns for code "{code}" at columns {first_column} and {second_column}'
        )
        self.code = code
        self.first_column = first_column
        self.second_column = second_column


class UnsafeOutputPathError(ConversionError):
    kind = ErrorKind.UNSAFE_OUTPUT_PATH

    def __init__(self, path: str):
        super().__init__(f"Unsafe output path: {path}")
        self.path = path


class DuplicateKeyError(ConversionError):
    kind = ErrorKind.DUPLICATE_KEY

    def __init__(self, keys):
        self.keys = list(keys)
        super().__init__(f"Duplicate keys detected in Excel: {', '.join(self.keys)}")


class MissingWorksheetError(ConversionError):
    kind = ErrorKind.MISSING_WORKSHEET

    def __init__(self, sheet_name: str):
        super().__init__(f'Worksheet "{sheet_name}" not found')
        self.sheet_name = sheet_name


class InvalidCellValueError(ConversionError):
    kind = ErrorKind.INVALID_CELL_VALUE

    def __init__(self, key: str, lang: Optional[str], reason: str):
        target = f'value of "{key}" ({lang})' if lang else f'key "{key}"'
        super().__init__(f"Cannot write {target} to a worksheet: {reason}")
        self.key = key
        self.lang = lang
        self.reason = reason
