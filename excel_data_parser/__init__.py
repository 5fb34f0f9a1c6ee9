"""
Excel Data Parser - 基于表头关键词行的嵌套数据解析
"""

__version__ = "1.0.0"

from .parser import parse_file, parse_sheet, SheetParser
from .config import ParserConfig, load_config
from .grid_builder import SheetGrid
from .query import query_path
from .file_reader import read_file, list_sheet_names
from .models import (
    FileFormat,
    LogLevel,
    ErrorCode,
    WarningCode,
    Value,
    Null,
    NULL,
    Scalar,
    Record,
    ListValue,
    value_from_python,
    ColumnSchema,
    SheetSchema,
    SheetResult,
    Manifest,
    OutputItem,
)
from .exceptions import (
    ExcelParseError,
    InvalidArgumentError,
    UnsupportedFormatError,
    FileReadError,
    SheetError,
    NoSchemaError,
    DataError,
    OutputWriteError,
)

__all__ = [
    "parse_file",
    "parse_sheet",
    "SheetParser",
    "ParserConfig",
    "load_config",
    "SheetGrid",
    "query_path",
    "read_file",
    "list_sheet_names",
    "FileFormat",
    "LogLevel",
    "ErrorCode",
    "WarningCode",
    "Value",
    "Null",
    "NULL",
    "Scalar",
    "Record",
    "ListValue",
    "value_from_python",
    "ColumnSchema",
    "SheetSchema",
    "SheetResult",
    "Manifest",
    "OutputItem",
    "ExcelParseError",
    "InvalidArgumentError",
    "UnsupportedFormatError",
    "FileReadError",
    "SheetError",
    "NoSchemaError",
    "DataError",
    "OutputWriteError",
]
