"""
异常与错误模型
文件级 / 工作表级 / 数据级
"""
from typing import Optional
from .models import ErrorCode


class ExcelParseError(Exception):
    """解析异常基类"""
    def __init__(self, code: ErrorCode, message: str, hint: Optional[str] = None,
                 file_path: Optional[str] = None, sheet_name: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.hint = hint
        self.file_path = file_path
        self.sheet_name = sheet_name


class InvalidArgumentError(ExcelParseError):
    def __init__(self, message: str = "Invalid argument", hint: Optional[str] = None):
        super().__init__(ErrorCode.INVALID_ARGUMENT, message, hint)


class UnsupportedFormatError(ExcelParseError):
    def __init__(self, message: str = "Unsupported file format", hint: Optional[str] = None,
                 file_path: Optional[str] = None):
        super().__init__(ErrorCode.UNSUPPORTED_FORMAT, message, hint, file_path=file_path)


class FileReadError(ExcelParseError):
    def __init__(self, message: str = "Failed to read file", hint: Optional[str] = None,
                 file_path: Optional[str] = None):
        super().__init__(ErrorCode.FILE_READ, message, hint, file_path=file_path)


class SheetError(ExcelParseError):
    def __init__(self, message: str = "Failed to parse sheet", sheet_name: Optional[str] = None,
                 file_path: Optional[str] = None, hint: Optional[str] = None,
                 code: ErrorCode = ErrorCode.SHEET):
        super().__init__(code, message, hint, file_path=file_path, sheet_name=sheet_name)


class NoSchemaError(SheetError):
    def __init__(self, message: str = "No schema header rows found", sheet_name: Optional[str] = None,
                 file_path: Optional[str] = None):
        super().__init__(message, sheet_name=sheet_name, file_path=file_path,
                         hint="Sheet needs '#var' and '#type' rows in column 1",
                         code=ErrorCode.NO_SCHEMA)


class DataError(ExcelParseError):
    """数据级错误，附带行列位置（1-based，未知为 -1）"""
    def __init__(self, message: str = "Invalid data", sheet_name: Optional[str] = None,
                 row: int = -1, column: int = -1, file_path: Optional[str] = None,
                 hint: Optional[str] = None):
        super().__init__(ErrorCode.DATA, message, hint, file_path=file_path, sheet_name=sheet_name)
        self.row = row
        self.column = column

    def __str__(self):
        location = []
        if self.sheet_name:
            location.append(f"sheet={self.sheet_name}")
        if self.row >= 0:
            location.append(f"row={self.row}")
        if self.column >= 0:
            location.append(f"column={self.column}")
        message = super().__str__()
        return f"{message} ({', '.join(location)})" if location else message


class OutputWriteError(ExcelParseError):
    def __init__(self, message: str = "Failed to write outputs", hint: Optional[str] = None):
        super().__init__(ErrorCode.OUTPUT_WRITE, message, hint)
