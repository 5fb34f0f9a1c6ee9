"""
数据类与枚举定义
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any, Iterator, Tuple
from enum import Enum

from .constants import (
    KEYWORD_VAR,
    KEYWORD_TYPE,
    KEYWORD_DEFAULT,
    KEY_SHEET_NAME,
    KEY_TYPE_LOOKUP,
    KEY_DATA_LIST,
    RESERVED_KEYS,
    PATH_SEPARATOR,
)


# ========== 枚举 ==========
class FileFormat(str, Enum):
    xlsx = "xlsx"
    xlsb = "xlsb"
    csv = "csv"


class LogLevel(str, Enum):
    INFO = "INFO"
    DEBUG = "DEBUG"
    WARN = "WARN"
    ERROR = "ERROR"


class ErrorCode(str, Enum):
    INVALID_ARGUMENT = "InvalidArgumentError"
    UNSUPPORTED_FORMAT = "UnsupportedFormatError"
    FILE_READ = "FileReadError"
    SHEET = "SheetError"
    NO_SCHEMA = "NoSchemaError"
    DATA = "DataError"
    OUTPUT_WRITE = "OutputWriteError"


class WarningCode(str, Enum):
    ROWS_TRUNCATED = "RowsTruncated"
    COLS_TRUNCATED = "ColsTruncated"
    COLUMN_DROPPED = "ColumnDropped"
    INVALID_IDENTIFIER = "InvalidIdentifier"
    INVALID_TYPE = "InvalidType"
    NESTING_TOO_DEEP = "NestingTooDeep"
    FILE_TOO_LARGE = "FileTooLarge"


# ========== 值模型 ==========
class Value:
    """解析结果的值：Null / Scalar / Record / ListValue 之一"""
    __slots__ = ()

    def is_empty(self) -> bool:
        raise NotImplementedError

    def to_python(self) -> Any:
        raise NotImplementedError


@dataclass(frozen=True)
class Null(Value):
    """空值"""

    def is_empty(self) -> bool:
        return True

    def to_python(self) -> Any:
        return None

    def __repr__(self):
        return "NULL"


NULL = Null()


@dataclass(frozen=True)
class Scalar(Value):
    text: str

    def is_empty(self) -> bool:
        return self.text == ""

    def to_python(self) -> Any:
        return self.text


@dataclass
class Record(Value):
    """
    有序字段映射 name → Value，保持插入顺序
    """
    fields: Dict[str, Value] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return all(isinstance(v, Null) for v in self.fields.values())

    def to_python(self) -> Any:
        return {k: v.to_python() for k, v in self.fields.items()}

    def get(self, name: str, default: Optional[Value] = None) -> Optional[Value]:
        return self.fields.get(name, default)

    def set(self, name: str, value: Value):
        self.fields[name] = value

    def items(self):
        return self.fields.items()

    def keys(self):
        return self.fields.keys()

    def values(self):
        return self.fields.values()

    def __contains__(self, name: object) -> bool:
        return name in self.fields

    def __getitem__(self, name: str) -> Value:
        return self.fields[name]

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)


@dataclass
class ListValue(Value):
    items: List[Value] = field(default_factory=list)

    def is_empty(self) -> bool:
        return len(self.items) == 0

    def to_python(self) -> Any:
        return [item.to_python() for item in self.items]

    def append(self, value: Value):
        self.items.append(value)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)


def value_from_python(data: Any) -> Value:
    """将普通 Python 数据（dict/list/str/None）转换为 Value"""
    if data is None:
        return NULL
    if isinstance(data, Value):
        return data
    if isinstance(data, dict):
        return Record({str(k): value_from_python(v) for k, v in data.items()})
    if isinstance(data, (list, tuple)):
        return ListValue([value_from_python(item) for item in data])
    return Scalar(str(data))


# ========== 表头 Schema ==========
class ColumnSchema:
    """
    单列的表头信息：keyword → 原始值序列（自上而下）
    """
    def __init__(self, column_index: int):
        self.column_index = column_index
        self.values: Dict[str, List[str]] = {}
        self._default_value: Optional[str] = None

    def add(self, keyword: str, value: str):
        self.values.setdefault(keyword, []).append(value)
        if keyword == KEYWORD_DEFAULT and value:
            self._default_value = value

    def get(self, keyword: str) -> Optional[List[str]]:
        return self.values.get(keyword)

    @property
    def default_value(self) -> Optional[str]:
        return self._default_value

    @property
    def var_names(self) -> List[str]:
        return self.values.get(KEYWORD_VAR) or []

    @property
    def type_names(self) -> List[str]:
        return self.values.get(KEYWORD_TYPE) or []

    @property
    def field_path(self) -> str:
        return PATH_SEPARATOR.join(self.var_names)

    @property
    def has_data(self) -> bool:
        return bool(self.values)

    def __repr__(self):
        return f"ColumnSchema({self.column_index}: {self.values})"


@dataclass
class SheetSchema:
    """
    单个工作表的解析上下文，每次解析调用独立创建
    """
    sheet_name: str
    header_row_count: int = 0
    row_count: int = 0
    col_count: int = 0
    columns: Dict[int, ColumnSchema] = field(default_factory=dict)
    path_to_type: Dict[str, str] = field(default_factory=dict)
    path_to_default: Dict[str, str] = field(default_factory=dict)
    metadata: Dict[str, Optional[str]] = field(default_factory=dict)
    dropped_columns: List[int] = field(default_factory=list)

    @property
    def first_data_row(self) -> int:
        return self.header_row_count + 1


# ========== 解析结果 ==========
@dataclass
class SheetResult:
    sheet_name: str
    type_lookup: Dict[str, str] = field(default_factory=dict)
    records: List[Record] = field(default_factory=list)
    metadata: Dict[str, Optional[str]] = field(default_factory=dict)
    columns: Dict[int, ColumnSchema] = field(default_factory=dict)
    physical_rows: int = 0   # 表头之后参与解析的物理行数
    dropped_columns: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """
        输出结构：保留键 + sheet 元数据键
        与保留键同名的元数据不输出
        """
        result: Dict[str, Any] = {KEY_SHEET_NAME: self.sheet_name}
        for key, value in self.metadata.items():
            if key in RESERVED_KEYS:
                continue
            result[key] = value
        result[KEY_TYPE_LOOKUP] = dict(self.type_lookup)
        result[KEY_DATA_LIST] = [record.to_python() for record in self.records]
        return result

    def query(self, path) -> List[Value]:
        from .query import query_path
        return query_path(path, ListValue(list(self.records)))

    def to_dataframe(self):
        """将记录展平为 DataFrame（嵌套字段以 . 连接列名）"""
        import pandas as pd
        rows = [record.to_python() for record in self.records]
        if not rows:
            return pd.DataFrame()
        return pd.json_normalize(rows, sep=PATH_SEPARATOR)


# ========== Manifest（运行清单）==========
@dataclass
class OutputItem:
    sheet: str
    json: Optional[str]      # 实际导出路径（相对 run 根目录）
    rows: int                # 物理行数
    records: int             # 逻辑记录数


@dataclass
class Manifest:
    run_id: str
    source: str
    format: FileFormat
    sheets: List[str] = field(default_factory=list)
    config_profile: str = "default"
    outputs: List[OutputItem] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)     # sheet -> 错误信息
    warnings: Dict[str, int] = field(default_factory=dict)   # WarningCode -> count
    started_at_utc: str = ""
    finished_at_utc: str = ""


# ========== 日志事件 ==========
@dataclass
class LogEvent:
    ts: str
    lvl: LogLevel
    event: str              # 例如: "run.start","schema.extract","sheet.parsed","export.json"
    file: Optional[str] = None
    sheet: Optional[str] = None
    cell: Optional[Tuple[int, int]] = None   # (row, column)，1-based
    message: Optional[str] = None
    metrics: Optional[Dict[str, Any]] = None
    error_code: Optional[ErrorCode] = None
    warning_code: Optional[WarningCode] = None
