"""
配置类定义
"""
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Tuple, Optional, Pattern, Union

import yaml

from .models import LogLevel
from .exceptions import InvalidArgumentError
from .constants import (
    BUILTIN_KEYWORDS,
    LIST_TYPE_MARKER,
    DEFAULT_MAX_ROWS,
    DEFAULT_MAX_COLS,
    DEFAULT_MAX_NESTING_LEVEL,
    DEFAULT_MAX_FILE_SIZE_MB,
    DEFAULT_VARIABLE_NAME_PATTERN,
    DEFAULT_VALID_TYPES,
    DEFAULT_SUPPORTED_EXTENSIONS,
    JSON_ENCODING,
    JSON_INDENT,
)


@dataclass
class ParserConfig:
    # 表头关键词
    custom_keywords: List[str] = field(default_factory=list)  # 在 var/type/default 之外额外识别的关键词
    case_sensitive: bool = False

    # 限制
    max_rows: int = DEFAULT_MAX_ROWS
    max_cols: int = DEFAULT_MAX_COLS
    max_nesting_level: int = DEFAULT_MAX_NESTING_LEVEL
    max_file_size_mb: float = DEFAULT_MAX_FILE_SIZE_MB  # 超过只警告

    # 校验
    strict_validation: bool = True
    variable_name_pattern: str = DEFAULT_VARIABLE_NAME_PATTERN
    valid_types: Tuple[str, ...] = DEFAULT_VALID_TYPES
    list_type_marker: str = LIST_TYPE_MARKER
    supported_extensions: Tuple[str, ...] = DEFAULT_SUPPORTED_EXTENSIONS

    # 行为
    fail_fast: bool = False  # True 时工作表级/数据级错误直接抛出，不再继续后续 sheet

    # 导出
    json_encoding: str = JSON_ENCODING
    json_indent: int = JSON_INDENT
    sanitize_file_name: bool = True
    long_path_support: bool = True

    # 日志
    log_level: LogLevel = LogLevel.INFO

    def __post_init__(self):
        for name in ("max_rows", "max_cols", "max_nesting_level"):
            if getattr(self, name) <= 0:
                raise InvalidArgumentError(f"{name} must be positive, got {getattr(self, name)}")
        if not self.list_type_marker:
            raise InvalidArgumentError("list_type_marker must not be empty")
        self.valid_types = tuple(self.valid_types)
        self.supported_extensions = tuple(ext.lower() for ext in self.supported_extensions)
        self.custom_keywords = list(self.custom_keywords)
        if isinstance(self.log_level, str):
            self.log_level = LogLevel(self.log_level.upper())
        try:
            flags = 0 if self.case_sensitive else re.IGNORECASE
            self._identifier_regex: Pattern = re.compile(self.variable_name_pattern, flags)
        except re.error as e:
            raise InvalidArgumentError(
                f"Invalid variable_name_pattern: {self.variable_name_pattern}",
                hint=str(e),
            )

    # ---------- 关键词与类型匹配 ----------
    @property
    def keywords(self) -> List[str]:
        return list(BUILTIN_KEYWORDS) + list(self.custom_keywords)

    def _same(self, a: str, b: str) -> bool:
        if self.case_sensitive:
            return a == b
        return a.lower() == b.lower()

    def canonical_keyword(self, text: str) -> Optional[str]:
        """返回已登记的关键词写法；不是关键词时返回 None"""
        if not text:
            return None
        for keyword in self.keywords:
            if self._same(keyword, text):
                return keyword
        return None

    def is_keyword(self, text: str) -> bool:
        return self.canonical_keyword(text) is not None

    def is_valid_identifier(self, name: str) -> bool:
        if not name or not name.strip():
            return False
        return self._identifier_regex.match(name) is not None

    def is_valid_type(self, type_name: str) -> bool:
        if not type_name or not type_name.strip():
            return False
        return any(self._same(t, type_name) for t in self.valid_types)

    def is_list_type(self, type_name: str) -> bool:
        if self.case_sensitive:
            return self.list_type_marker in type_name
        return self.list_type_marker.lower() in type_name.lower()


def load_config(path: Union[str, Path]) -> ParserConfig:
    """
    从 YAML 文件加载配置
    未知键视为错误
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise InvalidArgumentError(f"Failed to read config file: {path}", hint=str(e))
    except yaml.YAMLError as e:
        raise InvalidArgumentError(f"Invalid YAML in config file: {path}", hint=str(e))

    if not isinstance(data, dict):
        raise InvalidArgumentError(f"Config file must contain a mapping: {path}")

    known = {f.name for f in fields(ParserConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise InvalidArgumentError(f"Unknown config keys: {', '.join(unknown)}")

    for key in ("valid_types", "supported_extensions"):
        if key in data and data[key] is not None:
            data[key] = tuple(data[key])

    return ParserConfig(**data)
