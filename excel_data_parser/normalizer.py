"""
规范化 - 空对象置空、列表类型字段包装为列表
"""
from typing import Dict
from .config import ParserConfig
from .exceptions import DataError
from .models import Record, ListValue, Value, Null, NULL, SheetSchema
from .constants import PATH_SEPARATOR
from .paths import join_path


def is_empty_record(record: Record) -> bool:
    """所有顶层字段都为空"""
    return all(isinstance(value, Null) for value in record.values())


def normalize(record: Record, schema: SheetSchema, config: ParserConfig,
              parent_path: str = "", row: int = -1):
    """
    原地改写 Record：
    - 子对象的字段全部为空时，子对象置为 NULL
    - 空列表、空文本同样视为空
    - 类型标记包含 list 的字段包装为单元素列表
    """
    modified: Dict[str, Value] = {}
    for name, value in record.items():
        path = join_path(parent_path, name)

        type_name = schema.path_to_type.get(path)
        if type_name is None:
            raise DataError(f"No type defined for field '{path}'", sheet_name=schema.sheet_name,
                            row=row, column=_column_for_path(schema, path))

        if isinstance(value, Record):
            normalize(value, schema, config, path, row)
            if is_empty_record(value):
                modified[name] = NULL
        elif value.is_empty():
            modified[name] = NULL

        if config.is_list_type(type_name):
            current = modified.get(name, value)
            if not isinstance(current, Null):
                modified[name] = ListValue([current])

    for name, value in modified.items():
        record.set(name, value)


def prune_empty(record: Record):
    """
    只执行判空规则（不包装列表）：
    全空子对象置为 NULL，列表中的空元素移除
    """
    modified: Dict[str, Value] = {}
    for name, value in record.items():
        if isinstance(value, Record):
            prune_empty(value)
            if is_empty_record(value):
                modified[name] = NULL
        elif isinstance(value, ListValue):
            _prune_list(value)
        elif value.is_empty() and not isinstance(value, Null):
            modified[name] = NULL

    for name, value in modified.items():
        record.set(name, value)


def _prune_list(items: ListValue):
    kept = []
    for item in items:
        if isinstance(item, Record):
            prune_empty(item)
            if is_empty_record(item):
                continue
        elif isinstance(item, ListValue):
            _prune_list(item)
        elif item.is_empty():
            continue
        kept.append(item)
    items.items[:] = kept


def _column_for_path(schema: SheetSchema, path: str) -> int:
    """路径所在的列号（1-based），找不到时返回 -1"""
    for col, column in schema.columns.items():
        field_path = column.field_path
        if field_path == path or field_path.startswith(path + PATH_SEPARATOR):
            return col
    return -1
