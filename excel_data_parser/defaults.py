"""
默认值填充
"""
from typing import Dict
from .models import Record, ListValue, Scalar, Value, Null
from .paths import join_path


def apply_defaults(value: Value, path: str, path_to_default: Dict[str, str]) -> Value:
    """
    为 value 填充默认值，返回填充后的值
    Record 原地修改；单元素列表只处理其唯一元素
    """
    if isinstance(value, Record):
        apply_defaults_to_record(value, path, path_to_default)
        return value
    if isinstance(value, ListValue):
        if len(value) == 1:
            value.items[0] = apply_defaults(value.items[0], path, path_to_default)
        return value
    if isinstance(value, Null) and path in path_to_default:
        return Scalar(path_to_default[path])
    return value


def apply_defaults_to_record(record: Record, parent_path: str, path_to_default: Dict[str, str]):
    modified: Dict[str, Value] = {}
    for name, value in record.items():
        path = join_path(parent_path, name)

        # 能取到默认值说明已到达路径末端，非空值不覆盖
        if path in path_to_default:
            if isinstance(value, Null):
                modified[name] = Scalar(path_to_default[path])
            continue

        # 未到末端则向内处理
        if isinstance(value, ListValue):
            for item in value:
                if isinstance(item, Record):
                    apply_defaults_to_record(item, path, path_to_default)
        elif isinstance(value, Record):
            apply_defaults_to_record(value, path, path_to_default)

    for name, value in modified.items():
        record.set(name, value)
