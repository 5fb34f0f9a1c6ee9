"""
字段路径构建
"""
from typing import List, Sequence
from .constants import PATH_SEPARATOR


def build_path(names: Sequence[str]) -> str:
    """变量名序列 → 点分路径，空序列返回空串"""
    if not names:
        return ""
    return PATH_SEPARATOR.join(names)


def join_path(parent: str, name: str) -> str:
    if not parent:
        return name
    return f"{parent}{PATH_SEPARATOR}{name}"


def split_path(path: str) -> List[str]:
    if not path:
        return []
    return path.split(PATH_SEPARATOR)


def path_depth(path: str) -> int:
    return len(split_path(path))


def path_prefixes(names: Sequence[str]) -> List[str]:
    """每一层的路径：["a", "a.b", "a.b.c"]"""
    return [build_path(names[:i + 1]) for i in range(len(names))]
