"""
按路径取值
"""
from typing import List, Sequence, Union
from .models import Record, ListValue, Value
from .paths import split_path


def query_path(path: Union[str, Sequence[str]], root: Value) -> List[Value]:
    """
    沿点分路径取出所有匹配的值，遇到列表时对每个元素继续查找并拼接结果
    """
    segments = split_path(path) if isinstance(path, str) else list(path)
    return _query(segments, root)


def _query(segments: List[str], node: Value) -> List[Value]:
    # 抵达最终路径
    if not segments:
        if isinstance(node, ListValue):
            return list(node.items)
        return [node]

    name, rest = segments[0], segments[1:]
    results: List[Value] = []

    if isinstance(node, ListValue):
        for item in node:
            if isinstance(item, Record) and name in item:
                results.extend(_query(rest, item[name]))
    elif isinstance(node, Record):
        if name in node:
            results.extend(_query(rest, node[name]))

    return results
