"""
列表合并 - 把续行并入上一条记录的列表字段
"""
from typing import List, Optional
from .config import ParserConfig
from .defaults import apply_defaults
from .logger import DualLogger
from .models import Record, ListValue, Null, Value, SheetSchema, WarningCode
from .paths import join_path, path_depth


class ListMerger:
    """
    续行合并器

    一条逻辑记录的列表字段可能分布在多行物理行上：
    当新行中除列表字段外的字段全部为空时，新行被视为上一条记录的续行，
    其列表元素追加（或递归合并）到上一条记录的对应列表中。
    """

    def __init__(self, schema: SheetSchema, config: ParserConfig, logger: Optional[DualLogger] = None):
        self.schema = schema
        self.config = config
        self.logger = logger or DualLogger(log_level=config.log_level)

    def try_merge(self, previous: Record, candidate: Record, parent_path: str = "",
                  filled: Optional[Record] = None) -> bool:
        """
        尝试把 candidate 合并进 previous
        返回 False 表示 candidate 应作为新记录

        filled: 同一行先填默认值再规范化得到的 Record，结构与 candidate 对应；
        追加的新元素取自 filled，嵌套对象的默认值因此不会因先置空而丢失。
        未提供时对新元素直接填充默认值
        """
        if len(previous) == 0 or len(candidate) == 0:
            return False

        # 检查嵌套层级限制
        nesting_level = path_depth(parent_path)
        if nesting_level > self.config.max_nesting_level:
            self.logger.warn("merge.depth_exceeded",
                             f"数据嵌套层级过深 ({nesting_level} > {self.config.max_nesting_level})，跳过合并",
                             WarningCode.NESTING_TOO_DEEP, sheet=self.schema.sheet_name,
                             metrics={"path": parent_path})
            return False

        targets = self._target_list_names(candidate)
        if not targets:
            return False

        processed = False
        for name in targets:
            path = join_path(parent_path, name)
            new_list = candidate[name]

            # 新对象内容为空跳过
            if len(new_list) == 0:
                continue
            new_item = new_list.items[0]
            filled_item = _single_item(filled, name)

            target_list = previous.get(name)
            if target_list is None or isinstance(target_list, Null):
                target_list = ListValue()
                previous.set(name, target_list)
            elif not isinstance(target_list, ListValue):
                continue

            processed = True

            # 目标列表为空，直接加入
            if len(target_list) == 0:
                target_list.append(self._prepare_item(new_item, filled_item, path))
                continue

            last_item = target_list.items[-1]
            if isinstance(last_item, Record) and isinstance(new_item, Record):
                # 递归合并失败则作为新元素加入
                inner_filled = filled_item if isinstance(filled_item, Record) else None
                if not self.try_merge(last_item, new_item, path, inner_filled):
                    target_list.append(self._prepare_item(new_item, filled_item, path))
            else:
                # 值列表只追加
                target_list.append(self._prepare_item(new_item, filled_item, path))

        return processed

    def _prepare_item(self, new_item: Value, filled_item: Optional[Value], path: str) -> Value:
        if filled_item is not None:
            return filled_item
        return apply_defaults(new_item, path, self.schema.path_to_default)

    def _target_list_names(self, candidate: Record) -> List[str]:
        """
        可合并的列表：同层的非列表字段全部为空
        """
        list_names = [name for name, value in candidate.items() if isinstance(value, ListValue)]
        if not list_names:
            return []

        for name, value in candidate.items():
            if name in list_names:
                continue
            if not isinstance(value, Null):
                return []

        return list_names


def _single_item(record: Optional[Record], name: str) -> Optional[Value]:
    """record[name] 为单元素列表时返回该元素"""
    if record is None:
        return None
    items = record.get(name)
    if isinstance(items, ListValue) and len(items) == 1:
        return items.items[0]
    return None
