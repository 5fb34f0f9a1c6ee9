"""
网格构建器 - 单元格访问与占用矩阵
行列均为 1-based，合并单元格统一解析到左上角单元格
"""
import math
from datetime import date, datetime, time
import numpy as np
import pandas as pd
from typing import Dict, Tuple, Any, List, Optional, Sequence


def cell_to_text(value: Any) -> Optional[str]:
    """单元格值 → 文本；空值/空白返回 None"""
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, (datetime, date, time)):
        text = value.isoformat()
    else:
        text = str(value)
    if text.strip() == "":
        return None
    return text


class SheetGrid:
    """工作表的只读单元格视图"""

    def __init__(self, name: str, df: pd.DataFrame, metadata: Optional[Dict[str, Any]] = None):
        self.name = name
        self.df = df
        self.metadata = metadata or {}
        self.n_rows, self.n_cols = df.shape
        self.source_rows = self.metadata.get("source_rows") or self.n_rows
        self.source_cols = self.metadata.get("source_cols") or self.n_cols
        self._merged_index = self._build_merged_index(self.metadata.get("merged_cells", []))

    @classmethod
    def from_rows(cls, name: str, rows: Sequence[Sequence[Any]],
                  merged_cells: Optional[List[Dict[str, int]]] = None) -> "SheetGrid":
        """
        由二维列表构建网格
        merged_cells: 0-based 的 min_row/max_row/min_col/max_col 字典列表
        """
        data = [list(row) for row in rows]
        if data:
            max_len = max(len(row) for row in data)
            data = [row + [None] * (max_len - len(row)) for row in data]
            df = pd.DataFrame(data, dtype=object)
        else:
            df = pd.DataFrame()
        return cls(name, df, {"merged_cells": merged_cells or []})

    def _build_merged_index(self, merged_cells: List[Dict[str, int]]) -> Dict[Tuple[int, int], Tuple[int, int]]:
        """构建合并单元格索引：(r, c) → 左上角 (r, c)，0-based"""
        merged_index = {}
        for merged in merged_cells:
            mr0, mr1 = merged["min_row"], merged["max_row"]
            mc0, mc1 = merged["min_col"], merged["max_col"]
            for r in range(mr0, mr1 + 1):
                for c in range(mc0, mc1 + 1):
                    merged_index[(r, c)] = (mr0, mc0)
        return merged_index

    def anchor(self, row: int, col: int) -> Tuple[int, int]:
        """1-based 坐标 → 合并区域左上角坐标（未合并则原样返回）"""
        r, c = self._merged_index.get((row - 1, col - 1), (row - 1, col - 1))
        return r + 1, c + 1

    def cell_value(self, row: int, col: int) -> Any:
        r, c = self.anchor(row, col)
        if r < 1 or c < 1 or r > self.n_rows or c > self.n_cols:
            return None
        return self.df.iat[r - 1, c - 1]

    def cell_text(self, row: int, col: int) -> Optional[str]:
        return cell_to_text(self.cell_value(row, col))

    def build_occupancy_matrix(self) -> np.ndarray:
        """
        构建占用矩阵 O[r, c]: 非空单元为 1（0-based）
        合并区域内的每个单元与左上角一致
        """
        O = np.zeros((self.n_rows, self.n_cols), dtype=np.int8)

        for r in range(self.n_rows):
            for c in range(self.n_cols):
                if cell_to_text(self.df.iat[r, c]) is not None:
                    O[r, c] = 1

        for (r, c), (ar, ac) in self._merged_index.items():
            if 0 <= r < self.n_rows and 0 <= c < self.n_cols and ar < self.n_rows and ac < self.n_cols:
                O[r, c] = O[ar, ac]

        return O
