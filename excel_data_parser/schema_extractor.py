"""
表头解析器 - 从 # 开头的关键词行构建列 Schema 与路径映射
"""
from typing import Dict, List, Optional
from .config import ParserConfig
from .constants import (
    HEADER_MARKER,
    HEADER_COLUMN,
    FIRST_DATA_COLUMN,
    KEYWORD_VAR,
    KEYWORD_TYPE,
)
from .grid_builder import SheetGrid
from .logger import DualLogger
from .models import ColumnSchema, SheetSchema, WarningCode
from .paths import build_path, path_prefixes


class SchemaExtractor:
    """表头解析器"""

    def __init__(self, config: ParserConfig, logger: Optional[DualLogger] = None):
        self.config = config
        self.logger = logger or DualLogger(log_level=config.log_level)

    def extract(self, grid: SheetGrid) -> Optional[SheetSchema]:
        """
        解析表头
        没有关键词行，或缺少 var / type 行时返回 None
        """
        schema = SheetSchema(sheet_name=grid.name)
        schema.row_count, schema.col_count = self._apply_limits(grid)

        # 1. 扫描第一列的表头行
        row_to_keyword = self._scan_header_rows(grid, schema)
        if not row_to_keyword:
            return None
        keywords = set(row_to_keyword.values())
        if KEYWORD_VAR not in keywords or KEYWORD_TYPE not in keywords:
            return None

        # 2. 逐列收集关键词数据
        for col in range(FIRST_DATA_COLUMN, schema.col_count + 1):
            column = ColumnSchema(col)
            for row, keyword in row_to_keyword.items():
                value = grid.cell_text(row, col)
                if value is None or value.strip() == "":
                    continue
                column.add(keyword, value.strip())

            # 没有任何数据的列直接忽略
            if not column.has_data:
                continue

            if not self._validate_column(column, schema):
                schema.dropped_columns.append(col)
                continue

            self._register_paths(column, schema)
            schema.columns[col] = column

        self.logger.log("schema.extract", sheet=grid.name,
                        metrics={"header_rows": schema.header_row_count,
                                 "columns": len(schema.columns),
                                 "dropped": len(schema.dropped_columns),
                                 "paths": len(schema.path_to_type),
                                 "metadata": list(schema.metadata.keys())})
        return schema

    def _apply_limits(self, grid: SheetGrid):
        """行列数超过配置上限时截断并警告"""
        row_count, col_count = grid.n_rows, grid.n_cols
        source_rows = max(grid.source_rows, row_count)
        source_cols = max(grid.source_cols, col_count)

        if source_rows > self.config.max_rows:
            self.logger.warn("schema.limit",
                             f"工作表 '{grid.name}' 行数超过限制 ({source_rows} > {self.config.max_rows})，"
                             f"将只处理前 {self.config.max_rows} 行",
                             WarningCode.ROWS_TRUNCATED, sheet=grid.name,
                             metrics={"rows": source_rows, "limit": self.config.max_rows})
            row_count = min(row_count, self.config.max_rows)

        if source_cols > self.config.max_cols:
            self.logger.warn("schema.limit",
                             f"工作表 '{grid.name}' 列数超过限制 ({source_cols} > {self.config.max_cols})，"
                             f"将只处理前 {self.config.max_cols} 列",
                             WarningCode.COLS_TRUNCATED, sheet=grid.name,
                             metrics={"cols": source_cols, "limit": self.config.max_cols})
            col_count = min(col_count, self.config.max_cols)

        return row_count, col_count

    def _scan_header_rows(self, grid: SheetGrid, schema: SheetSchema) -> Dict[int, str]:
        """
        自上而下扫描第一列，遇到不以 # 开头的行即停止
        已登记关键词记录 行号 → 关键词；其他关键词作为 sheet 元数据
        """
        row_to_keyword = {}
        for row in range(1, schema.row_count + 1):
            text = grid.cell_text(row, HEADER_COLUMN)
            if text is None or not text.startswith(HEADER_MARKER):
                break

            schema.header_row_count += 1
            raw_keyword = text.lstrip(HEADER_MARKER).strip()

            keyword = self.config.canonical_keyword(raw_keyword)
            if keyword is not None:
                row_to_keyword[row] = keyword
            else:
                schema.metadata[raw_keyword] = self._first_value_in_row(grid, row, schema.col_count)

        return row_to_keyword

    def _first_value_in_row(self, grid: SheetGrid, row: int, col_count: int) -> Optional[str]:
        for col in range(FIRST_DATA_COLUMN, col_count + 1):
            value = grid.cell_text(row, col)
            if value is not None:
                return value
        return None

    def _validate_column(self, column: ColumnSchema, schema: SheetSchema) -> bool:
        """
        校验列数据：var 与 type 必须同时存在且数量一致；
        严格模式下还要检查变量名格式与类型
        """
        names = column.get(KEYWORD_VAR)
        types = column.get(KEYWORD_TYPE)

        if names is None or types is None or len(names) != len(types):
            self.logger.warn("schema.column_dropped",
                             f"第{column.column_index}列的 var/type 数量不一致 "
                             f"(var={len(names or [])}, type={len(types or [])})，已忽略该列",
                             WarningCode.COLUMN_DROPPED, sheet=schema.sheet_name,
                             cell=(schema.header_row_count, column.column_index))
            return False

        if not self.config.strict_validation:
            return True

        for name in names:
            if not self.config.is_valid_identifier(name):
                self.logger.warn("schema.column_dropped",
                                 f"第{column.column_index}列包含无效的变量名: {name}",
                                 WarningCode.INVALID_IDENTIFIER, sheet=schema.sheet_name,
                                 cell=(schema.header_row_count, column.column_index))
                return False

        for type_name in types:
            if not self.config.is_valid_type(type_name):
                self.logger.warn("schema.column_dropped",
                                 f"第{column.column_index}列包含无效的类型: {type_name}",
                                 WarningCode.INVALID_TYPE, sheet=schema.sheet_name,
                                 cell=(schema.header_row_count, column.column_index))
                return False

        return True

    def _register_paths(self, column: ColumnSchema, schema: SheetSchema):
        """每一层路径登记类型，完整路径登记默认值"""
        names: List[str] = column.var_names
        types: List[str] = column.type_names

        for path, type_name in zip(path_prefixes(names), types):
            schema.path_to_type[path] = type_name

        if column.default_value:
            schema.path_to_default[build_path(names)] = column.default_value
