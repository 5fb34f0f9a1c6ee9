"""
行读取器 - 将一行单元格按列路径放入嵌套 Record
"""
from .exceptions import DataError
from .grid_builder import SheetGrid
from .models import Record, Scalar, NULL, SheetSchema


class RowReader:
    """行读取器"""

    def __init__(self, grid: SheetGrid, schema: SheetSchema):
        self.grid = grid
        self.schema = schema

    def read_row(self, row: int) -> Record:
        record = Record()
        for col, column in self.schema.columns.items():
            names = column.var_names
            if not names:
                raise DataError("Column has no variable name path", sheet_name=self.schema.sheet_name,
                                row=row, column=col)

            try:
                text = self.grid.cell_text(row, col)
            except (IndexError, KeyError, TypeError, ValueError) as e:
                raise DataError(f"Failed to read cell: {e}", sheet_name=self.schema.sheet_name,
                                row=row, column=col) from e
            value = NULL if text is None else Scalar(text)

            # 除最后一个名称外都是上级路径
            current = record
            for name in names[:-1]:
                child = current.get(name)
                if child is None:
                    child = Record()
                    current.set(name, child)
                elif not isinstance(child, Record):
                    raise DataError(f"Field '{name}' is both a value and a parent of '{column.field_path}'",
                                    sheet_name=self.schema.sheet_name, row=row, column=col)
                current = child
            if isinstance(current.get(names[-1]), Record):
                raise DataError(f"Field '{column.field_path}' is both a value and a parent",
                                sheet_name=self.schema.sheet_name, row=row, column=col)
            current.set(names[-1], value)

        return record
