"""
Pytest configuration and shared fixtures.
"""
import openpyxl
import pytest

from excel_data_parser import ParserConfig, SheetGrid


@pytest.fixture
def config():
    return ParserConfig()


@pytest.fixture
def make_grid():
    """由二维列表构建内存中的工作表"""
    def _make(rows, name="Sheet1", merged_cells=None):
        return SheetGrid.from_rows(name, rows, merged_cells)
    return _make


@pytest.fixture
def write_workbook():
    """写出 xlsx 文件：sheets 为 {sheet 名: 行列表}，merges 为 {sheet 名: ["B1:C1", ...]}"""
    def _write(path, sheets, merges=None):
        wb = openpyxl.Workbook()
        for index, (name, rows) in enumerate(sheets.items()):
            ws = wb.active if index == 0 else wb.create_sheet()
            ws.title = name
            for row in rows:
                ws.append(list(row))
            for cell_range in (merges or {}).get(name, []):
                ws.merge_cells(cell_range)
        wb.save(path)
        wb.close()
        return path
    return _write


@pytest.fixture
def hero_rows():
    """一个带嵌套列表的工作表：英雄 → 物品列表 → 标签列表"""
    return [
        ["#description", "Hero table"],
        ["#var", "Name", "Items", "Items"],
        ["#var", None, "Name", "Tags"],
        ["#type", "string", "list", "list"],
        ["#type", None, "string", "list"],
        [None, "Hero", "Sword", "sharp"],
        [None, None, None, "shiny"],
        [None, None, "Shield", "heavy"],
        [None, "Villain", "Axe", None],
    ]
