"""
文件读取器 - 支持 xlsx/xlsb/csv
"""
import csv
import pandas as pd
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Any
from openpyxl import load_workbook
try:
    import pyxlsb
except ImportError:
    pyxlsb = None

from .models import FileFormat
from .constants import CSV_ENCODINGS
from .exceptions import UnsupportedFormatError, FileReadError, InvalidArgumentError


def detect_format(file_path: str) -> FileFormat:
    """检测文件格式"""
    ext = Path(file_path).suffix.lower()
    if ext in (".xlsx", ".xlsm"):
        return FileFormat.xlsx
    elif ext == ".xlsb":
        return FileFormat.xlsb
    elif ext == ".csv":
        return FileFormat.csv
    else:
        raise UnsupportedFormatError(f"Unsupported file extension: {ext}", file_path=file_path)


def csv_sheet_name(file_path: str) -> str:
    """CSV 只有一个工作表，以文件名命名"""
    return Path(file_path).stem


def _empty_metadata(source_rows: int = 0, source_cols: int = 0) -> Dict[str, Any]:
    return {
        "merged_cells": [],
        "source_rows": source_rows,
        "source_cols": source_cols,
    }


def _rows_to_dataframe(data: List[list]) -> pd.DataFrame:
    if not data:
        return pd.DataFrame()
    # 确保所有行长度一致
    max_len = max(len(row) for row in data)
    data = [row + [None] * (max_len - len(row)) for row in data]
    return pd.DataFrame(data, dtype=object)


def list_sheet_names(file_path: str, format: Optional[FileFormat] = None) -> List[str]:
    """列出文件中的全部工作表名称"""
    if format is None:
        format = detect_format(file_path)

    if format == FileFormat.csv:
        return [csv_sheet_name(file_path)]

    if format == FileFormat.xlsb:
        if pyxlsb is None:
            raise FileReadError("pyxlsb library not installed. Install with: pip install pyxlsb",
                                file_path=file_path)
        try:
            with pyxlsb.open_workbook(file_path) as wb:
                return list(wb.sheets)
        except Exception as e:
            raise FileReadError(f"Failed to read xlsb file: {str(e)}", file_path=file_path)

    try:
        wb = load_workbook(file_path, read_only=True, data_only=True)
    except Exception as e:
        raise FileReadError(f"Failed to read xlsx file: {str(e)}", file_path=file_path)
    try:
        return list(wb.sheetnames)
    finally:
        wb.close()


def _read_worksheet(ws, max_rows: Optional[int] = None,
                    max_cols: Optional[int] = None) -> Tuple[pd.DataFrame, Dict[str, Any]]:
    """
    openpyxl 工作表 → (DataFrame, metadata)
    metadata 包含: merged_cells（0-based）, source_rows, source_cols
    """
    original_max_row = ws.max_row or 0
    original_max_col = ws.max_column or 0

    # 应用行数和列数限制
    max_row = min(original_max_row, max_rows) if max_rows else original_max_row
    max_col = min(original_max_col, max_cols) if max_cols else original_max_col

    data = []
    if max_row > 0 and max_col > 0:
        for row in ws.iter_rows(min_row=1, max_row=max_row, min_col=1, max_col=max_col, values_only=True):
            data.append(list(row))

    df = _rows_to_dataframe(data)
    metadata = _empty_metadata(original_max_row, original_max_col)

    for merged_range in ws.merged_cells.ranges:
        metadata["merged_cells"].append({
            "min_row": merged_range.min_row - 1,  # 转为0-based
            "max_row": merged_range.max_row - 1,
            "min_col": merged_range.min_col - 1,
            "max_col": merged_range.max_col - 1,
        })

    return df, metadata


def read_xlsb_sheet(file_path: str, sheet_name: str, max_rows: Optional[int] = None,
                    max_cols: Optional[int] = None) -> Tuple[pd.DataFrame, Dict[str, Any]]:
    """
    读取 xlsb 文件的指定 sheet（xlsb 不提供合并单元格信息）
    """
    if pyxlsb is None:
        raise FileReadError("pyxlsb library not installed. Install with: pip install pyxlsb",
                            file_path=file_path)

    try:
        with pyxlsb.open_workbook(file_path) as wb:
            if sheet_name not in wb.sheets:
                raise FileReadError(f"Sheet '{sheet_name}' not found in file", file_path=file_path)

            data = []
            with wb.get_sheet(sheet_name) as ws:
                for row in ws.rows():
                    data.append([item.v for item in row])
    except FileReadError:
        raise
    except Exception as e:
        raise FileReadError(f"Failed to read xlsb file: {str(e)}", file_path=file_path)

    source_rows = len(data)
    source_cols = max((len(row) for row in data), default=0)
    if max_rows:
        data = data[:max_rows]
    if max_cols:
        data = [row[:max_cols] for row in data]

    return _rows_to_dataframe(data), _empty_metadata(source_rows, source_cols)


def _csv_width(file_path: str, encoding: str) -> int:
    """CSV 中最宽一行的字段数"""
    with open(file_path, "r", encoding=encoding, newline="") as f:
        return max((len(row) for row in csv.reader(f)), default=0)


def read_csv_file(file_path: str, max_rows: Optional[int] = None,
                  max_cols: Optional[int] = None) -> Tuple[pd.DataFrame, Dict[str, Any]]:
    """
    读取 CSV 文件（无表头行，保留空行以维持行号）
    各行字段数可以不同，列数取最宽的一行
    """
    df = None
    last_error = None

    # 尝试多种编码
    for encoding in CSV_ENCODINGS:
        try:
            width = _csv_width(file_path, encoding)
            if width == 0:
                df = pd.DataFrame()
                break
            df = pd.read_csv(file_path, encoding=encoding, header=None, names=list(range(width)),
                             dtype=str, keep_default_na=False, skip_blank_lines=False)
            break
        except UnicodeDecodeError as e:
            last_error = e
            continue
        except pd.errors.EmptyDataError:
            df = pd.DataFrame()
            break
        except (OSError, csv.Error, pd.errors.ParserError) as e:
            raise FileReadError(f"Failed to read CSV file: {str(e)}", file_path=file_path)

    if df is None:
        raise FileReadError(f"Failed to decode CSV file with encodings: {CSV_ENCODINGS}. "
                            f"Last error: {last_error}", file_path=file_path)

    source_rows, source_cols = df.shape
    if max_rows:
        df = df.iloc[:max_rows, :]
    if max_cols:
        df = df.iloc[:, :max_cols]
    df = df.reset_index(drop=True)
    df.columns = range(df.shape[1])

    return df, _empty_metadata(source_rows, source_cols)


def read_file(file_path: str, sheet_names: Optional[List[str]] = None,
              format: Optional[FileFormat] = None, max_rows: Optional[int] = None,
              max_cols: Optional[int] = None) -> Dict[str, Tuple[pd.DataFrame, Dict[str, Any]]]:
    """
    统一入口：读取文件并返回指定 sheet（默认全部）的数据和元数据，按工作簿顺序

    返回: {sheet_name: (DataFrame, metadata)}
    """
    if format is None:
        format = detect_format(file_path)

    result = {}

    if format == FileFormat.csv:
        name = csv_sheet_name(file_path)
        if sheet_names and list(sheet_names) != [name]:
            raise InvalidArgumentError(f"CSV file only has sheet '{name}'")
        result[name] = read_csv_file(file_path, max_rows, max_cols)
        return result

    available = list_sheet_names(file_path, format)
    if sheet_names:
        missing = [s for s in sheet_names if s not in available]
        if missing:
            raise FileReadError(f"Sheets not found in file: {missing}", file_path=file_path)
        targets = [s for s in available if s in sheet_names]
    else:
        targets = available

    if format == FileFormat.xlsb:
        for sheet in targets:
            result[sheet] = read_xlsb_sheet(file_path, sheet, max_rows, max_cols)
        return result

    try:
        wb = load_workbook(file_path, data_only=True, read_only=False)
    except Exception as e:
        raise FileReadError(f"Failed to read xlsx file: {str(e)}", file_path=file_path)
    try:
        for sheet in targets:
            result[sheet] = _read_worksheet(wb[sheet], max_rows, max_cols)
    finally:
        wb.close()

    return result
