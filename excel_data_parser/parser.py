"""
主解析器 - 工作表解析与统一入口函数
"""
import copy
from pathlib import Path
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple, Union

from .config import ParserConfig
from .constants import RUN_TS_FORMAT, DIR_LOGS
from .defaults import apply_defaults_to_record
from .exceptions import InvalidArgumentError, SheetError, NoSchemaError, DataError
from .exporter import Exporter
from .file_reader import read_file
from .grid_builder import SheetGrid
from .logger import DualLogger
from .merger import ListMerger
from .models import Record, SheetResult, Manifest, OutputItem, LogLevel
from .normalizer import normalize, prune_empty, is_empty_record
from .preprocessor import FilePreprocessor
from .row_reader import RowReader
from .schema_extractor import SchemaExtractor


class SheetParser:
    """
    单个工作表的解析流程：
    表头解析 → 逐行读取 → 规范化 → 续行合并 / 默认值填充后作为新记录
    """

    def __init__(self, config: Optional[ParserConfig] = None, logger: Optional[DualLogger] = None):
        self.config = config or ParserConfig()
        self.logger = logger or DualLogger(log_level=self.config.log_level)

    def parse(self, grid: SheetGrid) -> SheetResult:
        if grid.n_rows == 0 or grid.n_cols == 0:
            raise SheetError("Sheet has no dimension info", sheet_name=grid.name)

        schema = SchemaExtractor(self.config, self.logger).extract(grid)
        if schema is None:
            raise NoSchemaError(sheet_name=grid.name)

        O = grid.build_occupancy_matrix()
        self.logger.log("grid.build", sheet=grid.name,
                        metrics={"cells_total": O.size, "nonempty": O.sum()})

        reader = RowReader(grid, schema)
        merger = ListMerger(schema, self.config, self.logger)
        schema_cols = [col - 1 for col in schema.columns]

        records: List[Record] = []
        for row in range(schema.first_data_row, schema.row_count + 1):
            # 该行所有 Schema 列均为空，跳过
            if not schema_cols or not O[row - 1, schema_cols].any():
                continue

            raw = reader.read_row(row)
            candidate = copy.deepcopy(raw)
            normalize(candidate, schema, self.config, row=row)
            if is_empty_record(candidate):
                continue

            # 先填默认值再规范化：作为新记录，或为续行合并提供新元素
            apply_defaults_to_record(raw, "", schema.path_to_default)
            normalize(raw, schema, self.config, row=row)

            # 合并成功说明该行是上一条记录的续行
            if records and merger.try_merge(records[-1], candidate, filled=raw):
                prune_empty(records[-1])
                continue

            records.append(raw)

        result = SheetResult(
            sheet_name=grid.name,
            type_lookup=dict(schema.path_to_type),
            records=records,
            metadata=dict(schema.metadata),
            columns=dict(schema.columns),
            physical_rows=max(0, schema.row_count - schema.header_row_count),
            dropped_columns=list(schema.dropped_columns),
        )
        self.logger.log("sheet.parsed", sheet=grid.name,
                        metrics={"rows": result.physical_rows, "records": len(records)})
        return result


def parse_sheet(grid: SheetGrid, config: Optional[ParserConfig] = None,
                logger: Optional[DualLogger] = None) -> SheetResult:
    """解析单个工作表"""
    return SheetParser(config, logger).parse(grid)


def parse_file(
    file_path: str,
    sheet_name: Optional[Union[str, List[str]]] = None,
    output_dir: Optional[str] = None,
    export_json: bool = False,
    config: Optional[ParserConfig] = None
) -> Tuple[Dict[str, SheetResult], Manifest]:
    """
    统一入口函数：解析 Excel/CSV 文件

    Args:
        file_path: 输入文件路径
        sheet_name: Sheet 名称或名称列表，None 表示全部
        output_dir: 输出目录（日志、JSON、manifest），None 表示不落盘
        export_json: 是否导出 JSON（需要 output_dir）
        config: 配置对象

    Returns:
        (工作表名 → SheetResult, Manifest)
    """
    if config is None:
        config = ParserConfig()
    if export_json and not output_dir:
        raise InvalidArgumentError("export_json requires output_dir")
    if isinstance(sheet_name, str):
        sheet_name = [sheet_name]

    # 1. 创建运行目录
    run_timestamp = datetime.now(timezone.utc)
    ts_str = run_timestamp.strftime(RUN_TS_FORMAT)
    run_id = f"RUN_{ts_str}_UTC"
    run_dir = Path(output_dir) / run_id if output_dir else None

    # 2. 初始化日志
    logger = DualLogger(run_dir / DIR_LOGS if run_dir else None, config.log_level)

    try:
        file_name = Path(file_path).name if file_path else None
        logger.log("run.start", file=file_name)

        # 3. 预处理与读取
        info = FilePreprocessor(config, logger).preprocess_file(file_path)
        file_format = info["format"]
        sheet_data = read_file(file_path, sheet_name, file_format,
                               max_rows=config.max_rows, max_cols=config.max_cols)
        logger.log("file.loaded", file=file_name, metrics={"sheets": list(sheet_data.keys())})

        manifest = Manifest(
            run_id=run_id,
            source=file_path,
            format=file_format,
            sheets=list(sheet_data.keys()),
            config_profile="default" if config == ParserConfig() else "custom",
            started_at_utc=run_timestamp.isoformat().replace("+00:00", "Z"),
        )
        exporter = Exporter(run_dir, config) if run_dir else None

        # 4. 逐个处理 sheet，每个 sheet 独立的解析上下文
        results: Dict[str, SheetResult] = {}
        sheet_parser = SheetParser(config, logger)
        for name, (df, metadata) in sheet_data.items():
            grid = SheetGrid(name, df, metadata)
            try:
                result = sheet_parser.parse(grid)
            except (SheetError, DataError) as e:
                e.file_path = file_path
                level = LogLevel.WARN if isinstance(e, NoSchemaError) else LogLevel.ERROR
                logger.log("sheet.error", level=level, file=file_name, sheet=name,
                           cell=(e.row, e.column) if isinstance(e, DataError) and e.row >= 0 else None,
                           message=str(e), error_code=e.code)
                if config.fail_fast:
                    raise
                manifest.errors[name] = str(e)
                continue

            results[name] = result

            json_path = None
            if export_json:
                json_path = str(exporter.export_sheet_json(result, run_timestamp))
                logger.log("export.json", sheet=name, file=json_path,
                           metrics={"records": len(result.records)})
            manifest.outputs.append(OutputItem(
                sheet=name,
                json=json_path,
                rows=result.physical_rows,
                records=len(result.records),
            ))

        # 5. 导出元数据与 Manifest
        manifest.warnings = dict(logger.warning_counts)
        manifest.finished_at_utc = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        if exporter:
            if export_json and results:
                exporter.export_metadata(results)
            exporter.export_manifest(manifest)

        logger.log("run.end", message="Run completed successfully",
                   metrics={"sheets": len(results), "errors": len(manifest.errors)})

        return results, manifest

    except Exception as e:
        logger.log("error", level=LogLevel.ERROR, message=str(e))
        raise
    finally:
        logger.close()
