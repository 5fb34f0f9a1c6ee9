"""
导出系统 - JSON 导出和 Manifest 生成
"""
import json
import yaml
from pathlib import Path
from datetime import datetime
from typing import Dict
from .config import ParserConfig
from .models import Manifest, SheetResult
from .constants import INVALID_FILENAME_CHARS, RUN_TS_FORMAT, DIR_JSON, DIR_ARTIFACTS
from .exceptions import OutputWriteError


class Exporter:
    """导出器"""

    def __init__(self, run_dir: Path, config: ParserConfig):
        self.run_dir = run_dir
        self.config = config
        self.json_dir = run_dir / DIR_JSON
        self.artifacts_dir = run_dir / DIR_ARTIFACTS
        self.json_dir.mkdir(parents=True, exist_ok=True)
        self.artifacts_dir.mkdir(parents=True, exist_ok=True)

    def export_sheet_json(self, result: SheetResult, timestamp: datetime) -> Path:
        """
        导出单个工作表的解析结果
        返回: 相对 run_dir 的路径
        """
        safe_name = self._sanitize_filename(result.sheet_name)
        ts_str = timestamp.strftime(RUN_TS_FORMAT)
        filename = f"{safe_name}_{ts_str}.json"

        # 检查冲突并处理
        json_path = self.json_dir / filename
        counter = 1
        while json_path.exists():
            filename = f"{safe_name}_dup{counter}_{ts_str}.json"
            json_path = self.json_dir / filename
            counter += 1

        try:
            with open(json_path, "w", encoding=self.config.json_encoding) as f:
                json.dump(result.to_dict(), f, ensure_ascii=False, indent=self.config.json_indent)
        except (OSError, TypeError, ValueError) as e:
            raise OutputWriteError(f"Failed to export JSON: {str(e)}")

        return json_path.relative_to(self.run_dir)

    def export_metadata(self, results: Dict[str, SheetResult]):
        """
        导出 Schema 元数据 JSON
        """
        metadata_dict = {}
        for sheet, result in results.items():
            metadata_dict[sheet] = {
                "type_lookup": result.type_lookup,
                "metadata": result.metadata,
                "columns": {
                    str(index): column.values for index, column in result.columns.items()
                },
                "physical_rows": result.physical_rows,
                "dropped_columns": result.dropped_columns,
                "records": len(result.records),
            }

        metadata_path = self.artifacts_dir / "schema_meta.json"
        try:
            with open(metadata_path, "w", encoding=self.config.json_encoding) as f:
                json.dump(metadata_dict, f, ensure_ascii=False, indent=self.config.json_indent)
        except (OSError, TypeError, ValueError) as e:
            raise OutputWriteError(f"Failed to export metadata: {str(e)}")

    def export_manifest(self, manifest: Manifest):
        """
        导出 Manifest YAML
        """
        manifest_path = self.run_dir / "manifest.yml"

        manifest_dict = {
            "run_id": manifest.run_id,
            "source": manifest.source,
            "format": manifest.format.value,
            "sheets": manifest.sheets,
            "config_profile": manifest.config_profile,
            "started_at_utc": manifest.started_at_utc,
            "finished_at_utc": manifest.finished_at_utc,
            "outputs": [
                {
                    "sheet": item.sheet,
                    "json": item.json,
                    "rows": item.rows,
                    "records": item.records,
                }
                for item in manifest.outputs
            ],
            "errors": manifest.errors,
            "warnings": manifest.warnings,
        }

        try:
            with open(manifest_path, "w", encoding="utf-8") as f:
                yaml.dump(manifest_dict, f, allow_unicode=True, default_flow_style=False, sort_keys=False)
        except (OSError, yaml.YAMLError) as e:
            raise OutputWriteError(f"Failed to export manifest: {str(e)}")

    def _sanitize_filename(self, name: str) -> str:
        """
        清洗文件名：去除非法字符
        """
        if not self.config.sanitize_file_name:
            return name

        for char in INVALID_FILENAME_CHARS:
            name = name.replace(char, "_")

        name = name.strip()

        max_len = 200 if self.config.long_path_support else 120
        if len(name) > max_len:
            name = name[:max_len]

        if not name:
            name = "sheet"

        return name
