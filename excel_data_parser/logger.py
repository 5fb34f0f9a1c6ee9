"""
日志系统 - 标准 logging + 可选的文本/JSONL 文件
"""
import json
import logging
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Tuple
from .models import LogEvent, LogLevel, ErrorCode, WarningCode

LOGGER_NAME = "excel_data_parser"

_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class DualLogger:
    """
    双格式日志记录器（文本 + JSONL）
    log_dir 为 None 时只写入标准 logging
    """

    def __init__(self, log_dir: Optional[Path] = None, log_level: LogLevel = LogLevel.INFO):
        self.log_dir = log_dir
        self.log_level = log_level
        self.warning_counts: Dict[str, int] = {}
        self.txt_logger = logging.getLogger(LOGGER_NAME)
        self.txt_handler: Optional[logging.Handler] = None
        self.jsonl_file = None

        if log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)

            # 文本日志
            self.txt_handler = logging.FileHandler(log_dir / "run.log.txt", encoding="utf-8")
            self.txt_handler.setLevel(_LEVELS[log_level])
            self.txt_handler.setFormatter(logging.Formatter(
                "[%(asctime)s %(levelname)s] %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%SZ"
            ))
            self.txt_logger.addHandler(self.txt_handler)
            if self.txt_logger.level == logging.NOTSET or self.txt_logger.level > _LEVELS[log_level]:
                self.txt_logger.setLevel(_LEVELS[log_level])

            # JSONL 日志
            self.jsonl_path = log_dir / "run.log.jsonl"
            self.jsonl_file = open(self.jsonl_path, "w", encoding="utf-8")

    def log(self, event: str, level: LogLevel = LogLevel.INFO, file: Optional[str] = None,
            sheet: Optional[str] = None, cell: Optional[Tuple[int, int]] = None,
            message: Optional[str] = None,
            metrics: Optional[Dict[str, Any]] = None,
            error_code: Optional[ErrorCode] = None,
            warning_code: Optional[WarningCode] = None):
        """
        记录日志事件
        """
        if warning_code is not None:
            self.warning_counts[warning_code.value] = self.warning_counts.get(warning_code.value, 0) + 1

        if _LEVELS[level] < _LEVELS[self.log_level]:
            return

        ts = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

        log_event = LogEvent(
            ts=ts,
            lvl=level,
            event=event,
            file=file,
            sheet=sheet,
            cell=cell,
            message=message,
            metrics=metrics,
            error_code=error_code,
            warning_code=warning_code
        )

        if self.jsonl_file:
            self.jsonl_file.write(json.dumps(self._to_json_obj(log_event), ensure_ascii=False) + "\n")
            self.jsonl_file.flush()

        # 文本日志
        parts = [f"{log_event.event}"]
        if log_event.file:
            parts.append(f"file={log_event.file}")
        if log_event.sheet:
            parts.append(f"sheet={log_event.sheet}")
        if log_event.cell:
            parts.append(f"row={log_event.cell[0]} column={log_event.cell[1]}")
        if log_event.warning_code:
            parts.append(f"warning={log_event.warning_code.value}")
        if log_event.error_code:
            parts.append(f"error={log_event.error_code.value}")
        if log_event.message:
            parts.append(log_event.message)
        if log_event.metrics:
            metrics_converted = self._convert_to_json_serializable(log_event.metrics)
            metrics_str = " ".join(f"{k}={v}" for k, v in metrics_converted.items())
            if metrics_str:
                parts.append(metrics_str)

        self.txt_logger.log(_LEVELS[level], " ".join(parts))

    def warn(self, event: str, message: str, warning_code: WarningCode, **kwargs):
        self.log(event, level=LogLevel.WARN, message=message, warning_code=warning_code, **kwargs)

    def _to_json_obj(self, log_event: LogEvent) -> Dict[str, Any]:
        json_obj = {
            "ts": log_event.ts,
            "lvl": log_event.lvl.value,
            "event": log_event.event,
        }
        if log_event.file:
            json_obj["file"] = log_event.file
        if log_event.sheet:
            json_obj["sheet"] = log_event.sheet
        if log_event.cell:
            json_obj["row"], json_obj["column"] = log_event.cell
        if log_event.message:
            json_obj["message"] = log_event.message
        if log_event.metrics:
            # 转换 numpy 类型为 Python 原生类型
            json_obj["metrics"] = self._convert_to_json_serializable(log_event.metrics)
        if log_event.error_code:
            json_obj["error_code"] = log_event.error_code.value
        if log_event.warning_code:
            json_obj["warning_code"] = log_event.warning_code.value
        return json_obj

    def _convert_to_json_serializable(self, obj):
        """
        将 numpy 类型转换为 JSON 可序列化的 Python 原生类型
        """
        import numpy as np

        if isinstance(obj, dict):
            return {k: self._convert_to_json_serializable(v) for k, v in obj.items()}
        elif isinstance(obj, (list, tuple)):
            return [self._convert_to_json_serializable(item) for item in obj]
        elif isinstance(obj, np.integer):
            return int(obj)
        elif isinstance(obj, np.floating):
            return float(obj)
        elif isinstance(obj, np.bool_):
            return bool(obj)
        elif isinstance(obj, np.ndarray):
            return obj.tolist()
        return obj

    def close(self):
        """关闭日志文件并移除文件 handler"""
        if self.jsonl_file:
            self.jsonl_file.close()
            self.jsonl_file = None
        if self.txt_handler is not None:
            self.txt_logger.removeHandler(self.txt_handler)
            self.txt_handler.close()
            self.txt_handler = None
