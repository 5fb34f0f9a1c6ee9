"""
文件预处理器 - 检查路径、格式与文件大小
"""
import os
from pathlib import Path
from typing import Dict, Optional

from .config import ParserConfig
from .exceptions import FileReadError, UnsupportedFormatError
from .file_reader import detect_format
from .logger import DualLogger
from .models import LogLevel, WarningCode


class FilePreprocessor:
    """文件预处理器"""

    def __init__(self, config: ParserConfig, logger: Optional[DualLogger] = None):
        self.config = config
        self.logger = logger

    def preprocess_file(self, file_path: str) -> Dict:
        """
        预处理文件：检查路径、扩展名与大小
        返回预处理信息字典
        """
        if not file_path:
            raise FileReadError("File path must not be empty")

        path = Path(file_path)
        if not path.is_file():
            raise FileReadError(f"File not found: {file_path}", file_path=file_path)

        ext = path.suffix.lower()
        if ext not in self.config.supported_extensions:
            raise UnsupportedFormatError(
                f"Unsupported file extension: {ext}",
                hint=f"Supported: {', '.join(self.config.supported_extensions)}",
                file_path=file_path,
            )

        info = {
            "file_path": file_path,
            "format": detect_format(file_path),
            "file_size_mb": 0.0,
            "warnings": [],
        }

        # 检查文件大小
        file_size_mb = os.path.getsize(file_path) / (1024 * 1024)
        info["file_size_mb"] = file_size_mb

        if file_size_mb > self.config.max_file_size_mb:
            warning = f"文件大小 {file_size_mb:.2f}MB 超过建议值 {self.config.max_file_size_mb}MB，处理可能较慢"
            info["warnings"].append(warning)
            if self.logger:
                self.logger.warn("preprocess.warning", warning, WarningCode.FILE_TOO_LARGE, file=path.name)

        if self.logger:
            self.logger.log("preprocess.complete", level=LogLevel.DEBUG, file=path.name,
                            metrics={
                                "format": info["format"].value,
                                "file_size_mb": round(file_size_mb, 2),
                                "warnings_count": len(info["warnings"]),
                            })

        return info
