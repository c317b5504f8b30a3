"""项目内使用的自定义异常定义。"""

from __future__ import annotations

from pathlib import Path


class GalleryError(Exception):
    """基础异常类型。"""


class InvalidConfigurationError(GalleryError):
    """配置不合法时抛出。"""


class DirectoryAccessError(GalleryError):
    """无法读取目录或创建输出目录，整棵子树中止。"""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path


class GalleryWriteError(GalleryError):
    """画廊页面写入失败。"""
