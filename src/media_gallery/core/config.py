"""画廊构建任务的配置模型。"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Iterable

from media_gallery.core.exceptions import InvalidConfigurationError

DEFAULT_IMAGE_EXTENSIONS = "jpg,jpeg,gif,png,heic"
DEFAULT_VIDEO_EXTENSIONS = "mp4,avi,mov"
DEFAULT_CONVERT_EXTENSIONS = "heic"


def parse_extensions(value: str | Iterable[str]) -> FrozenSet[str]:
    """将逗号分隔的扩展名列表规范化为小写、带点的集合。"""

    items = value.split(",") if isinstance(value, str) else value
    normalized: set[str] = set()
    for item in items:
        ext = item.strip().lower()
        if not ext:
            continue
        if not ext.startswith("."):
            ext = "." + ext
        normalized.add(ext)
    return frozenset(normalized)


def default_parallelism() -> int:
    """当前进程可用的 CPU 核数。"""

    if hasattr(os, "sched_getaffinity"):
        return len(os.sched_getaffinity(0)) or 1
    return os.cpu_count() or 1


@dataclass(slots=True)
class ExtensionConfig:
    """文件类型识别相关配置。"""

    image: FrozenSet[str] = field(default_factory=lambda: parse_extensions(DEFAULT_IMAGE_EXTENSIONS))
    video: FrozenSet[str] = field(default_factory=lambda: parse_extensions(DEFAULT_VIDEO_EXTENSIONS))
    convert_to_jpeg: FrozenSet[str] = field(default_factory=lambda: parse_extensions(DEFAULT_CONVERT_EXTENSIONS))


@dataclass(slots=True)
class SizeConfig:
    """最大宽高（保持比例）。"""

    width: int
    height: int

    def geometry(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(slots=True)
class ToolConfig:
    """外部编码器命令名。"""

    image_tool: str = "magick"
    video_tool: str = "ffmpeg"


@dataclass(slots=True)
class GalleryConfig:
    """单次画廊构建的配置集合。"""

    input_dir: Path
    output_dir: Path
    extensions: ExtensionConfig = field(default_factory=ExtensionConfig)
    thumbnail: SizeConfig = field(default_factory=lambda: SizeConfig(400, 225))
    scale: SizeConfig = field(default_factory=lambda: SizeConfig(1920, 1080))
    tools: ToolConfig = field(default_factory=ToolConfig)
    parallelism: int = field(default_factory=default_parallelism)
    verbose: bool = False

    def validate(self) -> None:
        """检查配置是否可用，不合法时抛出 InvalidConfigurationError。"""

        if self.parallelism < 1:
            raise InvalidConfigurationError(f"并发数必须大于 0: {self.parallelism}")

        for label, size in (("缩略图", self.thumbnail), ("缩放图", self.scale)):
            if size.width < 1 or size.height < 1:
                raise InvalidConfigurationError(f"{label}尺寸必须大于 0: {size.geometry()}")

        if not self.input_dir.exists():
            raise InvalidConfigurationError(f"输入目录不存在: {self.input_dir}")
        if not self.input_dir.is_dir():
            raise InvalidConfigurationError(f"输入路径不是目录: {self.input_dir}")

        input_root = self.input_dir.resolve()
        output_root = self.output_dir.resolve()
        if output_root == input_root or input_root in output_root.parents:
            raise InvalidConfigurationError(f"输出目录不能位于输入目录内: {self.output_dir}")
