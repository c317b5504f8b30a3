"""核心数据模型定义。"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence


class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class ConversionTask:
    """单个源文件需要生成的输出（仅文件名，不含目录）。"""

    source_path: Path
    kind: MediaKind
    scale_name: str
    thumbnail_name: str


@dataclass(frozen=True, slots=True)
class ConversionCommand:
    """一次外部编码器调用。"""

    argv: Sequence[str]
    source_path: Path
    target_path: Path
    output: str  # "scale" | "thumbnail"

    def display(self) -> str:
        return " ".join(str(arg) for arg in self.argv)


@dataclass(slots=True)
class ConversionOutcome:
    """记录单次转换的结果（用于日志/统计）。"""

    command: ConversionCommand
    status: str
    returncode: Optional[int] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "converted"


@dataclass(slots=True)
class DirectorySummary:
    """单个目录节点的聚合统计。

    缩略图路径都相对于该目录自身的输出目录，例如 ``t_a.jpg`` 或
    ``sub/t_b.jpg``。
    """

    name: str
    own_thumbnail: str = ""
    sub_thumbnail: str = ""
    images: int = 0
    videos: int = 0
    directories: int = 0
    sub_images: int = 0
    sub_videos: int = 0
    complete: bool = False  # index.html 已写出

    @property
    def thumbnail(self) -> str:
        """代表缩略图：子目录先于文件处理，因此后代缩略图优先。"""

        return self.sub_thumbnail or self.own_thumbnail

    @property
    def total_images(self) -> int:
        return self.images + self.sub_images

    @property
    def total_videos(self) -> int:
        return self.videos + self.sub_videos

    @property
    def total_media(self) -> int:
        return self.total_images + self.total_videos

    def absorb(self, child: "DirectorySummary") -> bool:
        """合并子目录统计；子树含媒体时返回 True。"""

        self.directories += 1
        self.sub_images += child.total_images
        self.sub_videos += child.total_videos

        if child.total_media == 0:
            return False
        if not self.sub_thumbnail and child.thumbnail:
            self.sub_thumbnail = f"{child.name}/{child.thumbnail}"
        return True


@dataclass(slots=True)
class BuildResult:
    """一次完整构建的产出。"""

    root: DirectorySummary
    outcomes: list[ConversionOutcome] = field(default_factory=list)
    launched: int = 0
    skipped: int = 0
    interrupted: bool = False

    @property
    def failed(self) -> list[ConversionOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]
