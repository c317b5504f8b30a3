"""按扩展名识别媒体类型并推导输出文件名。"""

from __future__ import annotations

from pathlib import Path
from typing import AbstractSet, Tuple

from media_gallery.core.config import ExtensionConfig
from media_gallery.core.models import ConversionTask, MediaKind

SCALE_PREFIX = "s_"
THUMBNAIL_PREFIX = "t_"
JPEG_EXTENSION = ".jpg"
VIDEO_EXTENSION = ".mp4"


def _split_extension(name: str) -> Tuple[str, str]:
    index = name.rfind(".")
    if index < 0:
        return name, ""
    return name[:index], name[index:]


def _matches_any(name: str, extensions: AbstractSet[str]) -> bool:
    lowered = name.lower()
    return any(lowered.endswith(ext) for ext in extensions)


def classify(
    filename: str,
    image_extensions: AbstractSet[str],
    video_extensions: AbstractSet[str],
) -> MediaKind:
    """仅根据文件名后缀（不区分大小写）判断媒体类型。"""

    if not filename:
        return MediaKind.UNKNOWN
    if _matches_any(filename, image_extensions):
        return MediaKind.IMAGE
    if _matches_any(filename, video_extensions):
        return MediaKind.VIDEO
    return MediaKind.UNKNOWN


def derive_output_names(
    filename: str,
    kind: MediaKind,
    convert_to_jpeg: AbstractSet[str],
) -> Tuple[str, str]:
    """返回 (缩放图文件名, 缩略图文件名)；未知类型返回空字符串。"""

    stem, ext = _split_extension(filename)

    if kind is MediaKind.IMAGE:
        name = filename
        if ext and ext.lower() in convert_to_jpeg:
            name = stem + JPEG_EXTENSION
        return SCALE_PREFIX + name, THUMBNAIL_PREFIX + name

    if kind is MediaKind.VIDEO:
        name = stem + VIDEO_EXTENSION
        return name, name + JPEG_EXTENSION

    return "", ""


def build_task(source_path: Path, extensions: ExtensionConfig) -> ConversionTask:
    kind = classify(source_path.name, extensions.image, extensions.video)
    scale_name, thumbnail_name = derive_output_names(source_path.name, kind, extensions.convert_to_jpeg)
    return ConversionTask(
        source_path=source_path,
        kind=kind,
        scale_name=scale_name,
        thumbnail_name=thumbnail_name,
    )
