"""外部编码器（ImageMagick / ffmpeg）命令行构造。"""

from __future__ import annotations

from pathlib import Path

from media_gallery.core.config import SizeConfig, ToolConfig
from media_gallery.core.models import ConversionCommand, MediaKind


def image_thumbnail_command(tools: ToolConfig, size: SizeConfig, source: Path, target: Path) -> ConversionCommand:
    argv = [tools.image_tool, str(source), "-auto-orient", "-strip", "-thumbnail", size.geometry(), str(target)]
    return ConversionCommand(argv=argv, source_path=source, target_path=target, output="thumbnail")


def image_scale_command(tools: ToolConfig, size: SizeConfig, source: Path, target: Path) -> ConversionCommand:
    argv = [tools.image_tool, str(source), "-auto-orient", "-strip", "-scale", size.geometry(), str(target)]
    return ConversionCommand(argv=argv, source_path=source, target_path=target, output="scale")


def video_thumbnail_command(tools: ToolConfig, size: SizeConfig, source: Path, target: Path) -> ConversionCommand:
    """抽取一帧，按 increase 模式缩放（覆盖缩略图尺寸）。"""

    argv = [
        tools.video_tool,
        "-hide_banner",
        "-loglevel", "panic",
        "-i", str(source),
        "-vframes", "1",
        "-vf", f"scale={size.width}:{size.height}:force_original_aspect_ratio=increase",
        str(target),
        "-y",
    ]
    return ConversionCommand(argv=argv, source_path=source, target_path=target, output="thumbnail")


def video_scale_command(tools: ToolConfig, source: Path, target: Path) -> ConversionCommand:
    """转码为 H.264 + AAC，覆盖残留的输出文件。"""

    argv = [
        tools.video_tool,
        "-i", str(source),
        "-vcodec", "h264",
        "-acodec", "aac",
        "-preset", "veryfast",
        "-crf", "18",
        str(target),
        "-y",
    ]
    return ConversionCommand(argv=argv, source_path=source, target_path=target, output="scale")


def thumbnail_command(
    kind: MediaKind, tools: ToolConfig, size: SizeConfig, source: Path, target: Path
) -> ConversionCommand:
    if kind is MediaKind.IMAGE:
        return image_thumbnail_command(tools, size, source, target)
    if kind is MediaKind.VIDEO:
        return video_thumbnail_command(tools, size, source, target)
    raise ValueError(f"无法为该类型生成缩略图: {kind}")


def scale_command(
    kind: MediaKind, tools: ToolConfig, size: SizeConfig, source: Path, target: Path
) -> ConversionCommand:
    if kind is MediaKind.IMAGE:
        return image_scale_command(tools, size, source, target)
    if kind is MediaKind.VIDEO:
        return video_scale_command(tools, source, target)
    raise ValueError(f"无法为该类型生成缩放图: {kind}")
