"""命令行入口。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import (
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from media_gallery.core.config import (
    DEFAULT_CONVERT_EXTENSIONS,
    DEFAULT_IMAGE_EXTENSIONS,
    DEFAULT_VIDEO_EXTENSIONS,
    ExtensionConfig,
    GalleryConfig,
    SizeConfig,
    ToolConfig,
    default_parallelism,
    parse_extensions,
)
from media_gallery.core.exceptions import GalleryError
from media_gallery.core.models import BuildResult
from media_gallery.core.progress import ProgressUpdate
from media_gallery.core.shutdown import CancellationToken, ShutdownCoordinator
from media_gallery.processing.pipeline import build_gallery
from media_gallery.utils.logging import setup_logging

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(help="把目录树中的图片与视频转换为网页版本，并生成静态画廊。")


def _build_progress_callback(progress: Progress):
    # 回调会在遍历线程与转换线程中被调用，任务须提前创建。
    task_id: TaskID = progress.add_task("转换媒体", total=0)

    def callback(update: ProgressUpdate) -> None:
        progress.update(task_id, total=update.submitted, completed=update.completed)

    return callback


def _summary_line(result: BuildResult) -> str:
    root = result.root
    line = (
        f"处理完成：{root.directories} 个子目录，{root.total_images} 张图片，{root.total_videos} 个视频；"
        f"转换 {result.launched} 次，跳过 {result.skipped} 次，失败 {len(result.failed)} 次。"
    )
    if result.interrupted:
        line += "（已中断，画廊不完整）"
    return line


@app.command("run", no_args_is_help=True)
def run_cli(  # noqa: PLR0913
    input_dir: Path = typer.Option(..., "-i", "--input", help="输入目录"),
    output_dir: Path = typer.Option(..., "-o", "--output", help="输出目录"),
    image: str = typer.Option(DEFAULT_IMAGE_EXTENSIONS, "-image", "--image", help="图片扩展名，逗号分隔"),
    video: str = typer.Option(DEFAULT_VIDEO_EXTENSIONS, "-video", "--video", help="视频扩展名，逗号分隔"),
    convert: str = typer.Option(DEFAULT_CONVERT_EXTENSIONS, "-convert", "--convert", help="需要转为 JPEG 的扩展名"),
    thumb_width: int = typer.Option(400, "-x", "--thumb-width", help="缩略图最大宽度"),
    thumb_height: int = typer.Option(225, "-y", "--thumb-height", help="缩略图最大高度"),
    scale_width: int = typer.Option(1920, "-X", "--scale-width", help="缩放图最大宽度"),
    scale_height: int = typer.Option(1080, "-Y", "--scale-height", help="缩放图最大高度"),
    parallel: Optional[int] = typer.Option(None, "-p", "--parallel", help="同时运行的转换数量，默认等于 CPU 核数"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="输出详细日志"),
    image_tool: str = typer.Option("magick", "--image-tool", help="图片处理命令"),
    video_tool: str = typer.Option("ffmpeg", "--video-tool", help="视频处理命令"),
) -> None:
    """转换媒体并生成画廊。"""

    setup_logging(verbose)
    logging.getLogger(__name__).debug("CLI 参数解析完成")

    config = GalleryConfig(
        input_dir=input_dir.expanduser(),
        output_dir=output_dir.expanduser(),
        extensions=ExtensionConfig(
            image=parse_extensions(image),
            video=parse_extensions(video),
            convert_to_jpeg=parse_extensions(convert),
        ),
        thumbnail=SizeConfig(thumb_width, thumb_height),
        scale=SizeConfig(scale_width, scale_height),
        tools=ToolConfig(image_tool=image_tool, video_tool=video_tool),
        parallelism=parallel if parallel is not None else default_parallelism(),
        verbose=verbose,
    )

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        console=console,
        disable=verbose,
    )

    def notify(message: str) -> None:
        progress.console.print(f"[yellow]{message}[/yellow]", soft_wrap=True)

    token = CancellationToken()
    coordinator = ShutdownCoordinator(token, notify=notify)

    try:
        with coordinator, progress:
            result = build_gallery(config, token=token, progress_callback=_build_progress_callback(progress))
    except GalleryError as exc:
        err_console.print(f"[red]错误：[/red]{escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(1) from exc

    console.print(_summary_line(result), soft_wrap=True)


if __name__ == "__main__":
    app()
