"""递归遍历输入目录：派发转换、写出画廊页面并自底向上汇总统计。"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol

from media_gallery.core.classifier import build_task
from media_gallery.core.config import GalleryConfig
from media_gallery.core.exceptions import DirectoryAccessError
from media_gallery.core.models import ConversionTask, DirectorySummary, MediaKind
from media_gallery.core.shutdown import CancellationToken
from media_gallery.render.gallery import INDEX_FILENAME, render_directory, render_file, write_gallery_page

LOGGER = logging.getLogger(__name__)


class Dispatcher(Protocol):
    def submit(self, task: ConversionTask, output_dir: Path) -> None: ...


def list_entries(directory: Path) -> tuple[list[Path], list[Path]]:
    """按名称排序列出目录项，分为子目录与文件；不跟随符号链接。"""

    try:
        with os.scandir(directory) as iterator:
            entries = sorted(iterator, key=lambda entry: entry.name)
    except OSError as exc:
        raise DirectoryAccessError(directory, f"无法读取目录 ({exc.strerror or exc})") from exc

    dirs: list[Path] = []
    files: list[Path] = []
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            dirs.append(Path(entry.path))
        else:
            files.append(Path(entry.path))
    return dirs, files


class TreeWalker:
    """深度优先遍历：先处理子目录，再处理文件。

    取消标记只在两个检查点读取：进入下一个子目录之前、每个文件处理之后。
    被中断的目录直接返回已累计的统计，不写出其 index.html。
    """

    def __init__(self, config: GalleryConfig, dispatcher: Dispatcher, token: CancellationToken) -> None:
        self.config = config
        self.dispatcher = dispatcher
        self.token = token
        self.input_root = config.input_dir
        self.output_root = config.output_dir
        self.directories_written = 0

    def output_dir_for(self, directory: Path) -> Path:
        return self.output_root / directory.relative_to(self.input_root)

    def visit(self, directory: Path) -> DirectorySummary:
        outdir = self.output_dir_for(directory)
        try:
            outdir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DirectoryAccessError(outdir, f"无法创建输出目录 ({exc.strerror or exc})") from exc

        summary = DirectorySummary(name=directory.name)
        fragments: list[str] = []
        dirs, files = list_entries(directory)

        for subdir in dirs:
            if self.token.cancelled:
                LOGGER.info("已中断，停止遍历子目录：%s", directory)
                return summary

            child = self.visit(subdir)
            # 被中断的子目录没有页面，只合并统计，不生成链接。
            if summary.absorb(child) and child.complete:
                fragments.append(render_directory(child))

        for path in files:
            task = build_task(path, self.config.extensions)
            if task.kind is MediaKind.UNKNOWN:
                continue

            self.dispatcher.submit(task, outdir)
            fragments.append(render_file(task))

            if task.kind is MediaKind.IMAGE:
                summary.images += 1
                if not summary.own_thumbnail:
                    summary.own_thumbnail = task.thumbnail_name
            else:
                summary.videos += 1

            if self.token.cancelled:
                LOGGER.info("已中断，停止处理文件：%s", directory)
                return summary

        write_gallery_page(
            outdir / INDEX_FILENAME,
            "".join(fragments),
            self.config.thumbnail,
            title=summary.name,
            parent_link=directory != self.input_root,
        )
        summary.complete = True
        self.directories_written += 1
        LOGGER.debug(
            "已写出 %s（%d 图片，%d 视频，%d 子目录）",
            outdir / INDEX_FILENAME,
            summary.images,
            summary.videos,
            summary.directories,
        )
        return summary
