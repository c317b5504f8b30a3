"""构建流水线：遍历输入目录、并发转换媒体并等待全部转换结束。"""

from __future__ import annotations

import logging
from typing import Optional

from media_gallery.core.config import GalleryConfig
from media_gallery.core.models import BuildResult
from media_gallery.core.shutdown import CancellationToken
from media_gallery.processing.dispatcher import CommandRunner, ConversionDispatcher, ProgressCallback
from media_gallery.processing.walker import TreeWalker
from media_gallery.processing.worker import run_command

LOGGER = logging.getLogger(__name__)


def build_gallery(
    config: GalleryConfig,
    token: Optional[CancellationToken] = None,
    runner: CommandRunner = run_command,
    progress_callback: ProgressCallback = None,
) -> BuildResult:
    """构建入口：遍历结束且所有转换名额归还后才返回。

    目录无法读取或创建时抛出 GalleryError 子类；单个文件的转换失败只记录在结果中。
    """

    config.validate()
    token = token or CancellationToken()

    LOGGER.info("开始构建画廊：%s -> %s（并发 %d）", config.input_dir, config.output_dir, config.parallelism)

    with ConversionDispatcher(config, runner=runner, progress_callback=progress_callback) as dispatcher:
        walker = TreeWalker(config, dispatcher, token)
        root = walker.visit(config.input_dir)
        LOGGER.info("遍历完成，等待 %d 个转换任务结束", dispatcher.launched)
        outcomes = dispatcher.drain()

    result = BuildResult(
        root=root,
        outcomes=outcomes,
        launched=dispatcher.launched,
        skipped=dispatcher.skipped,
        interrupted=token.cancelled,
    )
    LOGGER.info(
        "构建完成：启动 %d，跳过 %d，失败 %d",
        result.launched,
        result.skipped,
        len(result.failed),
    )
    return result
