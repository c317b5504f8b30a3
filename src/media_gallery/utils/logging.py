"""日志配置。"""

from __future__ import annotations

import logging


def setup_logging(verbose: bool = False) -> None:
    """初始化项目日志配置；非 verbose 模式下只输出错误。"""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(asctime)s [%(threadName)s] %(levelname)s %(name)s: %(message)s",
    )
