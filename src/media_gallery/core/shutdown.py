"""中断信号处理：收到信号后停止派发新任务，等待进行中的转换结束。"""

from __future__ import annotations

import logging
import signal
import threading
from types import FrameType
from typing import Callable, Dict, Optional, Sequence

LOGGER = logging.getLogger(__name__)

INTERRUPT_NOTICE = "收到中断信号！正在等待进行中的任务完成后退出"

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class CancellationToken:
    """只会从 False 变为 True 的取消标记，由遍历过程在检查点读取。"""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> bool:
        """设置标记；首次设置时返回 True。"""

        if self._event.is_set():
            return False
        self._event.set()
        return True

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class ShutdownCoordinator:
    """注册 SIGINT/SIGTERM，首次收到时输出提示并取消 token。

    只能在主线程中使用（``signal.signal`` 的限制）。
    """

    def __init__(
        self,
        token: CancellationToken,
        notify: Callable[[str], None] = print,
        signals: Sequence[signal.Signals] = DEFAULT_SIGNALS,
    ) -> None:
        self.token = token
        self._notify = notify
        self._signals = tuple(signals)
        self._previous: Dict[signal.Signals, object] = {}

    def install(self) -> "ShutdownCoordinator":
        for signum in self._signals:
            self._previous[signum] = signal.signal(signum, self._handle)
        return self

    def restore(self) -> None:
        for signum, handler in self._previous.items():
            # None 表示原处理器并非由 Python 安装，无法恢复。
            if handler is not None:
                signal.signal(signum, handler)
        self._previous.clear()

    def __enter__(self) -> "ShutdownCoordinator":
        return self.install()

    def __exit__(self, *exc_info: object) -> None:
        self.restore()

    def _handle(self, signum: int, frame: Optional[FrameType]) -> None:
        if not self.token.cancel():
            return
        LOGGER.info("收到信号 %s，停止派发新任务", signal.Signals(signum).name)
        self._notify(INTERRUPT_NOTICE)
