"""限制同时运行的外部转换进程数量。"""

from __future__ import annotations

import threading


class RateLimiter:
    """固定容量的计数信号量。

    ``acquire`` 在没有空闲名额时阻塞调用者，这是遍历线程唯一的背压来源。
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive: {capacity}")
        self.capacity = capacity
        self._semaphore = threading.BoundedSemaphore(capacity)

    def acquire(self) -> None:
        self._semaphore.acquire()

    def release(self) -> None:
        self._semaphore.release()

    def drain_all(self) -> None:
        """阻塞直到所有名额都已归还。"""

        for _ in range(self.capacity):
            self._semaphore.acquire()
        for _ in range(self.capacity):
            self._semaphore.release()
