"""转换派发器：跳过已存在的输出，限流并发执行外部编码器。"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Dict, Optional

from media_gallery.core.config import GalleryConfig
from media_gallery.core.models import ConversionCommand, ConversionOutcome, ConversionTask, MediaKind
from media_gallery.core.progress import ProgressUpdate
from media_gallery.processing.commands import scale_command, thumbnail_command
from media_gallery.processing.limiter import RateLimiter
from media_gallery.processing.worker import run_command

LOGGER = logging.getLogger(__name__)

CommandRunner = Callable[[ConversionCommand], ConversionOutcome]
ProgressCallback = Optional[Callable[[ProgressUpdate], None]]


class ConversionDispatcher:
    """接收转换任务并在后台线程中启动外部进程。

    ``submit`` 在限流器没有空闲名额时会阻塞调用方；每个启动的命令对应一个
    由派发器持有的 Future，``drain`` 等待全部完成。
    """

    def __init__(
        self,
        config: GalleryConfig,
        runner: CommandRunner = run_command,
        progress_callback: ProgressCallback = None,
        limiter: Optional[RateLimiter] = None,
    ) -> None:
        self.config = config
        self._runner = runner
        self._progress_callback = progress_callback
        self._limiter = limiter or RateLimiter(config.parallelism)
        self._executor = ThreadPoolExecutor(
            max_workers=self._limiter.capacity,
            thread_name_prefix="convert",
        )
        self._pending: Dict[Future, ConversionCommand] = {}
        self._outcomes: list[ConversionOutcome] = []
        self._lock = threading.Lock()
        self._completed = 0
        self.launched = 0
        self.skipped = 0

    def __enter__(self) -> "ConversionDispatcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            return
        self.drain()
        self._executor.shutdown(wait=True)

    def submit(self, task: ConversionTask, output_dir: Path) -> None:
        """为缺失的缩略图与缩放图各启动一次转换；已存在的输出直接跳过。"""

        if task.kind is MediaKind.UNKNOWN:
            return

        builders = (
            (task.thumbnail_name, thumbnail_command, self.config.thumbnail),
            (task.scale_name, scale_command, self.config.scale),
        )
        for name, build, size in builders:
            target = output_dir / name
            if target.exists():
                self.skipped += 1
                LOGGER.debug("跳过转换（输出已存在）：%s", target)
                continue
            command = build(task.kind, self.config.tools, size, task.source_path, target)
            self._launch(command)

    def drain(self) -> list[ConversionOutcome]:
        """等待所有已启动的转换结束并归还全部名额，返回累计结果。"""

        with self._lock:
            pending = list(self._pending.items())
            self._pending.clear()

        for future, command in pending:
            try:
                outcome = future.result()
            except Exception as exc:  # noqa: BLE001
                LOGGER.exception("转换任务执行异常：%s", exc)
                outcome = ConversionOutcome(command=command, status="error-worker", message=str(exc))
            self._outcomes.append(outcome)

        self._limiter.drain_all()
        return list(self._outcomes)

    def _launch(self, command: ConversionCommand) -> None:
        self._limiter.acquire()
        with self._lock:
            self.launched += 1
            submitted, completed = self.launched, self._completed
        try:
            future = self._executor.submit(self._run, command)
        except BaseException:
            self._limiter.release()
            with self._lock:
                self.launched -= 1
            raise

        with self._lock:
            self._pending[future] = command
        self._emit_progress(submitted, completed)

    def _run(self, command: ConversionCommand) -> ConversionOutcome:
        try:
            outcome = self._runner(command)
            _log_outcome(outcome)
            return outcome
        finally:
            self._limiter.release()
            with self._lock:
                self._completed += 1
                submitted, completed = self.launched, self._completed
            self._emit_progress(submitted, completed, command.target_path.name)

    def _emit_progress(self, submitted: int, completed: int, message: Optional[str] = None) -> None:
        if not self._progress_callback:
            return
        self._progress_callback(ProgressUpdate(submitted=submitted, completed=completed, message=message))


def _log_outcome(outcome: ConversionOutcome) -> None:
    command = outcome.command
    LOGGER.debug("%s", command.display())
    if outcome.ok:
        if outcome.message:
            LOGGER.warning("%s 输出诊断信息：%s", command.source_path, outcome.message)
        return
    details = outcome.message or ""
    if outcome.returncode is not None:
        LOGGER.warning("转换失败 (退出码 %s)：%s\n%s", outcome.returncode, command.display(), details)
    else:
        LOGGER.warning("无法启动转换：%s (%s)", command.display(), details)
