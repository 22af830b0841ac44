"""Progress reporting for long-running steps (tile downloads)."""

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


class _CbStore:
    progress: ProgressCallback | None = None


def set_progress_callback(cb: ProgressCallback | None) -> None:
    """Подписка внешнего интерфейса на прогресс: cb(done, total, label)."""
    _CbStore.progress = cb


def _format_duration(seconds: float) -> str:
    if seconds == float('inf'):
        return '--:--'
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f'{hours:d}:{minutes:02d}:{secs:02d}'
    return f'{minutes:02d}:{secs:02d}'


class ConsoleProgress:
    """
    Счётчик выполненных шагов с записью в лог.

    В лог пишется каждый log_every-й шаг и последний; колбэк, если задан,
    вызывается на каждом шаге. Асинхронный step() безопасен при вызове
    из нескольких корутин.
    """

    def __init__(self, total: int, label: str = 'Progress', log_every: int = 10) -> None:
        self.total = max(1, int(total))
        self.label = label
        self.log_every = max(1, log_every)
        self.done = 0
        self._started = time.monotonic()
        self._lock = asyncio.Lock()

    @property
    def finished(self) -> bool:
        return self.done >= self.total

    def eta_seconds(self) -> float:
        elapsed = max(1e-6, time.monotonic() - self._started)
        rate = self.done / elapsed
        return (self.total - self.done) / rate if rate > 0 else float('inf')

    def _report(self) -> None:
        if self.finished or self.done % self.log_every == 0:
            logger.info(
                '%s: %d/%d (%d%%), ETA %s',
                self.label,
                self.done,
                self.total,
                self.done * 100 // self.total,
                _format_duration(self.eta_seconds()),
            )
        if _CbStore.progress is not None:
            # Ошибки UI-колбэка не должны прерывать загрузку
            with contextlib.suppress(Exception):
                _CbStore.progress(self.done, self.total, self.label)

    def step_sync(self, n: int = 1) -> None:
        self.done = min(self.total, self.done + n)
        self._report()

    async def step(self, n: int = 1) -> None:
        async with self._lock:
            self.step_sync(n)
