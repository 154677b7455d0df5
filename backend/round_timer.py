from typing import Awaitable, Callable, Optional
import asyncio
import logging

import config
from errors import AlreadyRunning

logger = logging.getLogger(__name__)

TickCallback = Callable[[int], Awaitable[None]]


class RoundTimer:
    """Cancellable countdown that ticks once per interval.

    ``on_tick(remaining)`` is awaited after every elapsed interval. When the
    countdown reaches zero the timer calls ``on_tick(0)`` and stops itself;
    that terminal tick is how the owner learns the round timed out.
    """

    def __init__(self, interval: float = config.TICK_INTERVAL):
        self.interval = interval
        self._remaining = 0
        self._task: Optional[asyncio.Task] = None

    def start(self, limit_seconds: int, on_tick: TickCallback):
        if self.is_running():
            raise AlreadyRunning()
        self._remaining = limit_seconds
        self._task = asyncio.create_task(self._run(on_tick))

    def stop(self):
        task = self._task
        self._task = None
        # The terminal tick stops the timer from inside its own task.
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    def remaining(self) -> int:
        return self._remaining

    def is_running(self) -> bool:
        return self._task is not None

    async def _tick(self, on_tick: TickCallback):
        try:
            await on_tick(self._remaining)
        except Exception:
            logger.exception("Error in round timer tick (%ds left)", self._remaining)

    async def _run(self, on_tick: TickCallback):
        me = asyncio.current_task()
        try:
            if self._remaining <= 0:
                # Nothing to count down; report expiry straight away.
                self._remaining = 0
                await self._tick(on_tick)
            while self._task is me and self._remaining > 0:
                await asyncio.sleep(self.interval)
                self._remaining -= 1
                await self._tick(on_tick)
        except asyncio.CancelledError:
            pass
        finally:
            if self._task is me:
                self._task = None
