"""
Sentinel-G - Social Listener
Repeatable, cancellable task that feeds synthetic reports into the dashboard.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from sentinelg.core.config import settings
from sentinelg.ingestion.agents import ReportGenerator
from sentinelg.ingestion.signals import SyntheticReport

logger = logging.getLogger(__name__)

ReportSink = Callable[[SyntheticReport], Union[Any, Awaitable[Any]]]


class SocialListener:
    """
    Polls the report generator on a fixed interval.

    Reports without text are dropped. The listener owns its asyncio task;
    stop() cancels it and waits for it to finish.
    """

    def __init__(
        self,
        generator: ReportGenerator,
        sink: ReportSink,
        interval_seconds: Optional[float] = None
    ):
        """
        Args:
            generator: Source of synthetic reports
            sink: Called with every usable report (may be a coroutine function)
            interval_seconds: Delay between polls (default from settings)
        """
        self.generator = generator
        self.sink = sink
        self.interval_seconds = (
            interval_seconds if interval_seconds is not None
            else settings.synthetic_report_interval_seconds
        )
        self._task: Optional[asyncio.Task] = None
        self.ingested = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> Optional[Any]:
        """
        Generate one report and hand it to the sink.

        Returns:
            Whatever the sink returned, or None if the report was unusable
        """
        report = await self.generator.generate()
        if not report.is_usable:
            logger.debug("Synthetic report discarded: no text")
            return None

        result = self.sink(report)
        if asyncio.iscoroutine(result):
            result = await result
        self.ingested += 1
        return result

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Social listener iteration failed: {e}")

    def start(self) -> None:
        """Start polling in the running event loop (no-op if already running)."""
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop())
        logger.info(f"Social listener started (every {self.interval_seconds}s)")

    async def stop(self) -> None:
        """Cancel the polling task and wait for it to exit."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info(f"Social listener stopped after {self.ingested} reports")
