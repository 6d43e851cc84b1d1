"""
Alert poller.

Re-runs the whole pipeline on a fixed interval: fetch the three collections,
normalize, evaluate, hand the alerts to a callback. Each cycle is a full,
independent recomputation; nothing carries over. Stopping is just ending
the loop, since no cycle leaves work in flight.
"""

from datetime import datetime
from typing import Callable, List, Optional
import logging
import time

from ..engine.alerts import AlertEngine
from ..engine.normalizer import normalize
from ..errors import SourceError
from ..integrations.sources import RecordSource
from ..models import Alert


logger = logging.getLogger(__name__)


class AlertPoller:
    """Fixed-interval alert evaluation loop with injectable clock and sleep."""

    def __init__(
        self,
        source: RecordSource,
        on_alerts: Callable[[datetime, List[Alert]], None],
        engine: Optional[AlertEngine] = None,
        interval: Optional[float] = None,
        clock: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.source = source
        self.on_alerts = on_alerts
        self.engine = engine or AlertEngine()
        self.interval = interval if interval is not None else self.engine.config.poll_interval_seconds
        self.clock = clock
        self.sleep = sleep
        self.cycles = 0
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def run_once(self) -> Optional[List[Alert]]:
        """
        Run one evaluation cycle.

        Returns:
            The alerts, or None when the source could not be read
        """
        now = self.clock()
        try:
            events = normalize(
                self.source.fetch_itinerary(),
                self.source.fetch_appointments(),
                self.source.fetch_tasks(),
            )
        except SourceError as e:
            logger.error(f"Skipping alert cycle at {now.isoformat()}: {e}")
            return None

        alerts = self.engine.evaluate(events, now)
        self.on_alerts(now, alerts)
        return alerts

    def run(self, max_cycles: Optional[int] = None) -> int:
        """
        Poll until stopped (or ``max_cycles`` cycles have run).

        Returns:
            Number of cycles run
        """
        self._running = True
        self.cycles = 0
        logger.info(f"Alert poller started, interval {self.interval}s")
        try:
            while self._running:
                self.run_once()
                self.cycles += 1
                if max_cycles is not None and self.cycles >= max_cycles:
                    break
                if not self._running:
                    break
                self.sleep(self.interval)
        finally:
            self._running = False
            logger.info(f"Alert poller stopped after {self.cycles} cycles")
        return self.cycles

    def stop(self) -> None:
        """Stop before the next cycle."""
        self._running = False
