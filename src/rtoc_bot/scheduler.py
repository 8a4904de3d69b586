"""Daily sweep scheduler."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional, Sequence

import structlog

from .schedule import DailyTrigger, next_run_at
from .sequencer import VehicleSequencer

LOGGER = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SweepScheduler:
    """Sleeps until the next trigger instant, sweeps every vehicle, repeats."""

    def __init__(
        self,
        sequencer: VehicleSequencer,
        vehicles: Sequence[str],
        *,
        trigger: DailyTrigger,
        cooldown: float,
        clock: Optional[Clock] = None,
        wait: Optional[Callable[[float], Awaitable[None]]] = None,
    ) -> None:
        self._sequencer = sequencer
        self._vehicles: List[str] = list(vehicles)
        self._trigger = trigger
        self._cooldown = cooldown
        self._clock = clock or utc_now
        self._wait = wait or self._wait_until_stopped
        self._stop = sequencer.stop_event

    async def run(self) -> None:
        """Loop until the shared stop event is set."""
        LOGGER.info(
            "scheduler.started",
            vehicles=self._vehicles,
            start_time=self._trigger.label,
        )
        last_target: Optional[datetime] = None
        while not self._stop.is_set():
            now = self._clock()
            # Never reuse a trigger that already fired, even if the wait ended early.
            base = now if last_target is None else max(now, last_target)
            target = next_run_at(base, self._trigger)
            last_target = target
            delay = (target - now).total_seconds()
            LOGGER.info(
                "scheduler.next_run",
                at=target.strftime("%Y-%m-%d %H:%M:%S"),
                in_seconds=round(delay),
            )

            await self._wait(delay)
            if self._stop.is_set():
                break

            try:
                await self._sequencer.run(self._vehicles, cooldown=self._cooldown, label="daily-sweep")
            except Exception as exc:  # noqa: BLE001
                LOGGER.exception("scheduler.sweep_failed", error=str(exc))

        LOGGER.info("scheduler.stopped")

    async def _wait_until_stopped(self, seconds: float) -> None:
        """Sleep for ``seconds`` unless the stop event fires first."""
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=max(seconds, 0))
        except asyncio.TimeoutError:
            pass
