"""Sequential per-vehicle checking with a cooldown between upstream calls."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Protocol, Sequence, Set

import structlog

from .lookup import OffenceLookupError
from .models import OffenceQueryResult
from .report import format_failure, format_report

LOGGER = structlog.get_logger(__name__)

Notifier = Callable[[str], Awaitable[bool]]
Sleeper = Callable[[float], Awaitable[None]]


class Lookup(Protocol):
    async def check(self, vehicle: str) -> OffenceQueryResult: ...


@dataclass
class SweepSummary:
    """Outcome of one pass over a vehicle list."""

    label: str
    checked: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    undelivered: List[str] = field(default_factory=list)
    stopped: bool = False


class VehicleSequencer:
    """
    Runs lookups one vehicle at a time and forwards each report to the operator.

    Every run holds a shared lock, so the daily sweep and on-demand checks never
    hit the upstream API at the same time. A failing vehicle only produces an
    error message; the remaining vehicles are still checked.
    """

    def __init__(
        self,
        lookup: Lookup,
        notify: Notifier,
        *,
        lock: Optional[asyncio.Lock] = None,
        stop: Optional[asyncio.Event] = None,
        sleep: Optional[Sleeper] = None,
    ) -> None:
        self._lookup = lookup
        self._notify = notify
        self._lock = lock or asyncio.Lock()
        self._stop = stop or asyncio.Event()
        self._sleep = sleep or self._cooldown
        self._tasks: Set[asyncio.Task] = set()

    @property
    def stop_event(self) -> asyncio.Event:
        return self._stop

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def run(self, vehicles: Sequence[str], *, cooldown: float, label: str = "sweep") -> SweepSummary:
        """Check ``vehicles`` in order, pausing ``cooldown`` seconds between them."""
        summary = SweepSummary(label=label)
        if self._lock.locked():
            LOGGER.info("sequencer.waiting_for_lock", label=label, count=len(vehicles))

        async with self._lock:
            LOGGER.info("sequencer.start", label=label, count=len(vehicles), vehicles=list(vehicles))
            for index, vehicle in enumerate(vehicles):
                if index > 0:
                    LOGGER.info(
                        "sequencer.cooldown",
                        label=label,
                        seconds=cooldown,
                        next_registration=vehicle,
                    )
                    await self._sleep(cooldown)
                if self._stop.is_set():
                    LOGGER.info("sequencer.stopped", label=label, remaining=len(vehicles) - index)
                    summary.stopped = True
                    break
                await self._check_one(vehicle, summary)

        LOGGER.info(
            "sequencer.complete",
            label=label,
            checked=len(summary.checked),
            failed=len(summary.failed),
            undelivered=len(summary.undelivered),
        )
        return summary

    def submit(self, vehicles: Sequence[str], *, cooldown: float, label: str = "on-demand") -> asyncio.Task:
        """Run a batch in the background and keep a reference until it finishes."""
        task = asyncio.create_task(self.run(list(vehicles), cooldown=cooldown, label=label))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Stop pending cooldowns and wait for background batches to finish."""
        self._stop.set()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _check_one(self, vehicle: str, summary: SweepSummary) -> None:
        LOGGER.info("sequencer.vehicle.start", registration=vehicle)
        summary.checked.append(vehicle)
        try:
            result = await self._lookup.check(vehicle)
        except OffenceLookupError as exc:
            LOGGER.error("sequencer.vehicle_failed", registration=vehicle, error=str(exc))
            summary.failed.append(vehicle)
            text = format_failure(vehicle, exc)
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("sequencer.vehicle_crashed", registration=vehicle, error=str(exc))
            summary.failed.append(vehicle)
            text = format_failure(vehicle, exc)
        else:
            text = format_report(vehicle, result)

        if not await self._deliver(vehicle, text):
            summary.undelivered.append(vehicle)

    async def _deliver(self, vehicle: str, text: str) -> bool:
        try:
            delivered = await self._notify(text)
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("sequencer.notify_crashed", registration=vehicle, error=str(exc))
            return False
        if not delivered:
            LOGGER.error("sequencer.notify_failed", registration=vehicle)
        return delivered

    async def _cooldown(self, seconds: float) -> None:
        """Sleep for ``seconds`` unless the stop event fires first."""
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass
