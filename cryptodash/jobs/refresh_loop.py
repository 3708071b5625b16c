# cryptodash/jobs/refresh_loop.py
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

logger = logging.getLogger("cryptodash.refresh_loop")


# ----------------------------
# timestamp helpers (for info payload)
# ----------------------------
def _iso_z_from_epoch(ts: Optional[float]) -> Optional[str]:
    if ts is None:
        return None
    dt = datetime.fromtimestamp(float(ts), tz=timezone.utc)
    return dt.isoformat().replace("+00:00", "Z")


def _now_epoch() -> float:
    return time.time()


# ----------------------------
# loop state + handle
# ----------------------------
@dataclass
class RefreshLoopState:
    interval_s: float
    started: bool = False
    stop_event: Optional[asyncio.Event] = None
    task: Optional[asyncio.Task] = None
    started_at: Optional[float] = None
    stats: Dict[str, Any] = field(default_factory=lambda: {
        "runs": 0,
        "superseded": 0,
        "last_run_ts": None,
        "last_success_ts": None,
        "last_error_ts": None,
        "last_error": None,
        "consecutive_failures": 0,
    })


@dataclass(frozen=True)
class RefreshLoopHandle:
    """
    Stored in app.state.refresh_loop so /ready can report loop status.
    """
    _state: RefreshLoopState

    @property
    def running(self) -> bool:
        return bool(
            self._state.started
            and self._state.stop_event is not None
            and not self._state.stop_event.is_set()
            and self._state.task is not None
            and not self._state.task.done()
        )

    @property
    def interval_s(self) -> float:
        return self._state.interval_s

    def info(self) -> Dict[str, Any]:
        s = self._state.stats
        started_at = self._state.started_at
        return {
            "running": self.running,
            "interval_s": self._state.interval_s,
            "started_at": started_at,
            "started_at_iso": _iso_z_from_epoch(started_at),
            "uptime_s": int(_now_epoch() - started_at) if started_at else None,
            "runs": s["runs"],
            "superseded": s["superseded"],
            "last_run_ts": s["last_run_ts"],
            "last_run_iso": _iso_z_from_epoch(s["last_run_ts"]),
            "last_success_ts": s["last_success_ts"],
            "last_success_iso": _iso_z_from_epoch(s["last_success_ts"]),
            "last_error_ts": s["last_error_ts"],
            "last_error_iso": _iso_z_from_epoch(s["last_error_ts"]),
            "last_error": s["last_error"],
            "consecutive_failures": s["consecutive_failures"],
        }


def _record_failure(state: RefreshLoopState, error: str) -> None:
    s = state.stats
    s["last_error_ts"] = _now_epoch()
    s["last_error"] = error[:300]
    s["consecutive_failures"] = int(s.get("consecutive_failures", 0)) + 1


# ----------------------------
# loop
# ----------------------------
async def _refresh_loop(
    state: RefreshLoopState,
    refresh_fn: Callable[[], Awaitable[Optional[bool]]],
    stop_event: asyncio.Event,
) -> None:
    interval = state.interval_s
    next_tick = time.monotonic()  # run immediately once

    while not stop_event.is_set():
        now = time.monotonic()
        if now < next_tick:
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=(next_tick - now))
            except asyncio.TimeoutError:
                pass
            continue

        state.stats["runs"] += 1
        state.stats["last_run_ts"] = _now_epoch()
        t0 = time.perf_counter()

        try:
            ok = await refresh_fn()
            dt_ms = int((time.perf_counter() - t0) * 1000)
            if ok is None:
                # a newer refresh was issued while this one was in flight
                state.stats["superseded"] += 1
                logger.info("refresh tick superseded | %dms", dt_ms)
            elif ok:
                state.stats["last_success_ts"] = _now_epoch()
                state.stats["consecutive_failures"] = 0
                logger.info("refresh tick done | %dms", dt_ms)
            else:
                _record_failure(state, "refresh failed")
                logger.warning("refresh tick failed | %dms", dt_ms)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            dt_ms = int((time.perf_counter() - t0) * 1000)
            _record_failure(state, repr(e))
            logger.exception("refresh tick error | %dms", dt_ms)

        next_tick += interval
        if next_tick < time.monotonic() - interval:
            next_tick = time.monotonic() + interval


# ----------------------------
# public API
# ----------------------------
def start_refresh_loop(refresh_fn: Callable[[], Awaitable[Optional[bool]]], interval_s: float) -> RefreshLoopHandle:
    """Run refresh_fn now and then every interval_s seconds. Needs a running event loop."""
    if interval_s <= 0:
        raise ValueError(f"interval_s must be positive, got {interval_s}")

    state = RefreshLoopState(interval_s=float(interval_s))
    state.stop_event = asyncio.Event()
    state.started = True
    state.started_at = _now_epoch()
    state.task = asyncio.create_task(
        _refresh_loop(state, refresh_fn, state.stop_event),
        name="cryptodash:refresh",
    )

    logger.info("refresh loop started | interval_s=%s", interval_s)
    return RefreshLoopHandle(state)


async def stop_refresh_loop(handle: Optional[RefreshLoopHandle], timeout_s: float = 6.0) -> None:
    if handle is None:
        return
    state = handle._state
    if not state.started:
        return

    if state.stop_event:
        state.stop_event.set()

    task = state.task
    try:
        if task is not None:
            await asyncio.wait_for(asyncio.gather(task, return_exceptions=True), timeout=timeout_s)
    except asyncio.TimeoutError:
        if task is not None and not task.done():
            task.cancel()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
    finally:
        state.task = None
        state.stop_event = None
        state.started = False

    logger.info("refresh loop stopped")
