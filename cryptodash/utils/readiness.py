# cryptodash/utils/readiness.py
from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

# refresh loop is stale if age > STALL_MULTIPLIER * interval_s
STALL_MULTIPLIER_DEFAULT = 2.5


def _to_unix_ts(value: Any) -> Optional[float]:
    """
    Coerce a timestamp-like value into a unix seconds float (UTC).
    Accepts int/float (unix seconds), datetime (naive assumed UTC) and ISO strings.
    Returns None if it can't parse.
    """
    if value is None:
        return None

    if isinstance(value, (int, float)):
        return float(value)

    if isinstance(value, datetime):
        dt = value
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return float(dt.timestamp())

    if isinstance(value, str):
        s = value.strip().replace("Z", "+00:00")
        if not s:
            return None
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return float(dt.timestamp())

    return None


def _coerce_float(value: Any, default: float = 0.0) -> float:
    try:
        if value is None:
            return default
        return float(value)
    except (TypeError, ValueError):
        return default


def annotate_refresh_loop(
    loop_info: Dict[str, Any],
    now_ts: float | None = None,
    stall_multiplier: float = STALL_MULTIPLIER_DEFAULT,
) -> Tuple[Dict[str, Any], bool]:
    """
    Adds stall detection to a RefreshLoopHandle.info() payload.

    stalled if (now - last_success_ts) > stall_multiplier * interval_s.
    Before the first success the loop's started_at is the reference, so a
    fresh loop gets one full allowance before it is reported as stalled.

    Returns (loop_info updated in-place, stalled).
    """
    now = float(now_ts) if now_ts is not None else time.time()
    stall_mult = _coerce_float(stall_multiplier, default=STALL_MULTIPLIER_DEFAULT)

    interval_s = _coerce_float(loop_info.get("interval_s"), default=0.0)
    allowed_age_s = interval_s * stall_mult if interval_s > 0 else None

    last_success_unix = _to_unix_ts(loop_info.get("last_success_ts"))
    started_unix = _to_unix_ts(loop_info.get("started_at"))

    if last_success_unix is not None:
        ref_ts_unix, ref_ts_key = last_success_unix, "last_success_ts"
    elif started_unix is not None:
        ref_ts_unix, ref_ts_key = started_unix, "started_at"
    else:
        ref_ts_unix, ref_ts_key = None, None

    age_s: Optional[float] = None
    if ref_ts_unix is not None:
        age_s = max(0.0, now - ref_ts_unix)

    stalled = False
    stalled_by_s = 0.0
    if allowed_age_s is not None and age_s is not None and age_s > allowed_age_s:
        stalled = True
        stalled_by_s = age_s - allowed_age_s

    loop_info["stall_multiplier"] = stall_mult
    loop_info["age_s"] = age_s
    loop_info["allowed_age_s"] = allowed_age_s
    loop_info["ref_ts_key"] = ref_ts_key
    loop_info["stalled"] = stalled
    loop_info["stalled_by_s"] = stalled_by_s
    loop_info["never_succeeded"] = last_success_unix is None
    loop_info["computed_at_ts"] = now

    return loop_info, stalled
