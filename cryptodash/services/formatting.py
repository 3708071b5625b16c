"""Display formatters for prices, large currency amounts and timestamps."""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Optional

from cryptodash.utils.time import ensure_utc, parse_iso_timestamp


_MAGNITUDES = (
    (1e12, "T"),
    (1e9, "B"),
    (1e6, "M"),
    (1e3, "K"),
)


def format_price(price: float) -> str:
    """
    Price precision tiers:
      < 0.01  -> 8 decimals   (0.00001234)
      < 1     -> 4 decimals   (0.5123)
      otherwise 2 decimals with thousands grouping (64,321.50)
    """
    if price < 0.01:
        return f"{price:.8f}"
    if price < 1:
        return f"{price:.4f}"
    return f"{price:,.2f}"


def format_magnitude(amount: float) -> str:
    """Currency amount with a T/B/M/K suffix, e.g. 1_500_000_000 -> "$1.50B"."""
    for threshold, suffix in _MAGNITUDES:
        if amount >= threshold:
            return f"${amount / threshold:.2f}{suffix}"
    return f"${amount:.2f}"


def format_timestamp(value: str | datetime, tz: Optional[tzinfo] = None) -> str:
    """
    Render a timestamp in the viewer's local date/time convention.

    Strings must be ISO-8601; malformed input raises ValueError.
    `tz` overrides the local timezone.
    """
    if isinstance(value, datetime):
        dt = ensure_utc(value)
    else:
        dt = parse_iso_timestamp(value)

    local = dt.astimezone(tz) if tz is not None else dt.astimezone()
    return local.strftime("%x %X")


def format_change(pct: float, style: str = "arrow") -> str:
    """
    Percentage change for display.
      arrow:  "↑ 2.31%" / "↓ 1.05%"   (asset cards)
      signed: "+2.31%" / "-1.05%"     (detail panel)
    """
    if style == "arrow":
        arrow = "↑" if pct >= 0 else "↓"
        return f"{arrow} {abs(pct):.2f}%"
    if style == "signed":
        sign = "+" if pct >= 0 else ""
        return f"{sign}{pct:.2f}%"
    raise ValueError(f"Unknown change style: {style}")


def format_supply(amount: Optional[float], symbol: str) -> Optional[str]:
    # zero/None supplies are hidden rather than shown as "0"
    if not amount:
        return None
    if float(amount).is_integer():
        return f"{int(amount):,} {symbol}"
    return f"{amount:,.3f}".rstrip("0").rstrip(".") + f" {symbol}"
