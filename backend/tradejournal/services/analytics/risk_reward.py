"""Risk:reward ratio as shown in the trade form (e.g. "1:2.50")."""

from __future__ import annotations

from typing import Optional


def risk_reward_ratio(
    entry_price: Optional[float],
    take_profit: Optional[float],
    stop_loss: Optional[float],
) -> Optional[str]:
    """Return "1:<reward/risk>" with two decimals, or None when it can't be computed.

    Zero or missing prices mean the form field is still empty.
    """
    if not entry_price or not take_profit or not stop_loss:
        return None

    risk = abs(float(entry_price) - float(stop_loss))
    if risk == 0:
        return None
    reward = abs(float(take_profit) - float(entry_price))
    return f"1:{reward / risk:.2f}"
