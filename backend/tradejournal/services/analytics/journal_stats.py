"""Per-account journal statistics (P&L, trade count, win rate, volume)."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable

from tradejournal.models.journal_models import Trade


@dataclass(frozen=True)
class JournalStats:
    total_pnl: float
    total_trades: int
    win_rate: float      # percent, one decimal
    total_volume: float

    def to_wire(self) -> Dict[str, Any]:
        d = asdict(self)
        return {
            "totalPnL": d["total_pnl"],
            "totalTrades": d["total_trades"],
            "winRate": d["win_rate"],
            "totalVolume": d["total_volume"],
        }


def compute_stats(trades: Iterable[Trade]) -> JournalStats:
    trades = list(trades)
    if not trades:
        return JournalStats(total_pnl=0.0, total_trades=0, win_rate=0.0, total_volume=0.0)

    total_pnl = sum(t.profit for t in trades)
    wins = sum(1 for t in trades if t.profit > 0)
    total_volume = sum(t.volume for t in trades)

    return JournalStats(
        total_pnl=round(total_pnl, 2),
        total_trades=len(trades),
        win_rate=round(wins / len(trades) * 100, 1),
        total_volume=total_volume,
    )
