"""Journal domain models (profile, account, trade).

Wire payloads use camelCase keys (`initialBalance`, `accountId`, ...) and `type`
for the account/trade kind; attributes are snake_case. Storage columns are
snake_case too, see `to_row` / `from_row`.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class JournalModel(BaseModel):
    # wire keys only (aliases), and no coercion between JSON types
    model_config = ConfigDict(strict=True)

    def to_json(self) -> str:
        """Compact JSON with wire keys; absent optionals are emitted as null."""
        return self.model_dump_json(by_alias=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Profile(JournalModel):
    name: str
    email: Optional[str] = None
    experience: str
    currency: str
    timezone: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Profile":
        return cls(
            name=row["name"],
            email=row["email"],
            experience=row["experience"],
            currency=row["currency"],
            timezone=row["timezone"],
        )


class Account(JournalModel):
    id: Optional[int] = None
    name: str
    account_type: str = Field(alias="type")
    initial_balance: float = Field(alias="initialBalance")
    current_balance: float = Field(alias="currentBalance")
    broker: str
    leverage: str
    instruments: Optional[str] = None

    def to_row(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.account_type,
            "initial_balance": self.initial_balance,
            "current_balance": self.current_balance,
            "broker": self.broker,
            "leverage": self.leverage,
            "instruments": self.instruments or "",
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Account":
        return cls.model_validate(
            {
                "id": row["id"],
                "name": row["name"],
                "type": row["type"],
                "initialBalance": row["initial_balance"],
                "currentBalance": row["current_balance"],
                "broker": row["broker"],
                "leverage": row["leverage"],
                "instruments": row["instruments"],
            }
        )


class Trade(JournalModel):
    id: Optional[int] = None
    account_id: int = Field(alias="accountId")
    symbol: str
    trade_type: str = Field(alias="type")
    entry_price: float = Field(alias="entryPrice")
    exit_price: Optional[float] = Field(default=None, alias="exitPrice")
    take_profit: float = Field(alias="takeProfit")
    stop_loss: float = Field(alias="stopLoss")
    lot_size: float = Field(alias="lotSize")
    volume: float
    profit: float
    commission: float
    rr_ratio: Optional[str] = Field(default=None, alias="rrRatio")
    strategy: Optional[str] = None
    session: Optional[str] = None
    duration: Optional[str] = None
    date: str

    def to_row(self) -> Dict[str, Any]:
        return {
            "account_id": self.account_id,
            "symbol": self.symbol,
            "type": self.trade_type,
            "entry_price": self.entry_price,
            "exit_price": self.exit_price,
            "take_profit": self.take_profit,
            "stop_loss": self.stop_loss,
            "lot_size": self.lot_size,
            "volume": self.volume,
            "profit": self.profit,
            "commission": self.commission,
            "rr_ratio": self.rr_ratio or "",
            "strategy": self.strategy or "",
            "session": self.session or "",
            "duration": self.duration or "",
            "date": self.date,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Trade":
        return cls.model_validate(
            {
                "id": row["id"],
                "accountId": row["account_id"],
                "symbol": row["symbol"],
                "type": row["type"],
                "entryPrice": row["entry_price"],
                "exitPrice": row["exit_price"],
                "takeProfit": row["take_profit"],
                "stopLoss": row["stop_loss"],
                "lotSize": row["lot_size"],
                "volume": row["volume"],
                "profit": row["profit"],
                # column default is 0, but a NULL can still be written explicitly
                "commission": row["commission"] if row["commission"] is not None else 0.0,
                "rrRatio": row["rr_ratio"],
                "strategy": row["strategy"],
                "session": row["session"],
                "duration": row["duration"],
                "date": row["date"],
            }
        )
