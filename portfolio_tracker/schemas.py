"""Pydantic schemas for stored transaction and price records."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field, field_validator

from .models import PricePoint, PriceSource, Transaction, TransactionType


class TransactionRecord(BaseModel):
    date: dt.date
    type: TransactionType = Field(..., examples=["buy"])
    quantity: float = Field(..., ge=0)
    price: float = Field(..., ge=0)
    fees: float = Field(default=0.0, ge=0)
    notes: str | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    def to_domain(self) -> Transaction:
        return Transaction(
            date=self.date,
            kind=self.type,
            quantity=self.quantity,
            price=self.price,
            fees=self.fees,
            notes=self.notes or None,
        )

    class Config:
        json_schema_extra = {
            "example": {
                "date": "2023-01-15",
                "type": "buy",
                "quantity": 10,
                "price": 150.0,
                "fees": 1.5,
                "notes": "Initial purchase",
            }
        }


class PricePointRecord(BaseModel):
    date: dt.date
    price: float = Field(..., ge=0)
    source: PriceSource = PriceSource.MARKET

    @field_validator("source", mode="before")
    @classmethod
    def _normalize_source(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.upper()
            # Older histories tag feed prices with the provider name
            if value == "YAHOO":
                return PriceSource.MARKET
        return value

    def to_domain(self) -> PricePoint:
        return PricePoint(date=self.date, price=self.price, source=self.source)


def parse_transactions(rows: list[dict]) -> list[Transaction]:
    """Validate raw transaction dicts and convert them to domain objects."""

    return [TransactionRecord.model_validate(row).to_domain() for row in rows]


def parse_price_history(rows: list[dict]) -> list[PricePoint]:
    """Validate raw price dicts and convert them to domain objects."""

    return [PricePointRecord.model_validate(row).to_domain() for row in rows]


__all__ = [
    "PricePointRecord",
    "TransactionRecord",
    "parse_price_history",
    "parse_transactions",
]
