#!/usr/bin/env python3
"""Collaboration engine configuration

Commercial and outbox settings for the collaboration lifecycle engine.
"""
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation


def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default

def _float(val: str, default: float) -> float:
    try:
        return float(val) if val else default
    except ValueError:
        return default

def _decimal(val: str, default: str) -> Decimal:
    try:
        return Decimal(val) if val else Decimal(default)
    except InvalidOperation:
        return Decimal(default)


@dataclass
class CollaborationConfig:
    """Collaboration engine settings"""

    # Platform commission applied to the agreed amount (0.10 = 10%)
    commission_rate: Decimal = Decimal("0.10")
    currency: str = "USD"
    # Currency minor unit used for rounding the platform fee
    currency_quantum: Decimal = Decimal("0.01")

    # Side-effect outbox
    outbox_max_attempts: int = 5
    # Seconds to wait for in-flight dispatch on shutdown
    outbox_drain_timeout: float = 10.0

    # Persistence
    db_schema: str = "collaboration"

    @classmethod
    def from_env(cls) -> 'CollaborationConfig':
        """Load collaboration config from environment variables"""
        return cls(
            commission_rate=_decimal(os.getenv("COLLAB_COMMISSION_RATE", ""), "0.10"),
            currency=os.getenv("COLLAB_CURRENCY", "USD"),
            currency_quantum=_decimal(os.getenv("COLLAB_CURRENCY_QUANTUM", ""), "0.01"),
            outbox_max_attempts=_int(os.getenv("COLLAB_OUTBOX_MAX_ATTEMPTS", "5"), 5),
            outbox_drain_timeout=_float(os.getenv("COLLAB_OUTBOX_DRAIN_TIMEOUT", ""), 10.0),
            db_schema=os.getenv("COLLAB_DB_SCHEMA", "collaboration"),
        )
