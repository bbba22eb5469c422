"""Fonte de tempo do domínio (sempre UTC, timezone-aware)."""

from datetime import datetime, timezone
from typing import Callable

Relogio = Callable[[], datetime]


def agora() -> datetime:
    return datetime.now(timezone.utc)
