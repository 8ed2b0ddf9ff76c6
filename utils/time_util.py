"""시간 변환 유틸리티"""
from datetime import datetime, timezone
from typing import Optional


def ms_to_datetime(ms: int) -> datetime:
    """epoch 밀리초 → UTC datetime"""
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def optional_ms_to_datetime(ms: Optional[int]) -> Optional[datetime]:
    return ms_to_datetime(ms) if ms is not None else None


def as_utc(value: datetime) -> datetime:
    """naive datetime은 UTC로 간주"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
