"""Daily and per-category choice aggregation."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from verdant.db.models import CategoryStat, DailyStat
from verdant.game.catalog import CATEGORIES
from verdant.storage.gateway import StorageGateway

logger = logging.getLogger(__name__)


def next_daily_stat(existing: Any | None, is_good: bool, xp_earned: int, health_after: int) -> dict[str, Any]:
    """Fields for the (user, date) row after one more choice.

    ``health_start`` is fixed by the first write of the day; ``health_end``
    always tracks the latest health.
    """
    good = existing.good_count if existing is not None else 0
    bad = existing.bad_count if existing is not None else 0
    xp = existing.xp_earned if existing is not None else 0
    health_start = existing.health_start if existing is not None else None

    return {
        "good_count": good + (1 if is_good else 0),
        "bad_count": bad + (0 if is_good else 1),
        "xp_earned": xp + xp_earned,
        "health_start": health_after if health_start is None else health_start,
        "health_end": health_after,
    }


def category_totals(row: Any | None) -> dict[str, int]:
    """All five category counters, zero-filled when the row is missing."""
    return {name: (getattr(row, name, 0) or 0) if row is not None else 0 for name in CATEGORIES}


def next_category_stat(existing: Any | None, category: str) -> dict[str, int]:
    """Increment exactly one category counter."""
    if category not in CATEGORIES:
        msg = f"Unknown category: {category}"
        raise ValueError(msg)
    totals = category_totals(existing)
    totals[category] += 1
    return totals


async def update_daily_stat(
    gateway: StorageGateway,
    user_id: str,
    stat_date: date,
    is_good: bool,
    xp_earned: int,
    health_after: int,
) -> DailyStat:
    """Read-modify-upsert today's stat row."""
    rows = await gateway.get_daily_stats(user_id, 1, stat_date)
    existing = next((r for r in rows if r.stat_date == stat_date), None)
    fields = next_daily_stat(existing, is_good, xp_earned, health_after)
    return await gateway.upsert_daily_stat(user_id, stat_date, fields)


async def update_category_stat(gateway: StorageGateway, user_id: str, category: str) -> CategoryStat:
    existing = await gateway.get_category_stats(user_id)
    fields = next_category_stat(existing, category)
    logger.debug("Category %s for %s -> %d", category, user_id, fields[category])
    return await gateway.update_category_stats(user_id, fields)
