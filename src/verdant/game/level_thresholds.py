"""Level and plant-stage thresholds.

Level is a pure function of lifetime XP; plant stage is a pure function of
level. These values MUST match the frontend plant renderer.
"""

from __future__ import annotations

XP_PER_LEVEL = 100

# Ordered by min_level ascending; the stage is the last entry whose min_level <= level
PLANT_STAGES: list[dict] = [
    {
        "stage": "seedling",
        "name": "Seedling",
        "min_level": 0,
        "description": "A tiny sprout just beginning its journey",
        "color": "#8BC34A",
    },
    {
        "stage": "sprout",
        "name": "Sprout",
        "min_level": 5,
        "description": "Young and growing with vibrant energy",
        "color": "#4CAF50",
    },
    {
        "stage": "sapling",
        "name": "Sapling",
        "min_level": 10,
        "description": "Developing strong roots and branches",
        "color": "#2E7D32",
    },
    {
        "stage": "tree",
        "name": "Tree",
        "min_level": 25,
        "description": "A mature tree providing shade and oxygen",
        "color": "#1B5E20",
    },
    {
        "stage": "ancient",
        "name": "Ancient Tree",
        "min_level": 50,
        "description": "A legendary ancient tree, wise and majestic",
        "color": "#795548",
    },
]


def compute_level(total_xp: int) -> int:
    """Level from lifetime XP: floor(total_xp / 100) + 1."""
    if total_xp < 0:
        return 1
    return total_xp // XP_PER_LEVEL + 1


def stage_for(level: int) -> str:
    """Plant stage for a level."""
    current = PLANT_STAGES[0]
    for entry in PLANT_STAGES:
        if level >= entry["min_level"]:
            current = entry
    return current["stage"]


def level_progress(total_xp: int) -> dict:
    """Progress info for the level bar.

    ``xp_for_next`` is the cumulative XP at which the next level starts.
    """
    level = compute_level(total_xp)
    level_start = (level - 1) * XP_PER_LEVEL
    return {
        "level": level,
        "stage": stage_for(level),
        "xp_into_level": max(total_xp, 0) - level_start,
        "xp_for_level": XP_PER_LEVEL,
        "xp_for_next": level * XP_PER_LEVEL,
    }
