"""Choice catalog — the good and bad actions a user can log.

These ids MUST match the frontend choice buttons exactly.
"""

from __future__ import annotations

from dataclasses import dataclass

CATEGORIES: tuple[str, ...] = (
    "recycling",
    "public_transport",
    "energy_saving",
    "water_conservation",
    "sustainable_shopping",
)


@dataclass(frozen=True)
class ChoiceDefinition:
    id: str
    text: str
    icon: str
    category: str
    is_good: bool


GOOD_CHOICES: tuple[ChoiceDefinition, ...] = (
    ChoiceDefinition("recycle", "Recycle paper and plastics", "ri-recycle-line", "recycling", True),
    ChoiceDefinition("publictransport", "Use public transportation", "ri-bus-line", "public_transport", True),
    ChoiceDefinition("lightoff", "Turn off lights when leaving", "ri-lightbulb-flash-line", "energy_saving", True),
    ChoiceDefinition("reusablebag", "Use reusable shopping bags", "ri-shopping-bag-line", "sustainable_shopping", True),
    ChoiceDefinition("waterbottle", "Use a reusable water bottle", "ri-water-flash-line", "water_conservation", True),
    ChoiceDefinition("localfood", "Buy local produce", "ri-store-2-line", "sustainable_shopping", True),
    ChoiceDefinition("digitalreceipts", "Choose digital receipts", "ri-file-list-3-line", "recycling", True),
    ChoiceDefinition("walkbike", "Walk or bike for short trips", "ri-bike-line", "public_transport", True),
    ChoiceDefinition("shortshower", "Take shorter showers", "ri-drop-line", "water_conservation", True),
    ChoiceDefinition("compost", "Start composting food scraps", "ri-plant-fill", "recycling", True),
    ChoiceDefinition("energystar", "Buy energy-efficient appliances", "ri-star-line", "energy_saving", True),
    ChoiceDefinition("meatless", "Have a meatless meal", "ri-leaf-line", "sustainable_shopping", True),
)

BAD_CHOICES: tuple[ChoiceDefinition, ...] = (
    ChoiceDefinition("plasticbag", "Use single-use plastic bags", "ri-bank-card-line", "sustainable_shopping", False),
    ChoiceDefinition("bottledwater", "Buy disposable water bottles", "ri-water-flash-line", "water_conservation", False),
    ChoiceDefinition("foodwaste", "Waste food", "ri-restaurant-line", "sustainable_shopping", False),
    ChoiceDefinition("longshower", "Take extra long showers", "ri-shower-line", "water_conservation", False),
    ChoiceDefinition("driveshort", "Drive for very short trips", "ri-car-line", "public_transport", False),
    ChoiceDefinition("lighton", "Leave lights on unnecessarily", "ri-lightbulb-line", "energy_saving", False),
    ChoiceDefinition("standby", "Leave electronics on standby", "ri-tv-line", "energy_saving", False),
    ChoiceDefinition("excesspackaging", "Buy items with excess packaging", "ri-archive-line", "recycling", False),
    ChoiceDefinition("fastfashion", "Buy fast fashion clothing", "ri-t-shirt-line", "sustainable_shopping", False),
    ChoiceDefinition("disposables", "Use disposable utensils", "ri-restaurant-2-line", "recycling", False),
)

_GOOD_BY_ID = {c.id: c for c in GOOD_CHOICES}
_BAD_BY_ID = {c.id: c for c in BAD_CHOICES}


def find_choice(choice_id: str, is_good: bool) -> ChoiceDefinition | None:
    """Look up a choice by id within the given polarity only."""
    table = _GOOD_BY_ID if is_good else _BAD_BY_ID
    return table.get(choice_id)
