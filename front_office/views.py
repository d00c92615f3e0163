"""Player-facing label mappings.

Numeric owner state (patience, trust, mood, traits) is never surfaced raw;
everything the presentation layer sees goes through these helpers.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from .models import Owner, OwnerDemand, to_plain
from .patience import get_job_security_status

_PATIENCE_LABELS = ("very impatient", "impatient", "moderate", "patient", "very patient")
_SPENDING_LABELS = ("frugal", "budget-conscious", "moderate", "generous", "lavish")
_CONTROL_LABELS = ("hands-off", "occasional input", "involved", "controlling", "micromanager")
_LOYALTY_LABELS = ("ruthless", "results-driven", "fair", "loyal", "extremely loyal")


def _quintile_label(value: float, labels: Sequence[str]) -> str:
    if value <= 20:
        return labels[0]
    if value <= 40:
        return labels[1]
    if value <= 60:
        return labels[2]
    if value <= 80:
        return labels[3]
    return labels[4]


def get_patience_description(value: float) -> str:
    return _quintile_label(value, _PATIENCE_LABELS)


def get_spending_description(value: float) -> str:
    return _quintile_label(value, _SPENDING_LABELS)


def get_control_description(value: float) -> str:
    return _quintile_label(value, _CONTROL_LABELS)


def get_loyalty_description(value: float) -> str:
    return _quintile_label(value, _LOYALTY_LABELS)


@dataclass
class OwnerViewModel:
    id: str
    full_name: str
    patience_description: str
    spending_description: str
    control_description: str
    loyalty_description: str
    secondary_traits: List[str]
    job_security_status: str
    active_demands: List[OwnerDemand] = field(default_factory=list)
    years_as_owner: int = 0
    previous_gms_fired: int = 0
    championships_won: int = 0
    net_worth: str = "wealthy"

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


def create_owner_view_model(owner: Owner) -> OwnerViewModel:
    traits = owner.personality.traits
    return OwnerViewModel(
        id=owner.id,
        full_name=owner.full_name,
        patience_description=get_patience_description(traits.patience),
        spending_description=get_spending_description(traits.spending),
        control_description=get_control_description(traits.control),
        loyalty_description=get_loyalty_description(traits.loyalty),
        secondary_traits=[trait.value for trait in owner.personality.secondary_traits],
        job_security_status=get_job_security_status(owner.patience_meter),
        active_demands=list(owner.active_demands),
        years_as_owner=owner.years_as_owner,
        previous_gms_fired=owner.previous_gms_fired,
        championships_won=owner.championships_won,
        net_worth=owner.net_worth.value,
    )


__all__ = [
    "OwnerViewModel",
    "create_owner_view_model",
    "get_control_description",
    "get_loyalty_description",
    "get_patience_description",
    "get_spending_description",
]
