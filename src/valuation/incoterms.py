"""
Incoterm to freight allocation mode mapping.

Only the C-group terms where the seller pays main carriage matter to the
apportioner. CFR concentrates the whole shipment freight on regime 023
goods. CIF is recognised as its own mode but apportions freight like FOB:
by gross weight over every regime. Anything else, including empty or
unreadable terms, is FOB-like.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional


class AllocationMode(str, Enum):
    """How shipment freight is spread over HS groups."""
    FOB_LIKE = "FOB_LIKE"
    CFR_LIKE = "CFR_LIKE"
    CIF_LIKE = "CIF_LIKE"

    @property
    def concentrates_freight(self) -> bool:
        """True when all freight goes to regime 023 goods."""
        return self is AllocationMode.CFR_LIKE


INCOTERM_ALLOCATION_MODES: Mapping[str, AllocationMode] = MappingProxyType({
    "CFR": AllocationMode.CFR_LIKE,
    "C&F": AllocationMode.CFR_LIKE,
    "CNF": AllocationMode.CFR_LIKE,
    "CIF": AllocationMode.CIF_LIKE,
    "EXW": AllocationMode.FOB_LIKE,
    "FCA": AllocationMode.FOB_LIKE,
    "FAS": AllocationMode.FOB_LIKE,
    "FOB": AllocationMode.FOB_LIKE,
    "CPT": AllocationMode.FOB_LIKE,
    "CIP": AllocationMode.FOB_LIKE,
    "DAP": AllocationMode.FOB_LIKE,
    "DPU": AllocationMode.FOB_LIKE,
    "DDP": AllocationMode.FOB_LIKE,
})


def normalize_incoterm(incoterm: Optional[str]) -> str:
    """Upper-case, trimmed Incoterm code ("" when missing)."""
    return (incoterm or "").strip().upper()


def is_known_incoterm(incoterm: Optional[str]) -> bool:
    return normalize_incoterm(incoterm) in INCOTERM_ALLOCATION_MODES


def resolve_allocation_mode(incoterm: Optional[str]) -> AllocationMode:
    """
    Allocation mode for a free-text Incoterm.

    Example:
        >>> resolve_allocation_mode(" cfr ")
        <AllocationMode.CFR_LIKE: 'CFR_LIKE'>
        >>> resolve_allocation_mode("FOB Casablanca")
        <AllocationMode.FOB_LIKE: 'FOB_LIKE'>
    """
    return INCOTERM_ALLOCATION_MODES.get(
        normalize_incoterm(incoterm),
        AllocationMode.FOB_LIKE
    )
