"""
Desktop-set grouping for computer peripheral assets.

Peripherals bought as one desktop (monitor, keyboard, mouse and CPU) carry
structured asset tags such as ``SSBAS/Mo/2025-26/T01``. This module parses
those tags and folds the matching register rows into one `DesktopSet` per
(financial year, set) pair. Everything here is a pure function of its input.
"""

import re
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from asset_register.models import Asset


# Peripheral tag format: SSBAS/{Type}/YYYY-YY/TXX
# Type codes: Mo = Monitor, Ko = Keyboard, Ro = Mouse, Co = CPU
PERIPHERAL_TAG_PATTERN = re.compile(
    r'SSBAS/(Mo|Ko|Ro|Co)/(\d{4}-\d{2})/(T\d+)',
    re.IGNORECASE | re.ASCII
)

# Slots are keyed by the lower-cased type code, display names by the exact code
COMPONENT_SLOTS = MappingProxyType({
    'mo': 'monitor',
    'ko': 'keyboard',
    'ro': 'mouse',
    'co': 'cpu',
})

PERIPHERAL_TYPE_NAMES = MappingProxyType({
    'Mo': 'Monitor',
    'Ko': 'Keyboard',
    'Ro': 'Mouse',
    'Co': 'CPU',
})

SLOT_COUNT = len(COMPONENT_SLOTS)
MIXED_LOCATIONS = "Mixed Locations"

# Leading numeric prefix of a cost string ("42000", "1.5e3", "1200 incl. GST")
LEADING_FLOAT_PATTERN = re.compile(r'[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?', re.ASCII)


class _GroupingModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True


class PeripheralInfo(_GroupingModel):
    """Parse result for one asset tag."""
    type: Optional[str] = None
    financial_year: Optional[str] = None
    set_id: Optional[str] = None
    is_peripheral: bool = False


NOT_A_PERIPHERAL = PeripheralInfo()


class DesktopSetComponents(_GroupingModel):
    monitor: Optional[Asset] = None
    keyboard: Optional[Asset] = None
    mouse: Optional[Asset] = None
    cpu: Optional[Asset] = None


class DesktopSet(_GroupingModel):
    """
    One desktop assembled from its peripheral rows.

    Built fresh on every grouping call; it is a view over the asset list and
    is never stored.
    """
    set_id: str
    financial_year: str
    display_name: str
    components: DesktopSetComponents
    all_assets: List[Asset]
    completeness: int
    location: Optional[str] = None
    total_cost: float = 0.0
    is_grouped: bool = True


class GroupingResult(_GroupingModel):
    desktop_sets: List[DesktopSet]
    ungrouped_assets: List[Asset]


def parse_asset_tag(asset_tagging: Optional[str]) -> PeripheralInfo:
    """
    Parse an asset tag to extract peripheral information.

    Format: SSBAS/{Type}/YYYY-YY/TXX, matched case-insensitively after trimming.
    Example: SSBAS/Mo/2025-26/T01

    The captured segments keep the case they had in the input. Tags that do
    not match are not an error, they simply are not peripherals.

    Args:
        asset_tagging: Raw asset tag (may be empty or None)

    Returns:
        PeripheralInfo with is_peripheral=True and all fields set, or the
        empty PeripheralInfo when the tag does not conform
    """
    if not asset_tagging or not isinstance(asset_tagging, str):
        return NOT_A_PERIPHERAL

    match = PERIPHERAL_TAG_PATTERN.fullmatch(asset_tagging.strip())
    if not match:
        return NOT_A_PERIPHERAL

    peripheral_type, financial_year, set_id = match.groups()
    return PeripheralInfo(
        type=peripheral_type,
        financial_year=financial_year,
        set_id=set_id,
        is_peripheral=True,
    )


def parse_cost(value: Any) -> float:
    """
    Read a cost the way spreadsheet users type it.

    Takes the leading number of the string and ignores whatever follows;
    anything without a leading number is 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if value == value else 0.0

    match = LEADING_FLOAT_PATTERN.match(str(value).lstrip())
    if not match:
        return 0.0
    try:
        return float(match.group(0))
    except (ValueError, OverflowError):
        return 0.0


def get_component_slot(peripheral_type: Optional[str]) -> Optional[str]:
    """Component slot ('monitor', 'keyboard', 'mouse', 'cpu') for a type code."""
    if not peripheral_type:
        return None
    return COMPONENT_SLOTS.get(peripheral_type.lower())


def get_peripheral_type_name(peripheral_type: Optional[str]) -> str:
    """Display name for a peripheral type code, 'Unknown' if unrecognized."""
    if not peripheral_type or not isinstance(peripheral_type, str):
        return "Unknown"
    return PERIPHERAL_TYPE_NAMES.get(peripheral_type, "Unknown")


def is_desktop_peripheral(asset_tagging: Optional[str]) -> bool:
    return parse_asset_tag(asset_tagging).is_peripheral


def get_set_identifier(asset_tagging: Optional[str]) -> Optional[str]:
    """
    Set identifier of a peripheral tag, e.g. ``2025-26-T01``.

    Returns:
        "{financial_year}-{set_id}" for peripheral tags, None otherwise
    """
    info = parse_asset_tag(asset_tagging)
    if not info.is_peripheral:
        return None
    return f"{info.financial_year}-{info.set_id}"


def _display_name(set_id: str, financial_year: str) -> str:
    """'T01' in 2025-26 -> 'Desktop Set 1 (2025-26)'"""
    set_number = set_id[1:] if set_id[:1] in ('T', 't') else set_id
    set_number = set_number.lstrip('0') or '0'
    return f"Desktop Set {set_number} ({financial_year})"


def _common_location(assets: List[Asset]) -> Optional[str]:
    """
    Shared location of a set's rows.

    One distinct location is returned as-is, several collapse to
    "Mixed Locations", and None means no row has a location at all.
    """
    unique_locations = {asset.location for asset in assets if asset.location}
    if not unique_locations:
        return None
    if len(unique_locations) == 1:
        return unique_locations.pop()
    return MIXED_LOCATIONS


def _build_desktop_set(key: Tuple[str, str], assets: List[Asset]) -> DesktopSet:
    financial_year, set_id = key

    # Organize components by type; a duplicate slot keeps the last row seen
    components: Dict[str, Asset] = {}
    for asset in assets:
        slot = get_component_slot(parse_asset_tag(asset.asset_tagging).type)
        if slot:
            components[slot] = asset

    # The original cost is recorded once for the whole desktop set, not per
    # component, so it is read from the first row only
    total_cost = parse_cost(assets[0].original_cost) if assets else 0.0

    return DesktopSet(
        set_id=set_id,
        financial_year=financial_year,
        display_name=_display_name(set_id, financial_year),
        components=DesktopSetComponents(**components),
        all_assets=list(assets),
        completeness=len(components) * 100 // SLOT_COUNT,
        location=_common_location(assets),
        total_cost=total_cost,
    )


def group_assets_into_desktop_sets(assets: List[Asset]) -> GroupingResult:
    """
    Group peripheral assets into desktop sets.

    Algorithm:
    1. Parse every asset tag; non-peripheral rows pass through untouched
    2. Bucket peripherals by (financial year, set id)
    3. Fold each bucket into a DesktopSet (components, completeness,
       cost, location)
    4. Sort by financial year descending, then set id ascending. Both are
       plain string comparisons, so "T10" sorts before "T2".

    Args:
        assets: Full list of register rows

    Returns:
        GroupingResult with the sorted desktop sets and the ungrouped rows
        in their input order
    """
    ungrouped_assets: List[Asset] = []
    buckets: Dict[Tuple[str, str], List[Asset]] = {}

    for asset in assets:
        info = parse_asset_tag(asset.asset_tagging)
        if not info.is_peripheral:
            ungrouped_assets.append(asset)
            continue
        buckets.setdefault((info.financial_year, info.set_id), []).append(asset)

    desktop_sets = [_build_desktop_set(key, members) for key, members in buckets.items()]

    # Two stable sorts: secondary key first, then primary key
    desktop_sets.sort(key=lambda desktop_set: desktop_set.set_id)
    desktop_sets.sort(key=lambda desktop_set: desktop_set.financial_year, reverse=True)

    return GroupingResult(
        desktop_sets=desktop_sets,
        ungrouped_assets=ungrouped_assets,
    )
