"""
Asset Register - institution fixed-asset tracking with desktop-set grouping.
"""

from asset_register.grouping import (
    DesktopSet,
    DesktopSetComponents,
    GroupingResult,
    PeripheralInfo,
    get_peripheral_type_name,
    get_set_identifier,
    group_assets_into_desktop_sets,
    is_desktop_peripheral,
    parse_asset_tag,
)
from asset_register.models import Asset

__version__ = "1.0.0"

__all__ = [
    "Asset",
    "DesktopSet",
    "DesktopSetComponents",
    "GroupingResult",
    "PeripheralInfo",
    "get_peripheral_type_name",
    "get_set_identifier",
    "group_assets_into_desktop_sets",
    "is_desktop_peripheral",
    "parse_asset_tag",
]
