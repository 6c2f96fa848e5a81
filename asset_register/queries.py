"""
Shared query logic for the register API.

Records come from the key-value store as plain dicts; filtering and the
dashboard aggregates run in memory over that list.
"""

from typing import Any, Dict, List, Optional

import pandas as pd

from asset_register.grouping import parse_cost


# Fields searched by the free-text filter, including legacy field names
SEARCH_FIELDS = [
    'assetTagging',
    'assetClass',
    'assetSubClass',
    'description',
    'serialNumber',
    'supplierVendor',
    'location',
    'department',
    # Legacy fields for backward compatibility
    'assetCode',
    'assetName',
    'supplier',
]

UNSPECIFIED = "Unspecified"
RECENT_UPDATES_LIMIT = 5


def matches_search(record: Dict[str, Any], search: str) -> bool:
    """Case-insensitive substring match over SEARCH_FIELDS."""
    needle = search.lower()
    for field in SEARCH_FIELDS:
        value = record.get(field)
        if value and needle in str(value).lower():
            return True
    return False


def filter_assets(
    assets: List[Dict[str, Any]],
    department: Optional[str] = None,
    condition: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Filter asset records with multiple filter options.

    Args:
        assets: Asset records as stored
        department: Exact department match
        condition: Exact condition match
        status: Exact status match
        search: Free-text search across SEARCH_FIELDS

    Returns:
        Matching records in their original order
    """
    filtered = assets

    if department:
        filtered = [a for a in filtered if a.get('department') == department]

    if condition:
        filtered = [a for a in filtered if a.get('condition') == condition]

    if status:
        filtered = [a for a in filtered if a.get('status') == status]

    if search:
        filtered = [a for a in filtered if matches_search(a, search)]

    return filtered


def _value_counts(df: pd.DataFrame, column: str) -> Dict[str, int]:
    if column not in df:
        return {UNSPECIFIED: len(df)} if len(df) else {}
    # 1 and "1" are the same department
    values = df[column].fillna(UNSPECIFIED).replace('', UNSPECIFIED).astype(str)
    return {k: int(v) for k, v in values.value_counts().items()}


def get_dashboard_stats(assets: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Get dashboard statistics for the whole register.

    Returns:
        Dict with totalAssets, byDepartment, byCondition, byStatus,
        totalValue and recentUpdates (latest RECENT_UPDATES_LIMIT records)
    """
    if not assets:
        return {
            "totalAssets": 0,
            "byDepartment": {},
            "byCondition": {},
            "byStatus": {},
            "totalValue": 0.0,
            "recentUpdates": [],
        }

    df = pd.DataFrame(assets)

    # Total value (check both new and legacy cost fields)
    cost = df['originalCost'] if 'originalCost' in df else pd.Series([None] * len(df))
    if 'cost' in df:
        cost = cost.where(cost.notna() & (cost != ''), df['cost'])
    total_value = float(sum(parse_cost(value) for value in cost if pd.notna(value)))

    # Get recent updates (last 5)
    recent_updates = assets[:RECENT_UPDATES_LIMIT]
    if 'updatedAt' in df:
        updated = pd.to_datetime(df['updatedAt'], errors='coerce', utc=True, format='ISO8601')
        order = updated.sort_values(ascending=False, na_position='last', kind='stable').index
        recent_updates = [assets[i] for i in order[:RECENT_UPDATES_LIMIT]]

    return {
        "totalAssets": len(assets),
        "byDepartment": _value_counts(df, 'department'),
        "byCondition": _value_counts(df, 'condition'),
        "byStatus": _value_counts(df, 'status'),
        "totalValue": total_value,
        "recentUpdates": recent_updates,
    }
