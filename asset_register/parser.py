"""
Spreadsheet parser for the Asset Register.

Reads a register sheet exported from Excel (or CSV) and turns every row into
a camelCase asset record ready for bulk import. Column headings are matched
against the register's canonical headings after normalization; there is no
fuzzy matching.
"""

import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ('.xlsx', '.csv')

# Canonical register heading for each record field
REGISTER_HEADINGS = {
    'srNo': 'Sr No',
    'assetClass': 'Asset Class',
    'assetSubClass': 'Asset Sub Class',
    'description': 'Description',
    'assetTagging': 'Asset Tagging',
    'serialNumber': 'Serial Number',
    'location': 'Location',
    'department': 'Department',
    'condition': 'Condition',
    'status': 'Status',
    'dateOfPurchase': 'Date of Purchase',
    'taxInvoiceNo': 'Tax Invoice No',
    'vendorSupplierNameAddress': 'Vendor Supplier Name & Address',
    'originalCost': 'Original Cost',
    'depreciationRate': 'Depreciation Rate',
    'wdvAsMarch31': 'WDV as on 31st March',
    'transferredDisposalDetails': 'Transferred / Disposal Details',
    'valuationAtTransferDisposal': 'Valuation at Time of Transfer / Disposal',
    'scrapValueRealised': 'Scrap Value Realised',
    'remarksAuthorisedSignatory': 'Remarks & Authorised Signatory',
}

# Money and rate fields: thousands separators are stripped
NUMERIC_FIELDS = {
    'originalCost',
    'depreciationRate',
    'wdvAsMarch31',
    'valuationAtTransferDisposal',
    'scrapValueRealised',
}


def normalize_header(text: Any) -> str:
    """
    Normalize a column heading for comparison.

    Lowercases, trims, turns punctuation into spaces and collapses runs of
    whitespace, so ' Asset  Tagging ', 'asset-tagging' and 'ASSET TAGGING'
    are all 'asset tagging'.
    """
    normalized = str(text).lower().strip()
    normalized = re.sub(r'[^\w\s]', ' ', normalized)
    return ' '.join(normalized.split())


def _build_heading_lookup() -> Dict[str, str]:
    lookup = {}
    for field, heading in REGISTER_HEADINGS.items():
        lookup[normalize_header(heading)] = field
        # The camelCase field name itself is accepted too (exported JSON/CSV)
        lookup[normalize_header(field)] = field
    return lookup


HEADING_LOOKUP = _build_heading_lookup()


def map_columns(columns: List[Any]) -> Dict[Any, str]:
    """
    Map spreadsheet columns to record fields.

    The first column to claim a field wins; unknown columns are ignored.

    Returns:
        Dict of original column label -> record field name
    """
    mapping: Dict[Any, str] = {}
    claimed = set()
    for column in columns:
        field = HEADING_LOOKUP.get(normalize_header(column))
        if field and field not in claimed:
            mapping[column] = field
            claimed.add(field)
    return mapping


def clean_value(value: Any) -> Any:
    """
    Clean a single value for JSON serialization.
    Handles NaN, None, and pandas-specific types.

    Args:
        value: Any value from a DataFrame

    Returns:
        JSON-serializable value or None
    """
    # Handle pandas NA types
    if pd.isna(value):
        return None

    # Handle datetime (dates only, the register has no times)
    if isinstance(value, (pd.Timestamp, np.datetime64, datetime)):
        return pd.Timestamp(value).date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    # Handle numpy types
    if isinstance(value, (np.integer, np.floating)):
        value = value.item()

    # Whole-number floats come from numeric Excel cells: 42000.0 -> 42000
    if isinstance(value, float) and value.is_integer():
        return int(value)

    if not isinstance(value, (str, int, float, bool)):
        return str(value)

    return value


def normalize_row(row: Dict[Any, Any], column_mapping: Dict[Any, str]) -> Dict[str, str]:
    """
    Convert one spreadsheet row into an asset record.

    Empty cells are dropped, values become trimmed strings and numeric
    fields lose their thousands separators.
    """
    record: Dict[str, str] = {}
    for column, field in column_mapping.items():
        value = clean_value(row.get(column))
        if value is None:
            continue
        text = str(value).strip()
        if not text:
            continue
        if field in NUMERIC_FIELDS:
            text = text.replace(',', '')
        record[field] = text
    return record


def export_csv(assets: List[Dict[str, Any]]) -> str:
    """
    Write asset records as CSV under the canonical register headings.

    The export reads back through parse_excel unchanged. Fields outside the
    register (legacy names, extras) are not exported.
    """
    df = pd.DataFrame(assets, columns=list(REGISTER_HEADINGS))
    df = df.rename(columns=REGISTER_HEADINGS).fillna('')
    return df.to_csv(index=False)


def _read_sheet(file_path: Path) -> pd.DataFrame:
    if file_path.suffix.lower() == '.csv':
        return pd.read_csv(file_path, dtype=object)
    return pd.read_excel(file_path, sheet_name=0, dtype=object)


def parse_excel(file_path: str, original_filename: Optional[str] = None) -> List[Dict[str, str]]:
    """
    Parse a register spreadsheet into asset records.

    Process:
    1. Read the first sheet (or the CSV)
    2. Map column headings to record fields
    3. Normalize every row; rows without an asset tag are skipped

    Args:
        file_path: Path to the spreadsheet
        original_filename: Original filename (if different from file_path)

    Returns:
        List of camelCase asset records

    Raises:
        ValueError: If the file cannot be read or has no Asset Tagging column
        FileNotFoundError: If the file doesn't exist
    """
    file_path_obj = Path(file_path)
    if not file_path_obj.exists():
        raise FileNotFoundError(f"Spreadsheet not found: {file_path}")

    source_filename = original_filename if original_filename else file_path_obj.name

    try:
        df = _read_sheet(file_path_obj)
    except Exception as e:
        raise ValueError(f"Error reading spreadsheet: {str(e)}")

    column_mapping = map_columns(list(df.columns))
    logger.info(
        "Reading '%s': %d rows, %d of %d columns mapped",
        source_filename, len(df), len(column_mapping), len(df.columns)
    )

    if 'assetTagging' not in column_mapping.values():
        raise ValueError(
            f"No 'Asset Tagging' column found in '{source_filename}'. "
            f"Columns: {', '.join(str(c) for c in df.columns)}"
        )

    records = []
    skipped = 0
    for row in df.to_dict(orient='records'):
        record = normalize_row(row, column_mapping)
        if not record:
            continue
        if not record.get('assetTagging'):
            skipped += 1
            continue
        records.append(record)

    if skipped:
        logger.warning("⚠ Skipped %d rows without an asset tag in '%s'", skipped, source_filename)
    logger.info("✓ Parsed %d asset records from '%s'", len(records), source_filename)

    return records
