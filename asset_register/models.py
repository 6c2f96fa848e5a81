"""
SQLModel and Pydantic definitions for the Asset Register application.

`KeyValue` is the storage table: every asset record lives under its own key
(``asset:{assetTagging}``) with the whole record as a JSON value.

`Asset` is the in-memory shape of one register row. The wire format uses the
register's camelCase field names, Python code uses snake_case.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from sqlmodel import Field, SQLModel, Column, JSON


class KeyValue(SQLModel, table=True):
    """
    Key-value table backing the register.

    The value column stores the entire record as JSON so that fields added by
    spreadsheet imports or older clients survive a round trip untouched.
    """
    __tablename__ = "kv_store"

    key: str = Field(
        primary_key=True,
        nullable=False,
        max_length=500
    )

    value: dict = Field(
        default={},
        sa_column=Column(JSON, nullable=False)
    )


class Asset(BaseModel):
    """
    One fixed-asset register row.

    Only the asset tag is required. Unknown fields are kept as extras and are
    written back unchanged.
    """
    asset_tagging: str

    # Classification
    asset_class: Optional[str] = None
    asset_sub_class: Optional[str] = None
    description: Optional[str] = None
    sr_no: Optional[str] = None
    serial_number: Optional[str] = None
    location: Optional[str] = None
    department: Optional[str] = None
    condition: Optional[str] = None
    status: Optional[str] = None

    # Purchase and valuation
    date_of_purchase: Optional[str] = None
    tax_invoice_no: Optional[str] = None
    vendor_supplier_name_address: Optional[str] = None
    original_cost: Optional[str] = None
    depreciation_rate: Optional[str] = None
    wdv_as_march31: Optional[str] = None
    transferred_disposal_details: Optional[str] = None
    valuation_at_transfer_disposal: Optional[str] = None
    scrap_value_realised: Optional[str] = None
    remarks_authorised_signatory: Optional[str] = None

    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        coerce_numbers_to_str = True
        extra = "allow"
        frozen = True


def utc_timestamp() -> str:
    """ISO-8601 timestamp used for createdAt/updatedAt."""
    return datetime.utcnow().isoformat() + "Z"
