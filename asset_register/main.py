"""
FastAPI backend for the Asset Register - institution fixed-asset tracking.

Provides REST API endpoints for:
- Recording, editing and deleting asset register rows
- Browsing, searching and exporting the register
- Importing rows from spreadsheets (bulk JSON or file upload)
- Grouping desktop peripherals into desktop sets
- Dashboard statistics
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import Body, Depends, FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from asset_register import store
from asset_register.database import get_session, init_db
from asset_register.grouping import group_assets_into_desktop_sets
from asset_register.models import Asset, utc_timestamp
from asset_register.parser import SUPPORTED_EXTENSIONS, export_csv, parse_excel
from asset_register.queries import filter_assets, get_dashboard_stats

logger = logging.getLogger(__name__)

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

# camelCase names of the typed Asset fields
ASSET_FIELDS = {field.alias or name for name, field in Asset.model_fields.items()}


# Initialize FastAPI app
app = FastAPI(
    title="Asset Register API",
    description="Institution Fixed-Asset Register - Backend API",
    version="1.0.0",
)

# Configure CORS for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["Content-Length"],
    max_age=600,
)


# Response Models
class ImportResults(BaseModel):
    """Per-record outcome of a bulk import"""
    success: int = 0
    failed: int = 0
    created: int = 0
    updated: int = 0
    errors: List[Dict[str, Any]] = []


class ImportResponse(BaseModel):
    """Response model for bulk import and spreadsheet upload"""
    message: str
    results: ImportResults


def _primary_id(record: Dict[str, Any]) -> Optional[str]:
    """
    Register identifier of a record.

    Uses assetTagging, falling back to the legacy assetCode field.
    """
    primary_id = record.get("assetTagging") or record.get("assetCode")
    if primary_id is None:
        return None
    primary_id = str(primary_id).strip()
    return primary_id or None


def _to_asset(record: Dict[str, Any]) -> Asset:
    """Build an Asset from a stored record; scalar register fields become strings."""
    data = {
        key: str(value) if key in ASSET_FIELDS and value is not None and not isinstance(value, str) else value
        for key, value in record.items()
    }
    data["assetTagging"] = _primary_id(record) or ""
    return Asset.model_validate(data)


async def _import_records(session: AsyncSession, records: List[Any]) -> ImportResults:
    """
    Upsert records into the register, one key per asset tag.

    Records without an identifier are counted as failures; existing records
    keep their createdAt.
    """
    results = ImportResults()
    now = utc_timestamp()

    for record in records:
        if not isinstance(record, dict):
            results.failed += 1
            results.errors.append({"asset": record, "error": "Invalid asset record"})
            continue

        primary_id = _primary_id(record)
        if not primary_id:
            results.failed += 1
            results.errors.append({"asset": record, "error": "Missing asset tagging or asset code"})
            continue

        key = store.asset_key(primary_id)
        existing = await store.get(session, key)
        asset_data = {
            **record,
            "createdAt": existing.get("createdAt", now) if existing else now,
            "updatedAt": now,
        }
        await store.set(session, key, asset_data)

        results.success += 1
        if existing:
            results.updated += 1
        else:
            results.created += 1

    return results


# Startup event
@app.on_event("startup")
async def on_startup():
    """Initialize logging and database on application startup"""
    logging.basicConfig(level=logging.INFO)
    await init_db()
    logger.info("✓ Database initialized successfully")


# Health check endpoint
@app.get("/")
async def root():
    """Root endpoint - service information"""
    return {
        "service": "Asset Register API",
        "status": "operational",
        "version": app.version
    }


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/assets")
async def list_assets(
    department: Optional[str] = Query(None, description="Exact department"),
    condition: Optional[str] = Query(None, description="Exact condition"),
    status: Optional[str] = Query(None, description="Exact status"),
    search: Optional[str] = Query(None, description="Case-insensitive text search"),
    session: AsyncSession = Depends(get_session)
):
    """
    List register rows with optional filters.

    Args:
        department: Filter by department
        condition: Filter by condition
        status: Filter by status
        search: Substring search across tag, class, description, serial
            number, supplier, location and department
        session: Database session

    Returns:
        {"assets": [...]}
    """
    assets = await store.get_by_prefix(session, store.ASSET_PREFIX)
    filtered = filter_assets(
        assets,
        department=department,
        condition=condition,
        status=status,
        search=search,
    )
    return {"assets": filtered}


@app.get("/assets/export")
async def export_assets(
    department: Optional[str] = Query(None, description="Exact department"),
    condition: Optional[str] = Query(None, description="Exact condition"),
    status: Optional[str] = Query(None, description="Exact status"),
    search: Optional[str] = Query(None, description="Case-insensitive text search"),
    session: AsyncSession = Depends(get_session)
):
    """
    Download the filtered register as CSV.

    Takes the same filters as GET /assets. Columns use the register
    headings, so the file can be uploaded again as-is.
    """
    assets = await store.get_by_prefix(session, store.ASSET_PREFIX)
    filtered = filter_assets(
        assets,
        department=department,
        condition=condition,
        status=status,
        search=search,
    )
    filename = f"assets_export_{utc_timestamp()[:10]}.csv"
    logger.info("✓ Exported %d of %d assets", len(filtered), len(assets))
    return Response(
        content=export_csv(filtered),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@app.post("/assets/bulk-import", response_model=ImportResponse)
async def bulk_import_assets(
    body: Dict[str, Any] = Body(...),
    session: AsyncSession = Depends(get_session)
):
    """
    Import many register rows at once.

    Body: {"assets": [{...}, ...]}. Rows are upserted by asset tag; rows
    without a tag are reported in results.errors.
    """
    records = body.get("assets")
    if not isinstance(records, list) or len(records) == 0:
        raise HTTPException(status_code=400, detail="Invalid assets array")

    try:
        results = await _import_records(session, records)
        await session.commit()
    except Exception as e:
        await session.rollback()
        logger.exception("Error bulk importing assets")
        raise HTTPException(status_code=500, detail=f"Error bulk importing assets: {str(e)}")

    logger.info("✓ Bulk import: %d imported, %d failed", results.success, results.failed)
    return ImportResponse(
        message=f"Imported {results.success} assets successfully, {results.failed} failed",
        results=results
    )


@app.post("/assets/upload", response_model=ImportResponse)
async def upload_file(
    file: UploadFile = File(...),
    session: AsyncSession = Depends(get_session)
):
    """
    Upload a register spreadsheet and import its rows.

    The endpoint:
    1. Accepts .xlsx and .csv files
    2. Maps the register column headings to record fields
    3. Upserts every row by asset tag

    Args:
        file: Spreadsheet upload
        session: Database session

    Returns:
        ImportResponse with per-record results
    """
    filename = file.filename or ""
    file_ext = Path(filename).suffix.lower()
    if file_ext not in SUPPORTED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail="Only spreadsheet files (.xlsx, .csv) are supported"
        )

    # Save uploaded file temporarily
    with tempfile.NamedTemporaryFile(delete=False, suffix=file_ext) as tmp_file:
        content = await file.read()
        tmp_file.write(content)
        tmp_file_path = tmp_file.name

    try:
        records = parse_excel(tmp_file_path, original_filename=filename)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Error parsing '%s'", filename)
        raise HTTPException(status_code=500, detail=f"Error parsing file: {str(e)}")
    finally:
        # Clean up temp file
        if os.path.exists(tmp_file_path):
            os.unlink(tmp_file_path)

    if not records:
        return ImportResponse(message="No valid records found in the file", results=ImportResults())

    try:
        results = await _import_records(session, records)
        await session.commit()
    except Exception as e:
        await session.rollback()
        logger.exception("Error importing '%s'", filename)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")

    logger.info("✓ Imported %d rows from '%s'", results.success, filename)
    return ImportResponse(
        message=f"Imported {results.success} assets from '{filename}' "
                f"({results.created} new, {results.updated} updated)",
        results=results
    )


@app.post("/assets")
async def create_asset(
    body: Dict[str, Any] = Body(...),
    session: AsyncSession = Depends(get_session)
):
    """Create a register row; the asset tag must not exist yet."""
    primary_id = _primary_id(body)
    if not primary_id:
        raise HTTPException(status_code=400, detail="Asset tagging or asset code is required")

    key = store.asset_key(primary_id)
    if await store.get(session, key) is not None:
        raise HTTPException(status_code=400, detail="Asset with this identifier already exists")

    now = utc_timestamp()
    asset = {**body, "createdAt": now, "updatedAt": now}

    try:
        await store.set(session, key, asset)
        await session.commit()
    except Exception as e:
        await session.rollback()
        logger.exception("Error creating asset '%s'", primary_id)
        raise HTTPException(status_code=500, detail=f"Error creating asset: {str(e)}")

    return {"asset": asset, "message": "Asset created successfully"}


@app.get("/desktop-sets")
async def list_desktop_sets(session: AsyncSession = Depends(get_session)):
    """
    Group the whole register into desktop sets.

    Peripheral rows tagged SSBAS/{Mo|Ko|Ro|Co}/YYYY-YY/TXX are folded into
    one set per financial year and set number; every other row is returned
    in ungroupedAssets.
    """
    records = await store.get_by_prefix(session, store.ASSET_PREFIX)
    result = group_assets_into_desktop_sets([_to_asset(record) for record in records])
    return result.model_dump(by_alias=True, exclude_none=True)


@app.get("/dashboard/stats")
async def dashboard_stats(session: AsyncSession = Depends(get_session)):
    """Register totals, breakdowns and the most recent updates."""
    assets = await store.get_by_prefix(session, store.ASSET_PREFIX)
    return {"stats": get_dashboard_stats(assets)}


@app.get("/assets/{asset_tagging:path}")
async def get_asset(
    asset_tagging: str,
    session: AsyncSession = Depends(get_session)
):
    """
    Retrieve one register row by asset tag.

    Asset tags contain slashes (SSBAS/Mo/2025-26/T01), so the whole remaining
    path is the tag.
    """
    asset = await store.get(session, store.asset_key(asset_tagging))
    if asset is None:
        raise HTTPException(
            status_code=404,
            detail=f"Asset '{asset_tagging}' not found"
        )
    return {"asset": asset}


@app.put("/assets/{asset_tagging:path}")
async def update_asset(
    asset_tagging: str,
    body: Dict[str, Any] = Body(...),
    session: AsyncSession = Depends(get_session)
):
    """
    Update a register row.

    Fields in the body are merged over the stored record. Changing
    assetTagging moves the record to the new tag, which must be free.
    """
    key = store.asset_key(asset_tagging)
    existing = await store.get(session, key)
    if existing is None:
        raise HTTPException(status_code=404, detail=f"Asset '{asset_tagging}' not found")

    new_tagging = _primary_id({"assetTagging": body.get("assetTagging")}) or asset_tagging
    new_key = store.asset_key(new_tagging)
    if new_key != key and await store.get(session, new_key) is not None:
        raise HTTPException(status_code=400, detail="Asset tagging already exists")

    asset = {
        **existing,
        **body,
        "assetTagging": new_tagging,
        "createdAt": existing.get("createdAt"),
        "updatedAt": utc_timestamp(),
    }

    try:
        if new_key != key:
            await store.delete(session, key)
            logger.info("Renamed asset '%s' -> '%s'", asset_tagging, new_tagging)
        await store.set(session, new_key, asset)
        await session.commit()
    except Exception as e:
        await session.rollback()
        logger.exception("Error updating asset '%s'", asset_tagging)
        raise HTTPException(status_code=500, detail=f"Error updating asset: {str(e)}")

    return {"asset": asset, "message": "Asset updated successfully"}


@app.delete("/assets/{asset_tagging:path}")
async def delete_asset(
    asset_tagging: str,
    session: AsyncSession = Depends(get_session)
):
    key = store.asset_key(asset_tagging)
    if await store.get(session, key) is None:
        raise HTTPException(status_code=404, detail=f"Asset '{asset_tagging}' not found")

    try:
        await store.delete(session, key)
        await session.commit()
    except Exception as e:
        await session.rollback()
        logger.exception("Error deleting asset '%s'", asset_tagging)
        raise HTTPException(status_code=500, detail=f"Error deleting asset: {str(e)}")

    return {"message": "Asset deleted successfully"}
