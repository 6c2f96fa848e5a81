"""
Test the Asset Register API end to end against a temporary SQLite database
"""
import io

import pandas as pd

from asset_register.parser import REGISTER_HEADINGS


MONITOR = {
    "assetTagging": "SSBAS/Mo/2025-26/T01",
    "assetClass": "Computer",
    "description": "22 inch LED monitor",
    "location": "Computer Lab A",
    "originalCost": "52000",
    "department": "Computer Science",
    "status": "Active",
}


def create(client, record):
    response = client.post("/assets", json=record)
    assert response.status_code == 200, response.text
    return response.json()["asset"]


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/").json()["status"] == "operational"


def test_create_and_get_asset_with_slashes_in_tag(client):
    created = create(client, MONITOR)
    assert created["createdAt"] == created["updatedAt"]

    response = client.get("/assets/SSBAS/Mo/2025-26/T01")
    assert response.status_code == 200
    asset = response.json()["asset"]
    assert asset["description"] == "22 inch LED monitor"
    assert asset["createdAt"] == created["createdAt"]


def test_create_requires_identifier(client):
    response = client.post("/assets", json={"description": "No tag"})
    assert response.status_code == 400
    assert "required" in response.json()["detail"]


def test_create_accepts_legacy_asset_code(client):
    create(client, {"assetCode": "LEGACY-1", "assetName": "Projector"})
    assert client.get("/assets/LEGACY-1").status_code == 200


def test_create_duplicate_is_rejected(client):
    create(client, MONITOR)
    response = client.post("/assets", json=MONITOR)
    assert response.status_code == 400
    assert "already exists" in response.json()["detail"]


def test_get_missing_asset(client):
    assert client.get("/assets/SSBAS/Mo/2025-26/T99").status_code == 404


def test_list_assets_with_filters(client):
    create(client, MONITOR)
    create(client, {"assetTagging": "RANDOM-001", "description": "Steel almirah", "status": "Active"})
    create(client, {"assetTagging": "RANDOM-002", "description": "Microscope", "status": "Disposed"})

    assert len(client.get("/assets").json()["assets"]) == 3
    assert len(client.get("/assets", params={"status": "Active"}).json()["assets"]) == 2

    found = client.get("/assets", params={"search": "ALMIRAH"}).json()["assets"]
    assert [a["assetTagging"] for a in found] == ["RANDOM-001"]


def test_export_filtered_assets_as_csv(client):
    create(client, MONITOR)
    create(client, {"assetTagging": "RANDOM-001", "description": "Steel almirah", "department": "Administration"})

    response = client.get("/assets/export", params={"department": "Computer Science"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="assets_export_' in response.headers["content-disposition"]

    df = pd.read_csv(io.StringIO(response.text), dtype=str)
    assert list(df.columns) == list(REGISTER_HEADINGS.values())
    assert len(df) == 1
    row = df.iloc[0]
    assert row["Asset Tagging"] == "SSBAS/Mo/2025-26/T01"
    assert row["Location"] == "Computer Lab A"
    assert row["Original Cost"] == "52000"


def test_export_file_uploads_back(client):
    create(client, MONITOR)
    exported = client.get("/assets/export").content

    assert client.delete("/assets/SSBAS/Mo/2025-26/T01").status_code == 200
    response = client.post(
        "/assets/upload",
        files={"file": ("assets_export.csv", exported, "text/csv")},
    )
    assert response.status_code == 200
    assert response.json()["results"]["created"] == 1
    restored = client.get("/assets/SSBAS/Mo/2025-26/T01").json()["asset"]
    assert restored["description"] == MONITOR["description"]


def test_export_empty_register_has_headings_only(client):
    df = pd.read_csv(io.StringIO(client.get("/assets/export").text))
    assert list(df.columns) == list(REGISTER_HEADINGS.values())
    assert df.empty


def test_update_merges_fields(client):
    created = create(client, MONITOR)

    response = client.put("/assets/SSBAS/Mo/2025-26/T01", json={"location": "Library"})
    assert response.status_code == 200
    asset = response.json()["asset"]
    assert asset["location"] == "Library"
    assert asset["description"] == MONITOR["description"]
    assert asset["createdAt"] == created["createdAt"]


def test_update_renames_asset(client):
    create(client, MONITOR)

    response = client.put("/assets/SSBAS/Mo/2025-26/T01", json={"assetTagging": "SSBAS/Mo/2025-26/T02"})
    assert response.status_code == 200

    assert client.get("/assets/SSBAS/Mo/2025-26/T01").status_code == 404
    moved = client.get("/assets/SSBAS/Mo/2025-26/T02").json()["asset"]
    assert moved["assetTagging"] == "SSBAS/Mo/2025-26/T02"
    assert moved["location"] == MONITOR["location"]


def test_update_rename_trims_new_tag(client):
    create(client, MONITOR)

    response = client.put("/assets/SSBAS/Mo/2025-26/T01", json={"assetTagging": "  SSBAS/Mo/2025-26/T03  "})
    assert response.status_code == 200
    assert response.json()["asset"]["assetTagging"] == "SSBAS/Mo/2025-26/T03"
    assert client.get("/assets/SSBAS/Mo/2025-26/T03").status_code == 200


def test_update_with_blank_tag_keeps_key(client):
    create(client, MONITOR)

    response = client.put("/assets/SSBAS/Mo/2025-26/T01", json={"assetTagging": "   ", "location": "Lab B"})
    assert response.status_code == 200
    asset = client.get("/assets/SSBAS/Mo/2025-26/T01").json()["asset"]
    assert asset["assetTagging"] == "SSBAS/Mo/2025-26/T01"
    assert asset["location"] == "Lab B"


def test_update_rename_conflict(client):
    create(client, MONITOR)
    create(client, {"assetTagging": "SSBAS/Ko/2025-26/T01"})

    response = client.put("/assets/SSBAS/Mo/2025-26/T01", json={"assetTagging": "SSBAS/Ko/2025-26/T01"})
    assert response.status_code == 400
    assert client.get("/assets/SSBAS/Mo/2025-26/T01").status_code == 200


def test_update_missing_asset(client):
    assert client.put("/assets/NOPE-1", json={"location": "Lab"}).status_code == 404


def test_delete_asset(client):
    create(client, MONITOR)
    assert client.delete("/assets/SSBAS/Mo/2025-26/T01").status_code == 200
    assert client.get("/assets/SSBAS/Mo/2025-26/T01").status_code == 404
    assert client.delete("/assets/SSBAS/Mo/2025-26/T01").status_code == 404


def test_bulk_import(client):
    create(client, MONITOR)
    response = client.post("/assets/bulk-import", json={"assets": [
        {"assetTagging": "SSBAS/Mo/2025-26/T01", "location": "Library"},
        {"assetTagging": "SSBAS/Ko/2025-26/T01"},
        {"description": "no tag"},
        "not a record",
    ]})

    assert response.status_code == 200
    results = response.json()["results"]
    assert results["success"] == 2
    assert results["failed"] == 2
    assert results["created"] == 1
    assert results["updated"] == 1
    assert len(results["errors"]) == 2

    assert client.get("/assets/SSBAS/Mo/2025-26/T01").json()["asset"]["location"] == "Library"


def test_bulk_import_duplicate_tags_in_one_batch(client):
    response = client.post("/assets/bulk-import", json={"assets": [
        {"assetTagging": "RANDOM-001", "location": "Office"},
        {"assetTagging": "RANDOM-001", "location": "Store"},
    ]})
    results = response.json()["results"]
    assert results["created"] == 1
    assert results["updated"] == 1
    assert client.get("/assets/RANDOM-001").json()["asset"]["location"] == "Store"


def test_bulk_import_rejects_empty_array(client):
    assert client.post("/assets/bulk-import", json={"assets": []}).status_code == 400
    assert client.post("/assets/bulk-import", json={"items": [{}]}).status_code == 400


def test_upload_spreadsheet(client):
    df = pd.DataFrame({
        "Asset Tagging": ["SSBAS/Mo/2025-26/T01", "SSBAS/Ko/2025-26/T01", "RANDOM-001"],
        "Location": ["Lab A", "Lab A", "Office"],
        "Original Cost": ["52,000", "52,000", "9,000"],
    })
    buffer = io.BytesIO()
    df.to_excel(buffer, index=False)

    response = client.post(
        "/assets/upload",
        files={"file": ("register.xlsx", buffer.getvalue(),
                        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")},
    )

    assert response.status_code == 200, response.text
    assert response.json()["results"]["created"] == 3
    assert client.get("/assets/RANDOM-001").json()["asset"]["originalCost"] == "9000"


def test_upload_rejects_other_file_types(client):
    response = client.post("/assets/upload", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert response.status_code == 400


def test_upload_without_tag_column(client):
    response = client.post(
        "/assets/upload",
        files={"file": ("register.csv", b"Description,Location\nChair,Office\n", "text/csv")},
    )
    assert response.status_code == 400
    assert "Asset Tagging" in response.json()["detail"]


def test_desktop_sets_endpoint(client):
    for code in ("Mo", "Ko", "Ro", "Co"):
        create(client, {"assetTagging": f"SSBAS/{code}/2025-26/T01", "location": "Lab A",
                        "originalCost": 52000})
    create(client, {"assetTagging": "SSBAS/Mo/2024-25/T02", "location": "Library"})
    create(client, {"assetTagging": "RANDOM-001", "description": "Steel almirah"})

    data = client.get("/desktop-sets").json()

    assert [s["displayName"] for s in data["desktopSets"]] == [
        "Desktop Set 1 (2025-26)",
        "Desktop Set 2 (2024-25)",
    ]
    complete, partial = data["desktopSets"]
    assert complete["completeness"] == 100
    assert complete["location"] == "Lab A"
    assert complete["totalCost"] == 52000.0
    assert set(complete["components"]) == {"monitor", "keyboard", "mouse", "cpu"}
    assert partial["completeness"] == 25
    assert set(partial["components"]) == {"monitor"}

    assert [a["assetTagging"] for a in data["ungroupedAssets"]] == ["RANDOM-001"]
    assert data["ungroupedAssets"][0]["description"] == "Steel almirah"


def test_desktop_sets_empty_register(client):
    assert client.get("/desktop-sets").json() == {"desktopSets": [], "ungroupedAssets": []}


def test_dashboard_stats(client):
    create(client, MONITOR)
    create(client, {"assetTagging": "RANDOM-001", "status": "Active", "originalCost": "1,000"})

    stats = client.get("/dashboard/stats").json()["stats"]
    assert stats["totalAssets"] == 2
    assert stats["byStatus"] == {"Active": 2}
    assert stats["totalValue"] == 52001.0
    assert len(stats["recentUpdates"]) == 2
