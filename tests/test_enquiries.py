"""Enquiry CRUD endpoints."""
import pytest


async def test_create_enquiry_defaults_to_live(make_enquiry):
    enquiry = await make_enquiry(subject="Rupture discs for reactor")

    assert enquiry["status"] == "LIVE"
    assert enquiry["subject"] == "Rupture discs for reactor"
    assert enquiry["purchase_order_number"] is None


async def test_create_enquiry_for_company_office(client, make_company, make_enquiry):
    company = await make_company()
    office_id = company["offices"][0]["id"]

    enquiry = await make_enquiry(company_id=company["id"], location_id=office_id)

    assert enquiry["company_name"] == company["name"]
    assert enquiry["office_id"] == office_id
    assert enquiry["office_name"] == "Head Office"
    assert enquiry["plant_id"] is None


async def test_create_enquiry_for_company_plant(make_company, make_enquiry):
    company = await make_company()
    plant_id = company["plants"][0]["id"]

    enquiry = await make_enquiry(company_id=company["id"], location_id=plant_id)

    assert enquiry["plant_id"] == plant_id
    assert enquiry["plant_name"] == "Plant 1"
    assert enquiry["office_id"] is None


async def test_location_of_another_company_is_rejected(client, make_company):
    company = await make_company()
    other = await make_company()

    response = await client.post(
        "/enquiries/",
        json={"company_id": company["id"], "location_id": other["offices"][0]["id"]},
    )

    assert response.status_code == 404
    assert response.json()["error_code"] == "LOCATION_NOT_FOUND"


async def test_unknown_company_is_rejected(client, database):
    response = await client.post(
        "/enquiries/",
        json={"company_id": "123e4567-e89b-42d3-a456-426614174000"},
    )

    assert response.status_code == 404
    assert response.json()["error_code"] == "COMPANY_NOT_FOUND"


async def test_malformed_company_id_is_a_field_error(client, database):
    response = await client.post("/enquiries/", json={"company_id": "company-1"})

    assert response.status_code == 422
    body = response.json()
    assert body["error_code"] == "VALIDATION_ERROR"
    assert body["details"][0]["field"] == "company_id"
    assert "valid UUID" in body["details"][0]["message"]


async def test_empty_strings_are_stored_as_null(make_enquiry):
    enquiry = await make_enquiry(subject="Valves", notes="", region="  ", priority="")

    assert enquiry["notes"] is None
    assert enquiry["region"] is None
    assert enquiry["priority"] is None


@pytest.mark.parametrize(
    "field, value",
    [("priority", "Critical"), ("source", "Fax"), ("design_required", "custom"), ("customer_type", "EXISTING")],
)
async def test_enum_fields_are_closed_sets(client, database, field, value):
    response = await client.post("/enquiries/", json={field: value})

    assert response.status_code == 422
    assert response.json()["details"][0]["field"] == field


async def test_negative_block_count_is_rejected(client, database):
    response = await client.post("/enquiries/", json={"number_of_blocks": -1})

    assert response.status_code == 422
    assert response.json()["details"][0]["field"] == "number_of_blocks"


async def test_get_unknown_enquiry(client, database):
    response = await client.get("/enquiries/4242")

    assert response.status_code == 404
    assert response.json()["error_code"] == "ENQUIRY_NOT_FOUND"


async def test_update_leaves_absent_fields_and_clears_nulls(client, make_enquiry, unwrap):
    enquiry = await make_enquiry(subject="Thermowells", notes="call back", region="West")

    updated = unwrap(await client.patch(
        f"/enquiries/{enquiry['id']}",
        json={"notes": None, "timeline": "Q3"},
    ))

    assert updated["notes"] is None
    assert updated["timeline"] == "Q3"
    assert updated["region"] == "West"
    assert updated["subject"] == "Thermowells"


async def test_update_ignores_blank_values(client, make_enquiry, unwrap):
    enquiry = await make_enquiry(region="West")

    updated = unwrap(await client.patch(f"/enquiries/{enquiry['id']}", json={"region": ""}))

    assert updated["region"] == "West"


async def test_general_edit_cannot_change_status(client, make_enquiry, unwrap):
    enquiry = await make_enquiry()

    updated = unwrap(await client.patch(
        f"/enquiries/{enquiry['id']}",
        json={"status": "WON", "purchase_order_number": "PO-1"},
    ))

    assert updated["status"] == "LIVE"
    assert updated["purchase_order_number"] is None


async def test_update_records_changes_in_activity_log(client, make_enquiry, unwrap):
    enquiry = await make_enquiry(subject="Old")

    unwrap(await client.patch(f"/enquiries/{enquiry['id']}", json={"subject": "New"}))
    unwrap(await client.patch(f"/enquiries/{enquiry['id']}", json={"subject": "New"}))

    activities = unwrap(await client.get("/activities/", params={"code": "UPDATE_ENQUIRY"}))
    assert activities["total"] == 1
    assert "subject: Old → New" in activities["items"][0]["message"]


async def test_list_filters_by_status_and_company(client, make_company, make_enquiry, unwrap):
    company = await make_company()
    await make_enquiry(company_id=company["id"])
    await make_enquiry(company_id=company["id"], status="BUDGETARY")
    await make_enquiry()

    by_company = unwrap(await client.get("/enquiries/", params={"company_id": company["id"]}))
    assert by_company["total"] == 2
    assert {i["company_name"] for i in by_company["items"]} == {company["name"]}

    budgetary = unwrap(await client.get("/enquiries/", params={"status": "BUDGETARY"}))
    assert budgetary["total"] == 1


async def test_list_paginates(client, make_enquiry, unwrap):
    for _ in range(3):
        await make_enquiry()

    page = unwrap(await client.get("/enquiries/", params={"page": 2, "page_size": 2}))

    assert page["total"] == 3
    assert len(page["items"]) == 1


async def test_stats_count_each_status(client, make_enquiry, unwrap):
    await make_enquiry()
    await make_enquiry()
    dead = await make_enquiry()
    unwrap(await client.patch(f"/enquiries/{dead['id']}/status", json={"status": "DEAD"}))

    stats = unwrap(await client.get("/enquiries/stats"))

    assert stats["total"] == 3
    assert stats["live"] == 2
    assert stats["dead"] == 1
    assert stats["rcd"] == 0


async def test_delete_removes_quotations_and_unlinks_communications(
    client, make_company, make_enquiry, make_quotation, unwrap
):
    company = await make_company()
    enquiry = await make_enquiry(company_id=company["id"])
    quotation = await make_quotation(enquiry["id"])
    communication = unwrap(await client.post("/communications/", json={
        "date": "2024-04-01",
        "company_id": company["id"],
        "enquiry_id": enquiry["id"],
        "subject": "Site visit",
        "type": "PLANT_VISIT",
    }))

    deleted = unwrap(await client.delete(f"/enquiries/{enquiry['id']}"))
    assert deleted["quotations_deleted"] == 1

    assert (await client.get(f"/enquiries/{enquiry['id']}")).status_code == 404
    assert (await client.get(f"/quotations/{quotation['id']}")).status_code == 404

    kept = unwrap(await client.get(f"/communications/{communication['id']}"))
    assert kept["enquiry_id"] is None


async def test_delete_unknown_enquiry(client, database):
    response = await client.delete("/enquiries/77")

    assert response.status_code == 404


async def test_malformed_company_filter_is_a_field_error(client, database):
    response = await client.get("/enquiries/", params={"company_id": "zzz"})

    assert response.status_code == 422
    assert response.json()["details"][0]["field"] == "company_id"


async def test_blank_company_filter_is_ignored(client, make_enquiry, unwrap):
    await make_enquiry()

    listed = unwrap(await client.get("/enquiries/", params={"company_id": ""}))

    assert listed["total"] == 1


async def test_create_as_rcd_needs_a_receipt_date(client, database):
    response = await client.post("/enquiries/", json={"subject": "Blocks", "status": "RCD"})

    assert response.status_code == 422
    assert response.json()["details"][0]["field"] == "date_of_receipt"


async def test_create_as_rcd_keeps_receipt_and_po(make_enquiry):
    enquiry = await make_enquiry(
        status="RCD", date_of_receipt="2024-06-01", purchase_order_number="PO-77"
    )

    assert enquiry["status"] == "RCD"
    assert enquiry["date_of_receipt"] == "2024-06-01"
    assert enquiry["purchase_order_number"] == "PO-77"
    assert enquiry["po_value"] is None


async def test_create_as_live_drops_po_data(make_enquiry):
    enquiry = await make_enquiry(
        status="LIVE", date_of_receipt="2024-06-01", purchase_order_number="PO-78"
    )

    assert enquiry["date_of_receipt"] is None
    assert enquiry["purchase_order_number"] is None


async def test_general_edit_cannot_set_receipt_date(client, make_enquiry, unwrap):
    enquiry = await make_enquiry()

    updated = unwrap(await client.patch(
        f"/enquiries/{enquiry['id']}", json={"date_of_receipt": "2024-01-01", "region": "East"}
    ))

    assert updated["status"] == "LIVE"
    assert updated["date_of_receipt"] is None
    assert updated["region"] == "East"
