"""Companies with their offices, plants and contacts."""


async def test_create_company_with_locations(make_company):
    company = await make_company(
        name="Graphite Works",
        offices=[
            {"name": "Mumbai HQ", "contacts": [{"name": "Anil", "is_primary": True}]},
            {"name": "Delhi Branch"},
        ],
        plants=[{"name": "Taloja", "contacts": [{"name": "Sunita", "phone_number": "+91 90000 00000"}]}],
        po_thermowells=True,
    )

    assert company["name"] == "Graphite Works"
    assert company["po_thermowells"] is True
    assert company["po_rupture_discs"] is False

    offices = {o["name"]: o for o in company["offices"]}
    assert offices["Mumbai HQ"]["is_head_office"] is True
    assert offices["Delhi Branch"]["is_head_office"] is False
    assert offices["Mumbai HQ"]["contact_persons"][0]["name"] == "Anil"

    plant = company["plants"][0]
    assert plant["plant_type"] == "Manufacturing"
    assert plant["contact_persons"][0]["plant_id"] == plant["id"]
    assert len(company["contact_persons"]) == 2


async def test_company_needs_an_office(client, database):
    response = await client.post("/companies/", json={"name": "No Office Ltd", "offices": []})

    assert response.status_code == 422
    assert response.json()["details"][0]["field"] == "offices"


async def test_duplicate_company_name(client, make_company):
    await make_company(name="Twin Corp")

    response = await client.post("/companies/", json={"name": "Twin Corp", "offices": [{"name": "HQ"}]})

    assert response.status_code == 409
    assert response.json()["error_code"] == "COMPANY_NAME_EXISTS"


async def test_invalid_contact_email(client, database):
    response = await client.post("/companies/", json={
        "name": "Mail Corp",
        "offices": [{"name": "HQ", "contacts": [{"name": "X", "email_id": "not-an-email"}]}],
    })

    assert response.status_code == 422
    assert response.json()["details"][0]["field"] == "offices.0.contacts.0.email_id"


async def test_blank_contact_email_is_accepted(make_company):
    company = await make_company(offices=[{"name": "HQ", "contacts": [{"name": "Y", "email_id": ""}]}])

    assert company["offices"][0]["contact_persons"][0]["email_id"] is None


async def test_list_companies_with_counts(client, make_company, unwrap):
    await make_company(name="Alpha Seals")
    await make_company(name="Beta Pumps")

    listed = unwrap(await client.get("/companies/", params={"search": "alpha"}))

    assert listed["total"] == 1
    item = listed["items"][0]
    assert item["name"] == "Alpha Seals"
    assert item["offices_count"] == 1
    assert item["plants_count"] == 1
    assert item["contacts_count"] == 1


async def test_get_unknown_company(client, database):
    response = await client.get("/companies/123e4567-e89b-42d3-a456-426614174000")

    assert response.status_code == 404
    assert response.json()["error_code"] == "COMPANY_NOT_FOUND"


async def test_update_company(client, make_company, unwrap):
    company = await make_company(problems_faced="Leaks")

    updated = unwrap(await client.patch(f"/companies/{company['id']}", json={
        "industry": "Pharma",
        "po_heat_exchanger": True,
        "problems_faced": None,
    }))

    assert updated["industry"] == "Pharma"
    assert updated["po_heat_exchanger"] is True
    assert updated["problems_faced"] is None
    assert updated["name"] == company["name"]


async def test_rename_to_existing_name_conflicts(client, make_company):
    await make_company(name="Taken Name")
    company = await make_company(name="Free Name")

    response = await client.patch(f"/companies/{company['id']}", json={"name": "Taken Name"})

    assert response.status_code == 409


async def test_delete_company_with_enquiries_is_refused(client, make_company, make_enquiry):
    company = await make_company()
    await make_enquiry(company_id=company["id"])

    response = await client.delete(f"/companies/{company['id']}")

    assert response.status_code == 409
    assert response.json()["error_code"] == "COMPANY_HAS_ENQUIRIES"


async def test_delete_company_removes_dependents(client, make_company, unwrap):
    company = await make_company()
    contact_id = company["offices"][0]["contact_persons"][0]["id"]
    unwrap(await client.post("/communications/", json={
        "date": "2024-02-01",
        "company_id": company["id"],
        "contact_id": contact_id,
        "subject": "Intro call",
        "type": "TELEPHONIC",
    }))

    unwrap(await client.delete(f"/companies/{company['id']}"))

    assert (await client.get(f"/companies/{company['id']}")).status_code == 404
    remaining = unwrap(await client.get("/communications/", params={"company_id": company["id"]}))
    assert remaining["total"] == 0


# ── Contacts ─────────────────────────────────────────────────────────────────

async def test_add_contact_to_plant(client, make_company, unwrap):
    company = await make_company()
    plant_id = company["plants"][0]["id"]

    contact = unwrap(await client.post(f"/companies/{company['id']}/contacts", json={
        "name": "Meera", "designation": "Plant Head", "plant_id": plant_id,
    }))

    assert contact["plant_id"] == plant_id
    assert contact["office_id"] is None

    refreshed = unwrap(await client.get(f"/companies/{company['id']}"))
    assert len(refreshed["plants"][0]["contact_persons"]) == 1


async def test_contact_location_must_belong_to_company(client, make_company):
    company = await make_company()
    other = await make_company()

    response = await client.post(f"/companies/{company['id']}/contacts", json={
        "name": "Stray", "office_id": other["offices"][0]["id"],
    })

    assert response.status_code == 404
    assert response.json()["error_code"] == "LOCATION_NOT_FOUND"


async def test_contact_location_must_be_a_uuid(client, make_company):
    company = await make_company()

    response = await client.post(f"/companies/{company['id']}/contacts", json={"name": "Z", "plant_id": "plant-1"})

    assert response.status_code == 422
    assert response.json()["details"][0]["field"] == "plant_id"


async def test_update_and_delete_contact(client, make_company, unwrap):
    company = await make_company()
    contact_id = company["offices"][0]["contact_persons"][0]["id"]

    updated = unwrap(await client.patch(f"/companies/contacts/{contact_id}", json={
        "designation": "Purchase Manager", "is_primary": False,
    }))
    assert updated["designation"] == "Purchase Manager"
    assert updated["is_primary"] is False

    unwrap(await client.delete(f"/companies/contacts/{contact_id}"))

    refreshed = unwrap(await client.get(f"/companies/{company['id']}"))
    assert refreshed["offices"][0]["contact_persons"] == []


async def test_unknown_contact(client, database):
    response = await client.patch(
        "/companies/contacts/123e4567-e89b-42d3-a456-426614174000", json={"name": "Q"}
    )

    assert response.status_code == 404
    assert response.json()["error_code"] == "CONTACT_NOT_FOUND"


async def test_malformed_company_and_contact_ids(client, database):
    company = await client.get("/companies/acme")
    assert company.status_code == 422
    assert company.json()["details"][0]["field"] == "company_id"

    contact = await client.delete("/companies/contacts/7")
    assert contact.status_code == 422
    assert contact.json()["details"][0]["field"] == "contact_id"
