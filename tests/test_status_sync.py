"""Enquiry <-> quotation status propagation."""
import logging
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import update

from app.core.db import AsyncSessionLocal
from app.models.crm.enquiry_models import Enquiry
from app.models.enums.enquiry_status import EnquiryStatus
from app.models.enums.quotation_status import QuotationStatus
from app.schemas.crm.enquiry_schemas import EnquiryStatusUpdate
from app.services.crm import status_sync_service


RECEIPT = {"date_of_receipt": "2024-05-02"}

ENQUIRY_TO_QUOTATION = [
    ("LIVE", "LIVE"),
    ("BUDGETARY", "BUDGETARY"),
    ("RCD", "RECEIVED"),
    ("WON", "WON"),
    ("LOST", "LOST"),
    ("DEAD", "DEAD"),
]


async def _enquiry_status(client, enquiry_id, status, **fields):
    return await client.patch(
        f"/enquiries/{enquiry_id}/status", json={"status": status, **fields}
    )


async def _quotation_status(client, quotation_id, status, **fields):
    return await client.patch(
        f"/quotations/{quotation_id}/status", json={"status": status, **fields}
    )


async def _get(client, path, unwrap):
    return unwrap(await client.get(path))


# ── Mapping tables ───────────────────────────────────────────────────────────

def test_every_enquiry_status_has_a_quotation_counterpart():
    for status in EnquiryStatus:
        assert status_sync_service.to_quotation_status(status) is not None

    assert status_sync_service.to_quotation_status(EnquiryStatus.RCD) == QuotationStatus.RECEIVED


@pytest.mark.parametrize("status", ["DRAFT", "SUBMITTED", "PENDING"])
def test_workflow_only_quotation_statuses_do_not_map(status):
    assert status_sync_service.to_enquiry_status(QuotationStatus(status)) is None


def test_po_field_values_clear_outside_won_and_received():
    supplied = {"purchase_order_number": "PO-1", "po_value": Decimal("10"), "po_date": date(2024, 1, 1)}

    assert status_sync_service.po_field_values(QuotationStatus.WON, supplied)["purchase_order_number"] == "PO-1"
    assert status_sync_service.po_field_values(EnquiryStatus.LIVE, supplied) == {
        "purchase_order_number": None,
        "po_value": None,
        "po_date": None,
        "date_of_receipt": None,
    }


# ── Enquiry -> quotations ────────────────────────────────────────────────────

@pytest.mark.parametrize("enquiry_status, quotation_status", ENQUIRY_TO_QUOTATION)
async def test_enquiry_status_propagates_to_every_revision(
    client, make_enquiry, make_quotation, unwrap, enquiry_status, quotation_status
):
    enquiry = await make_enquiry()
    first = await make_quotation(enquiry["id"])
    second = await make_quotation(enquiry["id"], revision_number=1)

    # A quotation already moved on independently is overwritten as well
    unwrap(await _quotation_status(client, second["id"], "DEAD"))

    extra = RECEIPT if enquiry_status == "RCD" else {}
    updated = unwrap(await _enquiry_status(client, enquiry["id"], enquiry_status, **extra))
    assert updated["status"] == enquiry_status

    for quotation in (first, second):
        current = await _get(client, f"/quotations/{quotation['id']}", unwrap)
        assert current["status"] == quotation_status


async def test_lost_enquiry_marks_quotation_lost(client, make_enquiry, make_quotation, unwrap):
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])
    assert quotation["status"] == "LIVE"

    updated = unwrap(await _enquiry_status(client, enquiry["id"], "LOST"))

    assert updated["status"] == "LOST"
    current = await _get(client, f"/quotations/{quotation['id']}", unwrap)
    assert current["status"] == "LOST"


async def test_enquiry_without_quotations_still_updates(client, make_enquiry, unwrap):
    enquiry = await make_enquiry()

    updated = unwrap(await _enquiry_status(client, enquiry["id"], "BUDGETARY"))

    assert updated["status"] == "BUDGETARY"


async def test_enquiry_propagation_copies_po_fields_and_clears_lost_reason(
    client, make_enquiry, make_quotation, unwrap
):
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])
    unwrap(await _quotation_status(client, quotation["id"], "LOST", lost_reason="PRICE"))

    unwrap(await _enquiry_status(
        client,
        enquiry["id"],
        "WON",
        purchase_order_number="PO-77",
        po_value="25000",
        po_date="2024-06-01",
    ))

    current = await _get(client, f"/quotations/{quotation['id']}", unwrap)
    assert current["status"] == "WON"
    assert current["lost_reason"] is None
    assert current["purchase_order_number"] == "PO-77"
    assert Decimal(current["po_value"]) == Decimal("25000")
    assert current["po_date"] == "2024-06-01"


async def test_rcd_enquiry_stores_receipt_number_as_oa_number(
    client, make_enquiry, make_quotation, unwrap
):
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])

    updated = unwrap(await _enquiry_status(
        client, enquiry["id"], "RCD", date_of_receipt="2024-05-02", receipt_number="OA-991",
    ))

    assert updated["status"] == "RCD"
    assert updated["oa_number"] == "OA-991"
    assert updated["date_of_receipt"] == "2024-05-02"

    current = await _get(client, f"/quotations/{quotation['id']}", unwrap)
    assert current["status"] == "RECEIVED"
    assert current["date_of_receipt"] == "2024-05-02"


# ── Quotation -> enquiry ─────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "quotation_status, enquiry_status",
    [("LIVE", "LIVE"), ("BUDGETARY", "BUDGETARY"), ("WON", "WON"),
     ("LOST", "LOST"), ("DEAD", "DEAD"), ("RECEIVED", "RCD")],
)
async def test_quotation_status_propagates_to_enquiry(
    client, make_enquiry, make_quotation, unwrap, quotation_status, enquiry_status
):
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])

    extra = RECEIPT if quotation_status == "RECEIVED" else {}
    updated = unwrap(await _quotation_status(client, quotation["id"], quotation_status, **extra))

    assert updated["status"] == quotation_status
    assert updated["enquiry_status"] == enquiry_status
    current = await _get(client, f"/enquiries/{enquiry['id']}", unwrap)
    assert current["status"] == enquiry_status


@pytest.mark.parametrize("quotation_status", ["LIVE", "WON", "LOST", "DEAD", "BUDGETARY"])
async def test_rcd_enquiry_is_never_overwritten(
    client, make_enquiry, make_quotation, unwrap, quotation_status
):
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])
    unwrap(await _enquiry_status(client, enquiry["id"], "RCD", **RECEIPT))

    updated = unwrap(await _quotation_status(client, quotation["id"], quotation_status))

    assert updated["status"] == quotation_status
    current = await _get(client, f"/enquiries/{enquiry['id']}", unwrap)
    assert current["status"] == "RCD"
    assert current["date_of_receipt"] == "2024-05-02"


async def test_won_quotation_keeps_enquiry_rcd(client, make_enquiry, make_quotation, unwrap):
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])
    unwrap(await _enquiry_status(client, enquiry["id"], "RCD", **RECEIPT))

    updated = unwrap(await _quotation_status(client, quotation["id"], "WON"))

    assert updated["status"] == "WON"
    assert updated["enquiry_status"] == "RCD"


@pytest.mark.parametrize("status", ["DRAFT", "SUBMITTED", "PENDING"])
async def test_workflow_statuses_stay_on_the_quotation(
    client, make_enquiry, make_quotation, unwrap, status
):
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])
    unwrap(await _enquiry_status(client, enquiry["id"], "BUDGETARY"))

    updated = unwrap(await _quotation_status(client, quotation["id"], status))

    assert updated["status"] == status
    current = await _get(client, f"/enquiries/{enquiry['id']}", unwrap)
    assert current["status"] == "BUDGETARY"


async def test_quotation_po_fields_reach_the_enquiry(client, make_enquiry, make_quotation, unwrap):
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])

    unwrap(await _quotation_status(
        client,
        quotation["id"],
        "WON",
        purchase_order_number="PO-5",
        po_value="999.50",
        po_date="2024-07-07",
    ))

    current = await _get(client, f"/enquiries/{enquiry['id']}", unwrap)
    assert current["status"] == "WON"
    assert current["purchase_order_number"] == "PO-5"
    assert Decimal(current["po_value"]) == Decimal("999.50")
    assert current["po_date"] == "2024-07-07"


# ── Field contract ───────────────────────────────────────────────────────────

async def test_won_round_trip_returns_exactly_the_supplied_po_fields(
    client, make_enquiry, make_quotation, unwrap
):
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])
    unwrap(await _quotation_status(
        client, quotation["id"], "WON",
        purchase_order_number="OLD-PO", po_value="1", po_date="2023-01-01",
    ))
    unwrap(await _quotation_status(client, quotation["id"], "LIVE"))

    unwrap(await _quotation_status(
        client, quotation["id"], "WON",
        purchase_order_number="PO-2024-01", po_value="15000.00", po_date="2024-03-15",
    ))

    current = await _get(client, f"/quotations/{quotation['id']}", unwrap)
    assert current["purchase_order_number"] == "PO-2024-01"
    assert Decimal(current["po_value"]) == Decimal("15000.00")
    assert current["po_date"] == "2024-03-15"


async def test_won_without_po_fields_nulls_previous_values(
    client, make_enquiry, make_quotation, unwrap
):
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])
    unwrap(await _quotation_status(
        client, quotation["id"], "WON", purchase_order_number="PO-1", po_value="10",
    ))

    unwrap(await _quotation_status(client, quotation["id"], "WON", po_date="2024-01-09"))

    current = await _get(client, f"/quotations/{quotation['id']}", unwrap)
    assert current["purchase_order_number"] is None
    assert current["po_value"] is None
    assert current["po_date"] == "2024-01-09"


@pytest.mark.parametrize("next_status", ["LIVE", "LOST", "DEAD", "BUDGETARY"])
async def test_leaving_won_clears_po_fields(
    client, make_enquiry, make_quotation, unwrap, next_status
):
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])
    unwrap(await _enquiry_status(
        client, enquiry["id"], "WON",
        purchase_order_number="PO-9", po_value="500", po_date="2024-02-02",
    ))

    unwrap(await _enquiry_status(client, enquiry["id"], next_status))

    for path in (f"/enquiries/{enquiry['id']}", f"/quotations/{quotation['id']}"):
        current = await _get(client, path, unwrap)
        assert current["purchase_order_number"] is None
        assert current["po_value"] is None
        assert current["po_date"] is None
        assert current["date_of_receipt"] is None


async def test_leaving_received_clears_receipt_date(client, make_enquiry, make_quotation, unwrap):
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])
    unwrap(await _quotation_status(client, quotation["id"], "RECEIVED", **RECEIPT))

    updated = unwrap(await _quotation_status(client, quotation["id"], "DEAD"))

    assert updated["date_of_receipt"] is None


async def test_lost_reason_only_survives_on_lost(client, make_enquiry, make_quotation, unwrap):
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])

    first = unwrap(await _quotation_status(client, quotation["id"], "WON"))
    assert first["lost_reason"] is None

    lost = unwrap(await _quotation_status(client, quotation["id"], "LOST", lost_reason="PRICE"))
    assert lost["status"] == "LOST"
    assert lost["lost_reason"] == "PRICE"

    final = unwrap(await _quotation_status(client, quotation["id"], "WON"))
    assert final["status"] == "WON"
    assert final["lost_reason"] is None


async def test_lost_reason_ignored_for_other_statuses(client, make_enquiry, make_quotation, unwrap):
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])

    updated = unwrap(await _quotation_status(client, quotation["id"], "DEAD", lost_reason="PRICE"))

    assert updated["lost_reason"] is None


@pytest.mark.parametrize("path_kind, status", [("enquiries", "RCD"), ("quotations", "RECEIVED")])
async def test_receipt_date_required(client, make_enquiry, make_quotation, path_kind, status):
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])
    target = enquiry["id"] if path_kind == "enquiries" else quotation["id"]

    response = await client.patch(f"/{path_kind}/{target}/status", json={"status": status})

    assert response.status_code == 422
    body = response.json()
    assert body["error_code"] == "VALIDATION_ERROR"
    assert body["details"][0]["field"] == "date_of_receipt"


async def test_blank_receipt_date_counts_as_missing(client, make_enquiry):
    enquiry = await make_enquiry()

    response = await _enquiry_status(client, enquiry["id"], "RCD", date_of_receipt="")

    assert response.status_code == 422
    assert response.json()["details"][0]["field"] == "date_of_receipt"


# ── Failures ─────────────────────────────────────────────────────────────────

async def test_unknown_enquiry_is_not_found(client, database):
    response = await _enquiry_status(client, 999, "WON")

    assert response.status_code == 404
    assert response.json()["error_code"] == "ENQUIRY_NOT_FOUND"


async def test_unknown_quotation_is_not_found(client, database):
    response = await _quotation_status(client, "0b6c3f8e-2d1a-4c7b-9e5f-123456789abc", "WON")

    assert response.status_code == 404
    assert response.json()["error_code"] == "QUOTATION_NOT_FOUND"


async def test_malformed_quotation_id_is_rejected_before_lookup(client, database):
    response = await _quotation_status(client, "not-a-uuid", "WON")

    assert response.status_code == 422
    body = response.json()
    assert body["error_code"] == "VALIDATION_ERROR"
    assert body["details"][0]["field"] == "quotation_id"
    assert "valid UUID" in body["details"][0]["message"]


@pytest.mark.parametrize("status", ["won", "NEW", "CLOSED", ""])
async def test_status_outside_the_enum_is_rejected(client, make_enquiry, status):
    enquiry = await make_enquiry()

    response = await _enquiry_status(client, enquiry["id"], status)

    assert response.status_code == 422
    assert any(d["field"] == "status" for d in response.json()["details"])


async def test_unknown_lost_reason_is_rejected(client, make_enquiry, make_quotation):
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])

    response = await _quotation_status(client, quotation["id"], "LOST", lost_reason="TOO_EXPENSIVE")

    assert response.status_code == 422
    assert response.json()["details"][0]["field"] == "lost_reason"


async def test_failure_after_propagation_rolls_back_both_sides(
    client, make_enquiry, make_quotation, unwrap, monkeypatch
):
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])

    async def broken_emit(*args, **kwargs):
        raise RuntimeError("audit store unavailable")

    monkeypatch.setattr(status_sync_service, "emit_activity", broken_emit)

    response = await _enquiry_status(client, enquiry["id"], "WON", purchase_order_number="PO-X")
    assert response.status_code == 500
    assert response.json()["message"] == "Something went wrong. Please try again."

    assert (await _get(client, f"/enquiries/{enquiry['id']}", unwrap))["status"] == "LIVE"
    current = await _get(client, f"/quotations/{quotation['id']}", unwrap)
    assert current["status"] == "LIVE"
    assert current["purchase_order_number"] is None


async def test_quotation_side_failure_rolls_back_both_sides(
    client, make_enquiry, make_quotation, unwrap, monkeypatch
):
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])

    async def broken_emit(*args, **kwargs):
        raise RuntimeError("audit store unavailable")

    monkeypatch.setattr(status_sync_service, "emit_activity", broken_emit)

    response = await _quotation_status(client, quotation["id"], "DEAD")
    assert response.status_code == 500

    assert (await _get(client, f"/quotations/{quotation['id']}", unwrap))["status"] == "LIVE"
    assert (await _get(client, f"/enquiries/{enquiry['id']}", unwrap))["status"] == "LIVE"


async def test_missing_enquiry_skips_propagation_but_commits(
    client, make_enquiry, make_quotation, unwrap, monkeypatch, caplog
):
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])

    async def no_enquiry(db, enquiry_id):
        return None

    monkeypatch.setattr(status_sync_service, "_get_enquiry_for_propagation", no_enquiry)

    with caplog.at_level(logging.WARNING, logger="crm.status_sync"):
        updated = unwrap(await _quotation_status(client, quotation["id"], "WON"))

    assert updated["status"] == "WON"
    assert "propagation skipped" in caplog.text
    assert (await _get(client, f"/enquiries/{enquiry['id']}", unwrap))["status"] == "LIVE"


# ── Idempotence ──────────────────────────────────────────────────────────────

async def test_repeating_a_status_update_is_a_no_op(client, make_enquiry, make_quotation, unwrap):
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])
    fields = {"purchase_order_number": "PO-1", "po_value": "100", "po_date": "2024-01-01"}

    first = unwrap(await _enquiry_status(client, enquiry["id"], "WON", **fields))
    second = unwrap(await _enquiry_status(client, enquiry["id"], "WON", **fields))

    for key in ("status", "purchase_order_number", "po_value", "po_date", "date_of_receipt"):
        assert first[key] == second[key]

    activities = unwrap(await client.get("/activities/", params={"code": "UPDATE_ENQUIRY_STATUS"}))
    assert activities["total"] == 1

    current = await _get(client, f"/quotations/{quotation['id']}", unwrap)
    assert current["status"] == "WON"
    assert current["purchase_order_number"] == "PO-1"


async def test_repeating_a_quotation_status_update_logs_once(
    client, make_enquiry, make_quotation, unwrap
):
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])

    unwrap(await _quotation_status(client, quotation["id"], "LOST", lost_reason="DELIVERY_SCHEDULE"))
    unwrap(await _quotation_status(client, quotation["id"], "LOST", lost_reason="DELIVERY_SCHEDULE"))

    activities = unwrap(await client.get("/activities/", params={"code": "UPDATE_QUOTATION_STATUS"}))
    assert activities["total"] == 1
    assert "enquiry → LOST" in activities["items"][0]["message"]


async def test_status_change_is_attributed_to_the_actor(client, make_enquiry, unwrap):
    enquiry = await make_enquiry()

    unwrap(await client.patch(
        f"/enquiries/{enquiry['id']}/status",
        json={"status": "DEAD"},
        headers={"X-Actor": "priya"},
    ))

    activities = unwrap(await client.get("/activities/", params={"actor": "priya"}))
    assert activities["total"] == 1
    assert activities["items"][0]["message"].startswith("priya changed enquiry")


# ── Concurrency ──────────────────────────────────────────────────────────────

async def test_enquiry_turning_rcd_mid_request_is_not_overwritten(
    client, make_enquiry, make_quotation, unwrap, monkeypatch
):
    """
    Another request commits RCD on the enquiry after this request has read
    it (still LIVE) but before the propagation write. The guarded UPDATE
    sees the committed RCD and leaves it alone; the quotation still commits.
    """
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])

    read_enquiry = status_sync_service._get_enquiry_for_propagation

    async def racing_read(db, enquiry_id):
        stale = await read_enquiry(db, enquiry_id)
        assert stale.status == EnquiryStatus.LIVE

        async with AsyncSessionLocal() as other:
            await other.execute(
                update(Enquiry)
                .where(Enquiry.id == enquiry_id)
                .values(status=EnquiryStatus.RCD, date_of_receipt=date(2024, 5, 2))
            )
            await other.commit()
        return stale

    monkeypatch.setattr(status_sync_service, "_get_enquiry_for_propagation", racing_read)

    updated = unwrap(await _quotation_status(client, quotation["id"], "WON"))

    assert updated["status"] == "WON"
    assert updated["enquiry_status"] == "RCD"
    current = await _get(client, f"/enquiries/{enquiry['id']}", unwrap)
    assert current["status"] == "RCD"
    assert current["date_of_receipt"] == "2024-05-02"


async def test_interleaved_enquiry_and_quotation_updates_last_writer_wins(
    client, make_enquiry, make_quotation, unwrap, monkeypatch
):
    """
    There is no lock between the two directions. An enquiry-side DEAD that
    commits after this quotation request has read its rows is overwritten:
    the quotation ends WON and the enquiry is pulled to WON. Both requests
    succeed and both are in the activity log.
    """
    enquiry = await make_enquiry()
    quotation = await make_quotation(enquiry["id"])

    read_enquiry = status_sync_service._get_enquiry_for_propagation

    async def racing_read(db, enquiry_id):
        stale = await read_enquiry(db, enquiry_id)

        async with AsyncSessionLocal() as other:
            await status_sync_service.update_enquiry_status(
                other, enquiry_id, EnquiryStatusUpdate(status=EnquiryStatus.DEAD), "other-user"
            )
        return stale

    monkeypatch.setattr(status_sync_service, "_get_enquiry_for_propagation", racing_read)

    updated = unwrap(await _quotation_status(client, quotation["id"], "WON"))

    assert updated["status"] == "WON"
    assert updated["enquiry_status"] == "WON"
    current = await _get(client, f"/enquiries/{enquiry['id']}", unwrap)
    assert current["status"] == "WON"

    enquiry_side = unwrap(await client.get("/activities/", params={"code": "UPDATE_ENQUIRY_STATUS"}))
    quotation_side = unwrap(await client.get("/activities/", params={"code": "UPDATE_QUOTATION_STATUS"}))
    assert enquiry_side["total"] == 1
    assert "LIVE → DEAD" in enquiry_side["items"][0]["message"]
    assert quotation_side["total"] == 1
    assert "LIVE → WON" in quotation_side["items"][0]["message"]
