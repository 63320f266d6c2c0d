import pytest
import asyncio

from conftest import STYLIST_ID, availability_document, time_range

test_booking = {
    "stylistId": STYLIST_ID,
    "clientId": "client-jordan",
    "dateTime": "2026-10-26T10:00:00+00:00",
    "duration": 60,
    "clientName": "Jordan",
    "serviceIds": ["svc-cut"],
    "serviceName": "Haircut",
    "price": "45.00",
    "notes": "Test booking for the booking flow"
}


@pytest.mark.asyncio
async def test_booking_flow(client, store):
    """
    Test the complete booking flow:
    1. Read the stylist's schedule
    2. Pick an available date and slot
    3. Book it
    4. Check the slot is gone and a second booking is refused
    """
    # 1. Schedule
    response = await client.get(f"/api/v1/availability/{STYLIST_ID}")
    assert response.status_code == 200
    schedule = response.json()
    assert schedule["stylistId"] == STYLIST_ID
    assert schedule["weeklySchedule"]["monday"]["enabled"] is True
    assert schedule["weeklySchedule"]["wednesday"]["enabled"] is False

    # 2. Dates and slots
    response = await client.get(f"/api/v1/availability/{STYLIST_ID}/dates", params={"days": 7})
    assert response.status_code == 200
    assert response.json() == ["2026-10-26", "2026-10-27"]

    response = await client.get(
        f"/api/v1/availability/{STYLIST_ID}/slots",
        params={"date": "2026-10-26", "duration": 60},
    )
    assert response.status_code == 200
    slots = response.json()
    assert [s["startTime"] for s in slots] == ["09:00", "10:00", "11:00"]
    assert slots[1]["displayTime"] == "10:00 AM"

    response = await client.get(
        f"/api/v1/availability/{STYLIST_ID}/check",
        params={"dateTime": "2026-10-26T10:00:00+00:00", "duration": 60},
    )
    assert response.json() == {"available": True, "conflictReason": None}

    # 3. Book
    response = await client.post("/api/v1/bookings", json=test_booking)
    assert response.status_code == 201
    appointment_id = response.json()["appointmentId"]
    assert store.appointments[appointment_id]["status"] == "Scheduled"

    # 4. Slot gone, second booking refused
    response = await client.get(
        f"/api/v1/availability/{STYLIST_ID}/slots",
        params={"date": "2026-10-26", "duration": 60},
    )
    assert [s["startTime"] for s in response.json()] == ["09:00", "11:00"]

    response = await client.get(
        f"/api/v1/availability/{STYLIST_ID}/check",
        params={"dateTime": "2026-10-26T10:30:00+00:00", "duration": 30},
    )
    assert response.json()["available"] is False

    response = await client.post(
        "/api/v1/bookings",
        json={**test_booking, "clientId": "client-riley", "dateTime": "2026-10-26T10:30:00+00:00", "duration": 30},
    )
    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["code"] == "DOUBLE_BOOKING"
    assert detail["retryable"] is False
    assert "already booked" in detail["message"]

    # back-to-back is fine
    response = await client.post(
        "/api/v1/bookings",
        json={**test_booking, "clientId": "client-riley", "dateTime": "2026-10-26T11:00:00+00:00", "duration": 30},
    )
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_concurrent_booking_requests(client, store):
    requests = [
        client.post("/api/v1/bookings", json={**test_booking, "clientId": f"client-{n}"})
        for n in range(5)
    ]

    responses = await asyncio.gather(*requests)

    codes = sorted(r.status_code for r in responses)
    assert codes == [201, 409, 409, 409, 409]
    assert len(store.appointments) == 1


@pytest.mark.asyncio
async def test_unknown_stylist(client):
    response = await client.get("/api/v1/availability/nobody/slots", params={"date": "2026-10-26", "duration": 60})
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "SCHEDULE_UNAVAILABLE"

    response = await client.post("/api/v1/bookings", json={**test_booking, "stylistId": "nobody"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_booking_outside_working_hours(client, store):
    response = await client.post(
        "/api/v1/bookings", json={**test_booking, "dateTime": "2026-10-28T10:00:00+00:00"}
    )
    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "SLOT_UNAVAILABLE"
    assert store.appointments == {}


@pytest.mark.asyncio
async def test_request_validation(client):
    response = await client.post("/api/v1/bookings", json={**test_booking, "dateTime": "2026-10-26T10:00:00"})
    assert response.status_code == 422

    response = await client.post("/api/v1/bookings", json={**test_booking, "duration": 0})
    assert response.status_code == 422

    response = await client.get(
        f"/api/v1/availability/{STYLIST_ID}/slots", params={"date": "2026-10-26", "duration": 0}
    )
    assert response.status_code == 422

    response = await client.get(
        f"/api/v1/availability/{STYLIST_ID}/check",
        params={"dateTime": "2026-10-26T10:00:00", "duration": 60},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_misconfigured_schedule(client, store):
    store.put_availability(
        STYLIST_ID,
        availability_document(monday={"enabled": True, "slots": [time_range("9:00", "AM", "8:00", "AM")]}),
    )

    response = await client.get(
        f"/api/v1/availability/{STYLIST_ID}/slots", params={"date": "2026-10-26", "duration": 60}
    )

    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "INVALID_TIME_FORMAT"
