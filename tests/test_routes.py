from factories import make_booking, make_rate

from interpreter_booking.models import BookingStatus

MARCH = {"periodStart": "2025-03-01T00:00:00", "periodEnd": "2025-03-31T23:59:59"}

BOOKING_PAYLOAD = {
    "service_type": "Video Remote",
    "language_from": "English",
    "language_to": "Portuguese",
    "date": "2025-03-10",
    "start_time": "10:00",
    "duration_minutes": 60,
    "location_type": "ONLINE",
}


def test_health(api):
    assert api.get("/health").json() == {"status": "healthy"}


def test_missing_bearer_token_is_401(api):
    response = api.get("/bookings")
    assert response.status_code == 401


def test_guest_booking_needs_no_account(api):
    payload = dict(
        BOOKING_PAYLOAD,
        guest_contact={"name": "Jo Bloggs", "email": "JO@Example.com", "organisation": "Bloggs LLP"},
    )

    response = api.post("/bookings/guest", json=payload)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "REQUESTED"
    assert body["client_id"] is None
    assert body["client_name"] == "Bloggs LLP"
    assert body["guest_contact"]["email"] == "jo@example.com"
    assert body["online_link"]
    assert body["expected_end_time"] == "11:00"
    assert body["booking_ref"].startswith("LL-")


def test_client_booking_is_bound_to_own_client(api, client_user, client_org):
    response = api.as_user(client_user).post("/bookings", json=BOOKING_PAYLOAD)

    assert response.status_code == 201
    assert response.json()["client_id"] == client_org.id


def test_onsite_booking_requires_address(api, client_user):
    payload = dict(BOOKING_PAYLOAD, location_type="ONSITE")

    response = api.as_user(client_user).post("/bookings", json=payload)

    assert response.status_code == 400
    assert response.json()["error_code"] == "invalid_argument"


def test_invalid_start_time_is_422(api, client_user):
    payload = dict(BOOKING_PAYLOAD, start_time="25:00")

    response = api.as_user(client_user).post("/bookings", json=payload)

    assert response.status_code == 422
    assert response.json()["error_code"] == "validation_error"


def test_client_cannot_read_other_clients_invoices(api, client_user):
    response = api.as_user(client_user).get("/billing/client-invoices", params={"clientId": "other"})
    assert response.status_code == 403


def test_client_reads_own_invoices(api, client_user, client_org):
    response = api.as_user(client_user).get("/billing/client-invoices")
    assert response.status_code == 200
    assert response.json() == []


def test_admin_must_name_client_for_invoices(api, admin_user):
    response = api.as_user(admin_user).get("/billing/client-invoices")
    assert response.status_code == 400


def test_interpreter_cannot_read_client_invoices(api, interpreter_user):
    response = api.as_user(interpreter_user).get("/billing/client-invoices")
    assert response.status_code == 403


def test_client_cannot_generate_invoices(api, client_user, client_org):
    response = api.as_user(client_user).post(
        "/billing/client-invoices/generate",
        json=dict(MARCH, clientId=client_org.id),
    )
    assert response.status_code == 403


def test_schedule_conflict_endpoint(api, db, admin_user, client_org, interpreter):
    existing = make_booking(
        db, client_org, status=BookingStatus.CONFIRMED, interpreter=interpreter,
        start_time="10:00", duration_minutes=60,
    )
    params = {"interpreter_id": interpreter.id, "date": "2025-03-10", "duration_minutes": 60}

    clash = api.as_user(admin_user).get("/bookings/conflicts", params=dict(params, start_time="10:30"))
    free = api.get("/bookings/conflicts", params=dict(params, start_time="11:00"))

    assert clash.json()["has_conflict"] is True
    assert clash.json()["conflicting_booking"]["id"] == existing.id
    assert free.json() == {"has_conflict": False, "conflicting_booking": None}


def test_conflict_endpoint_is_admin_only(api, client_user, interpreter):
    response = api.as_user(client_user).get(
        "/bookings/conflicts",
        params={"interpreter_id": interpreter.id, "date": "2025-03-10", "start_time": "10:00", "duration_minutes": 60},
    )
    assert response.status_code == 403


def test_booking_to_paid_invoice(api, db, admin_user, client_user, interpreter_user, client_org, interpreter):
    make_rate(db, "CLIENT", "Video Remote", amount_per_unit=40.0, minimum_units=1.0)
    make_rate(db, "INTERPRETER", "Video Remote", amount_per_unit=25.0, minimum_units=1.0)

    booking = api.as_user(client_user).post("/bookings", json=BOOKING_PAYLOAD).json()

    offer = api.as_user(admin_user).post(
        f"/bookings/{booking['id']}/assignments", json={"interpreter_id": interpreter.id}
    )
    assert offer.status_code == 201

    accepted = api.as_user(interpreter_user).post(f"/assignments/{offer.json()['id']}/accept")
    assert accepted.status_code == 200
    assert accepted.json()["booking"]["status"] == "CONFIRMED"
    assert accepted.json()["booking"]["interpreter_id"] == interpreter.id

    timesheet = api.post(
        "/timesheets",
        json={
            "booking_id": booking["id"],
            "actual_start": "2025-03-10T10:00:00Z",
            "actual_end": "2025-03-10T11:30:00Z",
        },
    )
    assert timesheet.status_code == 201
    assert api.get(f"/bookings/{booking['id']}").json()["status"] == "COMPLETED"

    approved = api.as_user(admin_user).post(f"/timesheets/{timesheet.json()['id']}/approve")
    assert approved.json()["client_amount_calculated"] == 60.0
    assert approved.json()["interpreter_amount_calculated"] == 37.5

    generated = api.post(
        "/billing/client-invoices/generate",
        json=dict(MARCH, clientId=client_org.id),
    )
    assert generated.json()["success"] is True
    assert generated.json()["total"] == 60.0
    invoice_id = generated.json()["invoiceId"]

    detail = api.as_user(client_user).get(f"/billing/client-invoices/{invoice_id}")
    assert detail.status_code == 200
    assert len(detail.json()["lines"]) == 1

    api.as_user(admin_user).patch(f"/billing/client-invoices/{invoice_id}/status", json={"status": "SENT"})
    paid = api.patch(f"/billing/client-invoices/{invoice_id}/status", json={"status": "PAID"})
    assert paid.json()["status"] == "PAID"
    assert api.get(f"/bookings/{booking['id']}").json()["status"] == "PAID"


def test_generate_with_nothing_eligible(api, admin_user, client_org):
    response = api.as_user(admin_user).post(
        "/billing/client-invoices/generate",
        json=dict(MARCH, clientId=client_org.id),
    )

    assert response.status_code == 200
    assert response.json()["success"] is False
    assert response.json()["message"] == "No eligible timesheets found for this period."


def test_accepting_twice_is_409(api, db, admin_user, client_org, interpreter):
    booking = make_booking(db, client_org)
    offer = api.as_user(admin_user).post(
        f"/bookings/{booking.id}/assignments", json={"interpreter_id": interpreter.id}
    ).json()

    api.post(f"/assignments/{offer['id']}/accept")
    response = api.post(f"/assignments/{offer['id']}/accept")

    assert response.status_code == 409
    assert response.json()["error_code"] == "invalid_transition"
