from conftest import FUTURE_DATE, auth_headers, make_user
from sams.roles import Role


def book(client, world, user=None, **extra):
    body = {
        "companyId": world.company.id,
        "serviceId": world.service.id,
        "appointmentDate": FUTURE_DATE,
        "appointmentTime": "10:00",
    }
    body.update(extra)
    return client.post("/appointments", json=body, headers=auth_headers(user or world.customer))


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_register_and_login(client):
    res = client.post("/users", json={
        "email": "Ana@Example.com", "password": "s3cret-pass", "firstName": "Ana", "role": "1",
    })
    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["data"]["role"] == Role.OWNER.value
    assert body["data"]["email"] == "ana@example.com"

    dup = client.post("/users", json={"email": "ana@example.com", "password": "another-pass"})
    assert dup.status_code == 409
    assert dup.json() == {"success": False, "message": "Email already registered"}

    bad = client.post("/auth/login", data={"username": "ana@example.com", "password": "wrong-pass"})
    assert bad.status_code == 401

    token = client.post("/auth/login", data={"username": "ana@example.com", "password": "s3cret-pass"}).json()
    me = client.get("/me", headers={"Authorization": f"Bearer {token['access_token']}"})
    assert me.json()["data"]["firstName"] == "Ana"


def test_cannot_self_register_as_admin(client):
    res = client.post("/users", json={"email": "x@example.com", "password": "longenough", "role": 0})
    assert res.status_code == 400


def test_requests_need_a_token(client):
    assert client.get("/appointments").status_code == 401
    assert client.get("/appointments", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_booking_round_trip_uses_camel_case(client, world):
    res = book(client, world, notes="hi", staffPreferences=[world.roster[0].id])
    assert res.status_code == 201
    data = res.json()["data"]
    assert data["status"] == "pending"
    assert data["staffPreferences"] == [world.roster[0].id]
    assert data["userId"] == world.customer.id

    listed = client.get("/appointments", headers=auth_headers(world.customer)).json()["data"]
    assert [a["id"] for a in listed] == [data["id"]]


def test_booking_with_four_preferences_is_400(client, world):
    res = book(client, world, staffPreferences=[1, 2, 3, 4])
    assert res.status_code == 400
    assert res.json()["success"] is False


def test_user_put_cannot_change_status(client, world):
    appt = book(client, world).json()["data"]

    res = client.put(
        f"/appointments/{appt['id']}",
        json={"notes": "x", "status": "completed"},
        headers=auth_headers(world.customer),
    )
    assert res.status_code == 200
    assert res.json()["data"]["notes"] == "x"
    assert res.json()["data"]["status"] == "pending"


def test_status_endpoint(client, world):
    appt = book(client, world).json()["data"]
    url = f"/appointments/{appt['id']}/status"

    assert client.put(url, json={"status": "confirmed"}, headers=auth_headers(world.customer)).status_code == 403
    assert client.put(url, json={"status": "nope"}, headers=auth_headers(world.owner)).status_code == 400

    res = client.put(url, json={"status": "confirmed", "staffId": world.roster[0].id}, headers=auth_headers(world.owner))
    assert res.status_code == 200
    assert (res.json()["data"]["status"], res.json()["data"]["staffId"]) == ("confirmed", world.roster[0].id)


def test_assign_endpoint(client, world):
    appt = book(client, world, staffPreferences=[world.roster[1].id]).json()["data"]
    url = f"/appointments/{appt['id']}/assign"

    empty = client.post(url, json={}, headers=auth_headers(world.owner))
    assert empty.status_code == 400
    assert empty.json()["message"] == "Please select a staff member"

    options = client.get(f"/appointments/{appt['id']}/staff-options", headers=auth_headers(world.owner)).json()
    assert options["data"]["suggestedStaffId"] == world.roster[1].id
    assert [s["id"] for s in options["data"]["preferred"]] == [world.roster[1].id]

    res = client.post(url, json={"staffId": world.roster[1].id}, headers=auth_headers(world.owner))
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["appointment"]["status"] == "confirmed"
    assert data["appointment"]["staffId"] == world.roster[1].id
    assert [a["status"] for a in data["appointments"]] == ["confirmed"]


def test_get_and_delete(client, world):
    appt = book(client, world).json()["data"]
    url = f"/appointments/{appt['id']}"

    assert client.get(url, headers=auth_headers(world.other_owner)).status_code == 403
    assert client.get(url, headers=auth_headers(world.owner)).status_code == 200
    assert client.delete(url, headers=auth_headers(world.customer)).json()["success"] is True
    assert client.get(url, headers=auth_headers(world.admin)).status_code == 404


def test_admin_listing_and_stats(client, world):
    book(client, world)
    assert len(client.get("/appointments/all", headers=auth_headers(world.admin)).json()["data"]) == 1
    assert client.get("/appointments/all", headers=auth_headers(world.owner)).status_code == 403

    stats = client.get("/appointments/stats", headers=auth_headers(world.owner)).json()["data"]
    assert stats == {"total": 1, "pending": 1, "confirmed": 0, "completed": 0, "cancelled": 0}


def test_staff_endpoints(client, world, session):
    newcomer = make_user(session, "new@example.com")
    owner = auth_headers(world.owner)

    available = client.get("/staff/available-users", headers=owner).json()["data"]
    assert newcomer.id in [u["id"] for u in available]

    created = client.post("/staff", json={
        "userId": newcomer.id, "workingHoursStart": "09:00", "workingHoursEnd": "17:00",
    }, headers=owner)
    assert created.status_code == 201
    staff_id = created.json()["data"]["id"]

    again = client.post("/staff", json={"userId": newcomer.id}, headers=owner)
    assert again.status_code == 409

    bad_hours = client.put(f"/staff/{staff_id}", json={"workingHoursEnd": "08:00"}, headers=owner)
    assert bad_hours.status_code == 400

    roster = client.get(f"/staff/company/{world.company.id}", headers=auth_headers(world.customer)).json()["data"]
    assert staff_id in [s["id"] for s in roster]

    assert client.put(f"/staff/{staff_id}", json={"skills": "x"}, headers=auth_headers(world.other_owner)).status_code == 403
    assert client.delete(f"/staff/{staff_id}", headers=owner).status_code == 200
    assert client.get(f"/staff/{staff_id}", headers=owner).status_code == 404


def test_available_users_all_for_owner(client, world):
    res = client.get("/staff/available-users?includeStaffed=true", headers=auth_headers(world.owner))
    emails = {u["email"] for u in res.json()["data"]}
    assert "staff0@example.com" in emails


def test_staff_routes_need_a_company_owner(client, world):
    assert client.get("/staff", headers=auth_headers(world.customer)).status_code == 403
    assert client.get("/staff/admin/all", headers=auth_headers(world.owner)).status_code == 403
    assert len(client.get("/staff/admin/all", headers=auth_headers(world.admin)).json()["data"]) == 4


def test_company_lifecycle(client, session):
    owner = make_user(session, "fresh@example.com", Role.OWNER)
    admin = make_user(session, "boss@example.com", Role.ADMIN)

    res = client.post("/companies", json={"name": "Nail Bar"}, headers=auth_headers(owner))
    assert res.status_code == 201
    company = res.json()["data"]
    assert company["status"] == "pending"

    assert client.post("/companies", json={"name": "Second"}, headers=auth_headers(owner)).status_code == 409

    url = f"/companies/{company['id']}/status"
    assert client.put(url, json={"status": "active"}, headers=auth_headers(owner)).status_code == 403
    assert client.put(url, json={"status": "active"}, headers=auth_headers(admin)).json()["data"]["status"] == "active"

    service = client.post("/services", json={"name": "Manicure", "price": "30.00"}, headers=auth_headers(owner))
    assert service.status_code == 201
    assert client.post("/services", json={"name": "Free", "price": "0"}, headers=auth_headers(owner)).status_code == 400

    listed = client.get(f"/services/company/{company['id']}", headers=auth_headers(owner)).json()["data"]
    assert [s["name"] for s in listed] == ["Manicure"]
