import json

from app.services.change_feed import change_feed


FORM = {
    "title": "Replace stage lights",
    "description": "Two spotlights over the stage are out",
    "location": "Main sanctuary",
    "department": "Worship",
    "priority": "high",
    "requested_date": "2026-03-10",
    "requestor_name": "Jane Doe",
    "requestor_email": "jane@church.org",
}


async def test_submit_request(client):
    response = await client.post("/api/requests/", json=FORM)

    assert response.status_code == 201
    body = response.json()
    assert body["work_order_id"] == "WO-1"
    assert body["status"] == "pending"
    assert "WO-1" in body["message"]

    second = await client.post("/api/requests/", json=FORM)
    assert second.json()["work_order_id"] == "WO-2"


async def test_submit_normalizes_fields(client, admin_headers):
    response = await client.post(
        "/api/requests/", json={**FORM, "title": "  Fix door  ", "category": "  "}
    )
    request_id = response.json()["id"]

    detail = (await client.get(f"/api/work-orders/{request_id}", headers=admin_headers)).json()
    assert detail["title"] == "Fix door"
    assert detail["department"] == "worship"
    assert detail["category"] == "General"
    assert detail["requested_date"] == "2026-03-10"


async def test_submit_rejects_blank_and_invalid_fields(client):
    assert (await client.post("/api/requests/", json={**FORM, "title": "   "})).status_code == 422
    assert (await client.post("/api/requests/", json={**FORM, "requestor_email": "nope"})).status_code == 422
    assert (await client.post("/api/requests/", json={**FORM, "priority": "whenever"})).status_code == 422

    missing = dict(FORM)
    del missing["location"]
    assert (await client.post("/api/requests/", json=missing)).status_code == 422


async def test_submit_publishes_insert(client):
    async with change_feed.subscribe() as queue:
        await client.post("/api/requests/", json=FORM)
        change = queue.get_nowait()

    assert change["event"] == "INSERT"
    assert change["record"]["work_order_id"] == "WO-1"


async def test_status_check_matches_email_case_insensitively(client):
    await client.post("/api/requests/", json=FORM)
    await client.post("/api/requests/", json={**FORM, "title": "Fix faucet"})
    await client.post("/api/requests/", json={**FORM, "requestor_email": "other@church.org"})

    response = await client.get("/api/requests/status", params={"email": "JANE@church.org"})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert {r["title"] for r in body["requests"]} == {"Replace stage lights", "Fix faucet"}
    # internal fields stay private
    assert "requestor_email" not in body["requests"][0]
    assert "approved_by" not in body["requests"][0]


async def test_status_check_unknown_email(client):
    response = await client.get("/api/requests/status", params={"email": "nobody@church.org"})
    assert response.json() == {"email": "nobody@church.org", "total": 0, "requests": []}


async def test_submit_rejects_non_finite_estimate(client):
    body = json.dumps(FORM)[:-1] + ', "estimated_hours": Infinity}'
    response = await client.post(
        "/api/requests/", content=body, headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 422
