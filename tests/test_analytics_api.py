FORM = {
    "title": "Replace stage lights",
    "description": "Two spotlights over the stage are out",
    "location": "Main sanctuary",
    "priority": "medium",
    "requested_date": "2026-03-10",
    "requestor_name": "Jane Doe",
    "requestor_email": "jane@church.org",
}


async def test_analytics(client, admin_headers):
    for department in ("worship", "worship", "youth"):
        await client.post("/api/requests/", json={**FORM, "department": department})

    response = await client.get("/api/analytics/", params={"time_range": "3months"},
                                headers=admin_headers)
    body = response.json()

    assert response.status_code == 200
    assert body["time_range"] == "3months"
    assert body["total_requests"] == 3
    assert body["most_active_department"] == {"name": "worship", "count": 2}
    assert sum(day["requests"] for day in body["work_volume"]) == 3
    assert body["on_time_rate"] == 0


async def test_analytics_unknown_range(client, admin_headers):
    response = await client.get("/api/analytics/", params={"time_range": "10years"},
                                headers=admin_headers)
    assert response.status_code == 422


async def test_dashboard_overview(client, admin_headers):
    ids = []
    for priority in ("low", "high", "emergency"):
        response = await client.post("/api/requests/", json={
            **FORM, "department": "worship", "priority": priority,
        })
        ids.append(response.json()["id"])
    await client.post(f"/api/work-orders/{ids[0]}/approve", json={}, headers=admin_headers)

    body = (await client.get("/api/dashboard/overview", headers=admin_headers)).json()

    assert body["total"] == 3
    assert body["pending"] == 2
    assert body["active"] == 1
    assert body["completed"] == 0
    assert body["high_priority"] == 2
    assert body["completion_rate"] == 0
    assert len(body["recent"]) == 3
