DOC = {"title": "Unit 1 notes", "documentType": "notes", "fileUrl": "https://files.campuspilot.org/u1.pdf"}


def test_document_counters(client, register_user):
    _, headers = register_user()
    doc = client.post("/documents", json=dict(DOC, subjectId="os"), headers=headers).json()
    assert doc["viewCount"] == 0

    assert client.post(f"/documents/{doc['id']}/view", headers=headers).status_code == 200
    assert client.post(f"/documents/{doc['id']}/download-count", headers=headers).status_code == 200
    fetched = client.get(f"/documents/{doc['id']}", headers=headers).json()
    assert fetched["viewCount"] == 1
    assert fetched["downloadCount"] == 1
    assert fetched["lastAccessedAt"] is not None

    assert [d["id"] for d in client.get("/documents/subject/os", headers=headers).json()] == [doc["id"]]


def test_document_sharing_rules(client, register_user):
    _, owner = register_user()
    reader_id, reader = register_user()
    doc = client.post("/documents", json=DOC, headers=owner).json()
    url = f"/documents/{doc['id']}"

    assert client.post(f"{url}/view", headers=reader).status_code == 403

    shared = client.put(url, json=dict(DOC, sharedWith=[reader_id]), headers=owner)
    assert shared.status_code == 200
    assert client.post(f"{url}/view", headers=reader).status_code == 200

    public = client.post("/documents", json=dict(DOC, isPublic=True), headers=owner).json()
    assert client.post(f"/documents/{public['id']}/download-count", headers=reader).status_code == 200
    # sharing grants counters, not edits
    assert client.put(f"/documents/{public['id']}", json=DOC, headers=reader).status_code == 403


def test_study_plans_and_sessions(client, register_user):
    _, headers = register_user()
    plan = client.post(
        "/study-plans",
        json={"title": "Weekend revision", "planDate": "2030-01-05", "planType": "weekend"},
        headers=headers,
    )
    assert plan.status_code == 201
    plan = plan.json()
    assert plan["status"] == "planned"

    on_date = client.get("/study-plans/date", params={"date": "2030-01-05"}, headers=headers).json()
    assert [p["id"] for p in on_date] == [plan["id"]]
    assert client.get("/study-plans/date", params={"date": "2030-01-06"}, headers=headers).json() == []

    session = client.post(
        "/study-sessions",
        json={
            "studyPlanId": plan["id"],
            "sessionType": "revision",
            "plannedStartTime": "2030-01-05T09:00:00+05:30",
            "topicsToCover": ["graphs"],
        },
        headers=headers,
    )
    assert session.status_code == 201
    session = session.json()
    # normalized to UTC
    assert session["plannedStartTime"].startswith("2030-01-05T03:30:00")

    listed = client.get(f"/study-sessions/plan/{plan['id']}", headers=headers).json()
    assert [s["id"] for s in listed] == [session["id"]]

    r = client.put(
        f"/study-sessions/{session['id']}",
        json={"sessionType": "revision", "status": "completed", "completionPercentage": 100},
        headers=headers,
    )
    assert r.status_code == 200
    assert r.json()["completionPercentage"] == 100
    assert r.json()["topicsToCover"] == ["graphs"]

    bad = client.post("/study-plans", json={"title": "x", "planDate": "2030-01-05", "planType": "monthly"}, headers=headers)
    assert bad.status_code == 400


def test_analytics(client, register_user):
    _, headers = register_user()
    logged = client.post(
        "/analytics/activity-logs",
        json={"activityType": "login", "metadata": {"device": "web"}},
        headers=headers,
    )
    assert logged.status_code == 201
    assert logged.json()["metadata"] == {"device": "web"}
    client.post("/analytics/activity-logs", json={"activityType": "study"}, headers=headers)

    assert len(client.get("/analytics/activity-logs", headers=headers).json()) == 2
    only_login = client.get("/analytics/activity-logs", params={"activityType": "login"}, headers=headers).json()
    assert [a["activityType"] for a in only_login] == ["login"]

    missing = client.get("/analytics/daily-stats/date", params={"date": "2030-01-01"}, headers=headers)
    assert missing.status_code == 404

    first = client.put("/analytics/daily-stats", json={"statDate": "2030-01-01", "studyMinutes": 30}, headers=headers)
    assert first.status_code == 200
    second = client.put("/analytics/daily-stats", json={"statDate": "2030-01-01", "sessionsCompleted": 2}, headers=headers)
    stats = second.json()
    assert stats["studyMinutes"] == 30
    assert stats["sessionsCompleted"] == 2

    fetched = client.get("/analytics/daily-stats/date", params={"date": "2030-01-01"}, headers=headers)
    assert fetched.status_code == 200
    assert len(client.get("/analytics/daily-stats", headers=headers).json()) == 1
