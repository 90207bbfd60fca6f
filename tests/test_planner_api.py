def test_health(client):
    response = client.get("/planner/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_hr_test_plan(client, run_block, now):
    response = client.post("/planner/hr-test", json={
        "sport": "run",
        "now": now.isoformat(),
        "activities": run_block,
    })
    assert response.status_code == 200
    data = response.json()
    assert data["hrMax"]["value"] == 188
    assert data["lt1"]["hr"]["value"] == 150
    assert data["lt2"]["confidence"] == "high"

    protocol = data["protocol"]
    assert protocol["endHR"] == 179
    assert protocol["stageDurationMinutes"] == 4
    assert protocol["stopRules"][0] == "Stop when HR >= 179 bpm"
    first = protocol["stages"][0]
    assert first["targetHR"] == 135
    assert first["notes"] == "Below LT1 (150 bpm)"
    assert "suggestedPace" in first and "suggestedPower" in first

    assert len(data["zones"]) == 5
    evidence = data["lt2"]["evidence"][0]
    assert evidence["activityId"] in ("tempo-1", "tempo-2")
    assert "slopeBpmPerMin" in evidence


def test_hr_test_plan_without_activities(client):
    response = client.post("/planner/hr-test", json={"sport": "bike", "activities": []})
    assert response.status_code == 200
    data = response.json()
    assert data["hrMax"]["value"] is None
    assert data["lt1"]["confidence"] == "low"
    assert data["protocol"] is None
    assert data["zones"] is None


def test_lookback_accepts_both_spellings(client, run_block, now):
    for key in ("lookbackDays", "lookback_days"):
        response = client.post("/planner/hr-test", json={
            "now": now.isoformat(),
            "activities": run_block,
            key: 4,
        })
        assert response.status_code == 200
        assert response.json()["lt1"]["hr"]["value"] is None


def test_invalid_lookback_is_rejected(client):
    response = client.post("/planner/hr-test", json={"activities": [], "lookbackDays": 0})
    assert response.status_code == 422


def test_setup_logging_levels():
    import logging

    from hrplan.logging_config import setup_logging

    assert setup_logging("debug") == logging.DEBUG
    assert logging.getLogger("hrplan").level == logging.DEBUG
    assert setup_logging("not-a-level") == logging.INFO
