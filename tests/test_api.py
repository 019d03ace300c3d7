"""API endpoint tests."""
import pytest

from streamscore.scoring import DEFAULT_PERIOD_SETTINGS, TimePeriod

AUTH_HEADERS = {"X-API-Key": "test-secret"}

GOLDEN_JSON = {
    "name": "golden",
    "date": "2024-03-01",
    "period": "60days",
    "numberOfStreams": 60,
    "hours": 60,
    "avgViewers": 100,
    "messages": 18000,
    "uniqueChatters": 1800,
    "followers": 600,
    "followerCount": 5000,
}

CSV_HEADER = "Name,Date,NumberOfStreams,Hours,AvgViewers,Messages,UniqueChatters,Followers"


def _sixty_day_settings(**overrides) -> dict:
    return {**DEFAULT_PERIOD_SETTINGS[TimePeriod.SIXTY_DAYS].model_dump(), **overrides}


class TestHealthEndpoint:
    """Test health check endpoint."""

    def test_health_returns_200(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["service"] == "streamscore"

    def test_root_lists_docs(self, client):
        assert client.get("/").json()["docs"] == "/docs"


class TestAuth:
    """API key checks."""

    def test_missing_key(self, client):
        assert client.get("/api/v1/records").status_code == 401

    def test_wrong_key(self, client):
        response = client.get("/api/v1/records", headers={"X-API-Key": "nope"})
        assert response.status_code == 403


class TestScoreEndpoints:
    """Scoring ad-hoc records."""

    def test_golden_record(self, client):
        response = client.post("/api/v1/score", json={"record": GOLDEN_JSON}, headers=AUTH_HEADERS)

        assert response.status_code == 200
        data = response.json()
        assert data["result"]["final_score"] == 91.2
        assert data["result"]["window_start"] == "2024-01-01"
        assert data["red_flags"] == []

    def test_ad_hoc_settings(self, client):
        response = client.post(
            "/api/v1/score",
            json={"record": GOLDEN_JSON, "settings": _sixty_day_settings(min_viewer_hours=12000)},
            headers=AUTH_HEADERS,
        )
        assert response.json()["result"]["final_score"] == 45.6

    def test_red_flags_are_returned(self, client):
        record = {**GOLDEN_JSON, "messages": 100}
        response = client.post("/api/v1/score", json={"record": record}, headers=AUTH_HEADERS)

        flags = response.json()["red_flags"]
        assert flags[0]["code"] == "very_low_chat_activity"
        assert flags[0]["severity"] == "critical"

    @pytest.mark.parametrize("field, value", [
        ("hours", 0),
        ("avgViewers", -3),
        ("numberOfStreams", 0),
        ("name", "   "),
        ("period", "7days"),
    ])
    def test_invalid_record(self, client, field, value):
        record = {**GOLDEN_JSON, field: value}
        response = client.post("/api/v1/score", json={"record": record}, headers=AUTH_HEADERS)
        assert response.status_code == 422

    def test_batch_keeps_order(self, client):
        records = [
            {**GOLDEN_JSON, "name": "quiet", "messages": 0},
            GOLDEN_JSON,
        ]
        response = client.post("/api/v1/score/batch", json={"records": records}, headers=AUTH_HEADERS)

        results = response.json()["results"]
        assert len(results) == 2
        assert results[0]["result"]["breakdown"]["legitimacy_multiplier"] == 0.1
        assert results[1]["result"]["final_score"] == 91.2
        assert results[0]["red_flags"][0]["code"] == "very_low_chat_activity"
        assert results[1]["red_flags"] == []

    def test_empty_batch_rejected(self, client):
        response = client.post("/api/v1/score/batch", json={"records": []}, headers=AUTH_HEADERS)
        assert response.status_code == 422


class TestRecordEndpoints:
    """Stored record CRUD."""

    def _create(self, client, **overrides) -> dict:
        response = client.post("/api/v1/records", json={**GOLDEN_JSON, **overrides}, headers=AUTH_HEADERS)
        assert response.status_code == 201
        return response.json()

    def test_create_assigns_id(self, client):
        created = self._create(client)
        assert created["id"]
        assert created["number_of_streams"] == 60

        fetched = client.get(f"/api/v1/records/{created['id']}", headers=AUTH_HEADERS).json()
        assert fetched == created

    def test_excluded_metric_is_stored_as_zero(self, client):
        created = self._create(client, includeMessages=False, messages=500)
        assert created["messages"] == 0

        fetched = client.get(f"/api/v1/records/{created['id']}", headers=AUTH_HEADERS).json()
        assert fetched["messages"] == 0
        assert fetched["include_messages"] is False

    def test_infinite_hours_rejected(self, client):
        response = client.post(
            "/api/v1/records",
            content='{"name": "x", "date": "2024-03-01", "numberOfStreams": 1, "hours": Infinity, "avgViewers": 5}',
            headers={**AUTH_HEADERS, "Content-Type": "application/json"},
        )
        assert response.status_code == 422

    def test_duplicate_id_conflicts(self, client):
        self._create(client, id="fixed")
        response = client.post("/api/v1/records", json={**GOLDEN_JSON, "id": "fixed"}, headers=AUTH_HEADERS)
        assert response.status_code == 409

    def test_list_filters(self, client):
        self._create(client, name="alice")
        self._create(client, name="bob", period="1day")

        names = [r["name"] for r in client.get("/api/v1/records", headers=AUTH_HEADERS).json()]
        assert sorted(names) == ["alice", "bob"]

        response = client.get("/api/v1/records", params={"period": "1day"}, headers=AUTH_HEADERS)
        assert [r["name"] for r in response.json()] == ["bob"]

        response = client.get("/api/v1/records", params={"name": "alice"}, headers=AUTH_HEADERS)
        assert [r["name"] for r in response.json()] == ["alice"]

    def test_update_keeps_path_id(self, client):
        created = self._create(client)
        response = client.put(
            f"/api/v1/records/{created['id']}",
            json={**GOLDEN_JSON, "id": "other", "hours": 30},
            headers=AUTH_HEADERS,
        )
        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

        fetched = client.get(f"/api/v1/records/{created['id']}", headers=AUTH_HEADERS).json()
        assert fetched["hours"] == 30

    def test_delete(self, client):
        created = self._create(client)
        response = client.delete(f"/api/v1/records/{created['id']}", headers=AUTH_HEADERS)
        assert response.json() == {"deleted": created["id"]}

        response = client.get(f"/api/v1/records/{created['id']}", headers=AUTH_HEADERS)
        assert response.status_code == 404

    def test_missing_record(self, client):
        assert client.delete("/api/v1/records/missing", headers=AUTH_HEADERS).status_code == 404
        assert client.get("/api/v1/records/missing/score", headers=AUTH_HEADERS).status_code == 404

    def test_clear(self, client):
        self._create(client)
        self._create(client)
        assert client.delete("/api/v1/records", headers=AUTH_HEADERS).json() == {"deleted": 2}
        assert client.get("/api/v1/records", headers=AUTH_HEADERS).json() == []

    def test_score_stored_record(self, client):
        created = self._create(client)
        response = client.get(f"/api/v1/records/{created['id']}/score", headers=AUTH_HEADERS)
        assert response.json()["result"]["final_score"] == 91.2

    def test_score_uses_stored_settings(self, client):
        created = self._create(client)
        client.put(
            "/api/v1/settings/60days",
            json=_sixty_day_settings(min_viewer_hours=12000),
            headers=AUTH_HEADERS,
        )
        response = client.get(f"/api/v1/records/{created['id']}/score", headers=AUTH_HEADERS)
        assert response.json()["result"]["final_score"] == 45.6


class TestCsvEndpoints:
    """CSV upload and download."""

    def _upload(self, client, content: str, filename: str = "data.csv", **params):
        return client.post(
            "/api/v1/records/upload",
            files={"file": (filename, content.encode("utf-8"), "text/csv")},
            params=params,
            headers=AUTH_HEADERS,
        )

    def test_upload(self, client):
        content = "\n".join([
            CSV_HEADER,
            "alice,2024-03-01,60,60,100,18000,1800,600",
            "bob,2024-03-01,3",
        ])
        response = self._upload(client, content)

        assert response.status_code == 200
        assert response.json() == {
            "imported": 1,
            "warnings": ["Skipping line 3: column count mismatch"],
        }
        records = client.get("/api/v1/records", headers=AUTH_HEADERS).json()
        assert [r["name"] for r in records] == ["alice"]
        assert records[0]["period"] == "60days"

    def test_upload_period_parameter(self, client):
        self._upload(client, f"{CSV_HEADER}\nalice,2024-03-01,1,3,10,30,4,1", period="1day")
        records = client.get("/api/v1/records", headers=AUTH_HEADERS).json()
        assert records[0]["period"] == "1day"

    def test_non_csv_rejected(self, client):
        response = self._upload(client, "hello", filename="data.txt")
        assert response.status_code == 400

    def test_missing_columns_rejected(self, client):
        response = self._upload(client, "Name,Date\nalice,2024-03-01")
        assert response.status_code == 400
        assert "Missing required columns" in response.json()["detail"]

    def test_export(self, client):
        client.post("/api/v1/records", json=GOLDEN_JSON, headers=AUTH_HEADERS)
        response = client.get("/api/v1/records/export.csv", headers=AUTH_HEADERS)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "stream-data-" in response.headers["content-disposition"]
        lines = response.text.splitlines()
        assert lines[0].startswith(CSV_HEADER)
        assert lines[1] == "golden,2024-03-01,60,60,100,18000,1800,600,60days,5000"


class TestSettingsEndpoints:
    """Per-period settings."""

    def test_all_periods_present(self, client):
        periods = client.get("/api/v1/settings", headers=AUTH_HEADERS).json()["periods"]
        assert set(periods) == {p.value for p in TimePeriod}
        assert periods["1day"]["hours_cap"] == 4

    def test_periods(self, client):
        periods = client.get("/api/v1/settings/periods", headers=AUTH_HEADERS).json()
        assert [p["period"] for p in periods] == [p.value for p in TimePeriod]
        assert periods[0] == {"period": "1day", "days": 1, "label": "1 Day"}
        assert periods[-1]["days"] == 365

    def test_update_and_reset(self, client):
        response = client.put(
            "/api/v1/settings/30days",
            json=_sixty_day_settings(streams_cap=12),
            headers=AUTH_HEADERS,
        )
        assert response.status_code == 200
        assert client.get("/api/v1/settings/30days", headers=AUTH_HEADERS).json()["streams_cap"] == 12

        client.post("/api/v1/settings/reset", headers=AUTH_HEADERS)
        assert client.get("/api/v1/settings/30days", headers=AUTH_HEADERS).json()["streams_cap"] == 30

    def test_camel_case_input(self, client):
        payload = {
            "streamsCap": 10,
            "hoursCap": 10,
            "viewersCap": 100,
            "mpvmTarget": 0.05,
            "ucp100Target": 30,
            "f1kVHTarget": 15,
            "minViewerHours": 8,
        }
        response = client.put("/api/v1/settings/1day", json=payload, headers=AUTH_HEADERS)
        assert response.status_code == 200
        assert response.json()["f1kvh_target"] == 15

    def test_invalid_settings(self, client):
        response = client.put(
            "/api/v1/settings/60days",
            json=_sixty_day_settings(viewers_cap=0),
            headers=AUTH_HEADERS,
        )
        assert response.status_code == 422

    def test_unknown_period(self, client):
        assert client.get("/api/v1/settings/7days", headers=AUTH_HEADERS).status_code == 422


class TestLegacyImport:
    """Importing data saved by older releases."""

    V1_SETTINGS = {
        "daysCap": 20,
        "daysWeight": 0.1,
        "windowStartDays": 60,
        "hoursCap": 60,
        "viewersCap": 1000,
        "mpvmTarget": 0.05,
        "ucp100Target": 30,
        "f1kVHTarget": 15,
        "minViewerHours": 48,
    }

    def test_records_and_settings(self, client):
        streams = [
            {"id": "old-1", "name": "alice", "date": "2024-03-01", "hours": 12,
             "avgViewers": 40, "messages": 300, "uniqueChatters": 25, "followers": 10},
            {"id": "old-2", "name": "bob", "date": "2024-03-01", "hours": 0,
             "avgViewers": 40, "messages": 300, "uniqueChatters": 25, "followers": 10},
        ]
        response = client.post(
            "/api/v1/records/import-legacy",
            json={"streams": streams, "settings": self.V1_SETTINGS},
            headers=AUTH_HEADERS,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["imported"] == 1
        assert data["settings_migrated"] is True
        assert data["warnings"][0].startswith("Skipping stream 2:")

        record = client.get("/api/v1/records/old-1", headers=AUTH_HEADERS).json()
        assert record["number_of_streams"] == 1
        assert record["period"] == "60days"

        cfg = client.get("/api/v1/settings/60days", headers=AUTH_HEADERS).json()
        assert cfg["streams_cap"] == 20

    def test_records_only(self, client):
        response = client.post(
            "/api/v1/records/import-legacy",
            json={"streams": [{**GOLDEN_JSON, "id": "g"}]},
            headers=AUTH_HEADERS,
        )
        assert response.json()["settings_migrated"] is False
        assert client.get("/api/v1/records/g", headers=AUTH_HEADERS).status_code == 200

    def test_unsupported_settings_version(self, client):
        response = client.post(
            "/api/v1/records/import-legacy",
            json={"streams": [{**GOLDEN_JSON, "id": "g"}], "settings": {"schemaVersion": 9}},
            headers=AUTH_HEADERS,
        )
        assert response.status_code == 400
        assert client.get("/api/v1/records/g", headers=AUTH_HEADERS).status_code == 404

    def test_invalid_settings_values(self, client):
        response = client.post(
            "/api/v1/records/import-legacy",
            json={"settings": {**self.V1_SETTINGS, "hoursCap": -1}},
            headers=AUTH_HEADERS,
        )
        assert response.status_code == 400
        assert "Invalid legacy settings" in response.json()["detail"]
