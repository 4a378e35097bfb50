"""Tests for the HTTP surface."""

from anondiary.config import Settings


def _post(client, headers=None, **body):
    return client.post("/api/entries", json=body, headers=headers or {})


class TestHealth:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health_reports_database(self, client):
        response = client.get("/health")
        assert response.json() == {"status": "healthy", "database": "connected"}


class TestPostEntry:
    def test_create_returns_generated_entry(self, client, generator):
        response = _post(client, content="wrote my diary", name="anon", sub="day 1", device_id="d1")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == 1
        assert data["content"] == "wrote my diary"
        assert data["greentext"] == ">be me\n>write diary\n>mfw it works"
        assert data["memories"] == ["keeps a diary", "likes tea"]
        assert data["name"] == "anon"
        assert data["sub"] == "day 1"
        assert data["created_at"]
        assert generator.calls == 1

    def test_defaults_for_name_and_subject(self, client):
        data = _post(client, content="x", device_id="d1").json()
        assert data["name"] == "Anonymous"
        assert data["sub"] == ""

    def test_fallback_when_generation_fails(self, make_client, failing_generator):
        client = make_client(failing_generator)
        response = _post(client, content="woke up late\nmissed the bus", device_id="d1")

        assert response.status_code == 200
        assert response.json()["greentext"] == ">woke up late\n>missed the bus"
        assert response.json()["memories"] == []
        assert client.get("/api/memories", params={"device_id": "d1"}).json() == {"memories": []}

    def test_empty_submission_rejected(self, client, generator):
        response = _post(client, content="   ", options="", sub="", device_id="d1")
        assert response.status_code == 400
        assert response.json()["detail"] == "Content is required"
        assert generator.calls == 0

    def test_header_device_id_wins_over_body(self, client):
        _post(client, headers={"X-Device-ID": "from-header"}, content="x", device_id="from-body")
        assert len(client.get("/api/entries", params={"device_id": "from-header"}).json()["entries"]) == 1
        assert client.get("/api/entries", params={"device_id": "from-body"}).json()["entries"] == []


class TestCommands:
    def test_clear_then_list_is_empty(self, client, generator):
        _post(client, content="one", device_id="d1")
        _post(client, content="two", device_id="d1")
        _post(client, content="keep me", device_id="d2")
        calls_before = generator.calls

        response = _post(client, options="  CLEAR ", device_id="d1")

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "All entries deleted. Database cleared."
        assert data["entries_deleted"] == 2
        assert data["memories_deleted"] == 4
        assert generator.calls == calls_before

        assert client.get("/api/entries?device_id=d1").json() == {"entries": []}
        assert len(client.get("/api/entries?device_id=d2").json()["entries"]) == 1

    def test_memory_dump_is_ephemeral_and_repeatable(self, client, generator):
        _post(client, content="drank tea", device_id="d1")
        calls_before = generator.calls

        first = _post(client, sub="memory", device_id="d1").json()
        second = _post(client, options="Memory", device_id="d1").json()

        assert first["sub"] == "Memory Dump"
        assert first["greentext"] == second["greentext"]
        assert ": likes tea" in first["greentext"]
        assert generator.calls == calls_before
        assert len(client.get("/api/entries?device_id=d1").json()["entries"]) == 1

    def test_memory_dump_without_memories(self, client):
        data = _post(client, sub="memory", device_id="empty").json()
        assert data["greentext"] == ">be me\n>no memories yet\n>mfw empty mind"


class TestEntryRoutes:
    def test_list_newest_first(self, client):
        _post(client, content="first", device_id="d1")
        _post(client, content="second", device_id="d1")

        entries = client.get("/api/entries", headers={"X-Device-ID": "d1"}).json()["entries"]
        assert [e["content"] for e in entries] == ["second", "first"]

    def test_list_without_device_is_empty(self, client):
        _post(client, content="first", device_id="d1")
        assert client.get("/api/entries").json() == {"entries": []}

    def test_get_single_entry_any_device(self, client):
        entry_id = _post(client, content="hello", device_id="d1").json()["id"]
        response = client.get(f"/api/entries/{entry_id}")
        assert response.status_code == 200
        assert response.json()["entry"]["content"] == "hello"

    def test_get_missing_entry(self, client):
        response = client.get("/api/entries/404")
        assert response.status_code == 404

    def test_delete(self, client):
        entry_id = _post(client, content="bye", device_id="d1").json()["id"]
        response = client.delete(f"/api/entries/{entry_id}")
        assert response.json() == {"message": "Entry deleted", "changes": 1}
        assert client.delete(f"/api/entries/{entry_id}").json()["changes"] == 0


class TestMemoryRoutes:
    def test_memories_joined_with_source(self, client):
        _post(client, content="drank tea", device_id="d1")
        memories = client.get("/api/memories", headers={"X-Device-ID": "d1"}).json()["memories"]

        assert [m["memory_text"] for m in memories] == ["likes tea", "keeps a diary"]
        assert all(m["source_content"] == "drank tea" for m in memories)

    def test_memories_are_device_scoped(self, client):
        _post(client, content="drank tea", device_id="d1")
        assert client.get("/api/memories", params={"device_id": "d2"}).json() == {"memories": []}

    def test_source_never_shows_other_device_content(self, client):
        first_id = _post(client, content="d1 private", device_id="d1").json()["id"]
        client.delete(f"/api/entries/{first_id}")
        _post(client, content="x", device_id="d2", options="clear")
        second_id = _post(client, content="d2 secret", device_id="d2").json()["id"]

        assert second_id != first_id
        memories = client.get("/api/memories", params={"device_id": "d1"}).json()["memories"]
        assert len(memories) == 2
        assert all(m["source_content"] is None for m in memories)


class TestRateLimit:
    def test_limit_applies_when_enabled(self, make_client, generator, db_path):
        settings = Settings(
            _env_file=None,
            database_path=str(db_path),
            rate_limit_enabled=True,
            rate_limit_max_requests=2,
            rate_limit_window_seconds=60,
        )
        client = make_client(generator, settings)

        assert client.get("/api/entries?device_id=d1").status_code == 200
        assert client.get("/api/entries?device_id=d1").status_code == 200
        assert client.get("/api/entries?device_id=d1").status_code == 429

    def test_health_and_root_exempt_from_limit(self, make_client, generator, db_path):
        settings = Settings(
            _env_file=None,
            database_path=str(db_path),
            rate_limit_enabled=True,
            rate_limit_max_requests=2,
            rate_limit_window_seconds=60,
        )
        client = make_client(generator, settings)

        client.get("/api/entries?device_id=d1")
        client.get("/api/entries?device_id=d1")
        assert client.get("/api/entries?device_id=d1").status_code == 429

        for _ in range(4):
            assert client.get("/health").status_code == 200
            assert client.get("/").status_code == 200

    def test_disabled_by_default(self, client):
        for _ in range(5):
            assert client.get("/api/entries?device_id=d1").status_code == 200
