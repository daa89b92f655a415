import json
from pathlib import Path

from fastapi.testclient import TestClient

from metaindex.api.server import create_app


def _client(path: Path) -> TestClient:
    return TestClient(create_app(index_path=str(path)))


def _index(tmp_path: Path) -> Path:
    p = tmp_path / "meta.json"
    p.write_text(
        json.dumps(
            [
                {"id": "pocketbase", "name": "PocketBase", "tags": ["database", "backend"]},
                {"id": "Grafana", "name": "Grafana", "tags": ["monitoring"]},
                {"id": "pocketbase", "name": "PocketBase (old)"},
                {"name": "broken"},
            ]
        ),
        encoding="utf-8",
    )
    return p


def test_health_reports_index_path(tmp_path: Path) -> None:
    p = _index(tmp_path)
    r = _client(p).get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "index_path": str(p)}
    assert r.headers.get("x-request-id")


def test_templates_are_normalized_without_writing(tmp_path: Path) -> None:
    p = _index(tmp_path)
    before = p.read_bytes()

    r = _client(p).get("/templates")

    assert r.status_code == 200
    data = r.json()
    assert data["count"] == 2
    assert [t["id"] for t in data["templates"]] == ["Grafana", "pocketbase"]
    assert data["templates"][1]["name"] == "PocketBase"
    assert p.read_bytes() == before


def test_template_lookup(tmp_path: Path) -> None:
    client = _client(_index(tmp_path))

    r = client.get("/templates/Grafana")
    assert r.status_code == 200
    assert r.json()["tags"] == ["monitoring"]

    r2 = client.get("/templates/grafana")
    assert r2.status_code == 404
    assert r2.json()["detail"] == "template_not_found"


def test_tags_are_unique_and_sorted(tmp_path: Path) -> None:
    r = _client(_index(tmp_path)).get("/tags")
    assert r.json() == {"count": 3, "tags": ["backend", "database", "monitoring"]}


def test_report_reflects_file_on_disk(tmp_path: Path) -> None:
    r = _client(_index(tmp_path)).get("/report")
    body = r.json()
    assert body["duplicates"] == 1
    assert body["duplicate_ids"] == ["pocketbase"]
    assert body["is_sorted"] is False
    assert body["clean"] is False


def test_index_errors_map_to_http_errors(tmp_path: Path) -> None:
    r = _client(tmp_path / "absent.json").get("/templates")
    assert r.status_code == 404
    assert r.json()["detail"] == "index_not_found"

    bad = tmp_path / "bad.json"
    bad.write_text('{"a": 1}', encoding="utf-8")
    r2 = _client(bad).get("/report")
    assert r2.status_code == 422
    assert r2.json()["detail"] == "invalid_index"
