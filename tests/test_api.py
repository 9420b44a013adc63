from __future__ import annotations

import inspect
from pathlib import Path

from fastapi.testclient import TestClient

from fileext import api
from fileext.api import app


def test_healthcheck() -> None:
    client = TestClient(app)
    assert client.get("/healthz").json() == {"status": "ok"}


def test_resolve_symlink_endpoint() -> None:
    client = TestClient(app)

    response = client.post("/symlinks/resolve", json={"base_directory": "/a/b", "link_target": "c/../d"})
    assert response.status_code == 200
    assert response.json() == {"path": "/a/b/d"}

    response = client.post(
        "/symlinks/resolve",
        json={"base_directory": "/home/someuser", "link_target": "../../../tmp/folder"},
    )
    assert response.status_code == 400
    assert response.json()["detail"]["reason"] == "AboveRoot"


def test_directory_endpoints(tmp_path: Path) -> None:
    client = TestClient(app)
    target = tmp_path / "x" / "y"

    response = client.post("/directories", json={"path": str(target), "exist_ok": True})
    assert response.status_code == 201
    assert response.json() == {"created": [str(tmp_path / "x"), str(target)]}

    response = client.post("/directories", json={"path": str(target)})
    assert response.status_code == 409

    response = client.delete("/directories", params={"path": str(tmp_path / "x")})
    assert response.status_code == 204
    assert not (tmp_path / "x").exists()

    response = client.delete("/directories", params={"path": str(tmp_path / "x")})
    assert response.status_code == 404

    response = client.post("/directories", json={"path": "bad;path"})
    assert response.status_code == 400
    assert response.json()["detail"]["reason"] == "DisallowedCharacter"


def test_transfer_endpoints(tmp_path: Path) -> None:
    source = tmp_path / "source.bin"
    source.write_bytes(b"abcdefghij" * 10)
    destination = tmp_path / "copy.bin"

    with TestClient(app) as client:
        response = client.post(
            "/transfers",
            json={"source": str(source), "destination": str(destination), "block_size": 25},
        )
        assert response.status_code == 202
        job_id = response.json()["job_id"]

        stream = client.get(f"/stream/{job_id}")
        assert stream.status_code == 200
        assert "data: copying block 75-99 of 100 bytes" in stream.text

        status = client.get(f"/transfers/{job_id}").json()
        assert status["status"] == "succeeded"
        assert status["blocks"] == 4
        assert status["bytes_copied"] == 100

        assert client.get("/transfers/unknown").status_code == 404
        assert client.delete("/transfers/unknown").status_code == 404

    assert destination.read_bytes() == source.read_bytes()


def test_transfer_with_missing_source(tmp_path: Path) -> None:
    client = TestClient(app)
    response = client.post(
        "/transfers",
        json={"source": str(tmp_path / "missing"), "destination": str(tmp_path / "copy")},
    )
    assert response.status_code == 404


def test_transfer_of_empty_source(tmp_path: Path) -> None:
    source = tmp_path / "empty.bin"
    source.write_bytes(b"")
    destination = tmp_path / "copy.bin"

    with TestClient(app) as client:
        response = client.post("/transfers", json={"source": str(source), "destination": str(destination)})
        assert response.status_code == 202
        job_id = response.json()["job_id"]

        client.get(f"/stream/{job_id}")
        status = client.get(f"/transfers/{job_id}").json()
        assert status["status"] == "succeeded"
        assert status["blocks"] == 0

    assert destination.read_bytes() == b""


def test_transfer_rejects_unusable_sources(tmp_path: Path) -> None:
    blocker = tmp_path / "afile"
    blocker.write_bytes(b"0123456789")
    client = TestClient(app)

    response = client.post(
        "/transfers",
        json={"source": str(blocker / "child"), "destination": str(tmp_path / "copy")},
    )
    assert response.status_code == 404
    assert response.json()["detail"]["reason"] == "NotFound"

    response = client.post(
        "/transfers",
        json={"source": str(blocker), "destination": str(tmp_path / "copy"), "start": 11},
    )
    assert response.status_code == 400

    response = client.post(
        "/transfers",
        json={"source": str(blocker), "destination": str(tmp_path / "copy"), "start": 5, "end": 2},
    )
    assert response.status_code == 400


def test_filesystem_endpoints_run_off_the_event_loop() -> None:
    for endpoint in (api.resolve_symlink, api.symlink_target, api.create_directory, api.delete_directory):
        assert not inspect.iscoroutinefunction(endpoint)
