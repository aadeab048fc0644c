# DynamoDB Local Manager MCP
# File: tests/test_settings.py
# Version: v1

from __future__ import annotations

import json
import logging

from dynamo_local_mcp.settings import ENDPOINT_KEY, EndpointStore


def test_missing_file_yields_default(tmp_path) -> None:
    store = EndpointStore(path=tmp_path / "nope" / "settings.json")
    assert store.load() == "http://localhost:8000"


def test_malformed_file_yields_default(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert EndpointStore(path=path).load() == "http://localhost:8000"


def test_non_string_or_blank_value_yields_default(tmp_path) -> None:
    path = tmp_path / "settings.json"

    path.write_text(json.dumps({ENDPOINT_KEY: 8000}), encoding="utf-8")
    assert EndpointStore(path=path).load() == "http://localhost:8000"

    path.write_text(json.dumps({ENDPOINT_KEY: "   "}), encoding="utf-8")
    assert EndpointStore(path=path).load() == "http://localhost:8000"

    path.write_text(json.dumps(["http://elsewhere:8000"]), encoding="utf-8")
    assert EndpointStore(path=path).load() == "http://localhost:8000"


def test_unreadable_storage_yields_default(tmp_path) -> None:
    # A directory where the file should be: reading raises an OSError.
    path = tmp_path / "settings.json"
    path.mkdir()
    assert EndpointStore(path=path).load() == "http://localhost:8000"


def test_save_then_load_round_trip(tmp_path) -> None:
    path = tmp_path / "nested" / "settings.json"
    store = EndpointStore(path=path)

    assert store.save("http://dynamo.internal:9000") is True
    assert EndpointStore(path=path).load() == "http://dynamo.internal:9000"
    assert json.loads(path.read_text(encoding="utf-8")) == {
        ENDPOINT_KEY: "http://dynamo.internal:9000"
    }


def test_save_keeps_unrelated_keys(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")

    EndpointStore(path=path).save("http://localhost:8001")

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == {"theme": "dark", ENDPOINT_KEY: "http://localhost:8001"}


def test_save_failure_reports_false(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.mkdir()
    assert EndpointStore(path=path).save("http://localhost:8001") is False


def test_save_over_malformed_file_warns_and_replaces(tmp_path, caplog) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="dynamo_local_mcp.settings"):
        assert EndpointStore(path=path).save("http://localhost:8002") is True

    assert any("settings.json" in r.getMessage() for r in caplog.records)
    assert json.loads(path.read_text(encoding="utf-8")) == {
        ENDPOINT_KEY: "http://localhost:8002"
    }


def test_save_to_new_file_does_not_warn(tmp_path, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="dynamo_local_mcp.settings"):
        EndpointStore(path=tmp_path / "settings.json").save("http://localhost:8003")
    assert caplog.records == []
