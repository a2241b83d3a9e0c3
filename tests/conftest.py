"""
Shared fixtures: isolated config, data directory and round state per test
"""
import json

import pytest
import yaml
from fastapi.testclient import TestClient

from buzzhub import state
from buzzhub.core import quiz as quiz_core
from buzzhub.core.broadcast import Broadcaster
from buzzhub.main import app, configure


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    """Config pointing the data directory at a temp dir"""
    path = tmp_path / "server.yaml"
    path.write_text(yaml.safe_dump({
        "data_dir": str(tmp_path / "data"),
        "static_dirs": [str(tmp_path / "public")],
        "ping_interval": 0.05,
        "client_queue_size": 50,
        "show_qr": False,
    }), encoding="utf-8")
    monkeypatch.setenv("BUZZHUB_CONFIG", str(path))
    monkeypatch.delenv("PORT", raising=False)
    return path


@pytest.fixture
def configured(config_file):
    """Loaded config, fresh broadcaster and empty round"""
    state.BROADCASTER = Broadcaster()
    configure()
    yield state.CONFIG
    quiz_core.reset_all()
    state.BROADCASTER.clear()


@pytest.fixture
def listener(configured):
    """A connected client to inspect broadcasts"""
    return state.BROADCASTER.connect()


@pytest.fixture
def drain():
    """Pop all queued SSE frames of a client as (event, data) tuples"""
    def _drain(sse_client):
        frames = []
        while not sse_client.queue.empty():
            frame = sse_client.queue.get_nowait()
            if frame is None:
                continue
            event_line, data_line = frame.strip().split("\n")
            frames.append((event_line[len("event: "):], json.loads(data_line[len("data: "):])))
        return frames
    return _drain


@pytest.fixture
def client(config_file):
    state.BROADCASTER = Broadcaster()
    with TestClient(app) as test_client:
        yield test_client
