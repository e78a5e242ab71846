import io
import json

import pytest

from data_sync.sync import build_logger
from fakes import FakeBroker


@pytest.fixture
def log_stream():
    return io.StringIO()


@pytest.fixture
def logger(log_stream):
    return build_logger("DEBUG", stream=log_stream)


@pytest.fixture
def broker():
    return FakeBroker()


@pytest.fixture
def write_config(tmp_path):
    def _write(data, name="config.json"):
        p = tmp_path / name
        p.write_text(data if isinstance(data, str) else json.dumps(data))
        return str(p)
    return _write


@pytest.fixture
def valid_config():
    return {"user": "guest", "password": "s3cret", "location": "rabbit.local", "queues": ["a", "b", "c"]}
