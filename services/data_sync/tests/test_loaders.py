import os

import pytest

from data_sync.config import load_broker_config
from data_sync.errors import (ConfigIncomplete, ConfigNotFound, ConfigParseError,
                              MessageEmpty, MessageNotFound)
from data_sync.files import find_file, load_message


def test_find_file_resolves_relative_path(tmp_path, monkeypatch):
    (tmp_path / "message.json").write_bytes(b"x")
    monkeypatch.chdir(tmp_path)
    abs_path, found = find_file("./message.json")
    assert found is True
    assert abs_path == os.path.join(str(tmp_path), "message.json")


def test_find_file_missing(tmp_path):
    assert find_file(str(tmp_path / "nope.json")) == ("", False)


def test_find_file_directory_is_not_openable(tmp_path):
    assert find_file(str(tmp_path)) == ("", False)


def test_load_message_returns_bytes_unmodified(tmp_path, logger):
    body = b'{"id": 1}\n\x00\xff trailing'
    p = tmp_path / "message.json"
    p.write_bytes(body)
    assert load_message(str(p), logger) == body


def test_load_message_empty(tmp_path, logger):
    p = tmp_path / "message.json"
    p.write_bytes(b"")
    with pytest.raises(MessageEmpty):
        load_message(str(p), logger)


def test_load_message_missing(tmp_path, logger):
    with pytest.raises(MessageNotFound):
        load_message(str(tmp_path / "message.json"), logger)


def test_load_config_ok(write_config, valid_config, logger):
    cfg = load_broker_config(write_config(valid_config), logger)
    assert cfg.user == "guest"
    assert cfg.password == "s3cret"
    assert cfg.host == "rabbit.local"
    assert cfg.queues == ("a", "b", "c")


def test_load_config_is_immutable(write_config, valid_config, logger):
    cfg = load_broker_config(write_config(valid_config), logger)
    with pytest.raises(Exception):
        cfg.host = "elsewhere"


def test_load_config_legacy_queuename(write_config, logger):
    path = write_config({"user": "u", "password": "p", "location": "h", "queuename": "only"})
    assert load_broker_config(path, logger).queues == ("only",)


def test_load_config_queues_wins_over_queuename(write_config, logger):
    path = write_config({"user": "u", "password": "p", "location": "h",
                         "queuename": "legacy", "queues": ["x", "y"]})
    assert load_broker_config(path, logger).queues == ("x", "y")


@pytest.mark.parametrize("missing", ["user", "password", "location", "queues"])
def test_load_config_missing_field(write_config, valid_config, logger, missing):
    del valid_config[missing]
    with pytest.raises(ConfigIncomplete):
        load_broker_config(write_config(valid_config), logger)


@pytest.mark.parametrize("queues", [[], [""], ["a", ""], "a", [1]])
def test_load_config_bad_queue_list(write_config, valid_config, logger, queues):
    valid_config["queues"] = queues
    with pytest.raises(ConfigIncomplete):
        load_broker_config(write_config(valid_config), logger)


def test_load_config_malformed_json(write_config, logger):
    with pytest.raises(ConfigParseError):
        load_broker_config(write_config('{"user": "guest",'), logger)


def test_load_config_not_an_object(write_config, logger):
    with pytest.raises(ConfigParseError):
        load_broker_config(write_config('["guest"]'), logger)


def test_load_config_missing_file(tmp_path, logger):
    with pytest.raises(ConfigNotFound):
        load_broker_config(str(tmp_path / "config.json"), logger)


def test_load_config_never_logs_password(write_config, valid_config, logger, log_stream):
    load_broker_config(write_config(valid_config), logger)
    out = log_stream.getvalue()
    assert "rabbit.local" in out
    assert "s3cret" not in out


def test_find_file_embedded_nul_is_not_found():
    assert find_file("a\x00b") == ("", False)
