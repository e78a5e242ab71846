import json
import logging
import os
from dataclasses import dataclass, field

from jsonschema import ValidationError, validate

from .errors import ConfigIncomplete, ConfigNotFound, ConfigParseError, SettingsError
from .files import find_file
from .schemas import CONFIG_JSON_SCHEMA, BrokerConfig

AMQP_PORT = 5672
POLICIES = ("best_effort", "fail_fast")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    config_path: str = field(default_factory=lambda: os.environ.get("DATA_SYNC_CONFIG_PATH", "./config.json"))
    message_path: str = field(default_factory=lambda: os.environ.get("DATA_SYNC_MESSAGE_PATH", "./message.json"))
    # raw env/CLI strings are accepted here and checked in __post_init__
    port: int | str = field(default_factory=lambda: os.environ.get("MQ_PORT", str(AMQP_PORT)))
    vhost: str = field(default_factory=lambda: (os.environ.get("MQ_VHOST") or "/").strip() or "/")
    policy: str = field(default_factory=lambda: os.environ.get("PUBLISH_POLICY", "best_effort"))
    pause_on_exit: bool = field(default_factory=lambda: _env_flag("DATA_SYNC_PAUSE_ON_EXIT"))
    log_level: str = field(default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO"))

    def __post_init__(self):
        try:
            self.port = int(self.port)
        except (TypeError, ValueError):
            raise SettingsError(f"port must be an integer, got {self.port!r}") from None
        if not 0 < self.port < 65536:
            raise SettingsError(f"port {self.port} is out of range")

        self.policy = str(self.policy).lower()
        if self.policy not in POLICIES:
            raise SettingsError(f"unknown publish policy {self.policy!r}; expected one of {POLICIES}")

        self.log_level = str(self.log_level).upper()
        if self.log_level not in LOG_LEVELS:
            raise SettingsError(f"unknown log level {self.log_level!r}; expected one of {LOG_LEVELS}")


def _normalize_queues(raw: dict) -> dict:
    # single-queue configs ({"queuename": "q"}) become a one-element list
    if "queues" not in raw and "queuename" in raw:
        raw = dict(raw)
        raw["queues"] = [raw["queuename"]]
    return raw


def load_broker_config(path: str, logger: logging.Logger) -> BrokerConfig:
    abs_path, exists = find_file(path, logger)
    if not exists:
        raise ConfigNotFound(f"config file {path} does not exist")

    logger.info("config detected - reading %s", abs_path)
    try:
        with open(abs_path, "rb") as f:
            text = f.read()
    except OSError as e:
        raise ConfigNotFound(f"config file {abs_path} could not be read: {e}") from e

    try:
        raw = json.loads(text)
    except ValueError as e:
        raise ConfigParseError(f"config file {abs_path} is not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigParseError(f"config file {abs_path} must hold a JSON object")

    raw = _normalize_queues(raw)
    try:
        validate(raw, CONFIG_JSON_SCHEMA)
    except ValidationError as e:
        raise ConfigIncomplete(f"broker config is not populated correctly: {e.message}") from e

    cfg = BrokerConfig(
        user=raw["user"],
        password=raw["password"],
        host=raw["location"],
        queues=tuple(raw["queues"]),
    )
    logger.info("config loaded: %s", json.dumps(cfg.masked()))
    return cfg
