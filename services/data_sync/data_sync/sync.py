import argparse
import logging
import sys

from .config import LOG_LEVELS, POLICIES, Settings, load_broker_config
from .errors import EXIT_OK, EXIT_PARTIAL_DELIVERY, DataSyncError, SettingsError
from .files import load_message
from .messaging import QueuePublisher

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(filename)s:%(lineno)d: %(message)s"
LOG_DATEFMT = "%Y/%m/%d %H:%M:%S"


def build_logger(level: str = "INFO", stream=None) -> logging.Logger:
    """One named logger with its own handler; the root logger is left alone."""
    logger = logging.getLogger("data_sync")
    logger.setLevel(level)
    logger.propagate = False
    for h in list(logger.handlers):
        logger.removeHandler(h)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    logger.addHandler(handler)
    return logger


def parse_args(argv: list[str] | None = None) -> Settings:
    s = Settings()
    ap = argparse.ArgumentParser(description="Publish a message file to one or more RabbitMQ queues.")
    ap.add_argument("--config", default=s.config_path, help="broker config JSON (user, password, location, queues)")
    ap.add_argument("--message", default=s.message_path, help="file holding the message body")
    ap.add_argument("--port", default=s.port)
    ap.add_argument("--vhost", default=s.vhost)
    ap.add_argument("--policy", default=s.policy,
                    help=f"one of {', '.join(POLICIES)}; best_effort keeps going past failed queues, "
                         "fail_fast stops at the first one")
    ap.add_argument("--pause", action=argparse.BooleanOptionalAction, default=s.pause_on_exit,
                    help="wait for Enter before exiting")
    ap.add_argument("--log-level", default=s.log_level, help=", ".join(LOG_LEVELS))
    args = ap.parse_args(argv)
    return Settings(
        config_path=args.config,
        message_path=args.message,
        port=args.port,
        vhost=args.vhost,
        policy=args.policy,
        pause_on_exit=args.pause,
        log_level=args.log_level,
    )


def run(settings: Settings, logger: logging.Logger, connection_factory=None) -> int:
    """Load message, load config, publish. Returns the process exit code."""
    try:
        msg = load_message(settings.message_path, logger)
        cfg = load_broker_config(settings.config_path, logger)

        publisher = QueuePublisher(cfg, logger, port=settings.port, vhost=settings.vhost,
                                   fail_fast=settings.policy == "fail_fast",
                                   connection_factory=connection_factory)
        logger.info("publishing message to %d queue(s)", len(cfg.queues))
        report = publisher.publish(msg)
    except DataSyncError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return e.exit_code

    logger.info("published to %d/%d queue(s)", len(report.delivered), len(cfg.queues))
    if not report.all_delivered:
        failed = ", ".join(o.queue for o in report.failed)
        if settings.policy == "fail_fast":
            logger.error("delivery incomplete; failed: %s", failed)
            return EXIT_PARTIAL_DELIVERY
        logger.warning("some queues failed (best_effort): %s", failed)
    return EXIT_OK


def wait_for_enter(logger: logging.Logger):
    try:
        input("press Enter to exit...")
    except (EOFError, KeyboardInterrupt):
        # no interactive stdin; exit without waiting
        logger.debug("pause skipped: stdin closed")


def main(argv: list[str] | None = None) -> int:
    try:
        settings = parse_args(argv)
    except SettingsError as e:
        build_logger().error("%s: %s", type(e).__name__, e)
        return e.exit_code

    logger = build_logger(settings.log_level)
    logger.info("logging initialized")
    code = run(settings, logger)
    if settings.pause_on_exit:
        wait_for_enter(logger)
    return code


if __name__ == "__main__":
    sys.exit(main())
