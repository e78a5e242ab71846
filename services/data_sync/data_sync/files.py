import logging
import os

from .errors import MessageEmpty, MessageNotFound


def find_file(path: str, logger: logging.Logger | None = None) -> tuple[str, bool]:
    """Resolve `path` against the working directory and check it can be opened.

    Returns (absolute_path, True) or ("", False); never raises.
    """
    try:
        abs_path = os.path.abspath(path)
    except (OSError, TypeError, ValueError):
        return "", False
    if logger is not None:
        logger.debug("resolved %s -> %s", path, abs_path)

    try:
        with open(abs_path, "rb"):
            pass
    except (OSError, ValueError):
        return "", False
    return abs_path, True


def load_message(path: str, logger: logging.Logger) -> bytes:
    """Read the message payload; opaque bytes, returned unmodified."""
    abs_path, exists = find_file(path, logger)
    if not exists:
        raise MessageNotFound(f"message file {path} does not exist")

    logger.info("message detected - reading %s", abs_path)
    try:
        with open(abs_path, "rb") as f:
            body = f.read()
    except OSError as e:
        raise MessageNotFound(f"message file {abs_path} could not be read: {e}") from e

    if len(body) == 0:
        raise MessageEmpty(f"no message in message file {abs_path}")
    logger.info("message loaded (%d bytes)", len(body))
    return body
