import logging
from dataclasses import dataclass, field
from typing import Callable

import pika
from pika.exceptions import AMQPError

from .config import AMQP_PORT
from .errors import BrokerConnectionError, ChannelOpenError, QueuePublishError
from .schemas import BrokerConfig

CONTENT_TYPE = "text/plain"
TRANSIENT = 1


@dataclass
class PublishOutcome:
    queue: str
    success: bool
    error: Exception | None = None


@dataclass
class PublishReport:
    outcomes: list[PublishOutcome] = field(default_factory=list)

    @property
    def attempted(self) -> list[str]:
        return [o.queue for o in self.outcomes]

    @property
    def delivered(self) -> list[str]:
        return [o.queue for o in self.outcomes if o.success]

    @property
    def failed(self) -> list[PublishOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def all_delivered(self) -> bool:
        return not self.failed


def connection_params(cfg: BrokerConfig, port: int = AMQP_PORT, vhost: str = "/") -> pika.ConnectionParameters:
    creds = pika.PlainCredentials(cfg.user, cfg.password)
    return pika.ConnectionParameters(
        host=cfg.host,
        port=port,
        virtual_host=vhost,
        credentials=creds,
    )


class QueuePublisher:
    """Publishes one payload to every configured queue over a single connection/channel.

    Connection and channel failures are fatal and raised. A failed publish to one
    queue is logged and recorded; with fail_fast=True the remaining queues are skipped.
    """
    def __init__(self, cfg: BrokerConfig, logger: logging.Logger,
                 port: int = AMQP_PORT, vhost: str = "/", fail_fast: bool = False,
                 connection_factory: Callable[[pika.ConnectionParameters], object] | None = None):
        self.cfg = cfg
        self.log = logger
        self.port = port
        self.vhost = vhost
        self.fail_fast = fail_fast
        self.connection_factory = connection_factory or pika.BlockingConnection

    def _connect(self):
        self.log.info("connecting to rabbit at %s:%d vhost=%s", self.cfg.host, self.port, self.vhost)
        try:
            conn = self.connection_factory(connection_params(self.cfg, self.port, self.vhost))
        except AMQPError as e:
            raise BrokerConnectionError(f"could not connect to {self.cfg.host}:{self.port}: {e!r}") from e
        self.log.info("rabbit connected")
        return conn

    def _open_channel(self, conn):
        self.log.info("opening channel")
        try:
            ch = conn.channel()
        except AMQPError as e:
            raise ChannelOpenError(f"could not open channel: {e!r}") from e
        self.log.info("channel opened")
        return ch

    def _publish_one(self, ch, queue: str, payload: bytes) -> PublishOutcome:
        props = pika.BasicProperties(
            content_type=CONTENT_TYPE,
            delivery_mode=TRANSIENT,
        )
        try:
            ch.basic_publish(
                exchange="",
                routing_key=queue,
                body=payload,
                properties=props,
                mandatory=False,
            )
        except AMQPError as e:
            err = QueuePublishError(queue, e)
            self.log.warning("%s", err)
            return PublishOutcome(queue, False, err)
        self.log.info("message published to %s", queue)
        return PublishOutcome(queue, True)

    def publish(self, payload: bytes) -> PublishReport:
        report = PublishReport()
        conn = self._connect()
        ch = None
        try:
            ch = self._open_channel(conn)
            for queue in self.cfg.queues:
                outcome = self._publish_one(ch, queue, payload)
                report.outcomes.append(outcome)
                if not outcome.success and self.fail_fast:
                    self.log.warning("fail_fast: skipping remaining queues after %s", queue)
                    break
        finally:
            self._close(conn, ch)
        return report

    def _close(self, conn, ch):
        # a broken channel must not stop the connection from being released
        if ch is not None and ch.is_open:
            try:
                ch.close()
            except AMQPError as e:
                self.log.warning("channel close failed: %r", e)
        if conn.is_open:
            try:
                conn.close()
            except AMQPError as e:
                self.log.warning("connection close failed: %r", e)
        self.log.info("rabbit connection closed")
