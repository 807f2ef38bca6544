# hkpstore/transport/transport_kafka.py
import logging
from typing import Optional, Any
from hkpstore.transport.transport_base import BaseTransport, TransportError

log = logging.getLogger("hkpstore.transport.kafka")


class KafkaAdapter(BaseTransport):
    """
    Producer-only Kafka transport for key change events.

    Messages are keyed by fingerprint so changes to one key stay ordered
    within a partition. Send failures raise ``TransportError``; the
    notification bus logs and drops them.
    """

    name = "kafka"

    def __init__(self, brokers="localhost:9092", enabled=True, flush_timeout: float = 1.0):
        self.brokers = brokers
        self.enabled = enabled
        self.flush_timeout = flush_timeout
        self._producer = None

        if not self.enabled:
            log.warning("[KAFKA] key change forwarding disabled")
            return

        try:
            from kafka import KafkaProducer

            self._producer = KafkaProducer(
                bootstrap_servers=self.brokers,
                linger_ms=5,
                acks="all",
            )
            log.info(f"[KAFKA] connected brokers={self.brokers}")

        except Exception:
            log.exception("[KAFKA] init failed, key changes will not be forwarded")
            self.enabled = False

    def publish(self, topic: str, payload, headers=None, key: Optional[str] = None) -> Any:
        if not self.enabled:
            log.debug(f"[KAFKA-SKIP] topic={topic} key={key}")
            return None

        data = self.to_bytes(payload)
        try:
            future = self._producer.send(
                topic,
                value=data,
                key=key.encode("utf-8") if key else None,
                headers=[(k, v.encode("utf-8")) for k, v in (headers or {}).items()],
            )
            self._producer.flush(timeout=self.flush_timeout)
        except Exception as e:
            raise TransportError(f"kafka send to {topic} failed: {e}") from e

        log.debug(f"[KAFKA PUB] topic={topic} key={key} bytes={len(data)}")
        return future

    def healthz(self) -> dict:
        status = "ok" if self.enabled else "disabled"
        return {"status": status, "transport": self.name, "brokers": self.brokers}

    def close(self) -> None:
        if self._producer is not None:
            self._producer.close()
