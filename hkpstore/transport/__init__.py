# hkpstore/transport/__init__.py
import os
from hkpstore.transport.transport_base import BaseTransport, TransportError
from hkpstore.transport.transport_local import LocalAdapter
from hkpstore.transport.transport_http import HTTPAdapter
from hkpstore.transport.transport_kafka import KafkaAdapter
from hkpstore.transport.forwarder import KeyChangeForwarder


def transport_factory():
    """
    Select the transport key change events are forwarded on.

    HKPSTORE_CHANGE_TRANSPORT: local (default) | http | kafka
    """
    mode = os.getenv("HKPSTORE_CHANGE_TRANSPORT", "local").lower()

    if mode == "kafka":
        return KafkaAdapter(
            brokers=os.getenv("KAFKA_BROKERS", "localhost:9092"),
            enabled=os.getenv("KAFKA_ENABLED", "1") == "1",
        )

    if mode == "http":
        return HTTPAdapter(
            os.getenv("HKPSTORE_HTTP_URL", "http://localhost:11371"),
            token=os.getenv("HKPSTORE_HTTP_TOKEN") or None,
        )

    return LocalAdapter()


__all__ = [
    "BaseTransport",
    "TransportError",
    "LocalAdapter",
    "HTTPAdapter",
    "KafkaAdapter",
    "KeyChangeForwarder",
    "transport_factory",
]
