# hkpstore/transport/transport_local.py
import json
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

from hkpstore.logger import get_logger
from hkpstore.transport.transport_base import BaseTransport

log = get_logger("hkpstore.transport.local")


class LocalAdapter(BaseTransport):
    """In-process loopback; handlers receive the decoded JSON payload."""

    name = "local"

    def __init__(self):
        self.handlers: Dict[str, List[Callable[[Any], None]]] = defaultdict(list)

    def publish(self, topic: str, payload, headers=None, key: Optional[str] = None) -> None:
        data = self.to_bytes(payload)
        log.info(f"[LOCAL PUB] topic={topic} key={key} bytes={len(data)}")
        message = json.loads(data.decode("utf-8"))
        for handler in list(self.handlers.get(topic, [])):
            handler(message)

    def subscribe(self, topic: str, handler: Callable[[Any], None]) -> None:
        log.info(f"[LOCAL SUB] topic={topic}")
        self.handlers[topic].append(handler)
