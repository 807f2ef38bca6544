from __future__ import annotations
from typing import Any, Callable, Dict, Optional
import json

Headers = Dict[str, str]


class TransportError(Exception):
    pass


class BaseTransport:
    """
    Mesh transport contract for key change fan-out.

    Canonical payload at the transport boundary is bytes; dict payloads are
    JSON-encoded by ``to_bytes``.
    """
    name: str = "base"

    def publish(
        self,
        topic: str,
        payload: bytes | dict,
        headers: Optional[Headers] = None,
        key: Optional[str] = None,
    ) -> Any:
        raise NotImplementedError

    def subscribe(self, topic: str, handler: Callable[[Any], None]) -> Any:
        raise NotImplementedError

    def healthz(self) -> dict:
        return {"status": "ok", "transport": self.name}

    def close(self) -> None:
        return

    @staticmethod
    def to_bytes(payload: bytes | dict) -> bytes:
        if isinstance(payload, bytes):
            return payload
        return json.dumps(payload, ensure_ascii=False, sort_keys=True).encode("utf-8")
