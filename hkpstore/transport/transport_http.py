# hkpstore/transport/transport_http.py
from typing import Optional

import requests

from hkpstore.logger import get_logger
from hkpstore.transport.transport_base import BaseTransport, TransportError

log = get_logger("hkpstore.transport.http")


class HTTPAdapter(BaseTransport):
    """
    Posts key change events to a peer's ``/emit`` endpoint.

    An optional bearer token is sent as the Authorization header.
    """

    name = "http"

    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = 5.0):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    def publish(self, topic: str, payload, headers=None, key: Optional[str] = None) -> dict:
        url = f"{self.base_url}/emit"
        req_headers = {"Content-Type": "application/json", "X-Topic": topic}
        if key:
            req_headers["X-Key"] = key
        if self.token:
            req_headers["Authorization"] = f"Bearer {self.token}"
        req_headers.update(headers or {})

        log.debug(f"[HTTP PUB] -> {url} | topic={topic}")
        try:
            res = requests.post(url, data=self.to_bytes(payload), headers=req_headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"POST {url} failed: {e}") from e

        if not res.ok:
            log.error(f"[HTTP PUB] {res.status_code}: {res.text}")
            raise TransportError(f"POST {url} returned {res.status_code}")
        log.info(f"[HTTP PUB] {res.status_code} topic={topic}")
        return res.json() if res.content else {}

    def subscribe(self, topic: str, handler):
        raise TransportError("HTTP transport is publish-only")
