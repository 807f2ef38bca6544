from __future__ import annotations

from hkpstore.constants import KEY_CHANGE_TOPIC
from hkpstore.models import KeyChange
from hkpstore.transport.transport_base import BaseTransport
from hkpstore.utils import canonical_json


class KeyChangeForwarder:
    """
    Notification bus listener that republishes key changes on a transport,
    so recon / sync peers can follow the store without polling.

    Transport errors propagate to the bus, which logs and drops them.
    """

    def __init__(self, transport: BaseTransport, topic: str = KEY_CHANGE_TOPIC):
        self.transport = transport
        self.topic = topic

    def __call__(self, change: KeyChange) -> None:
        self.transport.publish(
            self.topic,
            canonical_json(change.to_dict()),
            headers={"kind": change.kind},
            key=change.fingerprint,
        )
