"""Multi-client fan-out: one independent relay session per connected client."""

from .emitter import ClientEmitter
from .fanout import ClientFanout
from .registry import ClientEntry, ClientRegistry

__all__ = ["ClientEmitter", "ClientEntry", "ClientFanout", "ClientRegistry"]
