from scripto.sync_gateway.client import SyncClient
from scripto.sync_gateway.errors import (
    ConnectionRefused,
    InvalidRequest,
    MalformedResponse,
    ScriptOError,
    ServerError,
    TransportError,
    Unauthorized,
)

__all__ = [
    "ConnectionRefused",
    "InvalidRequest",
    "MalformedResponse",
    "ScriptOError",
    "ServerError",
    "SyncClient",
    "TransportError",
    "Unauthorized",
]
