from .cache import CachePort
from .debrid_transport import DebridTransportPort
from .timestamp_store import TimestampStorePort

__all__ = [
    "CachePort",
    "DebridTransportPort",
    "TimestampStorePort",
]
