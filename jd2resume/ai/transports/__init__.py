from .direct import DirectTransport
from .relay import RelayTransport

__all__ = ["DirectTransport", "RelayTransport"]
