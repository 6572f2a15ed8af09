from enum import Enum
from typing import Literal, Protocol


StrategyName = Literal["direct", "relay"]


class FailureKind(str, Enum):
    RATE_LIMITED = "RateLimited"
    SERVICE_UNAVAILABLE = "ServiceUnavailable"
    SAFETY_BLOCKED = "SafetyBlocked"
    NETWORK_ERROR = "NetworkError"
    INVALID_RESPONSE = "InvalidResponse"
    CONFIGURATION_ERROR = "ConfigurationError"
    UNKNOWN = "Unknown"


class ModelTransport(Protocol):
    """One way of reaching the model. Exactly one request per ``invoke``."""

    name: StrategyName

    async def invoke(self, prompt: str) -> str: ...
