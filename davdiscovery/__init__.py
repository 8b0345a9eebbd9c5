#!/usr/bin/env python
import logging

__version__ = "0.1.0"

from .async_discovery import AsyncServiceDiscoverer
from .discovery import ServiceDiscoverer, discover
from .lib.error import (
    ConfigurationError,
    DiscoveryError,
    DispatchError,
    InvalidInputError,
)
from .protocol.types import ServiceInfo, ServiceKind

# Silence notification of no default logging handler
log = logging.getLogger("davdiscovery")


class NullHandler(logging.Handler):
    def emit(self, record) -> None:
        pass


log.addHandler(NullHandler())

__all__ = [
    "__version__",
    "ServiceDiscoverer",
    "AsyncServiceDiscoverer",
    "discover",
    "ServiceInfo",
    "ServiceKind",
    "DiscoveryError",
    "InvalidInputError",
    "ConfigurationError",
    "DispatchError",
]
