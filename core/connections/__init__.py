"""Connection registry primitives shared by the broadcast feature.

This package holds the record type, the registry contract with its
in-memory implementation, and the delivery channel contract.
"""

from core.connections.connection_info import ConnectionRecord
from core.connections.delivery import DeliveryChannel, DeliveryOutcome
from core.connections.registry import ConnectionRegistry, InMemoryConnectionRegistry

__all__ = [
    "ConnectionRecord",
    "ConnectionRegistry",
    "DeliveryChannel",
    "DeliveryOutcome",
    "InMemoryConnectionRegistry",
]
