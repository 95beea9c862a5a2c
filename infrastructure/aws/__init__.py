"""AWS infrastructure helpers (clients, connection store, delivery channel)."""

from .clients import aws_clients, get_dynamodb_client, get_management_api_client
from .connection_store import DynamoConnectionRegistry
from .delivery import ApiGatewayDeliveryChannel, get_delivery_executor, is_gone_error

__all__ = [
    "aws_clients",
    "get_dynamodb_client",
    "get_management_api_client",
    "ApiGatewayDeliveryChannel",
    "DynamoConnectionRegistry",
    "get_delivery_executor",
    "is_gone_error",
]
