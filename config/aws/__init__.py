"""AWS-specific configuration values."""

from __future__ import annotations

import os

AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
# DynamoDB table holding one item per live connection
TABLE_NAME = os.getenv("TABLE_NAME", "")
# Optional override, e.g. http://localhost:8000 for DynamoDB Local
DYNAMODB_ENDPOINT_URL = os.getenv("DYNAMODB_ENDPOINT_URL") or None

__all__ = [
    "AWS_REGION",
    "TABLE_NAME",
    "DYNAMODB_ENDPOINT_URL",
]
