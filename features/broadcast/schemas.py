"""Payload envelope, broadcast report and handler response types."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import MalformedPayloadError


class PostEnvelope(BaseModel):
    """Body of a post event: ``{"action": "post", "data": ...}``."""

    model_config = ConfigDict(extra="ignore")

    action: Optional[str] = None
    data: Any

    def render_payload(self) -> str:
        """Return the wire form pushed to every recipient."""
        if isinstance(self.data, str):
            return self.data
        return json.dumps(self.data, ensure_ascii=False, separators=(",", ":"))


def decode_post_body(body: Optional[str]) -> str:
    """Validate a raw post body and return the payload to broadcast.

    Raises:
        MalformedPayloadError: when the body is absent, not JSON, not an
            object, or has no ``data`` member.
    """

    if body is None or not body.strip():
        raise MalformedPayloadError("Request body is empty", field="body")

    try:
        parsed = json.loads(body)
    except json.JSONDecodeError as exc:
        raise MalformedPayloadError(f"Body is not valid JSON ({exc.msg})", field="body") from exc

    if not isinstance(parsed, dict):
        raise MalformedPayloadError("Body must be a JSON object", field="body")
    if "data" not in parsed:
        raise MalformedPayloadError("Body is missing the 'data' field", field="data")

    try:
        envelope = PostEnvelope.model_validate(parsed)
    except PydanticValidationError as exc:  # pragma: no cover - action of the wrong type
        raise MalformedPayloadError(str(exc), field="action") from exc

    return envelope.render_payload()


@dataclass(slots=True)
class DeliveryReport:
    """Tally of one broadcast over one registry snapshot."""

    total: int = 0
    delivered: int = 0
    stale: int = 0
    transient: int = 0
    cleanup_failures: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class HandlerResponse:
    """Result of handling one lifecycle event."""

    status_code: int
    body: str

    def to_lambda(self) -> Dict[str, Any]:
        """Render in the Lambda proxy integration shape."""
        return {"statusCode": self.status_code, "body": self.body}


__all__ = ["DeliveryReport", "HandlerResponse", "PostEnvelope", "decode_post_body"]
