"""Wire contracts exchanged over the publish/subscribe transport."""

from __future__ import annotations

import base64
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic_core import PydanticSerializationError, to_jsonable_python


def new_correlation_id() -> str:
    """Return a fresh per-message correlation identifier."""
    return str(uuid.uuid4())


PAYLOAD_BASE64 = "base64"


def encode_payload(payload: Any) -> Tuple[Any, Optional[str]]:
    """Return ``payload`` as a JSON value and the encoding needed to restore it.

    Binary payloads are base64 encoded; anything else must already be JSON
    serializable.

    Raises:
        TypeError: ``payload`` cannot be represented as JSON.
    """
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(payload)).decode("ascii"), PAYLOAD_BASE64
    try:
        return to_jsonable_python(payload), None
    except PydanticSerializationError as exc:
        raise TypeError(f"Payload is not JSON serializable: {exc}") from exc


def decode_payload(value: Any, encoding: Optional[str]) -> Any:
    """Inverse of :func:`encode_payload`."""
    if encoding is None:
        return value
    if encoding != PAYLOAD_BASE64 or not isinstance(value, str):
        raise ValueError(f"Unsupported payload encoding {encoding!r}")
    return base64.b64decode(value, validate=True)


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> str:
        """Serialize to JSON using wire (camelCase) field names."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, data: str | bytes):
        """Deserialize from JSON."""
        return cls.model_validate_json(data)


class Certificate(_WireModel):
    """Signed proof that ``claim`` sent the message with a given correlation id."""

    claim: str = Field(..., description="Canonical identity of the sender")
    proof: str = Field(..., description="Compact JWS over claim and messageId")


class Envelope(_WireModel):
    """Unit placed on a recipient's inbox channel.

    ``payload`` holds the JSON form produced by :func:`encode_payload`;
    ``payload_encoding`` is set when the sender's payload was binary.
    """

    certificate: Certificate
    correlation_id: str = Field(..., alias="correlationId")
    payload: Any = None
    payload_encoding: Optional[str] = Field(None, alias="payloadEncoding")

    def open_payload(self) -> Any:
        """Return the payload exactly as the sender passed it."""
        return decode_payload(self.payload, self.payload_encoding)


class ProtocolMessage(_WireModel):
    """Typed application message carried once authentication passes."""

    type: str
    content: Dict[str, Any] = Field(default_factory=dict)


class PacketMetadata(_WireModel):
    """Routing and identity context attached to a gateway packet."""

    packet_created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="packetCreatedAt"
    )
    correlation_id: str = Field(default_factory=new_correlation_id, alias="correlationId")
    protocol: str
    sender: Optional[str] = None
    receiver: Optional[str] = None
    certificate: Optional[Certificate] = None


class GatewayPacket(_WireModel):
    """Envelope used by gateways on the shared topic provider."""

    metadata: PacketMetadata
    message: Any = None
