"""Notification envelope and blob-created payload types.

Service Bus delivers the Event Grid event as the message body. Both the
Event Grid schema (eventType/subject/data) and the CloudEvents 1.0 schema
(type/subject/data) are accepted.
"""

import json
from dataclasses import dataclass
from typing import Any

from .validation import EventParseError


@dataclass
class NotificationEnvelope:
    """Parsed wrapper around an inbound storage-change event."""

    event_type: str
    subject: str
    data: Any
    id: str | None = None
    event_time: str | None = None


@dataclass
class BlobCreatedDescriptor:
    """Payload of a Microsoft.Storage.BlobCreated event."""

    url: str
    api: str
    content_type: str | None = None
    content_length: int | None = None


def envelope_from_dict(event: dict) -> NotificationEnvelope:
    """Build an envelope from a decoded Event Grid or CloudEvents object.

    Raises:
        EventParseError: If no event type can be found
    """
    if not isinstance(event, dict):
        raise EventParseError(f"Event must be a JSON object, got {type(event).__name__}")

    event_type = event.get("eventType") or event.get("type")
    if not isinstance(event_type, str) or not event_type:
        raise EventParseError("Event has no eventType/type field")

    return NotificationEnvelope(
        event_type=event_type,
        subject=event.get("subject") or "",
        data=event.get("data"),
        id=event.get("id"),
        event_time=event.get("eventTime") or event.get("time"),
    )


def parse_envelope(body: bytes | str) -> NotificationEnvelope:
    """Parse a message body into a notification envelope.

    A body holding a JSON array is accepted only when it contains exactly
    one event.

    Args:
        body: Raw Service Bus message body

    Returns:
        NotificationEnvelope

    Raises:
        EventParseError: If the body is not a decodable single event
    """
    if isinstance(body, (bytes, bytearray)):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EventParseError(f"Message body is not UTF-8: {e}") from e

    try:
        decoded = json.loads(body)
    except json.JSONDecodeError as e:
        raise EventParseError(f"Message body is not valid JSON: {e}") from e

    if isinstance(decoded, list):
        if len(decoded) != 1:
            raise EventParseError(
                f"Expected a single event, message body holds {len(decoded)}"
            )
        decoded = decoded[0]

    return envelope_from_dict(decoded)


def decode_blob_created(envelope: NotificationEnvelope) -> BlobCreatedDescriptor:
    """Decode the data payload of a blob-created envelope.

    The payload may arrive as an object or as a JSON string.

    Raises:
        EventParseError: If the payload is missing url or api
    """
    data = envelope.data
    if isinstance(data, (str, bytes, bytearray)):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise EventParseError(f"BlobCreated data is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise EventParseError("Failed to deserialize BlobCreated event data")

    url = data.get("url")
    api = data.get("api")
    if not isinstance(url, str) or not url:
        raise EventParseError("BlobCreated event data has no url")
    if not isinstance(api, str):
        raise EventParseError("BlobCreated event data has no api")

    content_length = data.get("contentLength")
    if content_length is not None:
        try:
            content_length = int(content_length)
        except (TypeError, ValueError) as e:
            raise EventParseError(f"Invalid contentLength: {content_length!r}") from e

    return BlobCreatedDescriptor(
        url=url,
        api=api,
        content_type=data.get("contentType"),
        content_length=content_length,
    )
