"""Event validation utilities.

Checks an inbound notification is a blob-created event and that its blob
URL names both a container and a blob.
"""

from dataclasses import dataclass
from enum import Enum
from urllib.parse import unquote, urlparse

BLOB_CREATED_EVENT_TYPE = "Microsoft.Storage.BlobCreated"


class ValidationError(Exception):
    """Raised when an inbound notification fails validation."""

    pass


class EventParseError(ValidationError):
    """Raised when a message body or event payload cannot be decoded."""

    pass


class BlobPathError(ValidationError):
    """Raised when a blob URL does not resolve to container and blob name."""

    pass


class HandlingOutcome(Enum):
    """How a single inbound message was handled.

    Every outcome means the message is acknowledged. Processing failures
    are raised instead so the runtime can retry.
    """

    PROCESSED = "PROCESSED"
    FILTERED = "FILTERED"
    IGNORED_EVENT_TYPE = "IGNORED_EVENT_TYPE"
    MALFORMED = "MALFORMED"
    INVALID_PATH = "INVALID_PATH"
    MISSING_SOURCE = "MISSING_SOURCE"


@dataclass
class ValidationResult:
    """Result of event validation."""

    is_valid: bool
    error_message: str | None = None


@dataclass(frozen=True)
class BlobLocation:
    """Container and blob name addressed by a blob URL."""

    container: str
    blob_name: str

    def __str__(self) -> str:
        return f"{self.container}/{self.blob_name}"


def validate_event_type(event_type: str) -> ValidationResult:
    """Validate the envelope carries a blob-created event.

    Args:
        event_type: Envelope event type

    Returns:
        ValidationResult with status and error message if invalid
    """
    if event_type != BLOB_CREATED_EVENT_TYPE:
        return ValidationResult(
            is_valid=False,
            error_message=f"Received non-BlobCreated event: {event_type}",
        )
    return ValidationResult(is_valid=True)


def parse_blob_location(url: str) -> BlobLocation:
    """Split a blob URL into container and blob name.

    The path is split on the first slash only, so virtual directories stay
    part of the blob name. Percent-encoded characters are decoded.

    Args:
        url: Blob URL, e.g. https://acct.blob.core.windows.net/in/dir/a.csv

    Returns:
        BlobLocation("in", "dir/a.csv")

    Raises:
        BlobPathError: If the URL is unparsable or has fewer than two segments
    """
    try:
        parsed = urlparse(url)
    except (TypeError, ValueError) as e:
        raise BlobPathError(f"Unable to parse blob URL: {url!r} ({e})") from e

    if not parsed.scheme or not parsed.netloc:
        raise BlobPathError(f"Unable to parse blob path from URL: {url}")

    segments = parsed.path.lstrip("/").split("/", 1)
    if len(segments) < 2 or not segments[0] or not segments[1]:
        raise BlobPathError(f"Unable to parse blob path from URL: {url}")

    return BlobLocation(container=unquote(segments[0]), blob_name=unquote(segments[1]))
