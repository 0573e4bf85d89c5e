"""Handling of one inbound blob-created notification.

Flow: parse envelope -> check event type -> decode payload -> admission
filter -> resolve blob location -> process.

Validation failures are logged and reported as an outcome; the message is
still acknowledged. Processing failures propagate so the Functions runtime
abandons the message and Service Bus redelivers or dead-letters it.
"""

from typing import Protocol

from .admission import AdmissionFilter
from .events import NotificationEnvelope, decode_blob_created, parse_envelope
from .logging_utils import structured_logger
from .processor import ProcessingResult
from .validation import (
    BlobLocation,
    BlobPathError,
    EventParseError,
    HandlingOutcome,
    parse_blob_location,
    validate_event_type,
)


class Processor(Protocol):
    def process(self, source: BlobLocation) -> ProcessingResult: ...


def handle_notification(
    body: bytes | str,
    admission_filter: AdmissionFilter,
    processor: Processor,
) -> HandlingOutcome:
    """Handle a raw Service Bus message body."""
    try:
        envelope = parse_envelope(body)
    except EventParseError as e:
        structured_logger.warning("parse", f"Malformed event payload: {e}")
        return HandlingOutcome.MALFORMED

    return handle_envelope(envelope, admission_filter, processor)


def handle_envelope(
    envelope: NotificationEnvelope,
    admission_filter: AdmissionFilter,
    processor: Processor,
) -> HandlingOutcome:
    """Handle an already parsed notification envelope.

    Args:
        envelope: Parsed notification
        admission_filter: Accepted upload API identifiers
        processor: Performs the blob work for admitted events

    Returns:
        HandlingOutcome describing what happened

    Raises:
        Exception: Anything raised by processor.process()
    """
    structured_logger.info(
        "parse",
        "Event received",
        event_type=envelope.event_type,
        subject=envelope.subject,
        event_id=envelope.id,
    )

    type_result = validate_event_type(envelope.event_type)
    if not type_result.is_valid:
        structured_logger.warning(
            "parse",
            type_result.error_message or "Unexpected event type",
            event_type=envelope.event_type,
        )
        return HandlingOutcome.IGNORED_EVENT_TYPE

    try:
        descriptor = decode_blob_created(envelope)
    except EventParseError as e:
        structured_logger.warning("parse", f"Failed to deserialize BlobCreated event data: {e}")
        return HandlingOutcome.MALFORMED

    structured_logger.info(
        "parse",
        "BlobCreated event decoded",
        url=descriptor.url,
        api=descriptor.api,
        content_type=descriptor.content_type,
        content_length=descriptor.content_length,
    )

    if not admission_filter.admits(descriptor):
        structured_logger.info(
            "admit",
            f"Ignoring event with API: {descriptor.api}",
            api=descriptor.api,
            accepted_apis=sorted(admission_filter.accepted_apis),
        )
        return HandlingOutcome.FILTERED

    try:
        location = parse_blob_location(descriptor.url)
    except BlobPathError as e:
        structured_logger.warning("route", str(e), url=descriptor.url)
        return HandlingOutcome.INVALID_PATH

    structured_logger.set_context(blob=str(location))
    structured_logger.info(
        "route",
        "Blob resolved",
        container=location.container,
        blob_name=location.blob_name,
    )

    with structured_logger.timed_operation("process", "Process blob") as ctx:
        result = processor.process(location)
        ctx["found"] = result.found
        ctx["bytes_read"] = result.bytes_read
        ctx["event_published"] = result.event_published

    if not result.found:
        return HandlingOutcome.MISSING_SOURCE
    return HandlingOutcome.PROCESSED
