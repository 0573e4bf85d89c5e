"""Shared utilities for Azure Functions.

Exports:
- Config: App settings and accepted-API parsing
- Events: Notification envelope and BlobCreated payload parsing
- Admission: Upload-completion admission filter
- Validation: Event type and blob path checks, handling outcomes
- Clients: Azure Storage and Event Hub client bundle
- Processor: Source read, derived write, event publish
- Handler: One-message orchestration
- Logging: Structured JSON logging
"""

from .admission import DEFAULT_ACCEPTED_APIS, AdmissionFilter, is_admitted
from .clients import AzureClients, build_clients, get_clients
from .config import ProcessorSettings, parse_api_list, parse_bool
from .events import (
    BlobCreatedDescriptor,
    NotificationEnvelope,
    decode_blob_created,
    envelope_from_dict,
    parse_envelope,
)
from .handler import handle_envelope, handle_notification
from .logging_utils import StructuredLogger, structured_logger
from .processor import (
    BlobProcessor,
    DeferredProcessor,
    ProcessingResult,
    destination_blob_name,
    iter_text_lines,
)
from .validation import (
    BLOB_CREATED_EVENT_TYPE,
    BlobLocation,
    BlobPathError,
    EventParseError,
    HandlingOutcome,
    ValidationError,
    ValidationResult,
    parse_blob_location,
    validate_event_type,
)

__all__ = [
    # Config
    "ProcessorSettings",
    "parse_api_list",
    "parse_bool",
    # Events
    "NotificationEnvelope",
    "BlobCreatedDescriptor",
    "parse_envelope",
    "envelope_from_dict",
    "decode_blob_created",
    # Admission
    "AdmissionFilter",
    "is_admitted",
    "DEFAULT_ACCEPTED_APIS",
    # Validation
    "BLOB_CREATED_EVENT_TYPE",
    "BlobLocation",
    "BlobPathError",
    "EventParseError",
    "HandlingOutcome",
    "ValidationError",
    "ValidationResult",
    "parse_blob_location",
    "validate_event_type",
    # Clients
    "AzureClients",
    "build_clients",
    "get_clients",
    # Processor
    "BlobProcessor",
    "DeferredProcessor",
    "ProcessingResult",
    "destination_blob_name",
    "iter_text_lines",
    # Handler
    "handle_notification",
    "handle_envelope",
    # Logging
    "StructuredLogger",
    "structured_logger",
]
