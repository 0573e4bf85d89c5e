import json

import pytest

from shared.config import ProcessorSettings
from shared.processor import ProcessingResult


def blob_created_event(
    api: str = "SftpCommit",
    url: str = "https://sourceacct.blob.core.windows.net/uploads/incoming/data.csv",
    event_type: str = "Microsoft.Storage.BlobCreated",
) -> dict:
    """Event Grid BlobCreated event as relayed through Service Bus."""
    return {
        "id": "3f2a9c1e-0000-0000-0000-000000000001",
        "topic": "/subscriptions/sub/resourceGroups/rg/providers/Microsoft.Storage/storageAccounts/sourceacct",
        "subject": "/blobServices/default/containers/uploads/blobs/incoming/data.csv",
        "eventType": event_type,
        "eventTime": "2025-03-01T10:15:00.0000000Z",
        "dataVersion": "",
        "metadataVersion": "1",
        "data": {
            "api": api,
            "clientRequestId": "6d79dbfb-0e37-4fc4-981f-442c9ca89e20",
            "requestId": "831e1650-001e-001b-66ab-eeb76e000000",
            "contentType": "text/csv",
            "contentLength": 524288,
            "blobType": "BlockBlob",
            "url": url,
            "sequencer": "00000000000004420000000000028963",
        },
    }


class RecordingProcessor:
    """Processor double that records the locations it was asked to process."""

    def __init__(self, found: bool = True, error: Exception | None = None):
        self.calls = []
        self.found = found
        self.error = error

    def process(self, source):
        self.calls.append(source)
        if self.error is not None:
            raise self.error
        return ProcessingResult(found=self.found, bytes_read=10, event_published=self.found)


@pytest.fixture
def event_body():
    def _make(**kwargs) -> bytes:
        return json.dumps(blob_created_event(**kwargs)).encode("utf-8")

    return _make


@pytest.fixture
def settings():
    return ProcessorSettings(
        source_account_url="https://sourceacct.blob.core.windows.net",
        destination_account_url="https://destacct.blob.core.windows.net",
        event_hub_namespace="ns.servicebus.windows.net",
        event_hub_name="processed-files",
    )
