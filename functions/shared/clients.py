"""Azure SDK clients used for processing.

Clients are bundled in AzureClients and passed to the processor. The
function entry points share one bundle per worker process via get_clients().

Configuration:
    FILE_STORAGE_ACCOUNT_ENDPOINT - Source storage account blob endpoint
    DESTINATION_STORAGE_ACCOUNT_ENDPOINT - Destination storage account blob endpoint
    EVENT_HUB_NAMESPACE - Fully qualified Event Hubs namespace
    EVENT_HUB_NAME - Event hub to publish processing events to

Authentication uses DefaultAzureCredential (managed identity in Azure,
developer credentials locally).
"""

import threading
from dataclasses import dataclass

from azure.eventhub import EventHubProducerClient
from azure.identity import DefaultAzureCredential
from azure.storage.blob import BlobServiceClient

from .config import ProcessorSettings
from .logging_utils import structured_logger


@dataclass
class AzureClients:
    """Source/destination storage clients and the Event Hub producer."""

    source_blob_service: BlobServiceClient
    destination_blob_service: BlobServiceClient
    event_hub_producer: EventHubProducerClient

    def close(self) -> None:
        self.source_blob_service.close()
        self.destination_blob_service.close()
        self.event_hub_producer.close()


def build_clients(settings: ProcessorSettings, credential=None) -> AzureClients:
    """Construct the SDK clients for the configured endpoints.

    Args:
        settings: Processor settings with account and Event Hub endpoints
        credential: Token credential (defaults to DefaultAzureCredential)

    Returns:
        AzureClients bundle

    Raises:
        ValueError: If an endpoint setting is missing
    """
    settings.require_endpoints()
    credential = credential or DefaultAzureCredential()

    structured_logger.info(
        "clients",
        "Creating Azure clients",
        source_account=settings.source_account_url,
        destination_account=settings.destination_account_url,
        event_hub=f"{settings.event_hub_namespace}/{settings.event_hub_name}",
    )

    return AzureClients(
        source_blob_service=BlobServiceClient(
            account_url=settings.source_account_url, credential=credential
        ),
        destination_blob_service=BlobServiceClient(
            account_url=settings.destination_account_url, credential=credential
        ),
        event_hub_producer=EventHubProducerClient(
            fully_qualified_namespace=settings.event_hub_namespace,
            eventhub_name=settings.event_hub_name,
            credential=credential,
        ),
    )


# Initialize clients lazily; the worker runs sync invocations on threads
_clients: AzureClients | None = None
_clients_lock = threading.Lock()


def get_clients(settings: ProcessorSettings | None = None) -> AzureClients:
    """Get or create the process-wide client bundle."""
    global _clients

    if _clients is None:
        with _clients_lock:
            if _clients is None:
                _clients = build_clients(settings or ProcessorSettings.from_env())
    return _clients
