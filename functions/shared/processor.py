"""Blob processing for admitted uploads.

Reads the source blob as a stream, writes a derived file to the destination
storage account and publishes a JSON event to Event Hubs. The content
transform is pluggable and passes lines through unchanged by default.
"""

import codecs
import json
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime, timezone

from azure.core.exceptions import ResourceExistsError
from azure.eventhub import EventData
from azure.storage.blob import ContentSettings

from .clients import AzureClients
from .config import ProcessorSettings
from .logging_utils import structured_logger
from .validation import BlobLocation

LineTransform = Callable[[Iterable[str]], Iterable[str]]


def passthrough(lines: Iterable[str]) -> Iterable[str]:
    return lines


@dataclass
class ProcessingResult:
    """Outcome of processing one source blob."""

    found: bool
    destination: BlobLocation | None = None
    bytes_read: int = 0
    bytes_written: int = 0
    event_published: bool = False


def destination_blob_name(blob_name: str, now: datetime | None = None) -> str:
    """Name of the derived file, prefixed with a UTC timestamp."""
    now = now or datetime.now(timezone.utc)
    return f"{now:%Y%m%d%H%M%S}_new_{blob_name}"


def iter_text_lines(chunks: Iterable[bytes], encoding: str = "utf-8") -> Iterator[str]:
    """Decode a byte chunk stream into lines, keeping line endings.

    Multi-byte characters split across chunk boundaries are handled by an
    incremental decoder. Undecodable bytes become U+FFFD, so non-UTF-8
    uploads still produce output.
    """
    decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
    pending = ""
    for chunk in chunks:
        pending += decoder.decode(chunk)
        lines = pending.splitlines(keepends=True)
        # Last piece may be an incomplete line, or a "\r" whose "\n" is in
        # the next chunk
        if lines and not lines[-1].endswith("\n"):
            pending = lines.pop()
        else:
            pending = ""
        yield from lines
    pending += decoder.decode(b"", final=True)
    yield from pending.splitlines(keepends=True)


class BlobProcessor:
    """Processes one admitted blob per call."""

    def __init__(
        self,
        clients: AzureClients,
        settings: ProcessorSettings,
        transform: LineTransform = passthrough,
    ):
        self.clients = clients
        self.settings = settings
        self.transform = transform

    def process(self, source: BlobLocation) -> ProcessingResult:
        """Read the source blob, write the derived blob, publish an event.

        Args:
            source: Container and blob name of the uploaded file

        Returns:
            ProcessingResult (found=False if the source blob is gone)

        Raises:
            azure.core.exceptions.AzureError: On storage or Event Hub failures
        """
        source_client = self.clients.source_blob_service.get_blob_client(
            container=source.container, blob=source.blob_name
        )

        if not source_client.exists():
            structured_logger.warning(
                "read",
                "Source blob does not exist",
                container=source.container,
                blob=source.blob_name,
            )
            return ProcessingResult(found=False)

        properties = source_client.get_blob_properties()
        content_type = properties.content_settings.content_type
        structured_logger.info(
            "read",
            "Processing blob",
            size=properties.size,
            content_type=content_type,
        )

        result = ProcessingResult(found=True)

        with structured_logger.timed_operation("read", "Read and transform source blob") as ctx:
            downloader = source_client.download_blob()
            counted = self._count_bytes(downloader.chunks(), result)
            output = "".join(self.transform(iter_text_lines(counted)))
            payload = output.encode("utf-8")
            ctx["bytes_read"] = result.bytes_read
            ctx["bytes_out"] = len(payload)

        destination = BlobLocation(
            container=self.settings.destination_container,
            blob_name=destination_blob_name(source.blob_name),
        )
        with structured_logger.timed_operation(
            "write", "Write derived blob", destination=str(destination)
        ):
            self._write_destination(destination, payload, content_type)
        result.destination = destination
        result.bytes_written = len(payload)

        event = {
            "processedAt": datetime.now(timezone.utc).isoformat(),
            "sourceContainer": source.container,
            "sourceBlobName": source.blob_name,
            "destinationContainer": destination.container,
            "destinationBlobName": destination.blob_name,
            "contentLength": properties.size,
        }
        result.event_published = self._publish(event)

        return result

    @staticmethod
    def _count_bytes(chunks: Iterable[bytes], result: ProcessingResult) -> Iterator[bytes]:
        for chunk in chunks:
            result.bytes_read += len(chunk)
            yield chunk

    def _write_destination(
        self, destination: BlobLocation, payload: bytes, content_type: str | None
    ) -> None:
        container_client = self.clients.destination_blob_service.get_container_client(
            destination.container
        )
        try:
            container_client.create_container()
            structured_logger.info(
                "write", "Created destination container", container=destination.container
            )
        except ResourceExistsError:
            pass

        container_client.upload_blob(
            name=destination.blob_name,
            data=payload,
            overwrite=True,
            content_settings=ContentSettings(content_type=content_type) if content_type else None,
        )

    def _publish(self, event: dict) -> bool:
        """Send one JSON event. Returns False if it does not fit in a batch."""
        producer = self.clients.event_hub_producer
        json_event = json.dumps(event)

        batch = producer.create_batch()
        try:
            batch.add(EventData(json_event))
        except ValueError:
            structured_logger.error(
                "publish",
                "Event is too large for the batch",
                event_size=len(json_event),
            )
            return False

        with structured_logger.timed_operation("publish", "Event sent to Event Hub", event=event):
            producer.send_batch(batch)
        return True


class DeferredProcessor:
    """Builds the real processor on the first admitted blob.

    Messages that are filtered or fail validation never construct SDK
    clients, so a missing endpoint setting cannot turn a rejection into a
    retried failure.
    """

    def __init__(self, factory: Callable[[], BlobProcessor]):
        self._factory = factory
        self._processor: BlobProcessor | None = None

    def process(self, source: BlobLocation) -> ProcessingResult:
        if self._processor is None:
            self._processor = self._factory()
        return self._processor.process(source)
