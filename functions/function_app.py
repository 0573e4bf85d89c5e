"""Azure Functions app using v2 programming model.

Requires AzureWebJobsFeatureFlags=EnableWorkerIndexing app setting.

Reacts to BlobCreated notifications for uploaded files:
- Service Bus trigger: Event Grid events relayed through a queue
- Event Grid trigger: direct Event Grid subscription
- Admission filter: only completed uploads (SftpCommit by default)
- Processing: stream source blob, write derived blob, publish Event Hub event
- Structured logging with timing

Every validation outcome completes the message. Processing errors are
re-raised so the runtime abandons the message and Service Bus retries it.
"""

import logging
import os

import azure.functions as func

# Lazy imports to avoid startup failures - these are imported inside functions
# from shared.admission import AdmissionFilter
# from shared.clients import get_clients
# from shared.config import ProcessorSettings
# from shared.handler import handle_envelope, handle_notification
# from shared.logging_utils import structured_logger
# from shared.processor import BlobProcessor

app = func.FunctionApp()

SERVICE_BUS_QUEUE_NAME = os.environ.get("SERVICE_BUS_QUEUE_NAME", "queue-blob-created")
SERVICE_BUS_CONNECTION = "ConnToServiceBusFile"


def _build_pipeline():
    """Build the admission filter and processor from app settings.

    SDK clients are only created once a blob is admitted and routed.
    """
    from shared.admission import AdmissionFilter
    from shared.clients import get_clients
    from shared.config import ProcessorSettings
    from shared.processor import BlobProcessor, DeferredProcessor

    settings = ProcessorSettings.from_env()
    admission_filter = AdmissionFilter.from_settings(settings)
    processor = DeferredProcessor(lambda: BlobProcessor(get_clients(settings), settings))
    return admission_filter, processor


@app.function_name(name="health")
@app.route(route="health", auth_level=func.AuthLevel.ANONYMOUS)
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint to verify function deployment.

    This function has no dependencies beyond azure.functions,
    so it should always work if deployment succeeded.
    """
    import sys

    # Test imports and report which ones fail
    import_status = {}

    modules_to_test = [
        ("azure.storage.blob", "Blob Storage SDK"),
        ("azure.eventhub", "Event Hubs SDK"),
        ("azure.identity", "Azure Identity"),
        ("dotenv", "python-dotenv"),
    ]

    for module_name, description in modules_to_test:
        try:
            __import__(module_name)
            import_status[module_name] = "OK"
        except ImportError as e:
            import_status[module_name] = f"FAILED: {e}"
        except Exception as e:
            import_status[module_name] = f"ERROR: {type(e).__name__}: {e}"

    lines = [
        "File Processor Function App - Health Check",
        "=" * 40,
        f"Python version: {sys.version}",
        f"Platform: {sys.platform}",
        "",
        "Import Status:",
    ]

    all_ok = True
    for module_name, status in import_status.items():
        lines.append(f"  {module_name}: {status}")
        if status != "OK":
            all_ok = False

    lines.append("")
    lines.append(f"Overall: {'HEALTHY' if all_ok else 'UNHEALTHY - check imports above'}")

    return func.HttpResponse(
        "\n".join(lines),
        status_code=200 if all_ok else 500,
        mimetype="text/plain"
    )


@app.service_bus_queue_trigger(
    arg_name="msg",
    queue_name=SERVICE_BUS_QUEUE_NAME,
    connection=SERVICE_BUS_CONNECTION,
)
def process_blob_notification(msg: func.ServiceBusMessage) -> None:
    """Handle a BlobCreated event relayed through Service Bus.

    Args:
        msg: Service Bus message whose body is an Event Grid event
    """
    from shared.handler import handle_notification
    from shared.logging_utils import structured_logger

    structured_logger.set_context(message_id=msg.message_id)

    try:
        structured_logger.info(
            "receive",
            "Service Bus message received",
            content_type=msg.content_type,
            delivery_count=msg.delivery_count,
        )

        admission_filter, processor = _build_pipeline()
        outcome = handle_notification(msg.get_body(), admission_filter, processor)

        structured_logger.info(
            "complete",
            "Message handled",
            outcome=outcome.value,
        )

    except Exception as e:
        logging.error(f"Error processing blob from Service Bus message: {e!s}", exc_info=True)
        # Re-raise to let Azure Functions abandon the message for retry
        raise

    finally:
        structured_logger.clear_context()


@app.event_grid_trigger(arg_name="event")
def process_blob_event(event: func.EventGridEvent) -> None:
    """Handle a BlobCreated event delivered directly by Event Grid.

    Args:
        event: Event Grid event
    """
    from shared.events import NotificationEnvelope
    from shared.handler import handle_envelope
    from shared.logging_utils import structured_logger

    structured_logger.set_context(event_id=event.id)

    try:
        envelope = NotificationEnvelope(
            event_type=event.event_type,
            subject=event.subject or "",
            data=event.get_json(),
            id=event.id,
            event_time=event.event_time.isoformat() if event.event_time else None,
        )

        admission_filter, processor = _build_pipeline()
        outcome = handle_envelope(envelope, admission_filter, processor)

        structured_logger.info(
            "complete",
            "Event handled",
            outcome=outcome.value,
        )

    except Exception as e:
        logging.error(f"Error processing blob from Event Grid event: {e!s}", exc_info=True)
        raise

    finally:
        structured_logger.clear_context()
