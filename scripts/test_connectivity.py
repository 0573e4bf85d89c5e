#!/usr/bin/env python3
"""Test connectivity to the Azure resources used by the file processor."""

import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from shared.clients import AzureClients, build_clients  # noqa: E402
from shared.config import ProcessorSettings  # noqa: E402


def test_source_storage(clients: AzureClients) -> bool:
    """Test the source storage account."""
    print("Testing source Blob Storage connection...")

    try:
        containers = [c["name"] for c in clients.source_blob_service.list_containers()]
        print("  ✓ Connected to source storage account")
        print(f"    Containers: {containers}")
        return True

    except Exception as e:
        print(f"  ✗ Connection failed: {e}")
        return False


def test_destination_storage(clients: AzureClients, container_name: str) -> bool:
    """Test the destination storage account and output container."""
    print("\nTesting destination Blob Storage connection...")

    try:
        container_client = clients.destination_blob_service.get_container_client(container_name)
        if container_client.exists():
            print(f"  ✓ Container '{container_name}' exists")
        else:
            print(f"  ✗ Container '{container_name}' not found")
            print("    → It will be created on first processed file")
        return True

    except Exception as e:
        print(f"  ✗ Connection failed: {e}")
        return False


def test_event_hub(clients: AzureClients) -> bool:
    """Test the Event Hub producer."""
    print("\nTesting Event Hub connection...")

    try:
        properties = clients.event_hub_producer.get_eventhub_properties()
        print(f"  ✓ Connected to Event Hub '{properties['eventhub_name']}'")
        print(f"    Partitions: {properties['partition_ids']}")
        return True

    except Exception as e:
        print(f"  ✗ Connection failed: {e}")
        return False


def main() -> None:
    """Run all connectivity tests."""
    print("=" * 50)
    print("File Processor Connectivity Test")
    print("=" * 50)
    print()

    # Check .env file exists
    env_path = Path(__file__).parent.parent / ".env"
    if not env_path.exists():
        print("⚠ No .env file found")
        print("  → Copy .env.example to .env and fill in your values")
        print()

    settings = ProcessorSettings.from_env()
    try:
        clients = build_clients(settings)
    except ValueError as e:
        print(f"✗ {e}")
        print("  → Check your .env file")
        sys.exit(1)

    results = []
    try:
        results.append(("Source storage", test_source_storage(clients)))
        results.append(
            ("Destination storage", test_destination_storage(clients, settings.destination_container))
        )
        results.append(("Event Hub", test_event_hub(clients)))
    finally:
        clients.close()

    print()
    print("=" * 50)
    print("Summary")
    print("=" * 50)

    all_passed = True
    for name, passed in results:
        status = "✓ PASS" if passed else "✗ FAIL"
        print(f"  {name}: {status}")
        if not passed:
            all_passed = False

    print()
    if all_passed:
        print("All tests passed!")
        print(f"Accepted upload APIs: {sorted(settings.accepted_apis) or 'all'}")
    else:
        print("Some tests failed. Check the errors above.")
        sys.exit(1)


if __name__ == "__main__":
    main()
