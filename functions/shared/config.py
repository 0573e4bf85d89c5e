"""Shared configuration for the file processor function app."""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# SFTP uploads raise SftpCreate when the upload starts and SftpCommit once
# the file is complete. Only the commit is processed by default.
DEFAULT_ACCEPTED_BLOB_APIS = "SftpCommit"
DEFAULT_DESTINATION_CONTAINER = "filtered-csv"

_TRUTHY = {"true", "1", "yes", "on"}


def parse_bool(value: str | None, default: bool = True) -> bool:
    """Interpret an app setting as a boolean flag."""
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in _TRUTHY


def parse_api_list(value: str | None) -> frozenset[str]:
    """Parse a comma-separated list of blob API identifiers.

    Entries are trimmed and empty entries dropped. Case is preserved since
    matching is case-sensitive.

    Args:
        value: Raw setting value, e.g. "SftpCommit, PutBlob"

    Returns:
        Frozen set of identifiers (empty if value is None or blank)
    """
    if not value:
        return frozenset()
    return frozenset(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class ProcessorSettings:
    """Snapshot of the app settings used by one function host."""

    accepted_apis: frozenset[str] = field(
        default_factory=lambda: parse_api_list(DEFAULT_ACCEPTED_BLOB_APIS)
    )
    admission_filter_enabled: bool = True
    source_account_url: str = ""
    destination_account_url: str = ""
    event_hub_namespace: str = ""
    event_hub_name: str = ""
    destination_container: str = DEFAULT_DESTINATION_CONTAINER

    @classmethod
    def from_env(cls) -> "ProcessorSettings":
        """Read settings from the environment.

        ACCEPTED_BLOB_APIS set to an empty string yields an empty accepted
        set, which disables filtering.
        """
        return cls(
            accepted_apis=parse_api_list(
                os.environ.get("ACCEPTED_BLOB_APIS", DEFAULT_ACCEPTED_BLOB_APIS)
            ),
            admission_filter_enabled=parse_bool(
                os.environ.get("ADMISSION_FILTER_ENABLED"), default=True
            ),
            source_account_url=os.environ.get("FILE_STORAGE_ACCOUNT_ENDPOINT", ""),
            destination_account_url=os.environ.get(
                "DESTINATION_STORAGE_ACCOUNT_ENDPOINT", ""
            ),
            event_hub_namespace=os.environ.get("EVENT_HUB_NAMESPACE", ""),
            event_hub_name=os.environ.get("EVENT_HUB_NAME", ""),
            destination_container=os.environ.get(
                "DESTINATION_CONTAINER_NAME", DEFAULT_DESTINATION_CONTAINER
            ),
        )

    def require_endpoints(self) -> None:
        """Raise ValueError if any endpoint needed for processing is unset."""
        missing = [
            name
            for name, value in (
                ("FILE_STORAGE_ACCOUNT_ENDPOINT", self.source_account_url),
                ("DESTINATION_STORAGE_ACCOUNT_ENDPOINT", self.destination_account_url),
                ("EVENT_HUB_NAMESPACE", self.event_hub_namespace),
                ("EVENT_HUB_NAME", self.event_hub_name),
            )
            if not value
        ]
        if missing:
            raise ValueError(
                f"Missing required environment variable(s): {', '.join(missing)}"
            )
