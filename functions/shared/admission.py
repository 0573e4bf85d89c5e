"""Admission filter for blob-created notifications.

Upload protocols such as SFTP raise one BlobCreated event when the upload
starts (SftpCreate, the blob may still be partial) and another when it is
committed (SftpCommit). Only identifiers in the accepted set are processed,
so each logical upload is handled once and never while incomplete.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from .config import DEFAULT_ACCEPTED_BLOB_APIS, ProcessorSettings, parse_api_list
from .events import BlobCreatedDescriptor

DEFAULT_ACCEPTED_APIS = parse_api_list(DEFAULT_ACCEPTED_BLOB_APIS)


def is_admitted(api: str, accepted_apis: Iterable[str]) -> bool:
    """Return True if the API identifier is accepted.

    Matching is exact and case-sensitive. An empty accepted set admits
    everything.
    """
    accepted = frozenset(accepted_apis)
    if not accepted:
        return True
    return api in accepted


@dataclass(frozen=True)
class AdmissionFilter:
    """Stateless predicate gating which notifications get processed."""

    accepted_apis: frozenset[str] = field(default=DEFAULT_ACCEPTED_APIS)
    enabled: bool = True

    @classmethod
    def from_settings(cls, settings: ProcessorSettings) -> "AdmissionFilter":
        return cls(
            accepted_apis=frozenset(settings.accepted_apis),
            enabled=settings.admission_filter_enabled,
        )

    def admits(self, descriptor: BlobCreatedDescriptor) -> bool:
        if not self.enabled:
            return True
        return is_admitted(descriptor.api, self.accepted_apis)
