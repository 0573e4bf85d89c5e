import threading
import time
from unittest.mock import MagicMock

import pytest

from shared import clients as clients_module
from shared.config import ProcessorSettings


def test_get_clients_builds_one_bundle_across_threads(monkeypatch, settings):
    built = []

    def slow_build(settings_arg):
        time.sleep(0.05)
        bundle = MagicMock()
        built.append(bundle)
        return bundle

    monkeypatch.setattr(clients_module, "_clients", None)
    monkeypatch.setattr(clients_module, "build_clients", slow_build)

    results = []
    threads = [
        threading.Thread(target=lambda: results.append(clients_module.get_clients(settings)))
        for _ in range(8)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert len(built) == 1
    assert len(results) == 8
    assert all(result is built[0] for result in results)


def test_build_clients_requires_endpoints():
    with pytest.raises(ValueError, match="EVENT_HUB_NAMESPACE"):
        clients_module.build_clients(ProcessorSettings(), credential=object())
