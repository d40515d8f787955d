"""Shared fixtures: minimal Django settings plus fakes for the host-side collaborators."""

from __future__ import annotations

import queue
from typing import Any

import django
import pytest
from django.conf import settings

from wikidata_search_provider.config_utils import ProviderSettings


def pytest_configure(config: Any) -> None:
    if not settings.configured:
        settings.configure(
            INSTALLED_APPS=[],
            USE_I18N=True,
            LANGUAGE_CODE="en-us",
            DEFAULT_FROM_EMAIL="ops@example.org",
        )
        django.setup()


class FakeApi:
    """Records searches; tests decide when and how each one completes."""

    def __init__(self, limit: int = 3, protocol: str = "https") -> None:
        self.limit = limit
        self.protocol = protocol
        self.calls: list[tuple[str, Any]] = []
        self.shut_down = False

    def search_entities(self, query: str, callback) -> None:  # noqa: ANN001
        self.calls.append((query, callback))

    def respond(self, index: int, error: str | None = None, response: dict | None = None) -> None:
        _query, callback = self.calls[index]
        callback(error, response)

    def shutdown(self) -> None:
        self.shut_down = True


class FakeLauncher:
    def __init__(self) -> None:
        self.opened: list[str] = []

    def open(self, url: str) -> bool:
        self.opened.append(url)
        return True


class FakeHost:
    def __init__(self) -> None:
        self.providers: list[Any] = []

    def register_provider(self, provider: Any) -> None:
        self.providers.append(provider)

    def unregister_provider(self, provider: Any) -> None:
        self.providers.remove(provider)


class QueueHost(FakeHost):
    """Host whose main loop is a queue drained by the test thread."""

    def __init__(self) -> None:
        super().__init__()
        self.pending: queue.Queue = queue.Queue()

    def dispatch(self, fn) -> None:  # noqa: ANN001
        self.pending.put(fn)

    def run_pending(self, timeout: float = 5.0) -> None:
        self.pending.get(timeout=timeout)()


class Recorder:
    """Callable standing in for the host's delivery callback."""

    def __init__(self) -> None:
        self.deliveries: list[list[Any]] = []

    def __call__(self, items: list[Any]) -> None:
        self.deliveries.append(list(items))


def hit(qid: str, label: str = "", description: str = "") -> dict[str, Any]:
    return {
        "id": qid,
        "label": label or f"label {qid}",
        "description": description or f"description {qid}",
        "url": f"//www.wikidata.org/wiki/{qid}",
        "concepturi": f"http://www.wikidata.org/entity/{qid}",
    }


@pytest.fixture()
def provider_settings() -> ProviderSettings:
    return ProviderSettings(keyword="wd", limit=3, protocol="https")


@pytest.fixture()
def fake_api() -> FakeApi:
    return FakeApi(limit=3)


@pytest.fixture()
def launcher() -> FakeLauncher:
    return FakeLauncher()


@pytest.fixture()
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture()
def provider(provider_settings, fake_api, launcher):  # noqa: ANN001
    from wikidata_search_provider.providers.search import WikidataSearchProvider

    return WikidataSearchProvider(provider_settings, api=fake_api, launcher=launcher)
