"""Tests for enable/disable wiring and the Django app config."""

from __future__ import annotations

import importlib
import os
import threading

import pytest

from conftest import FakeHost, QueueHost, Recorder
from wikidata_search_provider import client, extension
from wikidata_search_provider.providers.messages import LOADING_ID
from wikidata_search_provider.providers.search import WikidataSearchProvider


@pytest.fixture(autouse=True)
def _reset_extension():
    extension._provider = None
    yield
    extension._provider = None


def test_enable_registers_once(host, provider) -> None:
    extension.init()
    first = extension.enable(host, provider)
    second = extension.enable(host)

    assert first is second is provider
    assert host.providers == [provider]
    assert extension.get_provider() is provider


def test_disable_unregisters_and_tears_down(host, provider, fake_api) -> None:
    extension.enable(host, provider)
    provider.get_initial_result_set(["wd", "q"], Recorder())

    extension.disable(host)

    assert host.providers == []
    assert extension.get_provider() is None
    assert fake_api.shut_down
    assert provider._outstanding.is_cancelled()


def test_disable_without_enable_is_noop(host) -> None:
    extension.disable(host)
    assert host.providers == []


class _Response:
    status_code = 200

    def raise_for_status(self) -> None:
        pass

    def json(self) -> dict:
        return {"search": [{"id": "Q42", "label": "Douglas Adams", "url": "//www.wikidata.org/wiki/Q42"}]}


def test_enable_posts_responses_through_host_dispatch(monkeypatch) -> None:
    monkeypatch.setattr(client.requests, "get", lambda *args, **kwargs: _Response())
    host = QueueHost()
    provider = extension.enable(host)
    delivered: list[tuple[list, threading.Thread]] = []

    def deliver(ids) -> None:  # noqa: ANN001
        delivered.append((list(ids), threading.current_thread()))

    try:
        provider.get_initial_result_set(["wd", "douglas"], deliver)
        host.run_pending()
    finally:
        extension.disable(host)

    assert [ids for ids, _ in delivered] == [[LOADING_ID], ["Q42"]]
    assert all(thread is threading.main_thread() for _, thread in delivered)
    assert provider.results.get("Q42").label == "Douglas Adams"


def test_explicit_dispatch_wins_over_host_attribute() -> None:
    posted: list = []
    provider = extension.enable(QueueHost(), dispatch=posted.append)
    try:
        assert provider._api._dispatch == posted.append
    finally:
        provider.destroy()


# importable host for WIKIDATA_SEARCH_PROVIDER_HOST
HOST = FakeHost()
QUEUE_HOST = QueueHost()


def _app_config():
    from wikidata_search_provider.apps import WikidataSearchConfig

    return WikidataSearchConfig("wikidata_search_provider", importlib.import_module("wikidata_search_provider"))


def test_ready_without_host_only_loads_settings(settings_override) -> None:
    app = _app_config()
    app.ready()

    assert app.provider_settings.keyword == "wd"
    assert app.host is None
    assert extension.get_provider() is None


def test_ready_enables_against_configured_host(settings_override) -> None:
    settings_override(WIKIDATA_SEARCH_PROVIDER_HOST="test_extension:HOST")
    app = _app_config()
    try:
        app.ready()

        assert app.host is HOST
        assert len(HOST.providers) == 1
        assert isinstance(HOST.providers[0], WikidataSearchProvider)
    finally:
        extension.disable(HOST)
    assert HOST.providers == []


def test_app_config_path_is_package_directory() -> None:
    from wikidata_search_provider import apps

    assert _app_config().path == os.path.dirname(os.path.abspath(apps.__file__))


def test_ready_passes_host_dispatch_to_provider(settings_override) -> None:
    settings_override(WIKIDATA_SEARCH_PROVIDER_HOST="test_extension:QUEUE_HOST")
    app = _app_config()
    try:
        app.ready()

        provider = QUEUE_HOST.providers[0]
        assert provider._api._dispatch == QUEUE_HOST.dispatch
    finally:
        extension.disable(QUEUE_HOST)
    assert QUEUE_HOST.providers == []


@pytest.fixture()
def settings_override():
    from django.conf import settings

    applied: list[str] = []

    def apply(**kwargs):  # noqa: ANN003
        for key, value in kwargs.items():
            setattr(settings, key, value)
            applied.append(key)

    yield apply
    for key in applied:
        delattr(settings, key)
