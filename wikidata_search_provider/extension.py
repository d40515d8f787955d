from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from wikidata_search_provider.providers.interfaces import SearchHost
from wikidata_search_provider.providers.search import WikidataSearchProvider

logger = logging.getLogger("wikidata_search.extension")

_provider: WikidataSearchProvider | None = None


def init() -> None:
    """noop"""


def enable(
    host: SearchHost,
    provider: WikidataSearchProvider | None = None,
    dispatch: Callable[[Callable[[], None]], Any] | None = None,
) -> WikidataSearchProvider:
    """
    Register the provider with ``host``. Responses are posted through
    ``dispatch``, falling back to the host's own ``dispatch`` attribute
    (e.g. a main-loop ``idle_add``) when the host exposes one.
    """
    global _provider
    if _provider is None:
        dispatch = dispatch or getattr(host, "dispatch", None)
        _provider = provider or WikidataSearchProvider(dispatch=dispatch)
        host.register_provider(_provider)
        logger.info("wikidata-search: registered provider %s", _provider.id)
    return _provider


def disable(host: SearchHost) -> None:
    global _provider
    if _provider is not None:
        host.unregister_provider(_provider)
        _provider.destroy()
        logger.info("wikidata-search: unregistered provider %s", _provider.id)
        _provider = None


def get_provider() -> WikidataSearchProvider | None:
    return _provider
