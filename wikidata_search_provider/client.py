from __future__ import annotations

import logging
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from importlib.metadata import PackageNotFoundError, version
from typing import Any

from django.conf import settings
from django.utils import translation

import requests

from wikidata_search_provider.config_utils import ProviderSettings

logger = logging.getLogger("wikidata_search.client")

SearchCallback = Callable[[str | None, dict | None], None]


def _package_version() -> str:
    try:
        return version("wikidata-search-provider")
    except PackageNotFoundError:
        return "0+unknown"


def get_user_agent(user_agent_config: dict | None = None) -> str:
    """
    Build a standardized User-Agent. Sources (in priority):
      1) [wikidata_search.user_agent] table (domain, contact)
      2) Django settings (DEFAULT_FROM_EMAIL) for the contact
    Wikimedia asks API clients to identify themselves this way.
    """
    base = f"wikidata-search-provider/{_package_version()}"

    cfg = user_agent_config or {}
    domain = cfg.get("domain")
    contact = cfg.get("contact") or getattr(settings, "DEFAULT_FROM_EMAIL", None)

    meta = []
    if domain:
        meta.append(f"https://{domain}")
    if contact:
        meta.append(contact)

    return base + (f" (+{'; '.join(meta)})" if meta else "")


def fetch_json(url: str, *, params: dict | None = None, user_agent: str | None = None, timeout: float = 10.0) -> dict:
    """
    GET a JSON document. Failures never raise; they come back as
    ``{"errors": [...]}`` so callers can report them uniformly.
    """
    logger.info("Fetching json from %s", url)
    try:
        response = requests.get(
            url,
            params=params,
            headers={"User-Agent": user_agent or get_user_agent()},
            timeout=timeout,
        )
        response.raise_for_status()
        logger.debug("Fetched data from %s: %s", url, response)
        json_data = response.json()
        if not json_data:
            logger.debug("Fetched data is empty %s: %s", url, response)
        return json_data if isinstance(json_data, dict) else {"errors": [f"unexpected payload from {url}"]}
    except requests.exceptions.RequestException as e:
        logger.error("Request failed for %s: %s", url, e)
        return {"errors": [str(e)]}
    except ValueError as e:
        # requests raises a ValueError subclass on undecodable bodies
        logger.error("Invalid JSON from %s: %s", url, e)
        return {"errors": [f"invalid json: {e}"]}


def error_from_document(doc: dict) -> str | None:
    """Collapse transport errors and MediaWiki API errors into one message."""
    if doc.get("errors"):
        return "; ".join(map(str, doc["errors"]))
    api_error = doc.get("error")
    if api_error:
        if isinstance(api_error, dict):
            return f"{api_error.get('code', 'error')}: {api_error.get('info', '')}".strip()
        return str(api_error)
    return None


class WikidataApi:
    """
    Asynchronous client for ``action=wbsearchentities``.

    ``search_entities`` returns immediately; the request runs on a small
    executor and ``callback(error, response)`` is invoked once it completes.
    ``dispatch`` lets a host marshal that invocation onto its own main loop.
    """

    def __init__(
        self,
        config: ProviderSettings,
        *,
        executor: ThreadPoolExecutor | None = None,
        dispatch: Callable[[Callable[[], None]], Any] | None = None,
    ) -> None:
        self.config = config
        self.limit = config.limit
        self.protocol = config.protocol
        self.user_agent = get_user_agent(config.user_agent)
        self._executor = executor or ThreadPoolExecutor(
            max_workers=config.max_workers, thread_name_prefix="wikidata-search"
        )
        self._dispatch = dispatch

    @property
    def endpoint(self) -> str:
        return f"{self.config.base_url}/w/api.php"

    def get_language(self) -> str:
        # resolved on the caller's thread, Django's active language is thread-local
        return (
            self.config.language
            or translation.get_language()
            or getattr(settings, "LANGUAGE_CODE", None)
            or "en"
        ).split("-")[0]

    def build_params(self, query: str, lang: str) -> dict[str, Any]:
        return {
            "action": "wbsearchentities",
            "format": "json",
            "type": "item",
            "language": lang,
            "uselang": lang,
            "limit": self.limit,
            "search": query,
        }

    def search_entities(self, query: str, callback: SearchCallback) -> Future:
        params = self.build_params(query, self.get_language())
        logger.debug("wbsearchentities query=%r params=%s", query, params)
        return self._executor.submit(self._run, query, params, callback)

    def _run(self, query: str, params: dict[str, Any], callback: SearchCallback) -> None:
        t0 = time.perf_counter()
        doc = fetch_json(self.endpoint, params=params, user_agent=self.user_agent, timeout=self.config.timeout)
        error = error_from_document(doc)
        response = None if error else doc
        dur_ms = int((time.perf_counter() - t0) * 1000)
        logger.info("wbsearchentities done query=%r error=%s duration_ms=%d", query, bool(error), dur_ms)

        def deliver() -> None:
            try:
                callback(error, response)
            except Exception:
                logger.exception("search callback failed for query=%r", query)

        if self._dispatch is not None:
            self._dispatch(deliver)
        else:
            deliver()

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
