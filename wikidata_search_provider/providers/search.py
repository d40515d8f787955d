from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from wikidata_search_provider.cancellable import Cancellable
from wikidata_search_provider.client import WikidataApi
from wikidata_search_provider.config_utils import ProviderSettings, load_provider_settings
from wikidata_search_provider.open_action import UrlLauncher, build_url

from .interfaces import CancellableLike, DeliverIds, DeliverMetas, Launcher, SearchApi
from .messages import ERROR_ID, LOADING_ID, build_messages, missing_message
from .meta import ResultMeta, resolve_icon_path
from .records import ResultRecord, ResultStore, extract_items

logger = logging.getLogger("wikidata_search.provider")

PROVIDER_ID = "wikidata-search-provider"


@dataclass(frozen=True, slots=True)
class AppInfo:
    name: str
    icon: str
    id: str

    def get_name(self) -> str:
        return self.name

    def get_icon(self) -> str:
        return self.icon

    def get_id(self) -> str:
        return self.id


class WikidataSearchProvider:
    """
    Search provider for a host search surface.

    Queries start with the activation keyword (``wd`` by default), e.g.
    ``wd douglas adams``. Only one search is outstanding at a time: every
    accepted query cancels the previous one, and a cancelled response
    neither touches the result store nor calls back into the host.

    ``dispatch`` posts response handling onto the host's main loop; without
    it responses are handled on the API worker thread.
    """

    def __init__(
        self,
        config: ProviderSettings | None = None,
        *,
        api: SearchApi | None = None,
        launcher: Launcher | None = None,
        dispatch: Callable[[Callable[[], None]], Any] | None = None,
    ) -> None:
        self.config = config or load_provider_settings()
        self.id = PROVIDER_ID
        self.icon_path = resolve_icon_path(self.config.icon)
        self.app_info = AppInfo(name=self.config.name, icon=self.icon_path, id=self.id)

        # pseudo results shown as search items
        self._messages = build_messages()
        self.results = ResultStore()

        self._api: SearchApi = api or WikidataApi(self.config, dispatch=dispatch)
        self._launcher: Launcher = launcher or UrlLauncher(self.config.opener)

        # the single outstanding-request slot; starts out idle
        self._outstanding = Cancellable()
        self._lock = threading.RLock()

    # ------------------------------------------------------------------ #
    # Host protocol
    # ------------------------------------------------------------------ #
    def get_initial_result_set(
        self, terms: Sequence[str], callback: DeliverIds, cancellable: CancellableLike | None = None
    ) -> None:
        """
        Search the API if the terms form a Wikidata query, i.e. the first
        term is the activation keyword and at least one term follows.
        Anything else is left alone entirely.
        """
        if len(terms) < 2 or terms[0] != self.config.keyword:
            return

        query = " ".join(terms[1:])
        with self._lock:
            self._outstanding.cancel()
            current = Cancellable(parent=cancellable)
            self._outstanding = current
            self.show_message(LOADING_ID, callback)

        logger.info("wikidata-search: start query=%r", query)
        t0 = time.perf_counter()

        def on_response(error: str | None, response: dict | None) -> None:
            dur_ms = int((time.perf_counter() - t0) * 1000)
            logger.debug("wikidata-search: response query=%r duration_ms=%d", query, dur_ms)
            self._on_response(error, response, callback, current)

        self._api.search_entities(query, on_response)

    def get_subset_result_set(
        self,
        previous_results: Sequence[str],
        terms: Sequence[str],
        callback: DeliverIds,
        cancellable: CancellableLike | None = None,
    ) -> None:
        # remote hits can't be narrowed locally, so refining means searching again
        self.get_initial_result_set(terms, callback, cancellable)

    def get_result_metas(self, identifiers: Sequence[str], callback: DeliverMetas) -> None:
        callback([self._get_result_meta(identifier) for identifier in identifiers])

    def activate_result(self, identifier: str, terms: Sequence[str], timestamp: Any = None) -> None:
        """Open the result's Wikidata page; placeholder rows do nothing."""
        if identifier in self._messages:
            return

        record = self.results.get(identifier)
        if record is None:
            logger.warning("wikidata-search: cannot activate unknown result %r", identifier)
            return
        if not record.url:
            logger.warning("wikidata-search: result %r has no url", identifier)
            return

        url = build_url(self._api.protocol, record.url)
        logger.info("wikidata-search: opening %s", url)
        self._launcher.open(url)

    def filter_results(self, results: Sequence[str], max_results: int | None = None) -> list[str]:
        """
        Return the first ``limit`` results. The host's ``max_results`` is
        ignored unless ``respect_host_limit`` is configured.
        """
        limit = self._api.limit
        if self.config.respect_host_limit and max_results is not None and max_results >= 0:
            limit = min(limit, max_results)
        return list(results[:limit])

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #
    def show_message(self, identifier: str, callback: DeliverIds) -> None:
        callback([identifier])

    def _get_result_meta(self, identifier: str) -> ResultMeta:
        message = self._messages.get(identifier)
        if message is not None:
            return ResultMeta.for_message(message, self.icon_path)

        record = self.results.get(identifier)
        if record is None:
            logger.warning("wikidata-search: metadata requested for unknown result %r", identifier)
            return ResultMeta.for_message(missing_message(identifier), self.icon_path)
        return ResultMeta.for_record(record, self.icon_path)

    def _on_response(
        self,
        error: str | None,
        response: dict | None,
        callback: DeliverIds,
        cancellable: CancellableLike,
    ) -> None:
        """
        Store the hits and hand their ids to the host. A superseded request
        returns without any effect.
        """
        with self._lock:
            if cancellable.is_cancelled():
                logger.debug("wikidata-search: dropping cancelled response")
                return

            hits = extract_items(self.config.record.items_path, response) if response else []
            if hits:
                ids: list[str] = []
                skipped = 0
                for hit in hits:
                    if not isinstance(hit, dict):
                        skipped += 1
                        continue
                    try:
                        record = ResultRecord.from_hit(hit, self.config.record)
                    except (TypeError, AttributeError, ValueError) as e:
                        logger.warning("wikidata-search: skipping malformed hit %r: %s", hit, e)
                        skipped += 1
                        continue
                    if record is not None and self.results.put(record):
                        ids.append(record.id)
                logger.info("wikidata-search: stored=%d skipped=%d total=%d", len(ids), skipped, len(self.results))
                if not ids and skipped:
                    self.show_message(ERROR_ID, callback)
                else:
                    callback(self.filter_results(ids))
            elif error:
                # let the user know that an error has occurred
                logger.error("wikidata-search: search failed: %s", error)
                self.show_message(ERROR_ID, callback)
            else:
                callback([])

    def destroy(self) -> None:
        with self._lock:
            self._outstanding.cancel()
        self._api.shutdown()
