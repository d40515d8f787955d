from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Protocol

from .meta import ResultMeta

DeliverIds = Callable[[list[str]], None]
DeliverMetas = Callable[[list[ResultMeta]], None]


class CancellableLike(Protocol):
    def cancel(self) -> None: ...
    def is_cancelled(self) -> bool: ...


class AppInfo(Protocol):
    def get_name(self) -> str: ...
    def get_icon(self) -> str: ...
    def get_id(self) -> str: ...


class SearchProvider(Protocol):
    """What a host search surface drives. The host calls, the provider answers via callbacks."""

    id: str
    app_info: AppInfo

    def get_initial_result_set(
        self, terms: Sequence[str], callback: DeliverIds, cancellable: CancellableLike | None = None
    ) -> None: ...
    def get_subset_result_set(
        self,
        previous_results: Sequence[str],
        terms: Sequence[str],
        callback: DeliverIds,
        cancellable: CancellableLike | None = None,
    ) -> None: ...
    def get_result_metas(self, identifiers: Sequence[str], callback: DeliverMetas) -> None: ...
    def activate_result(self, identifier: str, terms: Sequence[str], timestamp: Any) -> None: ...
    def filter_results(self, results: Sequence[str], max_results: int) -> list[str]: ...


class SearchHost(Protocol):
    def register_provider(self, provider: SearchProvider) -> None: ...
    def unregister_provider(self, provider: SearchProvider) -> None: ...


class SearchApi(Protocol):
    limit: int
    protocol: str

    def search_entities(self, query: str, callback: Callable[[str | None, dict | None], None]) -> Any: ...
    def shutdown(self) -> None: ...


class Launcher(Protocol):
    def open(self, url: str) -> bool: ...
