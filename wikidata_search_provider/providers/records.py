from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

import jmespath
from jmespath.exceptions import JMESPathError

from wikidata_search_provider.config_utils import RecordPaths

from .messages import SENTINEL_IDS
from .transforms.wikidata import normalize_search_hit

logger = logging.getLogger("wikidata_search.records")


def _eval_jmespath(expr: str, data: Any) -> Any:
    try:
        return jmespath.search(expr, data)
    except JMESPathError as e:
        logger.debug("JMESPath error for %r: %s", expr, e)
        return None


def _first_meaningful(v: Any) -> Any:
    """Pick the first non-empty scalar from lists like ['x', None, ''], otherwise return v."""
    if isinstance(v, list):
        for item in v:
            if item not in (None, "", [], {}):
                return item
        return None
    return v


def extract(expr: str | None, data: Any) -> Any:
    """
    Evaluate ``a || b || c`` style expressions: each alternative is tried in
    turn and the first non-empty value wins. Lists collapse to their first
    meaningful element.
    """
    if not expr or data is None:
        return None
    for cand in (k.strip() for k in expr.split("||")):
        if not cand:
            continue
        v = _first_meaningful(_eval_jmespath(cand, data))
        if v not in (None, "", [], {}):
            return v
    return None


def extract_items(expr: str, doc: Any) -> list[Any]:
    items = _eval_jmespath(expr, doc) if expr else doc
    if not isinstance(items, list):
        return []
    return items


@dataclass(frozen=True, slots=True)
class ResultRecord:
    id: str
    label: str
    description: str
    url: str
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_hit(cls, hit: dict[str, Any], paths: RecordPaths | None = None) -> ResultRecord | None:
        """Build a record from one search hit; hits without an id are dropped."""
        paths = paths or RecordPaths()
        doc = normalize_search_hit(dict(hit))

        rid = extract(paths.id_path, doc)
        if rid is None:
            logger.debug("dropping hit without id: %r", hit)
            return None
        rid = str(rid)

        label = extract(paths.label_path, doc)
        description = extract(paths.description_path, doc)
        url = extract(paths.url_path, doc)
        return cls(
            id=rid,
            label=str(label) if label is not None else rid,
            description=str(description) if description is not None else "",
            url=str(url) if url is not None else "",
            raw=doc,
        )


class ResultStore:
    """
    Session-lifetime mapping from result id to record.

    Append-and-overwrite only: there is no deletion and no eviction; the
    store goes away with the provider that owns it. Writes are serialized
    by the owning provider.
    """

    def __init__(self) -> None:
        self._records: dict[str, ResultRecord] = {}

    def put(self, record: ResultRecord) -> bool:
        if record.id in SENTINEL_IDS:
            logger.warning("refusing record with reserved id %r", record.id)
            return False
        self._records[record.id] = record
        return True

    def get(self, identifier: str) -> ResultRecord | None:
        return self._records.get(identifier)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._records))
