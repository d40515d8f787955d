from __future__ import annotations

from typing import Any


def qid_from_iri(value: str) -> str:
    if "/entity/" in value:
        return value.rsplit("/", 1)[-1]
    return value


def _strip_scheme(url: str) -> str:
    # "https://www.wikidata.org/entity/Q42" -> "//www.wikidata.org/entity/Q42"
    _scheme, sep, rest = url.partition("://")
    return f"//{rest}" if sep else url


def normalize_search_hit(hit: dict[str, Any]) -> dict[str, Any]:
    """
    Normalise one ``wbsearchentities`` hit:
      - strip leading/trailing whitespace on common string fields
      - ensure "id" is a bare QID (some mirrors return entity IRIs)
      - ensure "label" is populated (fall back to match.text, then the id)
      - ensure "url" is a scheme-less locator (fall back to concepturi)
      - ensure "description" is a string
    """
    for key in ("id", "label", "description", "url", "concepturi"):
        val = hit.get(key)
        if isinstance(val, str):
            hit[key] = val.strip()

    if isinstance(hit.get("id"), str):
        hit["id"] = qid_from_iri(hit["id"])

    if not hit.get("label"):
        match = hit.get("match")
        match_text = match.get("text") if isinstance(match, dict) else None
        if isinstance(match_text, str) and match_text.strip():
            hit["label"] = match_text.strip()
        elif hit.get("id"):
            hit["label"] = hit["id"]

    if not hit.get("url") and isinstance(hit.get("concepturi"), str) and hit["concepturi"]:
        hit["url"] = _strip_scheme(hit["concepturi"])
    elif isinstance(hit.get("url"), str):
        hit["url"] = _strip_scheme(hit["url"])

    if not isinstance(hit.get("description"), str):
        hit["description"] = ""

    return hit
