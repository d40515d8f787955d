import logging
import os
import sys
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

from django.conf import settings

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)

CONFIG_ROOT = "wikidata_search"


def find_config_path() -> Path:
    """
    Resolve the TOML file to read. An explicit path (Django setting, then
    environment) wins when it points at a file; otherwise a file name is
    looked up beside this package, ``config.toml`` unless overridden.
    """
    explicit = os.getenv(
        "WIKIDATA_SEARCH_PROVIDER_CONFIG_FILE_PATH",
        getattr(settings, "WIKIDATA_SEARCH_PROVIDER_CONFIG_FILE_PATH", None),
    )
    if explicit and Path(explicit).is_file():
        return Path(explicit).resolve()

    file_name = os.getenv(
        "WIKIDATA_SEARCH_PROVIDER_CONFIG_FILE_NAME",
        getattr(settings, "WIKIDATA_SEARCH_PROVIDER_CONFIG_FILE_NAME", "config.toml"),
    )
    return (Path(__file__).parent / file_name).resolve()


def read_config(path: Path) -> dict[str, Any]:
    logger.debug("Reading provider configuration from %s", path)
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except OSError as e:
        logger.error("Cannot open provider configuration %s: %s", path, e)
        raise
    except tomllib.TOMLDecodeError as e:
        logger.error("Invalid TOML in provider configuration %s: %s", path, e)
        raise


@dataclass(frozen=True, slots=True)
class RecordPaths:
    """JMESPath expressions used to turn a raw search hit into a record."""

    items_path: str = "search"
    id_path: str = "id"
    label_path: str = "label || match.text || id"
    description_path: str = "description"
    url_path: str = "url"

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "RecordPaths":
        data = data or {}
        defaults = cls()
        return cls(
            items_path=data.get("items_path") or defaults.items_path,
            id_path=data.get("id_path") or defaults.id_path,
            label_path=data.get("label_path") or defaults.label_path,
            description_path=data.get("description_path") or defaults.description_path,
            url_path=data.get("url_path") or defaults.url_path,
        )


@dataclass(frozen=True, slots=True)
class ProviderSettings:
    # activation
    keyword: str = "wd"

    # result filter
    limit: int = 5
    respect_host_limit: bool = False

    # remote api
    base_url: str = "https://www.wikidata.org"
    language: str | None = None
    timeout: float = 10.0
    max_workers: int = 1

    # open-action
    protocol: str = "https"
    opener: str = "xdg-open"

    # host-facing description
    name: str = "Wikidata Search Provider"
    icon: str = "wikidata_logo.svg"

    record: RecordPaths = field(default_factory=RecordPaths, repr=False)
    user_agent: dict[str, str] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ProviderSettings":
        data = data or {}
        defaults = cls()

        keyword = str(data.get("keyword", defaults.keyword)).strip()
        if not keyword or " " in keyword:
            raise ValueError(f"[{CONFIG_ROOT}] keyword must be a single non-empty token, got {keyword!r}")

        limit = int(data.get("limit", defaults.limit))
        if limit < 0:
            raise ValueError(f"[{CONFIG_ROOT}] limit must be >= 0, got {limit}")

        max_workers = int(data.get("max_workers", defaults.max_workers))
        if max_workers < 1:
            raise ValueError(f"[{CONFIG_ROOT}] max_workers must be >= 1, got {max_workers}")

        protocol = str(data.get("protocol", defaults.protocol)).rstrip(":")
        if not protocol:
            raise ValueError(f"[{CONFIG_ROOT}] protocol must not be empty")

        return cls(
            keyword=keyword,
            limit=limit,
            respect_host_limit=bool(data.get("respect_host_limit", defaults.respect_host_limit)),
            base_url=str(data.get("base_url") or defaults.base_url).rstrip("/"),
            language=(data.get("language") or None),
            timeout=float(data.get("timeout", defaults.timeout)),
            max_workers=max_workers,
            protocol=protocol,
            opener=str(data.get("opener") or defaults.opener),
            name=str(data.get("name") or defaults.name),
            icon=str(data.get("icon") or defaults.icon),
            record=RecordPaths.from_dict(data.get("record")),
            user_agent=dict(data.get("user_agent") or {}),
        )


@lru_cache(maxsize=1)
def _provider_settings_for(path: Path, mtime: float) -> ProviderSettings:
    root = read_config(path).get(CONFIG_ROOT, {}) or {}
    if not isinstance(root, dict):
        raise ValueError(f"[{CONFIG_ROOT}] must be a table")
    return ProviderSettings.from_dict(root)


def load_provider_settings() -> ProviderSettings:
    """
    Parsed ``[wikidata_search]`` settings. Re-read whenever the file's
    modification time changes.
    """
    path = find_config_path()
    try:
        mtime = path.stat().st_mtime
    except FileNotFoundError:
        mtime = 0.0
    return _provider_settings_for(path, mtime)
