"""Configuration loader"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from collector.collector.models import CollectionConfig, PollerConfig
from collector.storage.factory import QueueMode
from naver.core.types import OpenApiKey, SearchAdKey

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.json"
MAX_ENV_KEYS = 9


@dataclass
class AppConfig:
    """Typed view of config.json"""

    search_ad_keys: list[SearchAdKey] = field(default_factory=list)
    open_api_keys: list[OpenApiKey] = field(default_factory=list)
    api_timeout: float = 10.0

    collection: CollectionConfig = field(default_factory=CollectionConfig)
    poller: PollerConfig = field(default_factory=PollerConfig)

    cache_ttl: float = 60 * 60
    cache_max_entries: int = 2000

    queue_mode: QueueMode = QueueMode.MEMORY
    queue_path: str = "data/jobs.json"

    tracker_max_history: int = 10000
    tracker_path: str | None = "data/collection_history.json"

    keyword_store_path: str = "data/keywords.json"


def _is_placeholder(value: str | None) -> bool:
    return not value or value.startswith("YOUR_")


def _parse_search_ad_keys(items: list[dict]) -> list[SearchAdKey]:
    keys = []
    for i, item in enumerate(items, 1):
        if _is_placeholder(item.get("customer_id")):
            logger.warning(f"Skipping search-ad key #{i} without customer_id")
            continue
        keys.append(
            SearchAdKey(
                name=item.get("name") or f"search-ad-{i}",
                customer_id=str(item["customer_id"]),
                api_key=item.get("api_key", ""),
                secret_key=item.get("secret_key", ""),
            )
        )
    return keys


def _parse_open_api_keys(items: list[dict]) -> list[OpenApiKey]:
    keys = []
    for i, item in enumerate(items, 1):
        if _is_placeholder(item.get("client_id")):
            logger.warning(f"Skipping open-api key #{i} without client_id")
            continue
        keys.append(
            OpenApiKey(
                name=item.get("name") or f"open-api-{i}",
                client_id=item["client_id"],
                client_secret=item.get("client_secret", ""),
            )
        )
    return keys


def load_keys_from_env(
    environ: dict | None = None,
) -> tuple[list[SearchAdKey], list[OpenApiKey]]:
    """Read numbered NAVER_* variables, skipping unset and placeholder values"""
    env = os.environ if environ is None else environ
    search_ad = []
    open_api = []
    for n in range(1, MAX_ENV_KEYS + 1):
        customer_id = env.get(f"NAVER_CUSTOMER_ID_{n}")
        if not _is_placeholder(customer_id):
            search_ad.append(
                SearchAdKey(
                    name=f"search-ad-{n}",
                    customer_id=customer_id,
                    api_key=env.get(f"NAVER_API_KEY_{n}", ""),
                    secret_key=env.get(f"NAVER_SECRET_KEY_{n}", ""),
                )
            )
        client_id = env.get(f"NAVER_SEARCH_CLIENT_ID_{n}")
        if not _is_placeholder(client_id):
            open_api.append(
                OpenApiKey(
                    name=f"open-api-{n}",
                    client_id=client_id,
                    client_secret=env.get(f"NAVER_SEARCH_CLIENT_SECRET_{n}", ""),
                )
            )
    return search_ad, open_api


def load_config(config_path: str | Path | None = None, environ: dict | None = None) -> AppConfig:
    """Load config.json into an AppConfig

    Args:
        config_path: Path to config.json (default: $NKEYWORD_CONFIG or config.json)
        environ: Environment used for credential fallback (default: os.environ)

    Returns:
        AppConfig; missing sections keep their defaults
    """
    env = os.environ if environ is None else environ
    path = Path(config_path or env.get("NKEYWORD_CONFIG") or DEFAULT_CONFIG_PATH)

    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    else:
        logger.warning(f"Config file not found: {path}, using defaults")
        data = {}

    naver = data.get("naver", {})
    collection = data.get("collection", {})
    cache = data.get("cache", {})
    queue = data.get("queue", {})
    tracker = data.get("tracker", {})
    poller = data.get("poller", {})

    defaults = CollectionConfig()
    poller_defaults = PollerConfig()

    config = AppConfig(
        search_ad_keys=_parse_search_ad_keys(naver.get("search_ad_keys", [])),
        open_api_keys=_parse_open_api_keys(naver.get("open_api_keys", [])),
        api_timeout=naver.get("timeout", 10.0),
        collection=CollectionConfig(
            window_size=collection.get("window_size", defaults.window_size),
            window_delay=collection.get("window_delay", defaults.window_delay),
            max_retries=collection.get("max_retries", defaults.max_retries),
            base_delay=collection.get("base_delay", defaults.base_delay),
            keyword_retries=collection.get("keyword_retries", defaults.keyword_retries),
            keyword_retry_delay=collection.get(
                "keyword_retry_delay", defaults.keyword_retry_delay
            ),
            retention=queue.get("retention_seconds", defaults.retention),
            max_keyword_length=collection.get(
                "max_keyword_length", defaults.max_keyword_length
            ),
        ),
        poller=PollerConfig(
            interval=poller.get("interval", poller_defaults.interval),
            max_seconds=poller.get("max_seconds", poller_defaults.max_seconds),
            max_polls=poller.get("max_polls", poller_defaults.max_polls),
        ),
        cache_ttl=cache.get("ttl_seconds", 60 * 60),
        cache_max_entries=cache.get("max_entries", 2000),
        queue_mode=QueueMode.parse(queue.get("mode", QueueMode.MEMORY.value)),
        queue_path=queue.get("path", "data/jobs.json"),
        tracker_max_history=tracker.get("max_history", 10000),
        tracker_path=tracker.get("path", "data/collection_history.json"),
        keyword_store_path=data.get("keyword_store", {}).get("path", "data/keywords.json"),
    )

    if not config.search_ad_keys or not config.open_api_keys:
        env_search_ad, env_open_api = load_keys_from_env(env)
        config.search_ad_keys = config.search_ad_keys or env_search_ad
        config.open_api_keys = config.open_api_keys or env_open_api

    if config.collection.window_size < 1:
        raise ValueError("collection.window_size must be at least 1")

    logger.info(
        f"Loaded config from {path}: {len(config.search_ad_keys)} search-ad key(s), "
        f"{len(config.open_api_keys)} open-api key(s), queue mode {config.queue_mode.value}"
    )
    return config
