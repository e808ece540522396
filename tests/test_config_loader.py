"""Tests for config.json loading"""

import json

import pytest

from collector.storage import QueueMode
from settings.config_loader import load_config, load_keys_from_env


def write_config(tmp_path, data):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_loads_sections(tmp_path):
    path = write_config(
        tmp_path,
        {
            "naver": {
                "search_ad_keys": [
                    {"name": "main", "customer_id": "123", "api_key": "k", "secret_key": "s"},
                    {"customer_id": "YOUR_CUSTOMER_ID", "api_key": "k", "secret_key": "s"},
                ],
                "open_api_keys": [{"client_id": "cid", "client_secret": "sec"}],
                "timeout": 5,
            },
            "collection": {"window_size": 3, "max_retries": 1},
            "cache": {"ttl_seconds": 60, "max_entries": 10},
            "queue": {"mode": "json_file", "path": "var/jobs.json", "retention_seconds": 30},
            "poller": {"interval": 2},
        },
    )

    config = load_config(path, environ={})

    assert [k.name for k in config.search_ad_keys] == ["main"]
    assert config.open_api_keys[0].name == "open-api-1"
    assert config.api_timeout == 5
    assert config.collection.window_size == 3
    assert config.collection.max_retries == 1
    assert config.collection.base_delay == 0.3
    assert config.collection.retention == 30
    assert config.cache_ttl == 60
    assert config.cache_max_entries == 10
    assert config.queue_mode == QueueMode.JSON_FILE
    assert config.queue_path == "var/jobs.json"
    assert config.poller.interval == 2
    assert config.poller.max_polls == 10


def test_missing_file_uses_defaults(tmp_path):
    config = load_config(tmp_path / "absent.json", environ={})
    assert config.queue_mode == QueueMode.MEMORY
    assert config.collection.window_size == 5
    assert config.search_ad_keys == []
    assert config.open_api_keys == []


def test_env_fallback_per_kind(tmp_path):
    path = write_config(
        tmp_path,
        {"naver": {"open_api_keys": [{"client_id": "from-file", "client_secret": "x"}]}},
    )
    environ = {
        "NAVER_CUSTOMER_ID_1": "111",
        "NAVER_API_KEY_1": "api",
        "NAVER_SECRET_KEY_1": "secret",
        "NAVER_SEARCH_CLIENT_ID_1": "from-env",
        "NAVER_SEARCH_CLIENT_SECRET_1": "y",
    }

    config = load_config(path, environ=environ)

    assert [k.customer_id for k in config.search_ad_keys] == ["111"]
    assert [k.client_id for k in config.open_api_keys] == ["from-file"]


def test_env_keys_skip_gaps_and_placeholders():
    search_ad, open_api = load_keys_from_env(
        {
            "NAVER_CUSTOMER_ID_1": "111",
            "NAVER_CUSTOMER_ID_3": "333",
            "NAVER_CUSTOMER_ID_4": "YOUR_CUSTOMER_ID",
            "NAVER_SEARCH_CLIENT_ID_2": "cid",
        }
    )
    assert [k.name for k in search_ad] == ["search-ad-1", "search-ad-3"]
    assert [k.name for k in open_api] == ["open-api-2"]


def test_config_path_from_environment(tmp_path):
    path = write_config(tmp_path, {"cache": {"max_entries": 7}})
    config = load_config(environ={"NKEYWORD_CONFIG": str(path)})
    assert config.cache_max_entries == 7


def test_invalid_values(tmp_path):
    with pytest.raises(ValueError):
        load_config(write_config(tmp_path, {"queue": {"mode": "supabase"}}), environ={})
    with pytest.raises(ValueError):
        load_config(write_config(tmp_path, {"collection": {"window_size": 0}}), environ={})
