"""Tests for request signing and response handling of the Naver clients"""

import asyncio
import base64
import hashlib
import hmac
from types import SimpleNamespace

import pytest

from naver.auth.signature import create_headers, generate_signature
from naver.client import open_search
from naver.client.base import check_response, parse_json
from naver.client.open_search import OpenSearchClient
from naver.client.search_ad import parse_keyword_record
from naver.core.exceptions import APIError, CredentialRejected, RateLimited
from naver.core.types import DocumentCounts

from conftest import open_keys, search_ad_keys


def _response(status_code=200, payload=None, headers=None, text=""):
    def json():
        if isinstance(payload, Exception):
            raise payload
        return payload

    return SimpleNamespace(status_code=status_code, headers=headers or {}, text=text, json=json)


class FakeSession:
    """Stands in for curl_cffi's AsyncSession"""

    responses: dict = {}
    requests: list = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def get(self, url, params=None, headers=None, timeout=None):
        FakeSession.requests.append((url, params, headers))
        return FakeSession.responses[url.rsplit("/", 1)[-1]]


@pytest.fixture
def fake_session(monkeypatch):
    FakeSession.responses = {}
    FakeSession.requests = []
    monkeypatch.setattr(open_search, "AsyncSession", FakeSession)
    return FakeSession


def test_signature_is_base64_hmac_sha256():
    expected = base64.b64encode(
        hmac.new(b"secret", b"1700000000000.GET./keywordstool", hashlib.sha256).digest()
    ).decode()
    assert generate_signature(1700000000000, "GET", "/keywordstool", "secret") == expected


def test_create_headers():
    key = search_ad_keys("s1")[0]
    headers = create_headers("GET", "/keywordstool", key, timestamp=123)
    assert headers["X-Timestamp"] == "123"
    assert headers["X-API-KEY"] == "s1-api"
    assert headers["X-Customer"] == "s1-customer"
    assert headers["X-Signature"] == generate_signature(123, "GET", "/keywordstool", "s1-secret")


def test_check_response_maps_status_codes():
    check_response(_response(204), "k")

    with pytest.raises(CredentialRejected) as exc:
        check_response(_response(401), "k")
    assert exc.value.status_code == 401

    with pytest.raises(RateLimited) as exc:
        check_response(_response(429, headers={"Retry-After": "3"}), "k")
    assert exc.value.retry_after == 3.0

    with pytest.raises(APIError) as exc:
        check_response(_response(500, text="server error"), "k")
    assert exc.value.status_code == 500


def test_parse_json_rejects_bad_bodies():
    assert parse_json(_response(payload={"total": 1})) == {"total": 1}
    with pytest.raises(APIError):
        parse_json(_response(payload=ValueError("not json")))
    with pytest.raises(APIError):
        parse_json(_response(payload=[1, 2]))


def test_parse_keyword_record_handles_string_counts():
    record = parse_keyword_record(
        {
            "relKeyword": "캠핑의자",
            "monthlyPcQcCnt": "< 10",
            "monthlyMobileQcCnt": 1200,
            "compIdx": "높음",
            "monthlyAvePcCtr": "1.5",
        }
    )
    assert record.keyword == "캠핑의자"
    assert record.monthly_pc_search == 0
    assert record.monthly_mobile_search == 1200
    assert record.total_search == 1200
    assert record.competition == "높음"
    assert record.monthly_pc_click_rate == 1.5


def test_document_count_reads_total(fake_session):
    fake_session.responses["blog.json"] = _response(payload={"total": 1234, "items": []})
    key = open_keys("o1")[0]

    total = asyncio.run(OpenSearchClient().get_document_count("blog", "캠핑", key))

    assert total == 1234
    url, params, headers = fake_session.requests[0]
    assert url.endswith("/blog.json")
    assert params == {"query": "캠핑", "display": "1"}
    assert headers["X-Naver-Client-Id"] == "o1-id"


def test_document_count_missing_total_is_zero(fake_session):
    fake_session.responses["news.json"] = _response(payload={})
    total = asyncio.run(OpenSearchClient().get_document_count("news", "kw", open_keys("o1")[0]))
    assert total == 0


def test_document_count_invalid_total_raises(fake_session):
    fake_session.responses["webkr.json"] = _response(payload={"total": "many"})
    with pytest.raises(APIError):
        asyncio.run(OpenSearchClient().get_document_count("webkr", "kw", open_keys("o1")[0]))


def test_document_count_unknown_type():
    with pytest.raises(ValueError):
        asyncio.run(OpenSearchClient().get_document_count("image", "kw", open_keys("o1")[0]))


def test_document_counts_leave_failed_lookups_empty(fake_session):
    fake_session.responses.update(
        {
            "blog.json": _response(payload={"total": 1}),
            "cafearticle.json": _response(500, text="down"),
            "news.json": _response(payload={"total": 3}),
            "webkr.json": _response(payload={"total": 4}),
        }
    )
    counts = asyncio.run(OpenSearchClient().get_document_counts("kw", open_keys("o1")[0]))
    assert counts == DocumentCounts(blog=1, cafe=None, news=3, webkr=4)
