"""Tests for the related-keyword provider failover"""

import asyncio

import pytest

from naver.core.exceptions import AllKeysFailed, CredentialRejected, NoCredentialsConfigured
from naver.key_pool.round_robin import CredentialRotator
from naver.providers.related_keywords import RelatedKeywordProvider
from naver.core.types import RelatedKeyword

from conftest import search_ad_keys


class FlakyClient:
    def __init__(self, bad_keys):
        self.bad_keys = set(bad_keys)
        self.used = []

    async def get_related_keywords(self, keyword, key):
        self.used.append(key.name)
        if key.name in self.bad_keys:
            raise CredentialRejected(key.name, 401)
        return [RelatedKeyword(keyword=f"{keyword} 추천")]


def test_fails_over_to_next_key():
    client = FlakyClient(bad_keys={"s1"})
    provider = RelatedKeywordProvider(CredentialRotator(search_ad_keys("s1", "s2")), client)

    records = asyncio.run(provider.lookup("캠핑"))

    assert [r.keyword for r in records] == ["캠핑 추천"]
    assert client.used == ["s1", "s2"]


def test_all_keys_failed():
    client = FlakyClient(bad_keys={"s1", "s2"})
    provider = RelatedKeywordProvider(CredentialRotator(search_ad_keys("s1", "s2")), client)

    with pytest.raises(AllKeysFailed) as exc:
        asyncio.run(provider.lookup("캠핑"))
    assert exc.value.attempts == 2
    assert isinstance(exc.value.last_error, CredentialRejected)


def test_no_keys():
    provider = RelatedKeywordProvider(CredentialRotator(), FlakyClient(()))
    with pytest.raises(NoCredentialsConfigured):
        asyncio.run(provider.lookup("캠핑"))
