#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
난수 소스 어댑터 테스트 (네트워크 호출은 모두 monkeypatch)
"""

import asyncio
import hashlib
import logging

import pytest
import requests

import lotto_rng
from lotto_errors import InsufficientEntropySource
from lotto_rng import (
    RngSource,
    fetch_block_hash,
    make_fast_rng,
    make_secure_rng,
    make_vrf_rng,
    resolve,
    seed_from_hash,
)


class FakeResponse:
    def __init__(self, text="", status=200):
        self.text = text
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")


def _draw(rng, n=200):
    async def run():
        return [await rng() for _ in range(n)]
    return asyncio.run(run())


@pytest.mark.parametrize("factory", [make_fast_rng, make_secure_rng, make_vrf_rng])
def test_sources_return_unit_interval(factory):
    values = _draw(factory())
    assert all(0.0 <= v < 1.0 for v in values)
    assert len(set(values)) > 150


def test_fast_rng_reproducible_with_seed():
    assert _draw(make_fast_rng(42), 20) == _draw(make_fast_rng(42), 20)
    assert _draw(make_fast_rng(42), 20) != _draw(make_fast_rng(43), 20)


def test_vrf_rng_hashes_seed_and_counter():
    values = _draw(make_vrf_rng("session"), 3)

    for counter, value in enumerate(values, start=1):
        digest = hashlib.sha256(f"session{counter}".encode("utf-8")).digest()
        assert value == int.from_bytes(digest[:4], "big") / 2 ** 32
    assert len(set(values)) == 3


def test_seed_from_hash_mixes_salt():
    block = "00000000000000000002a7c4c1e48d76c5a37902165a270156b7a8d72728a054"

    assert seed_from_hash(block, salt=1) == seed_from_hash(block, salt=1)
    assert seed_from_hash(block, salt=1) != seed_from_hash(block, salt=2)
    assert 0 <= seed_from_hash(block) < 2 ** 64


@pytest.mark.parametrize("value, expected", [
    ("fast", RngSource.FAST),
    ("PRNG", RngSource.FAST),
    ("secure", RngSource.SECURE),
    ("vrf", RngSource.VRF_SIMULATED),
    ("blockchain", RngSource.EXTERNAL_SEEDED),
    (RngSource.SECURE, RngSource.SECURE),
])
def test_parse_source(value, expected):
    assert RngSource.parse(value) is expected


def test_parse_unknown_source():
    with pytest.raises(ValueError):
        RngSource.parse("quantum")


# ==================== 외부 엔트로피 ====================
def test_external_source_falls_back_to_secure(monkeypatch, caplog):
    def boom(*args, **kwargs):
        raise requests.exceptions.ConnectionError("offline")

    monkeypatch.setattr(lotto_rng.requests, "get", boom)

    with caplog.at_level(logging.WARNING, logger="lotto_rng"):
        rng = asyncio.run(resolve("external-seeded"))

    assert rng.__name__ == "secure"
    assert 0.0 <= _draw(rng, 1)[0] < 1.0
    assert "Secure" in caplog.text


def test_external_source_falls_back_on_http_error(monkeypatch):
    monkeypatch.setattr(lotto_rng.requests, "get", lambda *a, **kw: FakeResponse("", status=503))

    rng = asyncio.run(resolve(RngSource.EXTERNAL_SEEDED))
    assert rng.__name__ == "secure"


def test_external_source_uses_block_hash(monkeypatch):
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return FakeResponse("0000abcd\n")

    monkeypatch.setattr(lotto_rng.requests, "get", fake_get)

    rng = asyncio.run(resolve("external-seeded"))

    assert rng.__name__ == "fast"
    assert len(calls) == 1
    assert calls[0][1] == 5.0
    _draw(rng, 10)
    assert len(calls) == 1  # 추첨마다 호출하지 않음


def test_fetch_block_hash_rejects_empty(monkeypatch):
    monkeypatch.setattr(lotto_rng.requests, "get", lambda *a, **kw: FakeResponse("   "))

    with pytest.raises(InsufficientEntropySource):
        fetch_block_hash()
