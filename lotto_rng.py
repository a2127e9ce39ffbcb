#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
난수 소스 어댑터
- fast: numpy PCG64 (비암호학적, 가장 빠름)
- secure: OS CSPRNG (secrets.SystemRandom)
- vrf-simulated: SHA-256(세션 시드 + 카운터) - 실제 VRF 아님, 증명 없음
- external-seeded: 최신 비트코인 블록 해시로 시드한 PRNG (실패 시 secure)

모든 소스는 동일한 비동기 인터페이스 RandomFn 으로 통일한다.
호출자는 항상 `await rng()` 로 [0, 1) 실수를 얻는다.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import secrets
import time
from enum import Enum
from typing import Awaitable, Callable

import numpy as np
import requests

from lotto_config import DEFAULT_CONFIG, LottoConfig
from lotto_errors import InsufficientEntropySource

logger = logging.getLogger(__name__)

RandomFn = Callable[[], Awaitable[float]]

_UINT32_SPAN = 0xFFFFFFFF + 1


class RngSource(Enum):
    FAST = "fast"
    SECURE = "secure"
    VRF_SIMULATED = "vrf-simulated"
    EXTERNAL_SEEDED = "external-seeded"

    @property
    def label(self) -> str:
        return _RNG_LABELS[self]

    @classmethod
    def parse(cls, value: "str | RngSource") -> "RngSource":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        aliases = {"prng": cls.FAST, "vrf": cls.VRF_SIMULATED, "blockchain": cls.EXTERNAL_SEEDED}
        if key in aliases:
            return aliases[key]
        return cls(key)


_RNG_LABELS = {
    RngSource.FAST: "Basic PRNG (Fast)",
    RngSource.SECURE: "Secure (System CSPRNG)",
    RngSource.VRF_SIMULATED: "VRF (Simulated)",
    RngSource.EXTERNAL_SEEDED: "Blockchain (Bitcoin)",
}


# ==================== 개별 소스 ====================
def make_fast_rng(seed: int | None = None) -> RandomFn:
    gen = np.random.default_rng(seed)

    async def fast() -> float:
        return float(gen.random())

    return fast


def make_secure_rng() -> RandomFn:
    system_random = secrets.SystemRandom()

    async def secure() -> float:
        return system_random.random()

    return secure


def make_vrf_rng(session_seed: str | None = None) -> RandomFn:
    """
    VRF 흉내: SHA-256(seed + counter) 상위 4바이트 사용

    진짜 VRF(증명 검증)가 아니다. 카운터는 호출마다 단조 증가한다.
    """
    seed = session_seed if session_seed is not None else str(time.time_ns())
    counter = 0

    async def vrf() -> float:
        nonlocal counter
        counter += 1
        digest = hashlib.sha256(f"{seed}{counter}".encode("utf-8")).digest()
        return int.from_bytes(digest[:4], "big") / _UINT32_SPAN

    return vrf


def seed_from_hash(block_hash: str, salt: int | None = None) -> int:
    """블록 해시 문자열 → 64비트 시드 (같은 블록 내 클릭마다 다르게 시간 섞음)"""
    mixed = hashlib.sha256(block_hash.strip().encode("utf-8")).digest()
    seed = int.from_bytes(mixed[:8], "big")
    if salt is None:
        salt = time.time_ns()
    return (seed ^ salt) & 0xFFFFFFFFFFFFFFFF


def fetch_block_hash(config: LottoConfig = DEFAULT_CONFIG) -> str:
    """최신 비트코인 블록 해시 조회 (동기, 제한 시간 있음)"""
    try:
        response = requests.get(config.external_entropy_url, timeout=config.external_entropy_timeout)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise InsufficientEntropySource(f"블록 해시 조회 실패: {e}") from e

    block_hash = response.text.strip()
    if not block_hash:
        raise InsufficientEntropySource("빈 블록 해시 응답")
    return block_hash


async def make_external_rng(config: LottoConfig = DEFAULT_CONFIG) -> RandomFn:
    # 네트워크 호출은 resolve 1회당 1번, 추첨마다 호출하지 않음
    block_hash = await asyncio.to_thread(fetch_block_hash, config)
    logger.info("외부 엔트로피 사용: 블록 해시 %s...", block_hash[:16])
    return make_fast_rng(seed_from_hash(block_hash))


# ==================== 진입점 ====================
async def resolve(source: "str | RngSource", config: LottoConfig = DEFAULT_CONFIG) -> RandomFn:
    """
    소스 종류에 맞는 RandomFn 반환

    external-seeded 가 실패하면 예외를 전파하지 않고 secure 로 대체한다.
    """
    kind = RngSource.parse(source)

    if kind is RngSource.SECURE:
        return make_secure_rng()
    if kind is RngSource.VRF_SIMULATED:
        return make_vrf_rng()
    if kind is RngSource.EXTERNAL_SEEDED:
        try:
            return await make_external_rng(config)
        except InsufficientEntropySource as e:
            logger.warning("외부 RNG 실패, Secure RNG로 대체: %s", e)
            return make_secure_rng()
    return make_fast_rng()
