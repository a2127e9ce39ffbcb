#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
가중치 풀 샘플러
- 가중치 배열(45,) → 가상 풀(번호별 반복 횟수) → 비복원 추출
- 전이 가중치 dict 에서 1개 뽑기 (마르코프 체인용)
"""

from __future__ import annotations

from typing import Mapping

import numpy as np

from lotto_errors import SamplingExhausted
from lotto_rng import RandomFn

POOL_SCALE = 10.0


def pool_counts(weights, power: float = 1.0, scale: float = POOL_SCALE) -> np.ndarray:
    """
    번호별 풀 반복 횟수 = round(weight^power * scale), 최소 0

    반복 횟수 0인 번호는 절대 뽑히지 않는다.
    """
    w = np.asarray(weights, dtype=float)
    w = np.where(np.isfinite(w), np.maximum(w, 0.0), 0.0)
    raw = np.power(w, power) * scale
    # Math.round 와 같은 half-up 반올림
    counts = np.floor(raw + 0.5)
    return np.maximum(counts, 0.0).astype(np.int64)


async def sample(
    weights,
    power: float,
    rng: RandomFn,
    count: int,
    scale: float = POOL_SCALE,
) -> list[int]:
    """
    가중치 비례 비복원 추출

    Parameters:
        weights: 번호 1..N 의 가중치 (index = 번호-1)
        power: 가중치 지수 (클수록 상위 번호 편중)
        rng: 비동기 [0,1) 난수 함수
        count: 뽑을 개수

    Returns:
        서로 다른 번호 count 개 (뽑힌 순서)

    풀에서 중복이 나오면 다시 뽑는 방식과 분포가 같도록, 이미 뽑힌 번호는
    풀에서 제거한 뒤 다음 번호를 뽑는다. 남은 풀이 비면 SamplingExhausted.
    """
    counts = pool_counts(weights, power, scale)
    result: list[int] = []

    while len(result) < count:
        total = int(counts.sum())
        if total <= 0:
            raise SamplingExhausted(
                f"가중치 풀 소진: {len(result)}/{count}개에서 더 뽑을 번호가 없습니다."
            )

        r = await rng()
        index = min(int(r * total), total - 1)
        cumsum = np.cumsum(counts)
        slot = int(np.searchsorted(cumsum, index, side="right"))

        result.append(slot + 1)
        counts[slot] = 0

    return result


async def pick_from_weights(weights: Mapping[int, float], rng: RandomFn) -> int:
    """가중치 dict 에서 키 1개를 비례 추출 (가중치 0 이하 키는 절대 뽑히지 않음)"""
    positive = [(num, float(w)) for num, w in weights.items() if w > 0]
    if not positive:
        raise SamplingExhausted("가중치가 양수인 후보가 없습니다.")

    total_weight = sum(w for _, w in positive)
    r = await rng()
    remaining = r * total_weight

    for num, weight in positive:
        remaining -= weight
        if remaining <= 0:
            return int(num)

    # 부동소수점 오차로 끝까지 온 경우
    return int(positive[-1][0])


async def uniform_pick(candidates: list[int], rng: RandomFn) -> int:
    if not candidates:
        raise SamplingExhausted("후보가 비어 있습니다.")
    r = await rng()
    return candidates[min(int(r * len(candidates)), len(candidates) - 1)]
