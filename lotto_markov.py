#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
마르코프 체인 순차 예측 (Sequential AI/RL)

학습: 각 회차 번호를 무작위로 섞은 뒤 인접 번호 간 전이 횟수를 센다.
      공식 결과는 오름차순 정렬이라 그대로 쓰면 "정렬 패턴"만 배우므로,
      섞어서 동시 출현(co-occurrence) 학습기로 만든다.
추출: 첫 번호는 순수 RNG(탐색), 이후는 전이 가중치(활용), 막히면 균등 추출.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Sequence

import numpy as np

from lotto_config import DEFAULT_CONFIG, LottoConfig
from lotto_history import history_key
from lotto_rng import RandomFn
from lotto_sampler import pick_from_weights, uniform_pick

logger = logging.getLogger(__name__)

Transitions = dict[int, dict[int, int]]


def build_transitions(
    draws: Sequence[Sequence[int]],
    rng: np.random.Generator | None = None,
    min_length: int = 6,
) -> Transitions:
    """회차별 무작위 순열에서 (현재 → 다음) 전이 횟수 집계"""
    rng = rng if rng is not None else np.random.default_rng()
    transitions: dict[int, dict[int, int]] = defaultdict(dict)

    for draw in draws:
        if len(draw) < min_length:
            continue
        sequence = [int(v) for v in draw]
        rng.shuffle(sequence)

        for current, nxt in zip(sequence, sequence[1:]):
            row = transitions[current]
            row[nxt] = row.get(nxt, 0) + 1

    return dict(transitions)


class TransitionCache:
    """전이 모델 캐시 - 히스토리 키(길이 + 체크섬)가 바뀔 때만 재학습"""

    def __init__(self, seed: int | None = None):
        self._lock = threading.Lock()
        self._rng = np.random.default_rng(seed)
        self._key: tuple[int, str] | None = None
        self._transitions: Transitions | None = None
        self.rebuilds = 0

    def get(self, draws: Sequence[Sequence[int]]) -> Transitions:
        key = history_key(draws)
        with self._lock:
            if self._transitions is None or self._key != key:
                self._transitions = None
                self._transitions = build_transitions(draws, self._rng)
                self._key = key
                self.rebuilds += 1
                logger.debug("전이 모델 재학습: %d회차, 상태 %d개", len(draws), len(self._transitions))
            return self._transitions

    def invalidate(self) -> None:
        with self._lock:
            self._key = None
            self._transitions = None


async def sample_sequential(
    transitions: Transitions,
    rng: RandomFn,
    config: LottoConfig = DEFAULT_CONFIG,
) -> list[int]:
    """
    순차 추출: 메인 6개는 체인을 따라가고, 보너스는 남은 번호에서 균등 추출

    Returns:
        [메인 6개 (추출 순서), 보너스]
    """
    n = config.total_numbers

    r = await rng()
    first = min(int(r * n), n - 1) + 1
    result = [first]
    current = first

    while len(result) < config.main_count:
        nxt = None

        row = transitions.get(current)
        if row:
            candidates = {num: w for num, w in row.items() if num not in result and w > 0}
            if candidates:
                nxt = await pick_from_weights(candidates, rng)

        if nxt is None:
            available = [i for i in range(1, n + 1) if i not in result]
            nxt = await uniform_pick(available, rng)

        result.append(nxt)
        current = nxt

    for _ in range(config.bonus_count):
        available = [i for i in range(1, n + 1) if i not in result]
        result.append(await uniform_pick(available, rng))

    return result
