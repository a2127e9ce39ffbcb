#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
로또 번호 생성 알고리즘 모듈
- 순수 랜덤
- 빈도(Weighted), 추세(Adaptive), 비빈도(Cold)
- 순차 마르코프 체인(Sequential AI/RL)
- 정책 신경망(Learned Policy)

알고리즘은 닫힌 Enum 으로 고정하고 generate() 한 곳에서 분기한다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from lotto_config import DEFAULT_CONFIG, LottoConfig
from lotto_errors import PolicyNotTrained
from lotto_history import (
    History,
    StatisticsCache,
    clean_draws,
    frequency_weights,
    non_frequency_weights,
)
from lotto_markov import TransitionCache, sample_sequential
from lotto_policy import PolicyNetwork
from lotto_rng import RandomFn, RngSource, make_fast_rng, resolve
from lotto_sampler import sample
from lotto_utils import draw_to_text

logger = logging.getLogger(__name__)

__all__ = [
    'Algorithm',
    'GenerationResult',
    'GeneratorState',
    'random_numbers',
    'generate_numbers',
    'generate',
]


class Algorithm(Enum):
    RANDOM = "random"
    WEIGHTED = "weighted"
    ADAPTIVE = "adaptive"
    NON_FREQUENCY = "non-frequency"
    SEQUENTIAL = "sequential"
    LEARNED_POLICY = "learned-policy"

    @property
    def label(self) -> str:
        return _ALGO_LABELS[self]

    @property
    def keeps_order(self) -> bool:
        """예측 순서를 보여줘야 하는 알고리즘 (메인 번호 정렬 안 함)"""
        return self in (Algorithm.SEQUENTIAL, Algorithm.LEARNED_POLICY)

    @classmethod
    def parse(cls, value: "str | Algorithm") -> "Algorithm":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("_", "-")
        if key in ("policy", "neural"):
            return cls.LEARNED_POLICY
        return cls(key)


_ALGO_LABELS = {
    Algorithm.RANDOM: "Pure Random",
    Algorithm.WEIGHTED: "Frequency (Weighted)",
    Algorithm.ADAPTIVE: "Trend (Adaptive)",
    Algorithm.NON_FREQUENCY: "Non-Frequency (Cold)",
    Algorithm.SEQUENTIAL: "Sequential (AI/RL)",
    Algorithm.LEARNED_POLICY: "Learned Policy (Neural)",
}


@dataclass
class GenerationResult:
    """한 번의 생성 결과 (메인 6 + 보너스 1) + 히스토리 기록용 메타데이터"""
    main_numbers: list[int]
    bonus_number: int
    algorithm_label: str
    rng_label: str
    numbers: list[int] = field(default_factory=list)  # 생성 순서 그대로

    def as_tuple(self) -> tuple[list[int], int, str, str]:
        return self.main_numbers, self.bonus_number, self.algorithm_label, self.rng_label

    def to_text(self) -> str:
        return draw_to_text(self.main_numbers + [self.bonus_number], len(self.main_numbers))


def build_result(
    numbers: Sequence[int],
    algorithm_label: str,
    rng_label: str,
    sort_main: bool = True,
    config: LottoConfig = DEFAULT_CONFIG,
) -> GenerationResult:
    numbers = [int(n) for n in numbers]
    if len(numbers) < config.total_draw_count or len(set(numbers[:config.total_draw_count])) != config.total_draw_count:
        raise ValueError(f"생성된 번호가 올바르지 않습니다: {numbers}")

    main = numbers[:config.main_count]
    if sort_main:
        main = sorted(main)
    return GenerationResult(
        main_numbers=main,
        bonus_number=numbers[config.main_count],
        algorithm_label=algorithm_label,
        rng_label=rng_label,
        numbers=numbers[:config.total_draw_count],
    )


@dataclass
class GeneratorState:
    """생성 요청 사이에 유지되는 캐시와 학습 모델"""
    statistics: StatisticsCache = field(default_factory=StatisticsCache)
    transitions: TransitionCache = field(default_factory=TransitionCache)
    policy: PolicyNetwork | None = None


# ==================== 기본 생성기 ====================
async def random_numbers(rng: RandomFn, count: int = 7, max_number: int = 45) -> list[int]:
    """균등 추출 (중복이면 다시 뽑음)"""
    if count > max_number:
        raise ValueError(f"{max_number}개 중 {count}개를 중복 없이 뽑을 수 없습니다.")
    numbers: list[int] = []
    while len(numbers) < count:
        r = await rng()
        num = min(int(r * max_number), max_number - 1) + 1
        if num not in numbers:
            numbers.append(num)
    return numbers


def _draws_of(history) -> list[list[int]]:
    if history is None:
        return []
    if isinstance(history, History):
        return history.draws
    return clean_draws(history)


async def generate_numbers(
    algorithm: Algorithm,
    rng: RandomFn,
    history=None,
    state: GeneratorState | None = None,
    config: LottoConfig = DEFAULT_CONFIG,
) -> list[int]:
    """알고리즘 하나로 7개 번호 생성 (생성 순서 유지, 폴백 없음)"""
    state = state if state is not None else GeneratorState()
    draws = _draws_of(history)
    n = config.total_numbers
    count = config.total_draw_count

    if algorithm is Algorithm.WEIGHTED:
        weights = frequency_weights(draws, n)
        return await sample(weights, config.weighted_power, rng, count, config.pool_scale)

    if algorithm is Algorithm.ADAPTIVE:
        weights = state.statistics.adaptive_weights(draws, config)
        return await sample(weights, config.adaptive_power, rng, count, config.pool_scale)

    if algorithm is Algorithm.NON_FREQUENCY:
        weights = non_frequency_weights(draws, n)
        return await sample(weights, config.weighted_power, rng, count, config.pool_scale)

    if algorithm is Algorithm.SEQUENTIAL:
        transitions = state.transitions.get(draws)
        return await sample_sequential(transitions, rng, config)

    if algorithm is Algorithm.LEARNED_POLICY:
        if state.policy is None or not state.policy.trained:
            raise PolicyNotTrained("정책 신경망이 학습되지 않았습니다.")
        return await state.policy.generate(rng)

    return await random_numbers(rng, count, n)


async def generate(
    algorithm: "str | Algorithm",
    rng_source: "str | RngSource" = RngSource.FAST,
    history=None,
    state: GeneratorState | None = None,
    config: LottoConfig = DEFAULT_CONFIG,
) -> GenerationResult:
    """
    알고리즘 + RNG 소스로 한 회차 생성

    - 정책 신경망이 없으면 순차(마르코프) 알고리즘으로 대체
    - 그 밖의 오류는 로그를 남기고 순수 랜덤(fast RNG)으로 대체
    결과는 항상 서로 다른 7개 번호를 가진다.
    """
    algorithm = Algorithm.parse(algorithm)
    source = RngSource.parse(rng_source)
    state = state if state is not None else GeneratorState()

    try:
        rng = await resolve(source, config)
        try:
            numbers = await generate_numbers(algorithm, rng, history, state, config)
        except PolicyNotTrained:
            logger.warning("정책 신경망 미학습 - 순차 알고리즘으로 대체합니다.")
            numbers = await generate_numbers(Algorithm.SEQUENTIAL, rng, history, state, config)
        return build_result(numbers, algorithm.label, source.label, not algorithm.keeps_order, config)
    except Exception:
        logger.exception("번호 생성 실패 (%s/%s) - 순수 랜덤으로 대체", algorithm.value, source.value)
        numbers = await random_numbers(make_fast_rng(), config.total_draw_count, config.total_numbers)
        return build_result(numbers, algorithm.label, source.label, not algorithm.keeps_order, config)
