#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
정책 신경망 (Learned Policy)

입력: 한 회차 안에서 연속된 window 개 번호 (÷45 정규화)
출력: 다음 번호(1..45) 확률 분포
학습 데이터는 물리 시뮬레이션 배치 결과(추출 순서 그대로)만 사용한다.
"""

from __future__ import annotations

import logging
import pickle
from typing import Callable, Sequence

import numpy as np
from sklearn.neural_network import MLPClassifier

from lotto_config import DEFAULT_CONFIG, LottoConfig
from lotto_errors import PolicyNotTrained
from lotto_rng import RandomFn
from lotto_sampler import uniform_pick

logger = logging.getLogger(__name__)

MIN_TRAINING_DRAWS = 10


def prepare_data(
    draws: Sequence[Sequence[int]],
    window: int = 5,
    total_numbers: int = 45,
) -> tuple[np.ndarray, np.ndarray]:
    """
    회차 내부 슬라이딩 윈도우 (회차 간 연결은 학습하지 않음)

    Returns:
        X: (N, window) 정규화 입력, y: (N,) 다음 번호
    """
    xs = []
    ys = []
    for draw in draws:
        nums = [int(v) for v in draw]
        if len(nums) < window + 1:
            continue
        if any(n < 1 or n > total_numbers for n in nums):
            continue
        for i in range(len(nums) - window):
            xs.append([n / total_numbers for n in nums[i:i + window]])
            ys.append(nums[i + window])

    if not xs:
        return np.zeros((0, window), dtype=float), np.zeros(0, dtype=np.int64)
    return np.array(xs, dtype=float), np.array(ys, dtype=np.int64)


class PolicyNetwork:
    """MLP 정책 네트워크 (64-32, relu, adam)"""

    def __init__(self, config: LottoConfig = DEFAULT_CONFIG, random_state: int | None = 42):
        self.config = config
        self.window = config.policy_window
        self.classes = np.arange(1, config.total_numbers + 1)
        self.model = MLPClassifier(
            hidden_layer_sizes=(64, 32),
            activation='relu',
            solver='adam',
            batch_size=32,
            random_state=random_state,
        )
        self.trained = False
        self.loss_history: list[float] = []

    def fit(
        self,
        draws: Sequence[Sequence[int]],
        on_epoch: Callable[[int, float], None] | None = None,
        epochs: int | None = None,
    ) -> "PolicyNetwork":
        if len(draws) < MIN_TRAINING_DRAWS:
            raise ValueError(f"시뮬레이션 데이터 부족: {len(draws)}개 (최소 {MIN_TRAINING_DRAWS}개)")

        X, y = prepare_data(draws, self.window, self.config.total_numbers)
        if len(X) == 0:
            raise ValueError(f"길이 {self.window + 1} 이상인 회차가 없습니다.")

        epochs = epochs if epochs is not None else self.config.policy_epochs
        logger.info("정책 신경망 학습: 회차 %d개, 샘플 %d개, epoch %d", len(draws), len(X), epochs)

        for epoch in range(epochs):
            self.model.partial_fit(X, y, classes=self.classes)
            loss = float(self.model.loss_)
            self.loss_history.append(loss)
            if on_epoch is not None:
                on_epoch(epoch + 1, loss)

        self.trained = True
        logger.info("정책 신경망 학습 완료 (loss %.4f)", self.loss_history[-1])
        return self

    def predict_proba(self, window_numbers: Sequence[float]) -> np.ndarray:
        """다음 번호 확률 (index = 번호-1), 입력은 정규화된 window 개 값"""
        if not self.trained:
            raise PolicyNotTrained("정책 신경망이 학습되지 않았습니다.")
        x = np.asarray(window_numbers, dtype=float).reshape(1, -1)
        proba = self.model.predict_proba(x)[0]

        # classes_ 순서대로 1..N 자리에 배치
        out = np.zeros(self.config.total_numbers, dtype=float)
        for cls, p in zip(self.model.classes_, proba):
            out[int(cls) - 1] = p
        return out

    async def generate(self, rng: RandomFn) -> list[int]:
        """확률적 정책으로 7개 추출 (중복이면 남은 번호 중 균등 추출)"""
        n = self.config.total_numbers

        seq = []
        for _ in range(self.window):
            r = await rng()
            seq.append((min(int(r * n), n - 1) + 1) / n)

        result: list[int] = []
        while len(result) < self.config.total_draw_count:
            probs = self.predict_proba(seq)
            total = float(probs.sum())
            r = await rng()

            num = None
            if total > 0:
                idx = int(np.searchsorted(np.cumsum(probs), r * total, side='left'))
                if idx < n:
                    num = idx + 1
            if num is None:
                num = min(int(r * n), n - 1) + 1

            if num in result:
                available = [i for i in range(1, n + 1) if i not in result]
                num = await uniform_pick(available, rng)

            result.append(num)
            seq = seq[1:] + [num / n]

        return result

    def save(self, path: str) -> None:
        with open(path, 'wb') as f:
            pickle.dump(self, f)

    @staticmethod
    def load(path: str) -> "PolicyNetwork":
        with open(path, 'rb') as f:
            model = pickle.load(f)
        if not isinstance(model, PolicyNetwork):
            raise TypeError(f"정책 신경망 파일이 아닙니다: {path}")
        return model
