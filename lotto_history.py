#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
로또 히스토리 데이터 처리 모듈
- CSV 로딩 (round, date, n1..n6, bonus)
- 항목 검증 (잘못된 회차는 건너뜀)
- 통계 엔진: 빈도 / 추세(감쇠) / 비빈도(콜드) 가중치
- 추세 가중치 캐시 (길이 + 내용 체크섬 키)
"""

from __future__ import annotations

import hashlib
import logging
import threading
from dataclasses import dataclass, field
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from lotto_config import DEFAULT_CONFIG, LottoConfig
from lotto_errors import InvalidHistoryShape

logger = logging.getLogger(__name__)

MAIN_COLUMNS = ["n1", "n2", "n3", "n4", "n5", "n6"]


def _find_column(df: pd.DataFrame, key: str) -> str | None:
    for c in df.columns:
        if str(c).lower() == key or str(c).lower().endswith(key):
            return c
    return None


def load_history_csv(path: str) -> pd.DataFrame:
    """
    동행복권 내보내기 형식 CSV 로드 (최신 회차가 첫 행)

    n1..n6 컬럼은 필수, bonus/round/date 컬럼은 있으면 유지한다.
    숫자가 아닌 행은 제거한다.
    """
    df = pd.read_csv(path)
    ncols: list[str] = []
    for k in MAIN_COLUMNS:
        found = _find_column(df, k)
        if not found:
            raise ValueError("CSV에 n1..n6 컬럼이 필요합니다.")
        ncols.append(found)

    out = df[ncols].copy()
    out.columns = MAIN_COLUMNS
    bonus_col = _find_column(df, "bonus")
    if bonus_col is not None:
        out["bonus"] = df[bonus_col]
    out = out.apply(pd.to_numeric, errors="coerce").dropna(subset=MAIN_COLUMNS)
    out[MAIN_COLUMNS] = out[MAIN_COLUMNS].astype(int)

    for extra in ("round", "date"):
        col = _find_column(df, extra)
        if col is not None:
            out.insert(0 if extra == "round" else 1, extra, df.loc[out.index, col])
    return out.reset_index(drop=True)


# ==================== 항목 검증 ====================
def validate_draw(entry, main_count: int = 6, total_numbers: int = 45) -> list[int]:
    """한 회차 검증: 정확히 main_count 개, 1..total_numbers, 중복 없음"""
    try:
        nums = [int(v) for v in entry]
    except (TypeError, ValueError) as e:
        raise InvalidHistoryShape(f"정수가 아닌 항목: {entry!r}") from e
    if len(nums) != main_count:
        raise InvalidHistoryShape(f"{main_count}개가 아닌 항목: {entry!r}")
    if any(n < 1 or n > total_numbers for n in nums):
        raise InvalidHistoryShape(f"범위를 벗어난 번호: {entry!r}")
    if len(set(nums)) != main_count:
        raise InvalidHistoryShape(f"중복 번호: {entry!r}")
    return nums


def validate_bonus(bonus, main: Sequence[int], total_numbers: int = 45) -> int:
    """보너스 검증: 1..total_numbers, 같은 회차 메인 번호와 중복 없음"""
    try:
        v = int(bonus)
    except (TypeError, ValueError) as e:
        raise InvalidHistoryShape(f"정수가 아닌 보너스: {bonus!r}") from e
    if v < 1 or v > total_numbers:
        raise InvalidHistoryShape(f"범위를 벗어난 보너스: {bonus!r}")
    if v in main:
        raise InvalidHistoryShape(f"메인 번호와 겹치는 보너스: {bonus!r} / {list(main)}")
    return v


def clean_draws(entries: Iterable, config: LottoConfig = DEFAULT_CONFIG) -> list[list[int]]:
    """잘못된 항목은 건너뛰고 유효한 회차만 반환 (전체 계산은 중단하지 않음)"""
    draws: list[list[int]] = []
    skipped = 0
    for entry in entries:
        try:
            draws.append(validate_draw(entry, config.main_count, config.total_numbers))
        except InvalidHistoryShape as e:
            skipped += 1
            logger.debug("히스토리 항목 건너뜀: %s", e)
    if skipped:
        logger.info("잘못된 히스토리 항목 %d개를 건너뛰었습니다.", skipped)
    return draws


def clean_draws_with_bonus(
    entries: Iterable,
    bonuses: Iterable,
    config: LottoConfig = DEFAULT_CONFIG,
) -> tuple[list[list[int]], list[int]]:
    """
    (회차, 보너스) 쌍 단위 검증

    둘 중 하나라도 잘못되면 그 쌍을 통째로 건너뛴다. 결과 두 리스트는 항상 길이가 같다.
    """
    entries = list(entries)
    bonuses = list(bonuses)
    if len(entries) != len(bonuses):
        raise InvalidHistoryShape(f"회차 {len(entries)}개와 보너스 {len(bonuses)}개의 길이가 다릅니다.")

    draws: list[list[int]] = []
    clean_bonus: list[int] = []
    skipped = 0
    for entry, bonus in zip(entries, bonuses):
        try:
            nums = validate_draw(entry, config.main_count, config.total_numbers)
            b = validate_bonus(bonus, nums, config.total_numbers)
        except InvalidHistoryShape as e:
            skipped += 1
            logger.debug("히스토리 항목 건너뜀: %s", e)
            continue
        draws.append(nums)
        clean_bonus.append(b)
    if skipped:
        logger.info("잘못된 히스토리 항목 %d개를 건너뛰었습니다.", skipped)
    return draws, clean_bonus


@dataclass
class History:
    """과거 당첨 번호 (최신 회차가 0번), bonuses[i] 는 draws[i] 의 보너스 (없으면 빈 리스트)"""

    draws: list[list[int]] = field(default_factory=list)
    bonuses: list[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.draws)

    @classmethod
    def from_sequences(
        cls,
        draws: Iterable,
        bonuses: Iterable = (),
        config: LottoConfig = DEFAULT_CONFIG,
    ) -> "History":
        bonuses = list(bonuses)
        if not bonuses:
            return cls(draws=clean_draws(draws, config))
        clean, clean_bonus = clean_draws_with_bonus(draws, bonuses, config)
        return cls(draws=clean, bonuses=clean_bonus)

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame | None, config: LottoConfig = DEFAULT_CONFIG) -> "History":
        if df is None or df.empty:
            return cls()
        rows = df[MAIN_COLUMNS].values.tolist()
        # 보너스 칸이 빈 행은 쌍 검증에서 회차째 빠진다
        bonuses = df["bonus"].tolist() if "bonus" in df.columns else []
        return cls.from_sequences(rows, bonuses, config)

    @classmethod
    def from_csv(cls, path: str, config: LottoConfig = DEFAULT_CONFIG) -> "History":
        return cls.from_dataframe(load_history_csv(path), config)


def history_key(draws: Sequence[Sequence[int]]) -> tuple[int, str]:
    """캐시 키: (회차 수, 내용 SHA-256)"""
    digest = hashlib.sha256()
    for draw in draws:
        digest.update(",".join(str(int(n)) for n in draw).encode("ascii"))
        digest.update(b";")
    return len(draws), digest.hexdigest()


# ==================== 빈도 통계 ====================
def number_frequency(draws: Iterable[Sequence[int]], total_numbers: int = 45) -> np.ndarray:
    """번호별 출현 횟수 (index = 번호-1), 범위 밖 번호는 무시"""
    freq = np.zeros(total_numbers, dtype=np.int64)
    for draw in draws:
        for v in draw:
            v = int(v)
            if 1 <= v <= total_numbers:
                freq[v - 1] += 1
    return freq


def bonus_frequency(bonuses: Iterable[int], total_numbers: int = 45) -> np.ndarray:
    freq = np.zeros(total_numbers, dtype=np.int64)
    for v in bonuses:
        v = int(v)
        if 1 <= v <= total_numbers:
            freq[v - 1] += 1
    return freq


def first_number_frequency(draws: Iterable[Sequence[int]], total_numbers: int = 45) -> np.ndarray:
    """
    첫 번째 번호(시작 번호) 빈도

    시뮬레이션 결과는 추출 순서 그대로 넘겨야 한다 (정렬하면 의미 없음).
    """
    freq = np.zeros(total_numbers, dtype=np.int64)
    for draw in draws:
        if len(draw) == 0:
            continue
        v = int(draw[0])
        if 1 <= v <= total_numbers:
            freq[v - 1] += 1
    return freq


# ==================== 가중치 빌더 ====================
def frequency_weights(draws: Iterable[Sequence[int]], total_numbers: int = 45) -> np.ndarray:
    """빈도 가중치: 기본 1 + 출현 횟수"""
    return 1.0 + number_frequency(draws, total_numbers).astype(float)


def non_frequency_weights(draws: Iterable[Sequence[int]], total_numbers: int = 45) -> np.ndarray:
    """콜드 가중치: 100 / (출현 횟수 + 1)"""
    return 100.0 / (number_frequency(draws, total_numbers).astype(float) + 1.0)


def compute_adaptive_weights(draws: Sequence[Sequence[int]], config: LottoConfig = DEFAULT_CONFIG) -> np.ndarray:
    """
    추세 가중치 (지수 감쇠)

    최근 adaptive_recent_limit 회차만 사용. 가장 오래된 회차부터 최신 회차 순으로
    매 회차마다 전체 가중치에 감쇠율을 곱한 뒤, 그 회차 번호에 보상을 더한다.
    """
    n = config.total_numbers
    weights = np.ones(n, dtype=float)
    recent = list(draws[: config.adaptive_recent_limit])

    for draw in reversed(recent):
        weights *= config.adaptive_decay_rate
        for v in draw:
            v = int(v)
            if 1 <= v <= n:
                weights[v - 1] += config.adaptive_reward
    return weights


class StatisticsCache:
    """
    추세 가중치 캐시

    키는 (회차 수, 내용 체크섬). 같은 길이로 내용만 바뀌어도 다시 계산한다.
    무효화 → 재계산은 락 하나로 직렬화한다.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._key: tuple[int, str] | None = None
        self._weights: np.ndarray | None = None
        self.rebuilds = 0

    def adaptive_weights(self, draws: Sequence[Sequence[int]], config: LottoConfig = DEFAULT_CONFIG) -> np.ndarray:
        key = history_key(draws)
        with self._lock:
            if self._weights is None or self._key != key:
                self._weights = None
                self._weights = compute_adaptive_weights(draws, config)
                self._key = key
                self.rebuilds += 1
            return self._weights.copy()

    def invalidate(self) -> None:
        with self._lock:
            self._key = None
            self._weights = None
