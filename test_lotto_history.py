#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
히스토리 / 통계 엔진 테스트
"""

import logging

import numpy as np
import pytest

from lotto_config import DEFAULT_CONFIG
from lotto_errors import InvalidHistoryShape
from lotto_history import (
    History,
    StatisticsCache,
    bonus_frequency,
    clean_draws,
    compute_adaptive_weights,
    first_number_frequency,
    frequency_weights,
    history_key,
    non_frequency_weights,
    number_frequency,
    validate_bonus,
    validate_draw,
)


# ==================== 빈도 ====================
def test_frequency_weights_example():
    draws = [[1, 2, 3, 4, 5, 6], [1, 2, 3, 4, 5, 6]]
    w = frequency_weights(draws)

    assert w[0] == 3  # 번호 1
    assert w[6] == 1  # 번호 7
    assert w.shape == (45,)


def test_frequency_weights_at_least_one_and_monotone():
    draws = [[1, 2, 3, 4, 5, 6], [1, 2, 3, 7, 8, 9], [1, 2, 10, 11, 12, 13]]
    w = frequency_weights(draws)
    freq = number_frequency(draws)

    assert (w >= 1).all()
    assert w[0] == w[1] > w[2] > w[3] > w[44]
    np.testing.assert_array_equal(w, 1 + freq)


def test_non_frequency_weights_strictly_decrease_with_count():
    draws = [[1, 2, 3, 4, 5, 6], [1, 2, 3, 7, 8, 9], [1, 2, 10, 11, 12, 13]]
    w = non_frequency_weights(draws)

    # 1, 2: 3회 / 3: 2회 / 4: 1회 / 45: 0회
    assert w[0] == pytest.approx(25.0)
    assert w[0] == w[1]
    assert w[0] < w[2] < w[3] < w[44]
    assert w[44] == pytest.approx(100.0)


def test_first_number_frequency_uses_draw_order():
    draws = [[7, 1, 2, 3, 4, 5], [7, 9, 10, 11, 12, 13], [1, 7, 2, 3, 4, 5]]
    freq = first_number_frequency(draws)

    assert freq[6] == 2
    assert freq[0] == 1
    assert freq.sum() == 3


# ==================== 추세 가중치 ====================
def test_adaptive_single_draw():
    w = compute_adaptive_weights([[1, 2, 3, 4, 5, 6]], DEFAULT_CONFIG)

    assert w[0] == pytest.approx(0.96 + 1.0)
    assert w[6] == pytest.approx(0.96)


def test_adaptive_favors_newest_draw():
    # 0번이 최신 회차
    draws = [[7, 8, 9, 10, 11, 12], [1, 2, 3, 4, 5, 6]]
    w = compute_adaptive_weights(draws, DEFAULT_CONFIG)

    assert w[6] == pytest.approx(0.96 * 0.96 + 1.0)
    assert w[0] == pytest.approx((0.96 + 1.0) * 0.96)
    assert w[6] > w[0]


def test_adaptive_uses_only_recent_window():
    draws = [[1, 2, 3, 4, 5, 6]] * 100 + [[7, 8, 9, 10, 11, 12]] * 50
    w = compute_adaptive_weights(draws, DEFAULT_CONFIG)

    assert w[6] == pytest.approx(0.96 ** 100)
    assert w[44] == pytest.approx(0.96 ** 100)


# ==================== 캐시 ====================
def test_statistics_cache_reuses_same_history():
    cache = StatisticsCache()
    draws = [[1, 2, 3, 4, 5, 6]]

    first = cache.adaptive_weights(draws)
    second = cache.adaptive_weights([list(d) for d in draws])

    assert cache.rebuilds == 1
    np.testing.assert_array_equal(first, second)


def test_statistics_cache_rebuilds_on_same_length_edit():
    cache = StatisticsCache()
    before = cache.adaptive_weights([[1, 2, 3, 4, 5, 6]])
    after = cache.adaptive_weights([[40, 41, 42, 43, 44, 45]])

    assert cache.rebuilds == 2
    assert before[0] > after[0]
    assert after[44] > before[44]


def test_statistics_cache_returns_copy():
    cache = StatisticsCache()
    w = cache.adaptive_weights([[1, 2, 3, 4, 5, 6]])
    w[:] = 0

    assert cache.adaptive_weights([[1, 2, 3, 4, 5, 6]])[0] > 0
    assert cache.rebuilds == 1


def test_statistics_cache_invalidate():
    cache = StatisticsCache()
    cache.adaptive_weights([[1, 2, 3, 4, 5, 6]])
    cache.invalidate()
    cache.adaptive_weights([[1, 2, 3, 4, 5, 6]])

    assert cache.rebuilds == 2


def test_history_key_tracks_content():
    a = history_key([[1, 2, 3, 4, 5, 6]])
    b = history_key([[1, 2, 3, 4, 5, 7]])

    assert a[0] == b[0] == 1
    assert a != b
    assert history_key([[1, 2, 3, 4, 5, 6]]) == a


# ==================== 검증 ====================
@pytest.mark.parametrize("entry", [
    [1, 2, 3],
    [0, 1, 2, 3, 4, 5],
    [1, 2, 3, 4, 5, 46],
    [1, 1, 2, 3, 4, 5],
    ["a", 2, 3, 4, 5, 6],
    None,
])
def test_validate_draw_rejects_bad_entries(entry):
    with pytest.raises(InvalidHistoryShape):
        validate_draw(entry)


def test_clean_draws_skips_bad_entries(caplog):
    entries = [
        [1, 2, 3, 4, 5, 6],
        [1, 2, 3],
        [0, 1, 2, 3, 4, 5],
        [10, 20, 30, 40, 41, 45],
    ]
    with caplog.at_level(logging.INFO, logger="lotto_history"):
        draws = clean_draws(entries)

    assert draws == [[1, 2, 3, 4, 5, 6], [10, 20, 30, 40, 41, 45]]
    assert "2개" in caplog.text


def test_history_from_csv(tmp_path):
    path = tmp_path / "lotto.csv"
    path.write_text(
        "round,date,n1,n2,n3,n4,n5,n6,bonus\n"
        "1100,2023-12-30,17,26,29,30,31,43,12\n"
        "1099,2023-12-23,3,20,28,38,40,43,4\n"
        "1098,2023-12-16,x,2,3,4,5,6,7\n"
        "1097,2023-12-09,1,2,3,4,5,99,8\n",
        encoding="utf-8",
    )
    history = History.from_csv(str(path))

    assert len(history) == 2
    assert history.draws[0] == [17, 26, 29, 30, 31, 43]
    assert history.bonuses == [12, 4]
    assert len(history.bonuses) == len(history.draws)


def test_history_from_empty_dataframe():
    assert len(History.from_dataframe(None)) == 0


def test_bonus_stays_paired_with_its_draw(tmp_path):
    path = tmp_path / "lotto.csv"
    path.write_text(
        "n1,n2,n3,n4,n5,n6,bonus\n"
        "1,2,3,4,5,6,7\n"
        "1,2,3,4,5,99,8\n"
        "10,11,12,13,14,15,16\n"
        "20,21,22,23,24,25,\n",
        encoding="utf-8",
    )
    history = History.from_csv(str(path))

    assert history.draws == [[1, 2, 3, 4, 5, 6], [10, 11, 12, 13, 14, 15]]
    assert history.bonuses == [7, 16]
    assert bonus_frequency(history.bonuses)[7] == 0  # 건너뛴 회차의 보너스 8


def test_from_sequences_skips_bad_bonus_with_its_draw():
    history = History.from_sequences(
        [[1, 2, 3, 4, 5, 6], [7, 8, 9, 10, 11, 12], [1, 2, 3], [13, 14, 15, 16, 17, 18]],
        bonuses=[40, 7, 41, 46],
    )

    # 2번째: 보너스가 메인과 중복 / 3번째: 회차 불량 / 4번째: 보너스 범위 밖
    assert history.draws == [[1, 2, 3, 4, 5, 6]]
    assert history.bonuses == [40]


def test_from_sequences_without_bonuses():
    history = History.from_sequences([[1, 2, 3, 4, 5, 6], [1, 2]])
    assert history.draws == [[1, 2, 3, 4, 5, 6]]
    assert history.bonuses == []


def test_from_sequences_rejects_length_mismatch():
    with pytest.raises(InvalidHistoryShape):
        History.from_sequences([[1, 2, 3, 4, 5, 6]], bonuses=[7, 8])


@pytest.mark.parametrize("bonus", [0, 46, 3, "x", None, float("nan")])
def test_validate_bonus_rejects(bonus):
    with pytest.raises(InvalidHistoryShape):
        validate_bonus(bonus, [1, 2, 3, 4, 5, 6])
