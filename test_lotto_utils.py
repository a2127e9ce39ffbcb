#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""출력 포맷 유틸리티 테스트"""

import numpy as np

from lotto_utils import draw_to_text, frequency_table_text, sets_to_text


def test_draw_to_text_marks_bonus():
    assert draw_to_text([1, 12, 23, 34, 40, 45, 7]) == " 1 12 23 34 40 45 +  7"
    assert draw_to_text([1, 12, 23, 34, 40, 45]) == " 1 12 23 34 40 45"


def test_sets_to_text_one_line_per_set():
    text = sets_to_text([[1, 2, 3, 4, 5, 6, 7], [8, 9, 10, 11, 12, 13, 14]])
    assert text.splitlines() == [" 1  2  3  4  5  6 +  7", " 8  9 10 11 12 13 + 14"]


def test_frequency_table_layout():
    counts = frequency_table_text(np.arange(45, dtype=np.int64), columns=9)
    lines = counts.splitlines()
    assert len(lines) == 5
    assert lines[0].startswith(" 1:    0")

    weights = frequency_table_text(np.full(45, 1.5))
    assert " 1:   1.50" in weights
