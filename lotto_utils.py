#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
로또 유틸리티 함수들
"""

from __future__ import annotations
import numpy as np


def sets_to_text(sets: list[list[int]]) -> str:
    """번호 세트를 텍스트로 변환 (7개면 마지막을 보너스로 표시)"""
    return "\n".join(draw_to_text(s) for s in sets)


def draw_to_text(numbers: list[int], main_count: int = 6) -> str:
    """예: "1 2 3 4 5 6 + 7" """
    main = " ".join(f"{n:2d}" for n in numbers[:main_count])
    if len(numbers) > main_count:
        bonus = " ".join(f"{n:2d}" for n in numbers[main_count:])
        return f"{main} + {bonus}"
    return main


def frequency_table_text(freq: np.ndarray, columns: int = 9) -> str:
    """번호별 빈도 배열(45,)을 표 형태 텍스트로 변환"""
    lines = []
    row = []
    for i, v in enumerate(freq, start=1):
        row.append(f"{i:2d}:{v:>7.2f}" if isinstance(v, (float, np.floating)) else f"{i:2d}:{int(v):>5d}")
        if len(row) == columns:
            lines.append("  ".join(row))
            row = []
    if row:
        lines.append("  ".join(row))
    return "\n".join(lines)
