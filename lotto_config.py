#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
로또 6/45 생성기 설정 모듈
- 기본 상수 (번호 풀, 드럼 크기, 알고리즘 파라미터)
- .env / LOTTO_* 환경변수 오버라이드
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace

from dotenv import load_dotenv

VERSION = "v1.4.0"


@dataclass(frozen=True)
class LottoConfig:
    """생성기 전체 설정값"""

    # ==================== 로또 규칙 ====================
    total_numbers: int = 45
    main_count: int = 6
    bonus_count: int = 1

    # ==================== 시뮬레이션 (2D 드럼) ====================
    canvas_width: float = 600.0
    canvas_height: float = 400.0
    drum_radius: float = 180.0
    suction_radius: float = 30.0
    suction_offset: float = 20.0  # 드럼 최상단에서 흡입구 중심까지 거리
    ball_radius: float = 10.0
    turbulence: float = 5.0
    gravity: float = 0.3
    friction: float = 0.99  # 프레임당 속도 유지율
    elasticity: float = 0.85
    jet_width: float = 60.0  # 공기 분사 기둥 폭
    jet_height: float = 100.0  # 바닥에서 강한 분사가 닿는 높이
    extraction_interval_ms: float = 2000.0
    steps_per_extraction: int = 30
    max_extraction_cycles: int = 200
    batch_chunk_size: int = 10

    # ==================== 알고리즘 ====================
    adaptive_decay_rate: float = 0.96
    adaptive_reward: float = 1.0
    adaptive_recent_limit: int = 100
    weighted_power: float = 1.0
    adaptive_power: float = 10.0
    pool_scale: float = 10.0

    # ==================== RNG 소스 ====================
    external_entropy_url: str = "https://blockchain.info/q/latesthash?cors=true"
    external_entropy_timeout: float = 5.0

    # ==================== 정책 신경망 ====================
    policy_window: int = 5
    policy_epochs: int = 20

    log_level: str = "INFO"

    @property
    def total_draw_count(self) -> int:
        return self.main_count + self.bonus_count

    @property
    def drum_center(self) -> tuple[float, float]:
        return self.canvas_width / 2, self.canvas_height / 2


def _coerce(raw: str, current):
    if isinstance(current, int):
        return int(raw)
    if isinstance(current, float):
        return float(raw)
    return raw


def load_config(**overrides) -> LottoConfig:
    """
    .env 파일과 LOTTO_* 환경변수에서 설정 로드

    예: LOTTO_TURBULENCE=8, LOTTO_STEPS_PER_EXTRACTION=60
    키워드 인자는 환경변수보다 우선한다.
    """
    load_dotenv()

    base = LottoConfig()
    values = {}
    for f in fields(LottoConfig):
        raw = os.getenv(f"LOTTO_{f.name.upper()}")
        if raw is None or raw == "":
            continue
        try:
            values[f.name] = _coerce(raw, getattr(base, f.name))
        except ValueError as e:
            raise ValueError(f"LOTTO_{f.name.upper()} 값이 잘못되었습니다: {raw!r}") from e
    values.update(overrides)
    return replace(base, **values)


DEFAULT_CONFIG = LottoConfig()
