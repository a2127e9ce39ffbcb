#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
물리 추첨 시뮬레이션 모듈
- RealtimeSimulation: 프레임 단위 진행, 실제 시간 간격으로 추출 (렌더러 연동)
- animate: asyncio 프레임 루프 (7개 추출 또는 stop() 시 종료)
- run_headless_simulation: 렌더링 없이 고정 스텝 수마다 추출 시도
- batch_run_simulations: 헤드리스 시뮬레이션 청크 실행 + 진행률 콜백

두 모드는 lotto_physics 의 같은 step() 을 사용한다.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Dict, List, Optional

import numpy as np

from lotto_config import DEFAULT_CONFIG, LottoConfig
from lotto_errors import PhysicsStall
from lotto_generators import GenerationResult, build_result
from lotto_physics import (
    Ball,
    SimulationContext,
    create_balls,
    find_extractable,
    get_statistics,
    step,
)

logger = logging.getLogger(__name__)

SIM_ALGORITHM_LABEL = "Mechanical Sim"
SIM_RNG_LABEL = "Physics"


def _extract(balls: List[Ball], index: int) -> int:
    ball = balls.pop(index)
    ball.extracted = True
    return ball.id


# ==================== 실시간 모드 ====================
class RealtimeSimulation:
    """
    실시간 추첨기 (한 인스턴스 = 공 세트 하나)

    tick(now_ms) 한 번이 한 프레임. 추출 간격은 벽시계 밀리초 기준이며
    첫 번째 공은 간격 제한 없이 바로 추출될 수 있다.
    """

    def __init__(
        self,
        context: Optional[SimulationContext] = None,
        config: LottoConfig = DEFAULT_CONFIG,
        seed: int | None = None,
    ):
        self.config = config
        self.context = context if context is not None else SimulationContext.from_config(config)
        self.interval_ms = config.extraction_interval_ms
        self.rng = np.random.default_rng(seed)
        self.reset()

    def reset(self):
        self.balls: List[Ball] = create_balls(self.context, self.config, self.rng)
        self.selected: List[int] = []
        self.last_extraction_ms: float | None = None
        self.frame = 0
        self.total_collisions = 0
        self.running = True

    @property
    def complete(self) -> bool:
        return len(self.selected) >= self.config.total_draw_count

    def stop(self):
        self.running = False

    def set_ball_radius(self, radius: float):
        for ball in self.balls:
            ball.radius = radius

    def tick(self, now_ms: float) -> int | None:
        """한 프레임 진행, 이번 프레임에 추출된 공 번호 반환"""
        if not self.running:
            return None

        self.total_collisions += step(self.balls, self.context, self.rng)
        self.frame += 1

        extracted = None
        if not self.complete and (
            self.last_extraction_ms is None or now_ms - self.last_extraction_ms >= self.interval_ms
        ):
            idx = find_extractable(self.balls, self.context)
            if idx is not None:
                extracted = _extract(self.balls, idx)
                self.selected.append(extracted)
                self.last_extraction_ms = now_ms
                logger.info("[%d프레임] %d번째 공 추출: %d번", self.frame, len(self.selected), extracted)

        if self.complete:
            self.running = False
        return extracted

    @property
    def result(self) -> GenerationResult | None:
        """7개 추출 완료 시 결과 (메인 6개 정렬, 7번째는 보너스)"""
        if not self.complete:
            return None
        return build_result(self.selected, SIM_ALGORITHM_LABEL, SIM_RNG_LABEL, True, self.config)

    def get_state_snapshot(self) -> Dict:
        """현재 상태 스냅샷 (렌더링용)"""
        return {
            'frame': self.frame,
            'balls': [(b.id, b.x, b.y, b.vx, b.vy, b.radius) for b in self.balls],
            'extracted': list(self.selected),
            'turbulence': self.context.turbulence,
            'statistics': get_statistics(self.balls),
        }


async def animate(
    sim: RealtimeSimulation,
    on_frame: Callable[[RealtimeSimulation, int | None], None] | None = None,
    fps: float = 60.0,
    clock: Callable[[], float] | None = None,
) -> GenerationResult | None:
    """
    프레임 루프 - 매 프레임 tick 후 제어권을 이벤트 루프에 돌려준다

    Parameters:
        on_frame: 프레임마다 호출 (sim, 이번 프레임 추출 번호)
        clock: 밀리초 시계 (기본: time.monotonic)
    """
    clock = clock if clock is not None else (lambda: time.monotonic() * 1000.0)
    frame_dt = 1.0 / fps

    while sim.running:
        extracted = sim.tick(clock())
        if on_frame is not None:
            on_frame(sim, extracted)
        if not sim.running:
            break
        await asyncio.sleep(frame_dt)

    return sim.result


# ==================== 헤드리스 모드 ====================
def _extract_by_cycles(
    balls: List[Ball],
    selected: List[int],
    context: SimulationContext,
    config: LottoConfig,
    rng: np.random.Generator,
):
    cycles = 0
    while len(selected) < config.total_draw_count:
        if cycles >= config.max_extraction_cycles:
            raise PhysicsStall(
                f"{cycles}회 시도 동안 흡입구에 도달한 공 없음 ({len(selected)}/{config.total_draw_count})"
            )
        cycles += 1

        for _ in range(config.steps_per_extraction):
            step(balls, context, rng)

        idx = find_extractable(balls, context)
        if idx is not None:
            selected.append(_extract(balls, idx))


def _random_fill(balls: List[Ball], selected: List[int], config: LottoConfig, rng: np.random.Generator):
    while len(selected) < config.total_draw_count and balls:
        selected.append(_extract(balls, int(rng.integers(0, len(balls)))))


def run_headless_simulation(
    context: Optional[SimulationContext] = None,
    config: LottoConfig = DEFAULT_CONFIG,
    seed: int | None = None,
    rng: np.random.Generator | None = None,
) -> List[int]:
    """
    렌더링 없는 1회 추첨

    steps_per_extraction 스텝마다 흡입구의 첫 번째 공을 추출한다.
    max_extraction_cycles 를 넘기면 남은 자리를 활성 공 중 무작위로 채운다.

    Returns:
        추출 순서 그대로의 7개 번호 (정렬하지 않음)
    """
    context = context if context is not None else SimulationContext.from_config(config)
    rng = rng if rng is not None else np.random.default_rng(seed)

    balls = create_balls(context, config, rng)
    selected: List[int] = []

    try:
        _extract_by_cycles(balls, selected, context, config, rng)
    except PhysicsStall as e:
        logger.warning("물리 시뮬 정체, 무작위로 채움: %s", e)
        _random_fill(balls, selected, config, rng)

    return selected


async def batch_run_simulations(
    count: int,
    on_progress: Callable[[int], None] | None = None,
    config: LottoConfig = DEFAULT_CONFIG,
    seed: int | None = None,
    context: Optional[SimulationContext] = None,
) -> List[List[int]]:
    """
    헤드리스 시뮬레이션 count 회 실행

    batch_chunk_size 회마다 진행률(정수 %)을 알리고 이벤트 루프에 양보한다.
    결과는 완료 순서, 각 회차는 추출 순서 (정책 신경망 학습 입력 형식).
    """
    results: List[List[int]] = []
    if count <= 0:
        if on_progress is not None:
            on_progress(100)
        return results

    rng = np.random.default_rng(seed)
    chunk = max(1, config.batch_chunk_size)

    while len(results) < count:
        for _ in range(min(chunk, count - len(results))):
            results.append(run_headless_simulation(context, config, rng=rng))

        percent = round(len(results) / count * 100)
        logger.debug("배치 시뮬레이션 %d/%d (%d%%)", len(results), count, percent)
        if on_progress is not None:
            on_progress(percent)
        await asyncio.sleep(0)

    return results
