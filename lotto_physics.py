#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
2D Lotto Physics Engine
Korean Lotto 6/45 Air-Mix Drum Simulation

좌표계는 화면 좌표 (y 가 아래로 증가). 한 스텝 = 한 프레임.
- 중력, 바닥 중앙 공기 분사(난류), 등방성 마찰
- 원형 드럼 벽 충돌 (법선 반사 × 탄성, 접선 5% 감쇠)
- 공-공 2D 탄성 충돌 (Numba JIT)
- 상단 흡입구 추출 판정
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np
from numba import njit

from lotto_config import DEFAULT_CONFIG, LottoConfig

# ==================== Physical Constants ====================
WALL_TANGENTIAL_DAMPING = 0.05  # 벽 마찰 (접선 속도 5% 감소)
JET_LIFT_FACTOR = 0.8  # 분사 구간 양력 = turbulence × 0.8
JET_RESIDUAL_FACTOR = 0.1  # 잔여 양력 = turbulence × 0.1
JET_BLAST_CHAOS = 2.0  # 분사 구간 수직 요동 최대치
JET_BLAST_JITTER = 2.0  # 분사 구간 수평 요동 폭
JET_RESIDUAL_JITTER = 5.0  # 잔여 구간 수평 분산 폭
INITIAL_SPEED = 15.0  # 초기 속도 성분 폭
SPAWN_MARGIN = 20.0


# ==================== Ball Data Structure ====================
@dataclass
class Ball:
    """공 상태 (번호 1..45)"""
    id: int

    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0

    radius: float = 10.0
    mass: float = 1.0
    elasticity: float = 0.85
    friction: float = 0.99  # 프레임당 속도 유지율

    extracted: bool = False

    @property
    def speed(self) -> float:
        return math.hypot(self.vx, self.vy)

    @property
    def kinetic_energy(self) -> float:
        return 0.5 * self.mass * (self.vx ** 2 + self.vy ** 2)


@dataclass
class SimulationContext:
    """
    드럼 형상 + 물리 상수

    형상은 실행 중 고정, turbulence/gravity 는 외부 컨트롤이 매 스텝 바꿀 수 있다.
    """
    center_x: float = 300.0
    center_y: float = 200.0
    drum_radius: float = 180.0
    suction_radius: float = 30.0
    suction_offset: float = 20.0
    turbulence: float = 5.0
    gravity: float = 0.3
    jet_width: float = 60.0
    jet_height: float = 100.0

    @classmethod
    def from_config(cls, config: LottoConfig = DEFAULT_CONFIG) -> "SimulationContext":
        cx, cy = config.drum_center
        return cls(
            center_x=cx,
            center_y=cy,
            drum_radius=config.drum_radius,
            suction_radius=config.suction_radius,
            suction_offset=config.suction_offset,
            turbulence=config.turbulence,
            gravity=config.gravity,
            jet_width=config.jet_width,
            jet_height=config.jet_height,
        )

    @property
    def suction_x(self) -> float:
        return self.center_x

    @property
    def suction_y(self) -> float:
        return self.center_y - self.drum_radius + self.suction_offset

    @property
    def drum_bottom(self) -> float:
        return self.center_y + self.drum_radius


def create_balls(
    context: SimulationContext,
    config: LottoConfig = DEFAULT_CONFIG,
    rng: Optional[np.random.Generator] = None,
    mass_jitter: float = 0.05,
) -> List[Ball]:
    """45개 공 생성 - 드럼 내부 무작위 위치, 무작위 초기 속도"""
    rng = rng if rng is not None else np.random.default_rng()
    balls = []
    spawn_r = max(context.drum_radius - SPAWN_MARGIN, 0.0)

    for number in range(1, config.total_numbers + 1):
        angle = rng.uniform(0, 2 * np.pi)
        r = rng.uniform(0, spawn_r)
        balls.append(Ball(
            id=number,
            x=context.center_x + math.cos(angle) * r,
            y=context.center_y + math.sin(angle) * r,
            vx=(rng.random() - 0.5) * INITIAL_SPEED,
            vy=(rng.random() - 0.5) * INITIAL_SPEED,
            radius=config.ball_radius,
            mass=1.0 + (rng.random() - 0.5) * mass_jitter,
            elasticity=config.elasticity,
            friction=config.friction,
        ))
    return balls


# ==================== 물리 법칙 적용 ====================
def apply_air_jet(ball: Ball, context: SimulationContext, rng: np.random.Generator):
    """
    바닥 중앙 공기 분사

    - 분사 기둥(폭 jet_width) 안, 바닥에서 jet_height 이내: 강한 상승 + 요동
    - 분사 기둥 안, 드럼 중심선 아래쪽 나머지 구간: 약한 상승 + 큰 수평 분산
      (기둥 밖으로 밀어내 다시 순환시키기 위함)
    """
    turbulence = context.turbulence
    if turbulence <= 0:
        return
    if abs(ball.x - context.center_x) >= context.jet_width / 2:
        return

    if ball.y > context.drum_bottom - context.jet_height:
        ball.vy -= turbulence * JET_LIFT_FACTOR + rng.random() * JET_BLAST_CHAOS
        ball.vx += (rng.random() - 0.5) * JET_BLAST_JITTER
    elif ball.y > context.center_y:
        ball.vy -= turbulence * JET_RESIDUAL_FACTOR
        ball.vx += (rng.random() - 0.5) * JET_RESIDUAL_JITTER


def resolve_wall_collision(ball: Ball, context: SimulationContext) -> bool:
    """원형 드럼 벽 충돌 - 겹친 만큼 안쪽으로 밀고 법선 성분 반사"""
    dx = ball.x - context.center_x
    dy = ball.y - context.center_y
    dist = math.hypot(dx, dy)

    if dist + ball.radius <= context.drum_radius:
        return False

    if dist > 0:
        nx = dx / dist
        ny = dy / dist
    else:
        # 드럼보다 큰 공이 정중앙에 있는 경우 (설정 오류)
        nx, ny = 0.0, 1.0

    overlap = dist + ball.radius - context.drum_radius
    ball.x -= nx * overlap
    ball.y -= ny * overlap

    # 의도적으로 벽 밖으로 향하는 속도(v_n > 0)만 반사: v_new = v - (1 + e) * v_n * n
    v_normal = ball.vx * nx + ball.vy * ny
    if v_normal > 0:
        ball.vx -= (1 + ball.elasticity) * v_normal * nx
        ball.vy -= (1 + ball.elasticity) * v_normal * ny

    tx, ty = -ny, nx
    v_tangent = ball.vx * tx + ball.vy * ty
    ball.vx -= tx * v_tangent * WALL_TANGENTIAL_DAMPING
    ball.vy -= ty * v_tangent * WALL_TANGENTIAL_DAMPING
    return True


def update_ball(ball: Ball, context: SimulationContext, rng: np.random.Generator) -> bool:
    """
    한 프레임 갱신 (semi-implicit Euler)

    중력 → 공기 분사 → 마찰 → 위치 적분 → 벽 충돌
    Returns: 벽 충돌 여부
    """
    ball.vy += context.gravity
    apply_air_jet(ball, context, rng)

    ball.vx *= ball.friction
    ball.vy *= ball.friction

    ball.x += ball.vx
    ball.y += ball.vy

    return resolve_wall_collision(ball, context)


# ==================== 충돌 처리 ====================
@njit(cache=True)
def _resolve_pairs_jit(pos, vel, mass, radius, active):
    """
    Numba JIT 공-공 충돌 (O(n²))

    법선 방향 운동량을 질량 가중 교환, 접선 성분은 유지.
    속도 교환은 접근 중인 쌍(v1n - v2n > 0)에만 의도적으로 제한한다.
    이미 멀어지는 쌍은 속도 교환 없이 위치만 분리한다.
    겹친 양의 절반씩 법선 방향으로 밀어낸다.
    """
    n = pos.shape[0]
    hits = 0

    for i in range(n):
        if not active[i]:
            continue
        for j in range(i + 1, n):
            if not active[j]:
                continue

            dx = pos[j, 0] - pos[i, 0]
            dy = pos[j, 1] - pos[i, 1]
            rad_sum = radius[i] + radius[j]
            dist_sq = dx * dx + dy * dy
            if dist_sq >= rad_sum * rad_sum:
                continue

            dist = np.sqrt(dist_sq)
            if dist < 1e-9:
                nx = 1.0
                ny = 0.0
            else:
                nx = dx / dist
                ny = dy / dist
            tx = -ny
            ty = nx

            v1n = vel[i, 0] * nx + vel[i, 1] * ny
            v2n = vel[j, 0] * nx + vel[j, 1] * ny
            v1t = vel[i, 0] * tx + vel[i, 1] * ty
            v2t = vel[j, 0] * tx + vel[j, 1] * ty

            if v1n - v2n > 0.0:
                m1 = mass[i]
                m2 = mass[j]
                v1n_final = ((m1 - m2) * v1n + 2.0 * m2 * v2n) / (m1 + m2)
                v2n_final = ((m2 - m1) * v2n + 2.0 * m1 * v1n) / (m1 + m2)

                vel[i, 0] = v1n_final * nx + v1t * tx
                vel[i, 1] = v1n_final * ny + v1t * ty
                vel[j, 0] = v2n_final * nx + v2t * tx
                vel[j, 1] = v2n_final * ny + v2t * ty

            overlap = (rad_sum - dist) / 2.0
            pos[i, 0] -= nx * overlap
            pos[i, 1] -= ny * overlap
            pos[j, 0] += nx * overlap
            pos[j, 1] += ny * overlap
            hits += 1

    return hits


def resolve_ball_collisions(balls: List[Ball]) -> int:
    """공-공 충돌 감지 및 처리 - Ball 데이터를 배열로 옮겨 JIT 함수 호출"""
    n = len(balls)
    if n < 2:
        return 0

    pos = np.zeros((n, 2), dtype=np.float64)
    vel = np.zeros((n, 2), dtype=np.float64)
    mass = np.zeros(n, dtype=np.float64)
    radius = np.zeros(n, dtype=np.float64)
    active = np.zeros(n, dtype=np.bool_)

    for i, ball in enumerate(balls):
        pos[i] = (ball.x, ball.y)
        vel[i] = (ball.vx, ball.vy)
        mass[i] = ball.mass
        radius[i] = ball.radius
        active[i] = not ball.extracted

    hits = _resolve_pairs_jit(pos, vel, mass, radius, active)

    if hits:
        for i, ball in enumerate(balls):
            ball.x = pos[i, 0]
            ball.y = pos[i, 1]
            ball.vx = vel[i, 0]
            ball.vy = vel[i, 1]
    return int(hits)


def step(balls: List[Ball], context: SimulationContext, rng: np.random.Generator) -> int:
    """한 타임스텝 - 활성 공 전체 갱신 후 쌍 충돌 해결, 충돌 수 반환"""
    for ball in balls:
        if not ball.extracted:
            update_ball(ball, context, rng)
    return resolve_ball_collisions(balls)


# ==================== 추출 판정 ====================
def in_suction_zone(ball: Ball, context: SimulationContext) -> bool:
    dx = ball.x - context.suction_x
    dy = ball.y - context.suction_y
    return dx * dx + dy * dy < context.suction_radius * context.suction_radius


def find_extractable(balls: List[Ball], context: SimulationContext) -> Optional[int]:
    """흡입구 안에 있는 첫 번째 활성 공의 인덱스 (없으면 None)"""
    for i, ball in enumerate(balls):
        if not ball.extracted and in_suction_zone(ball, context):
            return i
    return None


# ==================== 통계 및 유틸리티 ====================
def total_kinetic_energy(balls: List[Ball]) -> float:
    return float(sum(b.kinetic_energy for b in balls if not b.extracted))


def get_statistics(balls: List[Ball]) -> Dict:
    """물리 통계 반환"""
    active_balls = [b for b in balls if not b.extracted]
    if not active_balls:
        return {
            'active_balls': 0,
            'avg_speed': 0.0,
            'max_speed': 0.0,
            'total_energy': 0.0,
        }

    speeds = [b.speed for b in active_balls]
    return {
        'active_balls': len(active_balls),
        'avg_speed': float(np.mean(speeds)),
        'max_speed': float(np.max(speeds)),
        'total_energy': total_kinetic_energy(active_balls),
    }
