#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Lotto 6/45 Generator (KR) - Random + HM Stats + Markov + Policy NN + Physics Drum
명령행 진입점

사용 예:
    python lotto_main.py generate --algorithm adaptive --rng secure --history lotto.csv
    python lotto_main.py simulate --interval 0.5
    python lotto_main.py batch --count 2000 --output sim.csv
    python lotto_main.py train --count 2000 --model policy.pkl
    python lotto_main.py stats --history lotto.csv
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import replace

import pandas as pd

from lotto_config import VERSION, LottoConfig, load_config
from lotto_generators import Algorithm, GeneratorState, generate
from lotto_history import (
    History,
    bonus_frequency,
    first_number_frequency,
    frequency_weights,
    non_frequency_weights,
    number_frequency,
    StatisticsCache,
)
from lotto_policy import PolicyNetwork
from lotto_rng import RngSource
from lotto_simulation import RealtimeSimulation, animate, batch_run_simulations
from lotto_utils import frequency_table_text, sets_to_text

logger = logging.getLogger(__name__)

SIM_COLUMNS = ["n1", "n2", "n3", "n4", "n5", "n6", "bonus"]


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )


def _load_history(path: str | None, config: LottoConfig) -> History:
    if not path:
        return History()
    history = History.from_csv(path, config)
    logger.info("히스토리 로드: %d회차 (%s)", len(history), path)
    return history


def _print_progress(percent: int):
    print(f"\r시뮬레이션 진행률: {percent:3d}%", end="", flush=True)
    if percent >= 100:
        print()


# ==================== 명령 ====================
async def cmd_generate(args, config: LottoConfig) -> int:
    history = _load_history(args.history, config)
    state = GeneratorState()
    if args.policy:
        state.policy = PolicyNetwork.load(args.policy)

    for _ in range(args.count):
        result = await generate(args.algorithm, args.rng, history, state, config)
        print(f"{result.to_text()}   [{result.algorithm_label} / {result.rng_label}]")
    return 0


async def cmd_simulate(args, config: LottoConfig) -> int:
    sim = RealtimeSimulation(config=config, seed=args.seed)

    def on_frame(s: RealtimeSimulation, extracted: int | None):
        if extracted is not None:
            tag = "보너스" if s.complete else f"{len(s.selected)}번째"
            print(f"  {tag}: {extracted:2d}")

    print(f"물리 추첨 시작 (추출 간격 {config.extraction_interval_ms / 1000:.1f}초)")
    result = await animate(sim, on_frame, fps=args.fps)
    if result is not None:
        print(f"결과: {result.to_text()}   [{result.algorithm_label} / {result.rng_label}]")
    return 0


async def cmd_batch(args, config: LottoConfig) -> int:
    results = await batch_run_simulations(args.count, _print_progress, config, seed=args.seed)
    if args.output:
        pd.DataFrame(results, columns=SIM_COLUMNS).to_csv(args.output, index=False)
        logger.info("시뮬레이션 결과 %d개 저장: %s", len(results), args.output)
    else:
        print(sets_to_text(results))
    return 0


async def cmd_train(args, config: LottoConfig) -> int:
    if args.data:
        draws = pd.read_csv(args.data)[SIM_COLUMNS].astype(int).values.tolist()
    else:
        draws = await batch_run_simulations(args.count, _print_progress, config, seed=args.seed)

    def on_epoch(epoch: int, loss: float):
        print(f"  epoch {epoch:3d}/{config.policy_epochs}  loss {loss:.4f}")

    policy = PolicyNetwork(config).fit(draws, on_epoch=on_epoch)
    policy.save(args.model)
    print(f"정책 신경망 저장: {args.model}")
    return 0


async def cmd_stats(args, config: LottoConfig) -> int:
    history = _load_history(args.history, config)
    n = config.total_numbers

    sections = [
        ("출현 빈도", number_frequency(history.draws, n)),
        ("보너스 빈도", bonus_frequency(history.bonuses, n)),
        ("첫 번호 빈도", first_number_frequency(history.draws, n)),
        ("빈도 가중치", frequency_weights(history.draws, n)),
        ("추세 가중치", StatisticsCache().adaptive_weights(history.draws, config)),
        ("비빈도 가중치", non_frequency_weights(history.draws, n)),
    ]
    print(f"히스토리 {len(history)}회차")
    for title, values in sections:
        print(f"\n[{title}]")
        print(frequency_table_text(values))
    return 0


COMMANDS = {
    "generate": cmd_generate,
    "simulate": cmd_simulate,
    "batch": cmd_batch,
    "train": cmd_train,
    "stats": cmd_stats,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=f"Lotto 6/45 Generator {VERSION}")
    parser.add_argument("--log-level", default=None, help="로그 레벨 (기본: 설정값)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("generate", help="알고리즘으로 번호 생성")
    p.add_argument("--algorithm", "-a", default=Algorithm.RANDOM.value,
                   choices=[a.value for a in Algorithm])
    p.add_argument("--rng", "-r", default=RngSource.FAST.value,
                   choices=[s.value for s in RngSource])
    p.add_argument("--history", help="과거 당첨 번호 CSV (n1..n6, bonus)")
    p.add_argument("--policy", help="학습된 정책 신경망 파일")
    p.add_argument("--count", "-n", type=int, default=1)

    p = sub.add_parser("simulate", help="실시간 물리 추첨 1회")
    p.add_argument("--interval", type=float, default=None, help="추출 간격 (초)")
    p.add_argument("--turbulence", type=float, default=None)
    p.add_argument("--gravity", type=float, default=None)
    p.add_argument("--fps", type=float, default=60.0)
    p.add_argument("--seed", type=int, default=None)

    p = sub.add_parser("batch", help="헤드리스 물리 추첨 여러 회")
    p.add_argument("--count", "-n", type=int, default=2000)
    p.add_argument("--output", "-o", help="결과 CSV (추출 순서)")
    p.add_argument("--seed", type=int, default=None)

    p = sub.add_parser("train", help="시뮬레이션 데이터로 정책 신경망 학습")
    p.add_argument("--count", "-n", type=int, default=2000)
    p.add_argument("--data", help="batch 명령으로 저장한 CSV (없으면 새로 시뮬레이션)")
    p.add_argument("--model", "-m", default="policy.pkl")
    p.add_argument("--seed", type=int, default=None)

    p = sub.add_parser("stats", help="히스토리 통계 출력")
    p.add_argument("--history", required=True)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config()

    if args.command == "simulate":
        overrides = {}
        if args.interval is not None:
            overrides["extraction_interval_ms"] = args.interval * 1000.0
        if args.turbulence is not None:
            overrides["turbulence"] = args.turbulence
        if args.gravity is not None:
            overrides["gravity"] = args.gravity
        config = replace(config, **overrides)

    setup_logging(args.log_level or config.log_level)
    return asyncio.run(COMMANDS[args.command](args, config))


if __name__ == '__main__':
    sys.exit(main())
