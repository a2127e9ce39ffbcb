#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
로또 생성기 예외 정의
"""

from __future__ import annotations


class LottoError(Exception):
    """생성기 공통 예외"""


class InsufficientEntropySource(LottoError):
    """외부 엔트로피 소스(블록 해시 API) 접근 실패"""


class InvalidHistoryShape(LottoError, ValueError):
    """잘못된 과거 당첨 번호 항목 (개수/범위/중복)"""


class SamplingExhausted(LottoError, RuntimeError):
    """가중치 풀이 필요한 개수를 채우기 전에 비어버림"""


class PhysicsStall(LottoError):
    """헤드리스 시뮬레이션이 흡입 조건을 만족하지 못하고 멈춤"""


class PolicyNotTrained(LottoError, RuntimeError):
    """학습되지 않은 정책 신경망 사용"""
