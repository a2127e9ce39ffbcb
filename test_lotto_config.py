#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""설정 로드 (.env / LOTTO_* 환경변수) 테스트"""

import pytest

from lotto_config import DEFAULT_CONFIG, load_config


def test_env_overrides_are_coerced_to_field_type(monkeypatch):
    monkeypatch.setenv("LOTTO_TURBULENCE", "8.5")
    monkeypatch.setenv("LOTTO_STEPS_PER_EXTRACTION", "60")
    monkeypatch.setenv("LOTTO_LOG_LEVEL", "DEBUG")

    config = load_config()

    assert config.turbulence == 8.5
    assert config.steps_per_extraction == 60
    assert isinstance(config.steps_per_extraction, int)
    assert config.log_level == "DEBUG"
    assert config.gravity == DEFAULT_CONFIG.gravity


def test_keyword_overrides_win_over_env(monkeypatch):
    monkeypatch.setenv("LOTTO_GRAVITY", "0.5")
    assert load_config(gravity=0.1).gravity == 0.1


def test_invalid_env_value(monkeypatch):
    monkeypatch.setenv("LOTTO_MAX_EXTRACTION_CYCLES", "many")
    with pytest.raises(ValueError):
        load_config()


def test_derived_values():
    assert DEFAULT_CONFIG.total_draw_count == 7
    assert DEFAULT_CONFIG.drum_center == (300.0, 200.0)
