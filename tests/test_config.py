"""Tests for StimConfig, scheduling modes and configuration validation."""

from __future__ import annotations

import pytest

from VTSE.SMM.config import (
    Blocked,
    ConfigError,
    FixedPhaseShift,
    RandomPhaseShift,
    StimConfig,
    check_config,
    resolve_mode,
    validate_config,
)
from VTSE.SGM.cycle_clock import cycle_samples
from VTSE.SVM.pulse_scan import scan_pulses


class TestResolveMode:
    def test_no_switches_is_blocked(self):
        assert resolve_mode(None, False) == Blocked()

    def test_phaseshift_interval(self):
        assert resolve_mode(30, False) == RandomPhaseShift(30)

    def test_fixed_phaseshift(self):
        assert resolve_mode(None, True) == FixedPhaseShift()

    def test_both_switches_conflict(self):
        with pytest.raises(ConfigError, match="Conflicting"):
            resolve_mode(30, True)

    def test_modes_are_distinct(self):
        assert Blocked() != FixedPhaseShift()
        assert RandomPhaseShift(10) != RandomPhaseShift(20)


class TestStimConfig:
    def test_defaults_are_stock_run(self):
        config = StimConfig()
        assert config.channels == 4
        assert config.sample_rate_hz == 44_100
        assert config.stim_freq_hz == 250
        assert config.stim_duration_ms == 100
        assert config.cycle_period_ms == 666
        assert config.pause_cycle_period == 5
        assert config.pause_cycles == frozenset()
        assert config.repetitions == 1
        assert config.randomize is True
        assert config.mode == Blocked()
        assert config.seed is None

    def test_total_channels_is_two_hands(self):
        assert StimConfig(channels=3).total_channels == 6

    def test_phase_shifted(self):
        assert not StimConfig().phase_shifted
        assert StimConfig(mode=RandomPhaseShift(5)).phase_shifted
        assert StimConfig(mode=FixedPhaseShift()).phase_shifted

    def test_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)


class TestCheckConfig:
    @pytest.mark.parametrize(
        "field",
        ["channels", "sample_rate_hz", "stim_freq_hz", "stim_duration_ms",
         "cycle_period_ms", "pause_cycle_period", "repetitions"],
    )
    def test_zero_rejected(self, field):
        with pytest.raises(ConfigError, match=field):
            check_config(StimConfig()._replace(**{field: 0}))

    def test_non_integer_rejected(self):
        with pytest.raises(ConfigError, match="integer"):
            check_config(StimConfig(sample_rate_hz=44100.0))

    def test_negative_seed_rejected(self):
        with pytest.raises(ConfigError, match="seed"):
            check_config(StimConfig(seed=-1))

    def test_slot_shorter_than_a_sample(self):
        with pytest.raises(ConfigError, match="one sample"):
            check_config(StimConfig(channels=4, sample_rate_hz=1000, cycle_period_ms=3))

    def test_single_channel_randomized_blocked(self):
        with pytest.raises(ConfigError, match="at least 2 channels"):
            check_config(StimConfig(channels=1))

    def test_phase_interval_must_be_positive(self):
        with pytest.raises(ConfigError, match="interval"):
            check_config(StimConfig(mode=RandomPhaseShift(0)))

    def test_phase_interval_below_one_sample(self):
        with pytest.raises(ConfigError, match="shorter than one sample"):
            check_config(StimConfig(sample_rate_hz=500, mode=RandomPhaseShift(1)))


class TestValidateConfig:
    def test_stock_run_is_clean(self):
        assert validate_config(StimConfig(pause_cycles=frozenset({3, 4}))) == []

    def test_fatal_problems_still_raise(self):
        with pytest.raises(ConfigError):
            validate_config(StimConfig(channels=0))

    def test_frequency_period_mismatch(self):
        warnings = validate_config(StimConfig(stim_freq_hz=255, stim_duration_ms=102))
        assert "Stimulation period and frequency do not match!" in warnings

    def test_whole_periods_match_for_long_bursts(self):
        # 250 Hz for 300 ms is 75 whole periods
        assert validate_config(StimConfig(stim_duration_ms=300, cycle_period_ms=1200)) == []

    def test_overlapping_stimulation(self):
        warnings = validate_config(StimConfig(stim_duration_ms=200))
        assert "Overlapping stimulation periods not supported!" in warnings

    def test_nyquist(self):
        warnings = validate_config(StimConfig(sample_rate_hz=400, stim_freq_hz=250))
        assert any("Nyquist" in w for w in warnings)

    def test_pause_outside_super_cycle(self):
        warnings = validate_config(StimConfig(pause_cycles=frozenset({1, 7})))
        assert warnings == ["This pause will have no effect: 7"]

    def test_phase_shift_too_large(self):
        # slot = 666 // 4 = 166 ms; 100 + 80 = 180 → 14 ms over
        warnings = validate_config(StimConfig(mode=RandomPhaseShift(80)))
        assert warnings == ["Phase shift is too large: 14ms over limit"]

    def test_phase_shift_within_slot(self):
        assert validate_config(StimConfig(mode=RandomPhaseShift(60))) == []

    def test_fixed_ladder_too_long(self):
        # ladder top 3 * 44 = 132 samples + 4410 pulse > 4410 slot at 400 ms
        warnings = validate_config(
            StimConfig(cycle_period_ms=400, mode=FixedPhaseShift())
        )
        assert any(w.startswith("Fixed phase ladder is too long") for w in warnings)


class TestSingleChannel:
    """One finger per hand is accepted wherever it can still play every cycle."""

    # 8 kHz, 300 ms cycle: 3 s is 10 whole cycles
    base = StimConfig(
        channels=1,
        sample_rate_hz=8_000,
        stim_freq_hz=100,
        stim_duration_ms=50,
        cycle_period_ms=300,
        seed=3,
    )

    @pytest.mark.parametrize(
        "overrides",
        [
            {"randomize": False},
            {"mode": RandomPhaseShift(20)},
            {"mode": FixedPhaseShift()},
        ],
    )
    def test_burst_every_cycle(self, overrides, render):
        config = self.base._replace(**overrides)
        assert validate_config(config) == []
        bursts = scan_pulses(render(config, 24_000), config, first_sample=1)
        for column in bursts:
            assert len(column) == 10
            gaps = {b.start - a.start for a, b in zip(column, column[1:])}
            assert gaps == {cycle_samples(config)}
