"""Tests for the vtse-gen and vtse-check command-line tools."""

from __future__ import annotations

import pytest
import soundfile as sf

from VTSE.SGM import stim_gen
from VTSE.SVM import stim_check

SMALL_ARGS = [
    "-s", "2", "-c", "3", "--samplerate", "8000", "--stimfreq", "100",
    "--stimperiod", "50", "--cycleperiod", "300",
    "--pauzecycleperiod", "4", "-p", "2", "-r", "7",
]
SMALL_NAME = "Sine-Blocked-100SFREQ-50SPER-300CPER--2P4--7RSEED--3LR-8000Hz-2s.flac"


@pytest.fixture
def rendered(tmp_path, capsys):
    assert stim_gen.main(SMALL_ARGS + ["-o", str(tmp_path)]) == 0
    return tmp_path / SMALL_NAME


class TestStimGen:
    def test_writes_named_file(self, rendered, capsys):
        assert rendered.exists()
        assert sf.info(str(rendered)).frames == 16_000
        assert "Frames written" in capsys.readouterr().out

    def test_parser_defaults(self):
        args = stim_gen.build_parser().parse_args(["-s", "60"])
        config = stim_gen.config_from_args(args)
        assert config.channels == 4
        assert config.cycle_period_ms == 666
        assert config.pause_cycles == frozenset()
        assert config.seed is None
        assert args.format == "flac"

    def test_pause_aliases(self):
        args = stim_gen.build_parser().parse_args(
            ["-s", "1", "--pauses", "3", "--pauzes", "4", "--pausecycleperiod", "6"]
        )
        config = stim_gen.config_from_args(args)
        assert config.pause_cycles == frozenset({3, 4})
        assert config.pause_cycle_period == 6

    def test_verbose_prints_configuration(self, tmp_path, capsys):
        assert stim_gen.main(SMALL_ARGS + ["-o", str(tmp_path), "-v"]) == 0
        out = capsys.readouterr().out
        assert "Generating Blocked output for:" in out
        assert "Pause on cycles         : [2]" in out

    def test_entropy_seed_is_reported(self, tmp_path, capsys):
        args = [a for a in SMALL_ARGS if a not in ("-r", "7")]
        assert stim_gen.main(args + ["-o", str(tmp_path)]) == 0
        assert "to reproduce" in capsys.readouterr().out

    def test_flac_channel_limit(self, tmp_path, capsys):
        assert stim_gen.main(["-s", "1", "-c", "5", "-o", str(tmp_path)]) == 2
        assert "[!!] ERROR" in capsys.readouterr().out
        assert list(tmp_path.iterdir()) == []

    def test_conflicting_modes(self, tmp_path, capsys):
        code = stim_gen.main(
            ["-s", "1", "--phaseshift", "10", "--fixedphaseshift", "-o", str(tmp_path)]
        )
        assert code == 2
        assert "Conflicting" in capsys.readouterr().out

    def test_seconds_required(self):
        with pytest.raises(SystemExit):
            stim_gen.main([])

    def test_log_level(self):
        assert stim_gen._log_level(0) == stim_gen.logging.WARNING
        assert stim_gen._log_level(2) == stim_gen.logging.INFO
        assert stim_gen._log_level(5) == stim_gen.logging.DEBUG


class TestStimCheck:
    def test_rendered_file_passes(self, rendered, capsys):
        assert stim_check.main([str(rendered), "--timeline", "5"]) == 0
        out = capsys.readouterr().out
        assert "VERDICT: PASS" in out
        assert "Burst Timeline" in out

    def test_phase_shift_file_passes(self, tmp_path):
        args = SMALL_ARGS + ["--phaseshift", "20", "-o", str(tmp_path)]
        assert stim_gen.main(args) == 0
        (path,) = tmp_path.iterdir()
        assert stim_check.run_check(str(path))

    def test_sound_in_pause_fails(self, rendered, capsys):
        data, rate = sf.read(str(rendered), dtype="int16", always_2d=True)
        data[5_000, 0] = 1_000              # inside paused cycle 2
        sf.write(str(rendered), data, rate, subtype="PCM_16", format="FLAC")
        assert stim_check.main([str(rendered)]) == 1
        assert "inside pauses" in capsys.readouterr().out

    def test_truncated_file_fails(self, rendered, capsys):
        data, rate = sf.read(str(rendered), dtype="int16", always_2d=True)
        sf.write(str(rendered), data[:8_000], rate, subtype="PCM_16", format="FLAC")
        assert stim_check.main([str(rendered)]) == 1
        assert "frame count is 8000, expected 16000" in capsys.readouterr().out

    def test_foreign_name_fails(self, rendered, tmp_path):
        other = tmp_path / "recording.flac"
        rendered.rename(other)
        assert stim_check.main([str(other)]) == 1

    def test_missing_file(self, tmp_path, capsys):
        assert stim_check.main([str(tmp_path / "nope.flac")]) == 1
        assert "File not found" in capsys.readouterr().out
