"""Unit tests for FM demodulation.

Tests the discriminator, de-emphasis and full pipeline with synthetic signals.
"""

import numpy as np
import pytest

from iqdsp.dsp.fm import deemphasis, fm_demod, nfm_demod, phase_diff
from iqdsp.dsp.stats import average_power, estimate_frequency


class TestPhaseDiff:
    def test_length(self):
        assert phase_diff(np.ones(10, dtype=np.complex128)).size == 9

    @pytest.mark.parametrize("n", [0, 1])
    def test_too_short(self, n):
        assert phase_diff(np.ones(n, dtype=np.complex128)).size == 0

    def test_tone(self, generate_tone):
        rate, freq = 48_000, 1000.0
        diff = phase_diff(generate_tone(rate, 480, freq))
        np.testing.assert_allclose(diff, 2 * np.pi * freq / rate, atol=1e-3)

    def test_range(self):
        x = np.exp(1j * np.random.default_rng(2).uniform(-np.pi, np.pi, 1000))
        diff = phase_diff(x)
        assert np.all(diff > -np.pi)
        assert np.all(diff <= np.pi)

    def test_half_turn_with_negative_zero_is_pi(self):
        # angle() of (-1 - 0j) is -pi, which lies outside the half-open range
        x = np.array([complex(1.0, -0.0), complex(-1.0, -0.0)], dtype=np.complex128)
        assert phase_diff(x)[0] == np.pi

    def test_half_turn_is_pi(self):
        x = np.array([1.0, -1.0, 1.0], dtype=np.complex128)
        np.testing.assert_array_equal(phase_diff(x), [np.pi, np.pi])


class TestDeemphasis:
    def test_disabled(self):
        x = np.array([1.0, -1.0, 0.5])
        np.testing.assert_array_equal(deemphasis(x, 0.0, 48_000), x)

    def test_empty(self):
        assert deemphasis(np.array([]), 75e-6, 48_000).size == 0

    def test_recursion(self):
        rate, tau = 48_000, 75e-6
        alpha = np.exp(-1.0 / (tau * rate))
        y = deemphasis(np.array([1.0, 1.0]), tau, rate)
        assert y[0] == pytest.approx(1.0 - alpha)
        assert y[1] == pytest.approx((1.0 - alpha) + alpha * (1.0 - alpha))

    def test_step_settles_to_one(self):
        y = deemphasis(np.ones(2000), 75e-6, 48_000)
        assert y[-1] == pytest.approx(1.0, abs=1e-6)


class TestFMDemod:
    """Tests for the FM pipeline."""

    def test_empty_input(self):
        assert fm_demod(np.array([], dtype=np.complex128), 48_000).size == 0

    def test_single_sample(self):
        assert fm_demod(np.ones(1, dtype=np.complex128), 48_000).size == 0

    def test_tone_power_and_bounds(self, generate_fm_signal):
        iq, _ = generate_fm_signal(48_000, 0.1, audio_freq=1000, deviation=5000)
        audio = fm_demod(iq, 48_000, audio_rate=48_000, deviation=5000)

        assert average_power(audio) > 0.01
        assert np.max(np.abs(audio)) <= 1.0
        assert np.max(np.abs(audio)) == pytest.approx(0.9)

    def test_resamples_to_audio_rate(self, generate_fm_signal):
        sample_rate = 240_000
        iq, _ = generate_fm_signal(sample_rate, 100_000 / sample_rate, deviation=75_000)
        audio = fm_demod(iq, sample_rate, audio_rate=48_000)

        expected = int(iq.size * 48_000 / sample_rate)
        assert abs(audio.size - expected) < expected * 0.1

    def test_silence_stays_silent(self):
        """A constant carrier has no deviation; normalization must not blow it up."""
        audio = fm_demod(np.ones(1000, dtype=np.complex128), 48_000)
        np.testing.assert_array_equal(audio, 0.0)


class TestNFMDemod:
    def test_recovers_tone_frequency(self, generate_fm_signal):
        iq, _ = generate_fm_signal(48_000, 0.1, audio_freq=1000, deviation=5000)
        audio = nfm_demod(iq, 48_000)
        assert estimate_frequency(audio, 48_000) == pytest.approx(1000, rel=0.05)

    def test_tracks_modulation(self, generate_fm_signal):
        """Without de-emphasis the output is the scaled instantaneous frequency."""
        iq, _ = generate_fm_signal(48_000, 0.05, audio_freq=500, deviation=5000)
        audio = nfm_demod(iq, 48_000)
        t = (np.arange(audio.size) + 0.5) / 48_000
        expected = 0.9 * np.cos(2 * np.pi * 500 * t)
        np.testing.assert_allclose(audio, expected, atol=0.02)

    def test_empty_input(self):
        assert nfm_demod(np.array([], dtype=np.complex128), 48_000).size == 0
