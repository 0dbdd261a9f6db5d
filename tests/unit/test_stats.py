"""Unit tests for sample statistics."""

import numpy as np
import pytest

from iqdsp.dsp.stats import (
    average_power,
    estimate_frequency,
    find_peak,
    iq_to_complex,
    magnitude,
    phase,
    power_db,
    remove_dc,
)


class TestIQConversion:
    def test_bytes(self):
        out = iq_to_complex(bytes([128, 128, 255, 0]))
        np.testing.assert_allclose(out, [0j, 127 / 128 - 1j])

    def test_int_sequence(self):
        np.testing.assert_allclose(iq_to_complex([0, 128]), [-1 + 0j])

    def test_memoryview(self):
        out = iq_to_complex(memoryview(bytes([128, 128, 0, 255])))
        np.testing.assert_allclose(out, [0j, -1 + 127j / 128])

    def test_trailing_byte_dropped(self):
        assert iq_to_complex(bytes([128] * 5)).size == 2

    def test_empty(self):
        assert iq_to_complex(b"").size == 0


class TestPower:
    def test_average_power(self):
        assert average_power(np.array([1 + 0j, 0 + 1j, 1 + 1j])) == pytest.approx(4 / 3)

    def test_average_power_empty(self):
        assert average_power(np.array([])) == 0.0

    def test_power_db(self):
        assert power_db(1.0) == pytest.approx(0.0, abs=1e-8)
        assert power_db(0.0) == pytest.approx(-100.0)


class TestPeak:
    def test_find_peak(self):
        assert find_peak(np.array([1.0, 5.0, 3.0])) == (1, 5.0)

    def test_first_of_ties(self):
        assert find_peak([2.0, 2.0])[0] == 0

    def test_empty(self):
        assert find_peak([]) == (0, 0.0)


class TestComponents:
    def test_magnitude_and_phase(self):
        x = np.array([1 + 1j, -1 + 0j, -1j])
        np.testing.assert_allclose(magnitude(x), [np.sqrt(2), 1.0, 1.0])
        np.testing.assert_allclose(phase(x), [np.pi / 4, np.pi, -np.pi / 2])


class TestRemoveDC:
    def test_first_sample_kept(self):
        assert remove_dc(np.array([3.0, 3.0]))[0] == 3.0

    def test_recursion(self):
        y = remove_dc(np.array([1.0, 2.0, 0.0]), alpha=0.5)
        np.testing.assert_allclose(y, [1.0, 1.0 + 0.5, -2.0 + 0.75])

    def test_constant_decays(self):
        y = remove_dc(np.full(2000, 2.0))
        assert abs(y[-1]) < 0.01

    def test_complex(self):
        y = remove_dc(np.full(100, 1 + 1j))
        assert np.iscomplexobj(y)

    def test_empty(self):
        assert remove_dc(np.array([])).size == 0


class TestEstimateFrequency:
    def test_tone(self, generate_tone):
        rate = 48_000
        tone = generate_tone(rate, 4800, 1000.0)
        assert estimate_frequency(tone, rate) == pytest.approx(1000, rel=0.02)

    def test_real_tone(self):
        rate = 8_000
        t = np.arange(8000) / rate
        assert estimate_frequency(np.sin(2 * np.pi * 200 * t + 0.1), rate) == pytest.approx(200, rel=0.02)

    @pytest.mark.parametrize("n", [0, 1])
    def test_too_short(self, n):
        assert estimate_frequency(np.ones(n), 48_000) == 0.0
