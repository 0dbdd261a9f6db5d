"""Unit tests for spectral analysis helpers."""

import numpy as np
import pytest

from iqdsp.dsp.fft import FFTUnavailableError
from iqdsp.dsp.spectrum import (
    apply_window,
    backward,
    fft_power_db,
    fft_shift,
    forward,
    ifft_shift,
    power_spectrum,
)


class TestTransforms:
    def test_roundtrip(self, scipy_fft):
        x = np.exp(2j * np.pi * 0.1 * np.arange(64)) + 0.5
        np.testing.assert_allclose(backward(forward(x, scipy_fft), scipy_fft), x, atol=1e-4)

    def test_unavailable(self, no_fft):
        with pytest.raises(FFTUnavailableError):
            forward(np.ones(8), no_fft)
        with pytest.raises(FFTUnavailableError):
            backward(np.ones(8), no_fft)

    def test_default_capability(self):
        """Without an injected capability the process default is used."""
        x = np.ones(8, dtype=np.complex128)
        spectrum = forward(x)
        assert spectrum[0] == pytest.approx(8.0)


class TestShift:
    def test_even_length(self):
        np.testing.assert_array_equal(fft_shift(np.arange(1, 9)), [5, 6, 7, 8, 1, 2, 3, 4])

    def test_odd_length(self):
        np.testing.assert_array_equal(fft_shift(np.arange(1, 6)), [3, 4, 5, 1, 2])

    @pytest.mark.parametrize("n", [1, 2, 5, 8, 11])
    def test_inverse(self, n):
        x = np.arange(n)
        np.testing.assert_array_equal(ifft_shift(fft_shift(x)), x)
        np.testing.assert_array_equal(fft_shift(ifft_shift(x)), x)

    def test_matches_numpy_for_even_length(self):
        x = np.arange(8)
        np.testing.assert_array_equal(fft_shift(x), np.fft.fftshift(x))
        np.testing.assert_array_equal(ifft_shift(x), np.fft.ifftshift(x))

    def test_empty(self):
        assert fft_shift(np.array([])).size == 0


class TestApplyWindow:
    def test_hanning_tapers_ends(self):
        out = apply_window(np.ones(64), "hanning")
        assert out[0] < 0.01
        assert out[-1] < 0.01
        assert out[32] > 0.9

    def test_hamming_endpoint(self):
        assert apply_window(np.ones(64), "hamming")[0] == pytest.approx(0.08)

    def test_none_passthrough(self):
        x = np.array([1.0, 2.0, 3.0])
        np.testing.assert_array_equal(apply_window(x, "none"), x)

    def test_unknown_passthrough(self):
        x = np.array([1.0, 2.0, 3.0])
        np.testing.assert_array_equal(apply_window(x, "kaiser"), x)

    def test_empty(self):
        assert apply_window(np.array([]), "hanning").size == 0


class TestPowerDb:
    def test_dc_signal_peaks_at_bin_zero(self, scipy_fft):
        db = fft_power_db(np.ones(16), "none", fft=scipy_fft)
        assert db[0] > db[1]
        assert db[0] == pytest.approx(10 * np.log10(256.0))

    def test_tone_bin(self, scipy_fft, generate_tone):
        tone = generate_tone(1024, 1024, 128.0)
        db = fft_power_db(tone, fft=scipy_fft)
        assert int(np.argmax(db)) == 128

    def test_empty_bins_are_finite(self, scipy_fft):
        db = fft_power_db(np.zeros(8), "none", fft=scipy_fft)
        assert np.all(np.isfinite(db))
        assert db[0] == pytest.approx(-200.0)

    def test_unavailable(self, no_fft):
        with pytest.raises(FFTUnavailableError):
            fft_power_db(np.ones(16), fft=no_fft)


class TestPowerSpectrumFallback:
    def test_short_input_empty(self):
        assert power_spectrum(np.ones(100), window_size=1024).size == 0

    def test_tapered_magnitude_squared(self):
        x = 2.0 * np.ones(2048, dtype=np.complex128)
        out = power_spectrum(x, window_size=1024)
        assert out.size == 1024
        assert out[0] == pytest.approx(0.0, abs=1e-12)
        assert out[512] == pytest.approx(4.0, rel=1e-3)
