import unittest

import numpy as np
import pytest

from musica.dsp.spectrum import SpectralPitchEstimator, estimate
from musica.note_types import NO_DETECTION

SAMPLE_RATE = 44100


def generate_sine(freq, n, sample_rate=SAMPLE_RATE, amplitude=0.8):
    t = np.arange(n) / sample_rate
    return amplitude * np.sin(2 * np.pi * freq * t)


def bin_tone(k, n, amplitude=0.5):
    """A cosine sitting exactly on bin k."""
    return amplitude * np.cos(2 * np.pi * k * np.arange(n) / n)


class TestSpectralPitchEstimator(unittest.TestCase):
    def setUp(self):
        self.estimator = SpectralPitchEstimator(SAMPLE_RATE)

    def test_empty_block(self):
        self.assertIs(self.estimator.estimate([]), NO_DETECTION)
        self.assertIsNone(self.estimator.spectrum([]).peak_index)

    def test_silence(self):
        for n in (1, 7, 1024, 2048):
            with self.subTest(n=n):
                self.assertIs(self.estimator.estimate(np.zeros(n)), NO_DETECTION)

    def test_non_finite_block(self):
        block = generate_sine(440.0, 1024)
        block[10] = np.nan
        self.assertIs(self.estimator.estimate(block), NO_DETECTION)

    def test_dc_only_block_is_no_detection(self):
        # The DC bin maps to 0 Hz, which has no note
        result = self.estimator.spectrum(np.full(1024, 0.25))
        self.assertEqual(result.peak_index, 0)
        self.assertEqual(result.frequency, 0.0)
        self.assertIs(self.estimator.estimate(np.full(1024, 0.25)), NO_DETECTION)

    def test_bin_to_frequency(self):
        n = 1024
        result = self.estimator.spectrum(bin_tone(10, n))
        self.assertEqual(result.peak_index, 10)
        self.assertAlmostEqual(result.bin_width, SAMPLE_RATE / n)
        self.assertAlmostEqual(result.frequency, 10 * SAMPLE_RATE / n)
        self.assertEqual(len(result.magnitudes), n)

    def test_mirror_tie_goes_to_lowest_bin(self):
        # A real tone has equal energy at k and N - k
        n = 2048
        result = self.estimator.spectrum(bin_tone(41, n))
        self.assertAlmostEqual(
            result.magnitudes[41], result.magnitudes[n - 41], delta=1e-9 * result.magnitudes[41]
        )
        self.assertEqual(result.peak_index, 41)

    def test_default_and_folded_agree_on_real_blocks(self):
        # Real input is conjugate symmetric, so the lower mirror bin always ties and wins
        folded = SpectralPitchEstimator(SAMPLE_RATE, fold_mirror=True)
        for freq in (82.41, 440.0, 987.77):
            block = generate_sine(freq, 4096)
            with self.subTest(freq=freq):
                self.assertEqual(
                    self.estimator.spectrum(block).peak_index, folded.spectrum(block).peak_index
                )
                self.assertLessEqual(self.estimator.spectrum(block).peak_index, 2048)

    def test_fold_mirror_limits_search_to_nyquist(self):
        n = 1024
        # Strongest component on the Nyquist bin, weaker one below it
        block = bin_tone(n // 2, n, amplitude=0.9) + bin_tone(20, n, amplitude=0.3)
        folded = SpectralPitchEstimator(SAMPLE_RATE, fold_mirror=True).spectrum(block)
        self.assertEqual(folded.peak_index, n // 2)
        self.assertAlmostEqual(folded.frequency, SAMPLE_RATE / 2)

    def test_properties(self):
        estimator = SpectralPitchEstimator(48000, fold_mirror=True, use_flats=True)
        self.assertEqual(estimator.sample_rate, 48000)
        self.assertTrue(estimator.fold_mirror)
        self.assertTrue(estimator.use_flats)

    def test_flats(self):
        # A#4 / Bb4 at 466.16 Hz, both neighbouring 5.4 Hz bins still round to it
        block = generate_sine(466.16, 8192)
        self.assertEqual(SpectralPitchEstimator(SAMPLE_RATE, use_flats=True).estimate(block).label, "Bb4")
        self.assertEqual(self.estimator.estimate(block).label, "A#4")

    def test_invalid_sample_rate(self):
        with self.assertRaises(ValueError):
            SpectralPitchEstimator(0)


@pytest.mark.parametrize("n", [1024, 2048, 4096, 8192])
def test_pure_a4_without_filter(n):
    event = estimate(generate_sine(440.0, n), SAMPLE_RATE)
    assert (event.note, event.octave) == ("A", 4)


@pytest.mark.parametrize(
    "freq, expected",
    [(261.63, "C4"), (329.63, "E4"), (523.25, "C5"), (880.0, "A5"), (110.0, "A2")],
)
def test_tones_on_long_blocks(freq, expected):
    # 16384 samples gives 2.7 Hz bins, fine enough for these notes
    assert estimate(generate_sine(freq, 16384), SAMPLE_RATE).label == expected
