import unittest

import numpy as np
import pytest

from musica.dsp.coefficients import generate_lowpass_coefficients
from musica.dsp.fir_filter import DelayLine, StreamingFIRFilter

SAMPLE_RATE = 44100


def reference_fir(taps, samples):
    """Direct-form FIR with zero initial history."""
    padded = np.concatenate((np.zeros(len(taps) - 1), samples))
    return np.array(
        [np.dot(taps, padded[n : n + len(taps)][::-1]) for n in range(len(samples))]
    )


def noise(n, seed=1234):
    return np.random.default_rng(seed).uniform(-1.0, 1.0, n)


class TestDelayLine(unittest.TestCase):
    def test_history_is_time_ordered(self):
        line = DelayLine(4)
        for value in (1.0, 2.0, 3.0, 4.0, 5.0, 6.0):
            line.write(value)
            line.advance()
        np.testing.assert_array_equal(line.history(), [3.0, 4.0, 5.0, 6.0])
        self.assertEqual(line.cursor, 2)
        # Oldest sample sits under the cursor, the newest just before it
        self.assertEqual(line.buffer[line.cursor], 3.0)
        self.assertEqual(line.buffer[line.cursor - 1], 6.0)

    def test_load_history_round_trip(self):
        line = DelayLine(5)
        line.load_history(np.arange(5.0), cursor=3)
        self.assertEqual(line.cursor, 3)
        np.testing.assert_array_equal(line.history(), np.arange(5.0))

    def test_reset(self):
        line = DelayLine(3)
        line.write(1.0)
        line.advance()
        line.reset()
        self.assertEqual(line.cursor, 0)
        np.testing.assert_array_equal(line.buffer, np.zeros(3))

    def test_buffer_view_is_read_only(self):
        line = DelayLine(3)
        with self.assertRaises(ValueError):
            line.buffer[0] = 1.0

    def test_invalid_length(self):
        with self.assertRaises(ValueError):
            DelayLine(0)


class TestStreamingFIRFilter(unittest.TestCase):
    def setUp(self):
        self.coefficients = generate_lowpass_coefficients(SAMPLE_RATE, 1000.0, 64)

    def test_impulse_response_is_the_taps(self):
        fir = StreamingFIRFilter(self.coefficients)
        impulse = np.zeros(100)
        impulse[0] = 1.0
        output = [fir.process_sample(x) for x in impulse]
        np.testing.assert_allclose(output[:64], self.coefficients.taps, atol=1e-15)
        np.testing.assert_allclose(output[64:], 0.0, atol=1e-15)

    def test_sample_path_matches_reference(self):
        samples = noise(300)
        fir = StreamingFIRFilter(self.coefficients)
        output = np.array([fir.process_sample(x) for x in samples])
        np.testing.assert_allclose(
            output, reference_fir(self.coefficients.taps, samples), rtol=1e-12, atol=1e-12
        )

    def test_block_path_matches_sample_path(self):
        samples = noise(500)
        by_sample = StreamingFIRFilter(self.coefficients)
        by_block = StreamingFIRFilter(self.coefficients)

        expected = np.array([by_sample.process_sample(x) for x in samples])
        actual = by_block.process_block(samples)

        np.testing.assert_allclose(actual, expected, rtol=1e-12, atol=1e-12)
        # Both paths leave the delay line in the same state
        self.assertEqual(by_block.delay_line.cursor, by_sample.delay_line.cursor)
        np.testing.assert_array_equal(by_block.delay_line.buffer, by_sample.delay_line.buffer)

    def test_mixed_sample_and_block_calls(self):
        samples = noise(200)
        fir = StreamingFIRFilter(self.coefficients)
        head = [fir.process_sample(x) for x in samples[:37]]
        tail = fir.process_block(samples[37:])
        np.testing.assert_allclose(
            np.concatenate((head, tail)),
            reference_fir(self.coefficients.taps, samples),
            rtol=1e-12,
            atol=1e-12,
        )

    def test_reset_clears_history(self):
        samples = noise(128)
        fir = StreamingFIRFilter(self.coefficients)
        first = fir.process_block(samples)
        fir.reset()
        second = fir.process_block(samples)
        np.testing.assert_array_equal(first, second)

    def test_instances_are_independent(self):
        samples = noise(256)
        a = StreamingFIRFilter(self.coefficients)
        b = StreamingFIRFilter(self.coefficients)
        a.process_block(noise(256, seed=99))
        fresh = b.process_block(samples)
        np.testing.assert_allclose(fresh, reference_fir(self.coefficients.taps, samples), atol=1e-12)

    def test_empty_block(self):
        fir = StreamingFIRFilter(self.coefficients)
        self.assertEqual(fir.process_block([]).size, 0)
        self.assertEqual(fir.delay_line.cursor, 0)

    def test_plain_sequence_of_taps(self):
        fir = StreamingFIRFilter([0.5, 0.5])
        np.testing.assert_allclose(fir.process_block([1.0, 1.0, 0.0, 0.0]), [0.5, 1.0, 0.5, 0.0])

    def test_empty_coefficients_are_rejected(self):
        with self.assertRaises(ValueError):
            StreamingFIRFilter([])

    def test_pass_through_order_one(self):
        fir = StreamingFIRFilter(generate_lowpass_coefficients(SAMPLE_RATE, 1000.0, 1))
        samples = noise(10)
        np.testing.assert_array_equal(fir.process_block(samples), samples)


@pytest.mark.parametrize("split", [1, 17, 63, 64, 65, 1000, 2047])
def test_block_boundary_invariance(split):
    coefficients = generate_lowpass_coefficients(SAMPLE_RATE, 1000.0, 64)
    samples = noise(2048, seed=split)

    whole = StreamingFIRFilter(coefficients).process_block(samples)

    fir = StreamingFIRFilter(coefficients)
    parts = np.concatenate(
        (fir.process_block(samples[:split]), fir.process_block(samples[split:]))
    )
    np.testing.assert_allclose(parts, whole, rtol=1e-12, atol=1e-12)


def test_many_small_blocks():
    coefficients = generate_lowpass_coefficients(SAMPLE_RATE, 1000.0, 64)
    samples = noise(1000)
    whole = StreamingFIRFilter(coefficients).process_block(samples)

    fir = StreamingFIRFilter(coefficients)
    sizes = [1, 2, 3, 5, 8, 13, 21, 34, 55, 89, 144, 233]
    pieces, start = [], 0
    for size in sizes:
        pieces.append(fir.process_block(samples[start : start + size]))
        start += size
    pieces.append(fir.process_block(samples[start:]))
    np.testing.assert_allclose(np.concatenate(pieces), whole, rtol=1e-12, atol=1e-12)


def test_long_filter_sample_path():
    # 20001 taps keeps per-filter state linear in the order
    coefficients = generate_lowpass_coefficients(SAMPLE_RATE, 1000.0, 20001)
    fir = StreamingFIRFilter(coefficients)
    samples = noise(200)

    head = np.array([fir.process_sample(x) for x in samples[:120]])
    tail = fir.process_block(samples[120:])

    expected = reference_fir(coefficients.taps, samples)
    np.testing.assert_allclose(np.concatenate((head, tail)), expected, rtol=1e-10, atol=1e-12)
    assert fir.delay_line.cursor == 200
