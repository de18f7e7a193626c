import numpy as np
import pytest

from uhpspectrum.spectrum import (
    AVERAGE_QTY,
    PART_SIZE,
    POINTS_QTY,
    SpectrumAccumulator,
    power_db,
)


def _frame_packets(frame):
    return [frame[i * PART_SIZE : (i + 1) * PART_SIZE] for i in range(4)]


def _feed_frames(acc, frame, count):
    """Feed packets so that `count` spectra are produced; return them."""
    results = []
    index = 0
    packets = _frame_packets(frame)
    while len(results) < count:
        out = acc.add_packet(packets[index % 4])
        index += 1
        if out is not None:
            results.append(out)
    return results


def test_power_db_values():
    assert float(power_db(1 + 0j)) == pytest.approx(0.0)
    assert float(power_db(10 + 0j)) == pytest.approx(20.0)
    assert float(power_db(100j)) == pytest.approx(40.0)


def test_power_db_zero_is_negative_infinity():
    assert np.isneginf(power_db([0j])).all()


def test_power_db_depends_only_on_magnitude():
    a = power_db([3 + 4j])
    b = power_db([5 + 0j])
    c = power_db([-4 - 3j])
    assert a[0] == pytest.approx(b[0])
    assert b[0] == pytest.approx(c[0])


def test_first_spectrum_after_fifth_packet():
    acc = SpectrumAccumulator()
    packet = np.ones(PART_SIZE, dtype=complex)
    outputs = [acc.add_packet(packet) for _ in range(5)]
    assert outputs[:4] == [None, None, None, None]
    assert outputs[4].shape == (POINTS_QTY,)
    assert acc.packets == 5
    assert acc.frames == 1


def test_spectrum_every_fourth_packet_after_first():
    acc = SpectrumAccumulator()
    packet = np.ones(PART_SIZE, dtype=complex)
    emitted = [i for i in range(13) if acc.add_packet(packet) is not None]
    assert emitted == [4, 8, 12]


def test_dc_signal_lands_in_middle():
    acc = SpectrumAccumulator()
    frame = np.ones(POINTS_QTY, dtype=complex)
    (spectrum,) = _feed_frames(acc, frame, 1)
    assert int(np.argmax(spectrum)) == POINTS_QTY // 2
    others = np.delete(spectrum, POINTS_QTY // 2)
    assert np.isneginf(others).all()
    assert spectrum[POINTS_QTY // 2] == np.trunc(spectrum[POINTS_QTY // 2])


def test_tone_position_after_rotation():
    acc = SpectrumAccumulator()
    n = np.arange(POINTS_QTY)
    frame = 1000 * np.exp(2j * np.pi * n / POINTS_QTY)
    (spectrum,) = _feed_frames(acc, frame, 1)
    assert int(np.argmax(spectrum)) == POINTS_QTY // 2 + 1


def test_steady_signal_gives_steady_average():
    acc = SpectrumAccumulator()
    n = np.arange(POINTS_QTY)
    frame = 500 * np.exp(2j * np.pi * 7 * n / POINTS_QTY) + 3
    spectra = _feed_frames(acc, frame, AVERAGE_QTY + 3)
    for spectrum in spectra[1:]:
        np.testing.assert_array_equal(spectrum, spectra[0])


def test_average_lies_between_frames():
    weak = np.ones(POINTS_QTY, dtype=complex)
    strong = 10 * weak
    first_acc = SpectrumAccumulator()
    (weak_alone,) = _feed_frames(first_acc, weak, 1)
    strong_acc = SpectrumAccumulator()
    (strong_alone,) = _feed_frames(strong_acc, strong, 1)

    acc = SpectrumAccumulator()
    _feed_frames(acc, weak, 1)
    (mixed,) = _feed_frames(acc, strong, 1)
    mid = POINTS_QTY // 2
    assert weak_alone[mid] < mixed[mid] < strong_alone[mid]


def test_wrong_packet_size_raises():
    acc = SpectrumAccumulator()
    with pytest.raises(ValueError):
        acc.add_packet(np.zeros(PART_SIZE - 1, dtype=complex))


def test_reset_restarts_counting():
    acc = SpectrumAccumulator()
    packet = np.ones(PART_SIZE, dtype=complex)
    for _ in range(6):
        acc.add_packet(packet)
    acc.reset()
    assert acc.packets == 0
    assert acc.frames == 0
    outputs = [acc.add_packet(packet) for _ in range(4)]
    assert all(out is None for out in outputs)


def test_invalid_configuration():
    with pytest.raises(ValueError):
        SpectrumAccumulator(points=1000, part_size=256)
    with pytest.raises(ValueError):
        SpectrumAccumulator(average=0)