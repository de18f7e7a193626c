"""Averaged power spectrum built from IQ stream packets."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

POINTS_QTY = 1024
AVERAGE_QTY = 10
PART_SIZE = 256


def power_db(samples: Sequence[complex] | np.ndarray) -> np.ndarray:
    """Return ``10 * log10(|z|^2)`` for every sample; zero power gives -inf."""
    values = np.asarray(samples, dtype=np.complex128)
    with np.errstate(divide="ignore"):
        return 10 * np.log10(values.real**2 + values.imag**2)


class SpectrumAccumulator:
    """Collect IQ packets into FFT frames and average their power spectra.

    Packets fill a frame buffer slot by slot. Whenever a packet lands in the
    first slot (except the very first packet), the buffer is transformed and
    its power spectrum goes into a ring of the last ``average`` spectra. The
    returned spectrum is their mean, truncated to whole decibels as the sum
    runs, and rotated so that zero frequency sits in the middle.
    """

    def __init__(
        self,
        points: int = POINTS_QTY,
        average: int = AVERAGE_QTY,
        part_size: int = PART_SIZE,
    ) -> None:
        if points <= 0 or part_size <= 0 or points % part_size:
            raise ValueError(
                f"points ({points}) must be a positive multiple of part_size "
                f"({part_size})"
            )
        if average <= 0:
            raise ValueError(f"average must be positive: {average}")
        self.points = points
        self.average = average
        self.part_size = part_size
        self._parts = points // part_size
        self.reset()

    def reset(self) -> None:
        """Forget all packets and spectra received so far."""
        self._frame = np.zeros(self.points, dtype=np.complex128)
        self._history = np.zeros((self.average, self.points), dtype=np.float64)
        self.packets = 0
        self.frames = 0

    def add_packet(self, samples: Sequence[complex] | np.ndarray) -> np.ndarray | None:
        """Store one packet of samples; return a new averaged spectrum if one is due."""
        values = np.asarray(samples, dtype=np.complex128)
        if values.shape != (self.part_size,):
            raise ValueError(
                f"packet must hold {self.part_size} samples, got shape {values.shape}"
            )
        slot = self.packets % self._parts
        start = slot * self.part_size
        self._frame[start : start + self.part_size] = values

        result = None
        if self.packets > 0 and slot == 0:
            result = self._emit()
        self.packets += 1
        return result

    def _emit(self) -> np.ndarray:
        spectrum = np.fft.fft(self._frame)
        self._history[self.frames % self.average] = power_db(spectrum)

        total = np.zeros(self.points, dtype=np.float64)
        for row in self._history:
            total = np.trunc(total + row)
        count = min(self.frames + 1, self.average)
        draw = np.trunc(total / count)

        self.frames += 1
        return np.roll(draw, -(self.points // 2))