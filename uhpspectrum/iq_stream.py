"""IQ stream packet header and sample payload decoding."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np

HEADER_STRING = b"hf"
SIZEOF_INT24 = 3


class IqFormat(IntEnum):
    """Sample format of an IQ packet."""

    INT16 = 0x01
    INT32 = 0x02
    FLOAT32 = 0x03
    COMPLEX_INT16 = 0x81
    COMPLEX_INT32 = 0x82
    COMPLEX_FLOAT32 = 0x83
    COMPLEX_INT24 = 0x84


_NAMED_FLAGS = (
    "adc_overload",
    "presel_protected",
    "att_6db_on",
    "att_12db_on",
    "att_24db_on",
    "att_10db_on",
)
_EXTRA_SHIFT = len(_NAMED_FLAGS)


@dataclass(frozen=True)
class HeaderFlags:
    """The 16 flag bits of an IQ packet header."""

    adc_overload: bool = False
    presel_protected: bool = False
    att_6db_on: bool = False
    att_12db_on: bool = False
    att_24db_on: bool = False
    att_10db_on: bool = False
    extra: int = 0  # bits 6..15, shifted down

    @classmethod
    def from_int(cls, value: int) -> HeaderFlags:
        """Build flags from the 16-bit field value."""
        if not 0 <= value <= 0xFFFF:
            raise ValueError(f"flags out of 16-bit range: {value}")
        named = {name: bool(value >> bit & 1) for bit, name in enumerate(_NAMED_FLAGS)}
        return cls(**named, extra=value >> _EXTRA_SHIFT)

    def to_int(self) -> int:
        """Return the 16-bit field value."""
        if not 0 <= self.extra < 1 << (16 - _EXTRA_SHIFT):
            raise ValueError(f"extra flag bits out of range: {self.extra}")
        value = self.extra << _EXTRA_SHIFT
        for bit, name in enumerate(_NAMED_FLAGS):
            if getattr(self, name):
                value |= 1 << bit
        return value


_HEADER = struct.Struct("<2sBHBIIHBB")


@dataclass
class IqHeader:
    """Header that starts every UDP IQ packet."""

    iq_format: IqFormat = IqFormat.COMPLEX_INT32
    ant_mask: int = 0
    seqnum: int = 0
    sample_rate_hz: int = 0
    n_samples: int = 0
    flags: HeaderFlags = field(default_factory=HeaderFlags)
    adc_avg_power_dbfs: int = 0
    adc_peak_power_dbfs: int = 0

    SIZE = _HEADER.size

    def pack(self) -> bytes:
        """Encode the header to its wire form."""
        try:
            return _HEADER.pack(
                HEADER_STRING,
                int(self.iq_format),
                self.ant_mask,
                self.seqnum,
                self.sample_rate_hz,
                self.n_samples,
                self.flags.to_int(),
                self.adc_avg_power_dbfs,
                self.adc_peak_power_dbfs,
            )
        except struct.error as exc:
            raise ValueError(f"header field out of range: {exc}") from exc

    @classmethod
    def unpack(cls, data: bytes) -> IqHeader:
        """Decode a header from the start of a packet."""
        if len(data) < _HEADER.size:
            raise ValueError(
                f"IQ header needs {_HEADER.size} bytes, got {len(data)}"
            )
        (signature, fmt, ant_mask, seqnum, rate, n_samples, flags, avg, peak) = (
            _HEADER.unpack_from(data)
        )
        if signature != HEADER_STRING:
            raise ValueError(f"bad IQ header signature: {signature!r}")
        try:
            iq_format = IqFormat(fmt)
        except ValueError:
            raise ValueError(f"unknown IQ format: {fmt:#x}") from None
        return cls(
            iq_format=iq_format,
            ant_mask=ant_mask,
            seqnum=seqnum,
            sample_rate_hz=rate,
            n_samples=n_samples,
            flags=HeaderFlags.from_int(flags),
            adc_avg_power_dbfs=avg,
            adc_peak_power_dbfs=peak,
        )


_NUMPY_TYPES = {
    IqFormat.INT16: ("<i2", 1),
    IqFormat.INT32: ("<i4", 1),
    IqFormat.FLOAT32: ("<f4", 1),
    IqFormat.COMPLEX_INT16: ("<i2", 2),
    IqFormat.COMPLEX_INT32: ("<i4", 2),
    IqFormat.COMPLEX_FLOAT32: ("<f4", 2),
}


def _decode_int24(payload: bytes, values: int) -> np.ndarray:
    raw = np.frombuffer(payload, dtype=np.uint8, count=values * SIZEOF_INT24)
    raw = raw.reshape(values, SIZEOF_INT24).astype(np.int32)
    numbers = raw[:, 0] | (raw[:, 1] << 8) | (raw[:, 2] << 16)
    return np.where(numbers >= 0x800000, numbers - 0x1000000, numbers)


def decode_samples(payload: bytes, iq_format: IqFormat | int, count: int) -> np.ndarray:
    """Decode `count` samples from a packet payload.

    Complex formats give a complex128 array, real formats a float64 array.
    """
    iq_format = IqFormat(iq_format)
    if count < 0:
        raise ValueError(f"sample count must not be negative: {count}")
    if iq_format is IqFormat.COMPLEX_INT24:
        width, parts = SIZEOF_INT24, 2
    else:
        dtype, parts = _NUMPY_TYPES[iq_format]
        width = np.dtype(dtype).itemsize
    needed = count * parts * width
    if len(payload) < needed:
        raise ValueError(f"payload holds {len(payload)} bytes, {needed} needed")
    if iq_format is IqFormat.COMPLEX_INT24:
        values = _decode_int24(payload, count * parts).astype(np.float64)
    else:
        values = np.frombuffer(payload, dtype=dtype, count=count * parts).astype(
            np.float64
        )
    if parts == 1:
        return values
    return values[0::2] + 1j * values[1::2]