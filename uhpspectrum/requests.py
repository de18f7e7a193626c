"""Wire layouts of the requests sent to the receiver over TCP."""

from __future__ import annotations

import struct
from collections.abc import Mapping
from dataclasses import dataclass
from functools import cached_property
from types import MappingProxyType
from typing import Any

from .commands import Command, DebugCommand

_HEADER = struct.Struct("<IIH")


@dataclass
class RequestHeader:
    """Header that starts every request to the receiver."""

    size: int
    messid: int
    cmd_type: int

    SIZE = _HEADER.size

    def pack(self) -> bytes:
        """Encode the header to its wire form."""
        try:
            return _HEADER.pack(self.size, self.messid, int(self.cmd_type))
        except struct.error as exc:
            raise ValueError(f"request header field out of range: {exc}") from exc

    @classmethod
    def unpack(cls, data: bytes) -> RequestHeader:
        """Decode a header from the start of a request."""
        if len(data) < _HEADER.size:
            raise ValueError(
                f"request header needs {_HEADER.size} bytes, got {len(data)}"
            )
        size, messid, cmd_type = _HEADER.unpack_from(data)
        return cls(size=size, messid=messid, cmd_type=cmd_type)


@dataclass(frozen=True)
class Layout:
    """Body of a request: named fixed-size fields, then optional raw bytes.

    When ``trailer`` is set, the raw bytes follow the fixed fields and their
    count is held in the field named by ``length_field``.
    """

    fields: tuple[tuple[str, str], ...] = ()
    trailer: str | None = None
    length_field: str | None = None

    @cached_property
    def _struct(self) -> struct.Struct:
        return struct.Struct("<" + "".join(code for _, code in self.fields))

    @property
    def names(self) -> tuple[str, ...]:
        """Names of the fixed fields in wire order."""
        return tuple(name for name, _ in self.fields)

    @property
    def size(self) -> int:
        """Size in bytes of the fixed fields."""
        return self._struct.size

    def pack(self, values: Mapping[str, Any]) -> bytes:
        """Encode field values to the body bytes."""
        values = dict(values)
        allowed = set(self.names)
        if self.trailer is not None:
            allowed.add(self.trailer)
        unknown = sorted(set(values) - allowed)
        if unknown:
            raise TypeError(f"unknown request fields: {', '.join(unknown)}")

        tail = b""
        if self.trailer is not None:
            tail = bytes(values.get(self.trailer, b""))
            if self.length_field is not None:
                given = values.setdefault(self.length_field, len(tail))
                if int(given) != len(tail):
                    raise ValueError(
                        f"{self.length_field} is {given} but "
                        f"{self.trailer} holds {len(tail)} bytes"
                    )

        missing = [name for name in self.names if name not in values]
        if missing:
            raise TypeError(f"missing request fields: {', '.join(missing)}")

        ordered = []
        for name, code in self.fields:
            value = values[name]
            ordered.append(float(value) if code in "fd" else int(value))
        try:
            return self._struct.pack(*ordered) + tail
        except struct.error as exc:
            raise ValueError(f"request field out of range: {exc}") from exc

    def unpack(self, data: bytes) -> dict[str, Any]:
        """Decode body bytes to a dict of field values."""
        data = bytes(data)
        if len(data) < self.size:
            raise ValueError(f"request body needs {self.size} bytes, got {len(data)}")
        result = dict(zip(self.names, self._struct.unpack_from(data)))
        rest = data[self.size :]
        if self.trailer is None:
            if rest:
                raise ValueError(f"{len(rest)} unexpected bytes after request body")
            return result
        if self.length_field is not None and result[self.length_field] != len(rest):
            raise ValueError(
                f"{self.length_field} is {result[self.length_field]} but "
                f"{len(rest)} bytes follow"
            )
        result[self.trailer] = rest
        return result


_EMPTY = Layout()

_CHIP_FIELDS = tuple(
    (name, "B")
    for name in (
        "mux",
        *(
            f"port_expander_addr{addr}_ch{ch}"
            for ch in range(3)
            for addr in range(4)
        ),
        "temp_sensor",
        "eeprom",
        "generator",
    )
)

REQUEST_LAYOUTS: Mapping[int, Layout] = MappingProxyType(
    {
        Command.GET_STATUS_0x1: _EMPTY,
        Command.SET_FREQ_REQUEST_0x2: Layout((("carrier_freq_hz", "I"),)),
        Command.ADD_PRESET_REQUEST_0x3: Layout(
            (("preset_num", "H"), ("is_auto_calc_att", "B"))
        ),
        Command.SET_FREQ_ADD_PRESET_REQUEST_0x4: Layout(
            (
                ("carrier_freq_hz", "I"),
                ("ant", "B"),
                ("att_bitmask", "I"),
                ("preset_num", "H"),
            )
        ),
        Command.SET_ATT_BITMASK_0x5: Layout((("att_bitmask", "I"),)),
        Command.SET_ANTENNA_0x6: Layout((("ant", "B"),)),
        Command.SET_MODULATION_0x7: Layout((("modulation", "B"),)),
        Command.SET_GENERATOR_SOURCE_0x9: Layout((("gen_source", "B"),)),
        Command.SET_SAMPLE_RATE_0xA: Layout((("sample_rate_hz", "I"),)),
        Command.SET_SETTINGS_0xB: Layout(
            (
                ("ant", "B"),
                ("att_bitmask", "I"),
                ("gen_source", "B"),
                ("modulation", "B"),
                ("sample_rate_hz", "I"),
                ("n_iq_slice", "B"),
            )
        ),
        Command.CTRL_IQ_STREAM_NOW_0xC: Layout(
            (("ip_stream", "I"), ("port_stream", "H"), ("preset_num", "H"))
        ),
        Command.CTRL_IQ_STREAM_SYNC_0xD: Layout(
            (
                ("sync_type", "B"),
                ("sync_timeout", "H"),
                ("ip_stream", "I"),
                ("port_stream", "H"),
                ("preset_num", "H"),
            )
        ),
        Command.STOP_IQ_STREAM_0xE: _EMPTY,
        Command.DIAGNOSTIC_0xF: Layout((("wells_step", "H"),)),
        Command.RESET_0x10: _EMPTY,
        Command.SET_N_IQ_SLICE_0x11: Layout((("n_iq_slice", "B"),)),
        Command.SET_IP_ADDRESS_0x12: Layout(
            (("ip_addr", "I"), ("save_in_memory", "B"))
        ),
        Command.SET_CONTROL_MODE_0x13: Layout((("ctrl_mode", "B"),)),
        Command.SET_PRESET_0x14: Layout((("preset_num", "H"),)),
        Command.SET_GENERATOR_MONITORING_0x15: Layout((("is_gen_monitoring", "B"),)),
        Command.SET_GENERATOR_FREQ_ADJUSTMENT_0x16: Layout(
            (("adjust_val", "H"), ("save_in_memory", "B"))
        ),
        Command.SET_LOG_DESTINATION_0x17: Layout(
            (("log_destination_ip", "I"), ("log_destination_port", "H"))
        ),
        Command.SET_ARU_STATE_0x18: Layout((("aru_state", "B"),)),
        Command.RESET_PROTECTION_0x19: Layout(
            (
                ("reset_in_presel_protection", "B"),
                ("reset_out_presel_protection", "B"),
                ("reset_adc_protection", "B"),
            )
        ),
        Command.GET_ID_AND_SOFT_VERSION_0x1A: _EMPTY,
        Command.SET_IQ_FORMAT_0x1C: Layout((("format", "B"),)),
        Command.UPDATE_PRESELECTOR_TEMPERATURE_0x1D: _EMPTY,
        DebugCommand.CALIBRATION_0x100: _EMPTY,
        DebugCommand.SET_C1_DPF_0x102: Layout((("c1", "H"),)),
        DebugCommand.SET_C2_DPF_0x103: Layout((("c2", "H"),)),
        DebugCommand.SET_C1_TPF_0x104: Layout((("c1", "H"),)),
        DebugCommand.SET_C2_TPF_0x105: Layout((("c2", "H"),)),
        DebugCommand.SET_C3_TPF_0x106: Layout((("c3", "H"),)),
        DebugCommand.SET_BAND_DPF_0x107: Layout((("band", "B"),)),
        DebugCommand.SET_BAND_TPF_0x108: Layout((("band", "B"),)),
        DebugCommand.SET_FREQ_PRESELECTOR_0x109: Layout((("freq", "d"),)),
        DebugCommand.SET_FILTER_0x10A: Layout(
            (
                ("c1_dpf", "H"),
                ("c2_dpf", "H"),
                ("c1_tpf", "H"),
                ("c2_tpf", "H"),
                ("c3_tpf", "H"),
                ("band_dpf", "B"),
                ("band_tpf", "B"),
            )
        ),
        DebugCommand.SET_IN_ATT_0x10B: Layout(
            (("db6_cond", "B"), ("db12_cond", "B"), ("db24_cond", "B"))
        ),
        DebugCommand.SET_OUT_ATT_0x10C: Layout((("db10_cond", "B"),)),
        DebugCommand.SET_TEST_GEN_0x10D: Layout((("freq_khz", "H"), ("cond", "B"))),
        DebugCommand.SET_TEMPERATURE_THRESHOLDS_0x10E: Layout(
            (
                ("low_limit_local_sensor", "f"),
                ("high_limit_local_sensor", "f"),
                ("low_limit_remote_sensor", "f"),
                ("high_limit_remote_sensor", "f"),
            )
        ),
        DebugCommand.GET_PRESELECTOR_TEMPERATURE_0x10F: _EMPTY,
        DebugCommand.WRITE_PRESELECTOR_MEMORY_0x110: Layout(
            (("offset", "H"), ("length", "H")),
            trailer="data",
            length_field="length",
        ),
        DebugCommand.READ_PRESELECTOR_MEMORY_0x111: Layout(
            (("offset", "H"), ("length", "H"))
        ),
        DebugCommand.SET_PRESELECTOR_AMPLIFIER_0x112: Layout((("amp_state", "B"),)),
        DebugCommand.SET_RF_IN_LOCK_0x113: Layout((("rf_in_lock", "B"),)),
        DebugCommand.RESET_PRESELECTOR_PROTECTION_0x114: _EMPTY,
        DebugCommand.RESET_PRESELECTOR_HARDWARE_0x115: _EMPTY,
        DebugCommand.INIT_PRESELECTOR_HARDWARE_0x116: _EMPTY,
        DebugCommand.INIT_TEST_ERROR_MSG_0x119: _EMPTY,
        DebugCommand.GET_DAC_GENERATOR_VALUE_0x11A: _EMPTY,
        DebugCommand.CHECK_PRESELECTOR_I2C_CHIPS_0x11C: Layout(_CHIP_FIELDS),
        DebugCommand.SET_DPF_FILTER_0x11E: Layout(
            (("c1_dpf", "H"), ("c2_dpf", "H"), ("band_dpf", "B"))
        ),
        DebugCommand.SET_TPF_FILTER_0x11F: Layout(
            (("c1_tpf", "H"), ("c2_tpf", "H"), ("c3_tpf", "H"), ("band_tpf", "B"))
        ),
    }
)


def layout_for(command: int) -> Layout:
    """Return the body layout of a request command."""
    try:
        return REQUEST_LAYOUTS[int(command)]
    except KeyError:
        raise ValueError(f"no request layout for command {int(command):#x}") from None


def encode_request(command: int, messid: int, **kwargs: Any) -> bytes:
    """Encode a complete request: header followed by the body fields."""
    body = layout_for(command).pack(kwargs)
    header = RequestHeader(
        size=RequestHeader.SIZE + len(body), messid=messid, cmd_type=int(command)
    )
    return header.pack() + body


def decode_request(data: bytes) -> tuple[RequestHeader, dict[str, Any]]:
    """Decode a complete request into its header and body fields."""
    data = bytes(data)
    header = RequestHeader.unpack(data)
    if header.size < RequestHeader.SIZE or header.size > len(data):
        raise ValueError(
            f"request size field is {header.size}, {len(data)} bytes available"
        )
    layout = layout_for(header.cmd_type)
    body = layout.unpack(data[RequestHeader.SIZE : header.size])
    return header, body