"""Answers sent by the receiver over the TCP control connection."""

from __future__ import annotations

import struct
from collections.abc import Callable
from dataclasses import astuple, dataclass
from typing import Any, Union

from .commands import Command, DebugCommand, command_name
from .requests import REQUEST_LAYOUTS, Layout
from .values import (
    CmdComplete,
    HardwareError,
    SoftwareError,
    decode_hardware_errors,
    decode_software_errors,
)

_HEADER = struct.Struct("<IIHHH")


@dataclass
class AnswerHeader:
    """Header that starts every answer from the receiver."""

    size: int
    messid: int
    cmd_type: int
    cmd_ack_type: int
    cmd_complete: int

    SIZE = _HEADER.size

    def pack(self) -> bytes:
        """Encode the header to its wire form."""
        try:
            return _HEADER.pack(
                self.size,
                self.messid,
                int(self.cmd_type),
                int(self.cmd_ack_type),
                int(self.cmd_complete),
            )
        except struct.error as exc:
            raise ValueError(f"answer header field out of range: {exc}") from exc

    @classmethod
    def unpack(cls, data: bytes) -> AnswerHeader:
        """Decode a header from the start of an answer."""
        if len(data) < _HEADER.size:
            raise ValueError(
                f"answer header needs {_HEADER.size} bytes, got {len(data)}"
            )
        return cls(*_HEADER.unpack_from(data))


_STATUS = struct.Struct("<BIIHIfBBBBBBBffBIHHBIIIIBHB")


@dataclass
class StatusData:
    """Receiver state reported in a status answer."""

    ant: int = 0
    sample_rate_hz: int = 0
    carrier_freq_hz: int = 0
    preset_num: int = 0xFFFF
    att_bitmask: int = 0
    att_db: float = 0.0
    xcvr_state: int = 0
    modulation: int = 0
    ctrl: int = 0
    sync_ctrl: int = 0
    sync_status: int = 0
    gen_source: int = 0
    debug_mode: int = 0
    adc_temp_c: float = 0.0
    preselector_temp_c: float = 0.0
    stream_status: int = 0
    stream_ip: int = 0
    stream_src_port: int = 0
    stream_dst_port: int = 0
    test_low_sens_state: int = 0
    hardware_errors_bitmask: int = 0
    software_errors_bitmask: int = 0
    remote_ctrl_ip: int = 0
    manual_ctrl_ip: int = 0
    gen_monitoring: int = 0
    gen_freq_adjustment: int = 0
    aru_state: int = 0

    SIZE = _STATUS.size

    @property
    def hardware_errors(self) -> list[HardwareError]:
        """Known hardware errors set in the status."""
        return decode_hardware_errors(self.hardware_errors_bitmask)

    @property
    def software_errors(self) -> list[SoftwareError]:
        """Known software errors set in the status."""
        return decode_software_errors(self.software_errors_bitmask)

    def pack(self) -> bytes:
        """Encode the status data to its wire form."""
        try:
            return _STATUS.pack(*astuple(self))
        except struct.error as exc:
            raise ValueError(f"status field out of range: {exc}") from exc

    @classmethod
    def unpack(cls, data: bytes) -> StatusData:
        """Decode status data from the start of an answer body."""
        if len(data) < _STATUS.size:
            raise ValueError(f"status data needs {_STATUS.size} bytes, got {len(data)}")
        return cls(*_STATUS.unpack_from(data))


_ERROR = struct.Struct("<IIH")


@dataclass
class ErrorData:
    """Error report: error masks followed by a message."""

    hardware_errors_bitmask: int = 0
    software_errors_bitmask: int = 0
    message: bytes = b""

    SIZE = _ERROR.size

    @property
    def text(self) -> str:
        """The message as text, without trailing NUL bytes."""
        return self.message.rstrip(b"\0").decode("utf-8", errors="replace")

    @property
    def hardware_errors(self) -> list[HardwareError]:
        """Known hardware errors set in the report."""
        return decode_hardware_errors(self.hardware_errors_bitmask)

    @property
    def software_errors(self) -> list[SoftwareError]:
        """Known software errors set in the report."""
        return decode_software_errors(self.software_errors_bitmask)

    def pack(self) -> bytes:
        """Encode the error data and its message."""
        message = bytes(self.message)
        try:
            head = _ERROR.pack(
                self.hardware_errors_bitmask,
                self.software_errors_bitmask,
                len(message),
            )
        except struct.error as exc:
            raise ValueError(f"error data field out of range: {exc}") from exc
        return head + message

    @classmethod
    def unpack(cls, data: bytes) -> ErrorData:
        """Decode error data and its message."""
        data = bytes(data)
        if len(data) < _ERROR.size:
            raise ValueError(f"error data needs {_ERROR.size} bytes, got {len(data)}")
        hardware, software, msg_size = _ERROR.unpack_from(data)
        message = data[_ERROR.size : _ERROR.size + msg_size]
        if len(message) < msg_size:
            raise ValueError(
                f"error message size is {msg_size}, {len(message)} bytes follow"
            )
        return cls(hardware, software, message)


Payload = Union[StatusData, ErrorData, dict, bytes, None]


@dataclass
class Answer:
    """A decoded answer: its header and the payload the header announces."""

    header: AnswerHeader
    payload: Payload = None

    @property
    def acknowledged(self) -> str:
        """Name of the command this answer acknowledges."""
        return command_name(self.header.cmd_ack_type)

    @property
    def complete(self) -> CmdComplete | int:
        """Completion status, as a CmdComplete when it is known."""
        try:
            return CmdComplete(self.header.cmd_complete)
        except ValueError:
            return self.header.cmd_complete


_ID_HEAD = struct.Struct("<9H")
_ID_FIELDS = (
    "linux_ver_s",
    "elf_ver_s",
    "fpga_ver_s",
    "uhp_ver_s",
    "station_name_s",
    "presel1_year",
    "presel1_num",
    "presel2_year",
    "presel2_num",
)
_ID_STRINGS = (
    ("linux_ver", "linux_ver_s"),
    ("elf_ver", "elf_ver_s"),
    ("fpga_ver", "fpga_ver_s"),
    ("uhp_ver", "uhp_ver_s"),
    ("station_name", "station_name_s"),
)


def _parse_id_and_versions(body: bytes) -> dict[str, Any]:
    if len(body) < _ID_HEAD.size:
        raise ValueError(
            f"version answer needs {_ID_HEAD.size} bytes, got {len(body)}"
        )
    values: dict[str, Any] = dict(zip(_ID_FIELDS, _ID_HEAD.unpack_from(body)))
    rest = body[_ID_HEAD.size :]
    for name, size_field in _ID_STRINGS:
        size = values[size_field]
        if len(rest) < size:
            raise ValueError(f"{name} needs {size} bytes, {len(rest)} left")
        values[name] = rest[:size].rstrip(b"\0").decode("utf-8", errors="replace")
        rest = rest[size:]
    if rest.strip(b"\0"):
        raise ValueError(f"{len(rest)} unexpected bytes after version strings")
    return values


_TEMPERATURE = Layout((("local_temp", "f"), ("remote_temp", "f")))
_MEMORY = Layout(
    (("offset", "H"), ("length", "H")), trailer="data", length_field="length"
)
_DAC = Layout((("dac_value", "H"),))
_CHIPS = REQUEST_LAYOUTS[DebugCommand.CHECK_PRESELECTOR_I2C_CHIPS_0x11C]

_PARSERS: dict[int, Callable[[bytes], Payload]] = {
    Command.ERROR_0xFF: ErrorData.unpack,
    Command.GET_ID_AND_SOFT_VERSION_ANS_0x1B: _parse_id_and_versions,
    DebugCommand.READ_PRESELECTOR_MEMORY_ANS_0x117: _MEMORY.unpack,
    DebugCommand.GET_PRESELECTOR_TEMPERATURE_ANS_0x118: _TEMPERATURE.unpack,
    DebugCommand.GET_DAC_GENERATOR_VALUE_ANS_0x11B: _DAC.unpack,
    DebugCommand.CHECK_PRESELECTOR_I2C_CHIPS_ANS_0x11D: _CHIPS.unpack,
}


def parse_answer(data: bytes) -> Answer:
    """Decode one answer from the receiver.

    The header's ``cmd_type`` picks the payload: an error report, a version
    answer, a technological answer as a dict of fields, or otherwise the
    receiver status when the body is large enough to hold it.
    """
    data = bytes(data)
    header = AnswerHeader.unpack(data)
    if not AnswerHeader.SIZE <= header.size <= len(data):
        raise ValueError(
            f"answer size field is {header.size}, {len(data)} bytes available"
        )
    body = data[AnswerHeader.SIZE : header.size]
    parser = _PARSERS.get(header.cmd_type)
    if parser is not None:
        payload: Payload = parser(body)
    elif not body:
        payload = None
    elif len(body) >= StatusData.SIZE:
        payload = StatusData.unpack(body)
    else:
        payload = body
    return Answer(header=header, payload=payload)


def describe_answer(answer: Answer) -> str:
    """One log line naming the acknowledged command and its completion status."""
    header = answer.header
    return (
        f"Answer to command : {command_name(header.cmd_ack_type)}"
        f" status: {header.cmd_complete}"
    )