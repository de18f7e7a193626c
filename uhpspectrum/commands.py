"""Command identifiers of the receiver control protocol."""

from __future__ import annotations

from enum import IntEnum

UHP_VERSION = "v2025.1.0"

UDP_ID_BROADCAST_PORT_RECV = 42000

UHP_PORT_CH1 = 5050
UHP_PORT_CH2 = 5051
UHP_PORT_CH3 = 5052
UHP_PORT_CH4 = 5053

MAX_CTRL_PACKET_SIZE = 102400


class Command(IntEnum):
    """Main protocol command identifiers."""

    ANSWER_0x0 = 0x0
    GET_STATUS_0x1 = 0x1
    SET_FREQ_REQUEST_0x2 = 0x2
    ADD_PRESET_REQUEST_0x3 = 0x3
    SET_FREQ_ADD_PRESET_REQUEST_0x4 = 0x4
    SET_ATT_BITMASK_0x5 = 0x5
    SET_ANTENNA_0x6 = 0x6
    SET_MODULATION_0x7 = 0x7
    SET_SIGNAL_BAND_0x8 = 0x8
    SET_GENERATOR_SOURCE_0x9 = 0x9
    SET_SAMPLE_RATE_0xA = 0xA
    SET_SETTINGS_0xB = 0xB
    CTRL_IQ_STREAM_NOW_0xC = 0xC
    CTRL_IQ_STREAM_SYNC_0xD = 0xD
    STOP_IQ_STREAM_0xE = 0xE
    DIAGNOSTIC_0xF = 0xF
    RESET_0x10 = 0x10
    SET_N_IQ_SLICE_0x11 = 0x11
    SET_IP_ADDRESS_0x12 = 0x12
    SET_CONTROL_MODE_0x13 = 0x13
    SET_PRESET_0x14 = 0x14
    SET_GENERATOR_MONITORING_0x15 = 0x15
    SET_GENERATOR_FREQ_ADJUSTMENT_0x16 = 0x16
    SET_LOG_DESTINATION_0x17 = 0x17
    SET_ARU_STATE_0x18 = 0x18
    RESET_PROTECTION_0x19 = 0x19
    GET_ID_AND_SOFT_VERSION_0x1A = 0x1A
    GET_ID_AND_SOFT_VERSION_ANS_0x1B = 0x1B
    SET_IQ_FORMAT_0x1C = 0x1C
    UPDATE_PRESELECTOR_TEMPERATURE_0x1D = 0x1D
    ERROR_0xFF = 0xFF


class DebugCommand(IntEnum):
    """Technological commands available in debug mode."""

    CALIBRATION_0x100 = 0x100
    SET_C1_DPF_0x102 = 0x102
    SET_C2_DPF_0x103 = 0x103
    SET_C1_TPF_0x104 = 0x104
    SET_C2_TPF_0x105 = 0x105
    SET_C3_TPF_0x106 = 0x106
    SET_BAND_DPF_0x107 = 0x107
    SET_BAND_TPF_0x108 = 0x108
    SET_FREQ_PRESELECTOR_0x109 = 0x109
    SET_FILTER_0x10A = 0x10A
    SET_IN_ATT_0x10B = 0x10B
    SET_OUT_ATT_0x10C = 0x10C
    SET_TEST_GEN_0x10D = 0x10D
    SET_TEMPERATURE_THRESHOLDS_0x10E = 0x10E
    GET_PRESELECTOR_TEMPERATURE_0x10F = 0x10F
    WRITE_PRESELECTOR_MEMORY_0x110 = 0x110
    READ_PRESELECTOR_MEMORY_0x111 = 0x111
    SET_PRESELECTOR_AMPLIFIER_0x112 = 0x112
    SET_RF_IN_LOCK_0x113 = 0x113
    RESET_PRESELECTOR_PROTECTION_0x114 = 0x114
    RESET_PRESELECTOR_HARDWARE_0x115 = 0x115
    INIT_PRESELECTOR_HARDWARE_0x116 = 0x116
    READ_PRESELECTOR_MEMORY_ANS_0x117 = 0x117
    GET_PRESELECTOR_TEMPERATURE_ANS_0x118 = 0x118
    INIT_TEST_ERROR_MSG_0x119 = 0x119
    GET_DAC_GENERATOR_VALUE_0x11A = 0x11A
    GET_DAC_GENERATOR_VALUE_ANS_0x11B = 0x11B
    CHECK_PRESELECTOR_I2C_CHIPS_0x11C = 0x11C
    CHECK_PRESELECTOR_I2C_CHIPS_ANS_0x11D = 0x11D
    SET_DPF_FILTER_0x11E = 0x11E
    SET_TPF_FILTER_0x11F = 0x11F


GLOBAL_COMMANDS = frozenset(
    {
        Command.SET_GENERATOR_SOURCE_0x9,
        Command.SET_SETTINGS_0xB,
        Command.DIAGNOSTIC_0xF,
        Command.RESET_0x10,
        Command.SET_IP_ADDRESS_0x12,
        Command.SET_CONTROL_MODE_0x13,
        # Broadcast happens only on standby -> Rx transition.
        Command.CTRL_IQ_STREAM_NOW_0xC,
        Command.CTRL_IQ_STREAM_SYNC_0xD,
        # Broadcast happens only on Rx -> standby transition.
        Command.STOP_IQ_STREAM_0xE,
        Command.SET_GENERATOR_MONITORING_0x15,
        Command.SET_GENERATOR_FREQ_ADJUSTMENT_0x16,
        Command.SET_LOG_DESTINATION_0x17,
        Command.SET_IQ_FORMAT_0x1C,
        DebugCommand.CALIBRATION_0x100,
    }
)

CMD_ALLOW_IN_ANY_CTRL_MODE = frozenset(
    {
        Command.GET_STATUS_0x1,
        Command.SET_CONTROL_MODE_0x13,
        Command.CTRL_IQ_STREAM_NOW_0xC,
        Command.STOP_IQ_STREAM_0xE,
    }
)

_NAMES: dict[int, str] = {
    member.value: member.name for member in (*Command, *DebugCommand)
}
_NAMES[DebugCommand.GET_DAC_GENERATOR_VALUE_0x11A] = "READ_DAC_GENERATOR_VALUE_0x11A"
_NAMES[DebugCommand.GET_DAC_GENERATOR_VALUE_ANS_0x11B] = (
    "READ_DAC_GENERATOR_VALUE_ANS_0x11B"
)


def command_name(value: int) -> str:
    """Return a readable name for a 16-bit command identifier."""
    value = int(value) & 0xFFFF
    name = _NAMES.get(value)
    if name is None:
        return f"UNKNOWN PARAMETER{value}"
    return name


def is_global(value: int) -> bool:
    """Tell whether a command applies to all receiver channels."""
    return int(value) in GLOBAL_COMMANDS


def allowed_in_any_ctrl_mode(value: int) -> bool:
    """Tell whether a command is accepted in both manual and remote modes."""
    return int(value) in CMD_ALLOW_IN_ANY_CTRL_MODE