"""Field values, ranges and bit masks of the receiver control protocol."""

from __future__ import annotations

from enum import IntEnum, IntFlag

MESSID_DEFAULT = 0
CMD_ACK_TYPE_DEFAULT = 0

MIN_FREQ_HZ = 3_000_000
MAX_FREQ_HZ = 30_000_000

MIN_GEN_FREQ_ADJUSTMENT = 0
MAX_GEN_FREQ_ADJUSTMENT = 65535

MIN_WELLS_STEP = 1
MAX_WELLS_STEP = 512

MIN_CAP = 0
MAX_CAP = 4095

MIN_BAND = 0
MAX_BAND = 1

MIN_PRESELECTOR_FREQ = 3e6
MAX_PRESELECTOR_FREQ = 3e7

MIN_TEST_GEN_FREQ_KHZ = 3000
MAX_TEST_GEN_FREQ_KHZ = 30000

MIN_SENSOR_TEMP = -40.0
MAX_SENSOR_TEMP = 125.0

MIN_EEPROM_SIZE = 0
MAX_EEPROM_SIZE = 8192


class CmdComplete(IntEnum):
    """Completion status of a command in an answer header."""

    GOOD = 0
    WRONG_PARAM = 1
    ERROR = 2
    WRONG_COMMAND = 3
    DIAGNOSTIC_GOOD = 4
    WRONG_CTRL_MODE = 5
    DIAGNOSTIC_FAILED = 6


class Ant(IntEnum):
    """Antenna input."""

    INTERNAL = 0
    EXTERNAL = 1


class SampleRate(IntEnum):
    """Supported sample rates in hertz."""

    SR_48_KHZ = 48000
    SR_96_KHZ = 96000
    SR_192_KHZ = 192000
    SR_384_KHZ = 384000
    BAD = 0


class Preset(IntEnum):
    """Preset number limits; DEFAULT keeps the current frequency."""

    MIN = 1
    MAX = 1000
    DEFAULT = 0xFFFF


class AttBitmask(IntFlag):
    """Attenuator stages; several may be on at once."""

    OFF = 0x0
    IN_6DB = 0x1
    IN_12DB = 0x2
    IN_24DB = 0x4
    OUT_10DB = 0x8


MAX_ATT_BITMASK = 0xF


class XcvrState(IntEnum):
    """Receiver state machine state."""

    INIT = 0
    STANDBY = 1
    DIAGNOSTIC = 2
    ADD_PRESET = 3
    WAITING_FOR_FAR_SYNC = 4
    RX = 5


class Modulation(IntEnum):
    """Demodulation type; only IQ is implemented by the device."""

    IQ = 0
    J3E_LSB = 1
    J3E_USB = 2
    A3E = 3
    F3E = 4
    OFF = 5


class CtrlMode(IntEnum):
    """Manual or remote control."""

    MANUAL = 0
    REMOTE = 1


class SyncType(IntEnum):
    """Synchronous start trigger."""

    FRONT = 0
    BARKER = 1
    BARKER_WITH_LINE_CHECK = 2


class SyncStatus(IntEnum):
    """State of the synchronisation signal."""

    UNUSED = 0
    WAITING = 1
    ACCEPTED = 2
    TIMEOUT = 3


class GenSource(IntEnum):
    """Reference oscillator source."""

    INTERNAL = 0
    EXTERNAL = 1


class AruState(IntEnum):
    """Automatic gain control state."""

    DISABLE = 0
    ENABLE = 1


class StreamStatus(IntEnum):
    """Whether the IQ stream is running."""

    OFF = 0
    ON = 1


class NIqSlice(IntEnum):
    """Samples per IQ packet at a 48 kHz sample rate."""

    N_IQ_64 = 0
    N_IQ_128 = 1
    N_IQ_256 = 2
    N_IQ_512 = 3

    @property
    def samples(self) -> int:
        """Number of IQ samples per packet at 48 kHz."""
        return 64 << self.value


class HardwareError(IntFlag):
    """Hardware error bits."""

    NO_RF_CLK = 0x00000001
    SYNC_TIMEOUT = 0x00000002
    SYNC_LINE_FAIL = 0x00000004
    ETH_USB_NOT_CONNECTED = 0x00000008
    PRESEL_PROTECT_IN = 0x00010000
    PRESEL_PROTECT_OUT = 0x00020000
    PRESEL_TEMP_HIGH = 0x00040000
    PRESEL_TEMP_LOW = 0x00080000
    PRESEL_NO_ANSWER = 0x00100000
    PRESEL_BAD_ATT = 0x00200000
    PRESEL_BAD_WELLS = 0x00400000
    ADC_OVERLOAD = 0x00800000


ERR_HW_CHECK_IN_DIAGNOSTIC = (
    HardwareError.ETH_USB_NOT_CONNECTED
    | HardwareError.PRESEL_NO_ANSWER
    | HardwareError.PRESEL_BAD_ATT
    | HardwareError.PRESEL_BAD_WELLS
)


class SoftwareError(IntFlag):
    """Software error bits."""

    FPGA_IQ_FIFO_OVERFLOW = 0x00000001
    FPGA_IQ_FIFO_UNDERFLOW = 0x00000002
    FAILED_SEND_UDP_IQ = 0x00010000
    PRESEL_WRONG_EEPROM_CRC32 = 0x00020000
    RF_PATH_CALIBRATION = 0x00040000
    INTERCHANNEL_FAR_SYNC_CTRL_CONFLICT = 0x00080000
    PRESEL_WRONG_CSV_DATA = 0x00100000
    OTHER_ERROR = 0x80000000


ERR_SW_CHECK_IN_DIAGNOSTIC = SoftwareError.RF_PATH_CALIBRATION


class PreselectorI2cChip(IntEnum):
    """State of a preselector I2C chip in a check request or answer."""

    DONT_CHECK = 0
    CHECK = 1
    CHECK_SUCCESS = 2
    CHECK_FAIL = 3


def _decode(mask: int, flags: type[IntFlag]) -> list:
    mask = int(mask)
    if not 0 <= mask <= 0xFFFFFFFF:
        raise ValueError(f"error mask out of 32-bit range: {mask}")
    return [flag for flag in flags if mask & flag]


def decode_hardware_errors(mask: int) -> list[HardwareError]:
    """List the known hardware errors set in a 32-bit mask, lowest bit first."""
    return _decode(mask, HardwareError)


def decode_software_errors(mask: int) -> list[SoftwareError]:
    """List the known software errors set in a 32-bit mask, lowest bit first."""
    return _decode(mask, SoftwareError)