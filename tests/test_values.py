import pytest

from uhpspectrum.values import (
    ERR_HW_CHECK_IN_DIAGNOSTIC,
    ERR_SW_CHECK_IN_DIAGNOSTIC,
    MAX_ATT_BITMASK,
    AttBitmask,
    CmdComplete,
    HardwareError,
    NIqSlice,
    Preset,
    SampleRate,
    SoftwareError,
    XcvrState,
    decode_hardware_errors,
    decode_software_errors,
)


def test_documented_values_look_up_members():
    assert SampleRate(384000) is SampleRate.SR_384_KHZ
    assert Preset(0xFFFF) is Preset.DEFAULT
    assert Preset(1000) is Preset.MAX
    assert XcvrState(5) is XcvrState.RX
    assert CmdComplete(6) is CmdComplete.DIAGNOSTIC_FAILED


def test_all_attenuators_make_max_mask():
    combined = AttBitmask.IN_6DB | AttBitmask.IN_12DB | AttBitmask.IN_24DB | AttBitmask.OUT_10DB
    assert AttBitmask(MAX_ATT_BITMASK) == combined


@pytest.mark.parametrize("member", list(NIqSlice))
def test_n_iq_slice_samples_double(member):
    if member.value > 0:
        assert member.samples == 2 * NIqSlice(member.value - 1).samples
    else:
        assert member.samples == 64


def test_n_iq_256():
    assert NIqSlice(2).samples == 256


def test_decode_hardware_errors_pair():
    mask = HardwareError.NO_RF_CLK | HardwareError.ADC_OVERLOAD
    assert decode_hardware_errors(mask) == [
        HardwareError.NO_RF_CLK,
        HardwareError.ADC_OVERLOAD,
    ]


def test_decode_hardware_diagnostic_mask():
    assert decode_hardware_errors(ERR_HW_CHECK_IN_DIAGNOSTIC) == [
        HardwareError.ETH_USB_NOT_CONNECTED,
        HardwareError.PRESEL_NO_ANSWER,
        HardwareError.PRESEL_BAD_ATT,
        HardwareError.PRESEL_BAD_WELLS,
    ]


def test_decode_empty_and_unknown_bits():
    assert decode_hardware_errors(0) == []
    assert decode_hardware_errors(0x80000000) == []


def test_decode_software_errors():
    assert decode_software_errors(0x80000000) == [SoftwareError.OTHER_ERROR]
    assert decode_software_errors(ERR_SW_CHECK_IN_DIAGNOSTIC) == [
        SoftwareError.RF_PATH_CALIBRATION
    ]


def test_decode_round_trip_all_hardware():
    full = 0
    for flag in HardwareError:
        full |= flag
    assert decode_hardware_errors(full) == list(HardwareError)


@pytest.mark.parametrize("mask", [-1, 1 << 32])
def test_decode_rejects_out_of_range(mask):
    with pytest.raises(ValueError):
        decode_software_errors(mask)