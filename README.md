# uhpspectrum

A live spectrum viewer and a protocol toolkit for HF receivers that take
commands over TCP and send IQ samples over UDP.

The viewer connects to the receiver's control port and tunes it to a carrier
frequency. It then asks for an IQ stream on UDP port 42000 and draws an
averaged 1024-point power spectrum in dB on a grid.

## Installation

```
pip install .
```

The window uses `tkinter`, which comes with most Python installations. Some
Linux distributions ship it as a separate package.

To run the tests:

```
pip install ".[test]"
pytest
```

## Running the viewer

```
uhpspectrum [--ip ADDRESS] [--port PORT] [--freq KHZ]
```

The options fill in the fields of the window. Edit the fields if needed, then
press **Включить** to start. The fields are locked while the viewer receives.
Press **Выключить** to stop. The receiver gets a stop-stream command and the
plot is cleared. If a field does not hold a valid value, a dialog shows the
error.

## Using the library

The modules can also be used without the window:

- `uhpspectrum.commands`
  - `Command` and `DebugCommand`: the command identifiers.
  - `command_name()`: a readable name for an identifier. An unknown identifier
    gives `"UNKNOWN PARAMETER<n>"`.
  - `is_global()` and `allowed_in_any_ctrl_mode()`.
  - Constants such as `UHP_PORT_CH1` and `MAX_CTRL_PACKET_SIZE`.
- `uhpspectrum.values`
  - Enumerations of field values: `CmdComplete`, `Ant`, `SampleRate`,
    `Preset`, `AttBitmask`, `XcvrState`, `Modulation`, `CtrlMode`, `SyncType`,
    `SyncStatus`, `GenSource`, `AruState`, `StreamStatus`, `NIqSlice`,
    `PreselectorI2cChip`.
  - Error flags: `HardwareError` and `SoftwareError`.
  - `decode_hardware_errors()` and `decode_software_errors()`, which list the
    known flags set in a 32-bit mask.
- `uhpspectrum.requests`
  - `encode_request(command, messid, **fields)` builds a packed request.
  - `decode_request(data)` returns a `(RequestHeader, dict)` pair.
  - `layout_for()` gives the `Layout` of a command's body.
- `uhpspectrum.answers`
  - `parse_answer()` turns a reply into an `Answer`. The answer holds an
    `AnswerHeader` and a payload. The payload is one of:
    - `StatusData`;
    - `ErrorData`;
    - a dict, for version answers and technological answers;
    - raw bytes;
    - `None`.
  - `describe_answer()` formats an answer as one log line.
- `uhpspectrum.iq_stream`
  - `IqHeader`: the UDP IQ packet header, with `pack()` and `unpack()`.
  - `HeaderFlags` and `IqFormat`.
  - `decode_samples()`: decodes a payload into a NumPy array.
- `uhpspectrum.spectrum`
  - `power_db()`.
  - `SpectrumAccumulator`: gathers four 256-sample packets into one FFT frame
    and averages the power spectra of the last ten frames. The result is
    rotated so that zero frequency sits in the middle.
- `uhpspectrum.receiver`
  - `Receiver`: runs the TCP/UDP session loop in `run()` until `stop()` is
    called, and feeds single datagrams through `handle_datagram()`.
  - `start_messages()` and `stop_message()`: the raw control requests it
    sends.
- `uhpspectrum.plot`
  - `PlotGeometry`: maps bins and levels onto a view of a given size. It gives
    the grid lines, the scene rectangle and the points of the spectrum path.
- `uhpspectrum.app`
  - `parse_settings()`: checks the address, port and frequency.
  - `SpectrumWindow`: the viewer state, without any toolkit.
  - `main()`: the command above.

Example: build and decode the command that tunes the receiver to 7 MHz.

```python
from uhpspectrum.commands import Command
from uhpspectrum.requests import encode_request, decode_request

packet = encode_request(Command.SET_FREQ_REQUEST_0x2, 1, carrier_freq_hz=7_000_000)
header, fields = decode_request(packet)
print(header.size, fields)   # 14 {'carrier_freq_hz': 7000000}
```

## What it does not do

- The viewer only tunes the frequency and starts and stops the stream. The
  other commands (attenuators, antenna, presets, diagnostics and so on) can be
  encoded with `encode_request()`, but nothing in the window sends them.
- The session loop only uses stream datagrams of exactly 2066 bytes: an
  18-byte header followed by 256 complex int32 samples. It ignores all other
  datagrams.
- Replies on the control connection are only written to the log. The loop
  does not act on them.
- Nothing is recorded or saved. Spectra exist only while they are shown.