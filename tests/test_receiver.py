import socket
import threading

import numpy as np
import pytest

from uhpspectrum.answers import AnswerHeader
from uhpspectrum.commands import Command
from uhpspectrum.iq_stream import IqHeader
from uhpspectrum.receiver import (
    PACKET_SIZE,
    Receiver,
    start_messages,
    stop_message,
)
from uhpspectrum.requests import decode_request
from uhpspectrum.spectrum import PART_SIZE, POINTS_QTY


def _packet(value=1000):
    samples = np.zeros(PART_SIZE * 2, dtype="<i4")
    samples[0::2] = value
    return IqHeader(n_samples=PART_SIZE).pack() + samples.tobytes()


def _read_exact(conn, size):
    data = b""
    while len(data) < size:
        chunk = conn.recv(size - len(data))
        if not chunk:
            break
        data += chunk
    return data


def test_packet_size_matches_stream_format():
    assert PACKET_SIZE == 2066
    assert len(_packet()) == PACKET_SIZE


def test_start_messages_content():
    set_freq, start = start_messages(7000)
    header, body = decode_request(set_freq)
    assert header.cmd_type == Command.SET_FREQ_REQUEST_0x2
    assert header.messid == 1
    assert header.size == len(set_freq)
    assert body == {"carrier_freq_hz": 7000 * 1000}

    header, body = decode_request(start)
    assert header.cmd_type == Command.CTRL_IQ_STREAM_NOW_0xC
    assert header.messid == 2
    assert body == {"ip_stream": 0, "port_stream": 42000, "preset_num": 0xFFFF}


def test_start_messages_frequency_out_of_range():
    with pytest.raises(ValueError):
        start_messages(5_000_000)


def test_stop_message_bytes():
    assert stop_message() == bytes.fromhex("0a000000" "00000000" "0e00")
    header, body = decode_request(stop_message())
    assert header.cmd_type == Command.STOP_IQ_STREAM_0xE
    assert body == {}


def test_handle_datagram_builds_spectrum():
    received = []
    receiver = Receiver(on_spectrum=received.append)
    results = [receiver.handle_datagram(_packet()) for _ in range(5)]
    assert results[:4] == [None, None, None, None]
    assert results[4].shape == (POINTS_QTY,)
    assert len(received) == 1
    np.testing.assert_array_equal(received[0], results[4])
    assert int(np.argmax(results[4])) == POINTS_QTY // 2


def test_handle_datagram_ignores_other_sizes():
    receiver = Receiver()
    assert receiver.handle_datagram(_packet()[:-1]) is None
    assert receiver.handle_datagram(b"") is None
    assert receiver.accumulator.packets == 0


def test_run_talks_to_receiver():
    finished = []
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as server:
        server.bind(("127.0.0.1", 0))
        server.listen(1)
        port = server.getsockname()[1]
        receiver = Receiver(on_finished=lambda: finished.append(True), udp_port=0)
        thread = threading.Thread(
            target=receiver.run, args=("127.0.0.1", port, 7000), daemon=True
        )
        thread.start()
        conn, _ = server.accept()
        with conn:
            conn.settimeout(5)
            first = _read_exact(conn, 14 + 18)
            conn.sendall(
                AnswerHeader(
                    size=16, messid=1, cmd_type=0, cmd_ack_type=2, cmd_complete=0
                ).pack()
            )
            receiver.stop()
            stop = _read_exact(conn, 10)
            thread.join(5)

    assert not thread.is_alive()
    assert stop == stop_message()
    assert finished == [True]
    assert not receiver.is_running

    _, freq_body = decode_request(first[:14])
    assert freq_body == {"carrier_freq_hz": 7000 * 1000}
    header, stream_body = decode_request(first[14:])
    assert header.cmd_type == Command.CTRL_IQ_STREAM_NOW_0xC
    assert stream_body["ip_stream"] == 0
    assert stream_body["preset_num"] == 0xFFFF


def test_run_connection_refused():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
        probe.bind(("127.0.0.1", 0))
        port = probe.getsockname()[1]
    finished = []
    receiver = Receiver(on_finished=lambda: finished.append(True), udp_port=0)
    with pytest.raises(OSError):
        receiver.run("127.0.0.1", port, 7000)
    assert finished == []
    assert not receiver.is_running