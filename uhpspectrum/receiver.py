"""Control connection and IQ stream reception for one receiver channel."""

from __future__ import annotations

import logging
import select
import socket
import threading
from collections.abc import Callable

import numpy as np

from .answers import Answer, AnswerHeader, describe_answer
from .commands import UDP_ID_BROADCAST_PORT_RECV, Command
from .iq_stream import IqFormat, IqHeader, decode_samples
from .requests import encode_request
from .spectrum import PART_SIZE, SpectrumAccumulator
from .values import Preset

logger = logging.getLogger(__name__)

STREAM_PORT = UDP_ID_BROADCAST_PORT_RECV
PACKET_SIZE = IqHeader.SIZE + PART_SIZE * 8
RECV_BUFFER = 3072


def _start_messages(freq_khz: int, stream_port: int) -> list[bytes]:
    return [
        encode_request(
            Command.SET_FREQ_REQUEST_0x2, 1, carrier_freq_hz=int(freq_khz) * 1000
        ),
        encode_request(
            Command.CTRL_IQ_STREAM_NOW_0xC,
            2,
            ip_stream=0,
            port_stream=stream_port,
            preset_num=Preset.DEFAULT,
        ),
    ]


def start_messages(freq_khz: int) -> list[bytes]:
    """Requests that tune the receiver and start the IQ stream to port 42000."""
    return _start_messages(freq_khz, STREAM_PORT)


def stop_message() -> bytes:
    """Request that stops the IQ stream."""
    return encode_request(Command.STOP_IQ_STREAM_0xE, 0)


class Receiver:
    """Talks to the receiver and turns its IQ stream into averaged spectra."""

    def __init__(
        self,
        on_spectrum: Callable[[np.ndarray], None] | None = None,
        on_finished: Callable[[], None] | None = None,
        *,
        udp_port: int = STREAM_PORT,
        poll_interval: float = 0.001,
    ) -> None:
        self.on_spectrum = on_spectrum
        self.on_finished = on_finished
        self.udp_port = udp_port
        self.poll_interval = poll_interval
        self.accumulator = SpectrumAccumulator()
        self._running = threading.Event()

    @property
    def is_running(self) -> bool:
        """Whether the receive loop is active."""
        return self._running.is_set()

    def stop(self) -> None:
        """Ask the receive loop to finish."""
        self._running.clear()

    def run(self, ip: str, port: int, freq_khz: int) -> None:
        """Connect, start the stream, and receive until :meth:`stop` is called.

        Socket failures are raised as ``OSError``. On a normal finish the stream
        is stopped and ``on_finished`` is called.
        """
        self._running.set()
        self.accumulator.reset()
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as tcp:
                tcp.connect((ip, port))
                with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as udp:
                    udp.bind(("", self.udp_port))
                    stream_port = udp.getsockname()[1]
                    for message in _start_messages(freq_khz, stream_port):
                        tcp.sendall(message)
                    tcp.setblocking(False)
                    udp.setblocking(False)

                    while self._running.is_set():
                        readable, _, _ = select.select(
                            [tcp, udp], [], [], self.poll_interval
                        )
                        if tcp in readable:
                            self._drain_tcp(tcp)
                        if udp in readable:
                            self._drain_udp(udp)

                    tcp.setblocking(True)
                    tcp.sendall(stop_message())
        finally:
            self._running.clear()
        if self.on_finished is not None:
            self.on_finished()

    def _drain_tcp(self, tcp: socket.socket) -> None:
        while True:
            try:
                chunk = tcp.recv(RECV_BUFFER)
            except BlockingIOError:
                return
            if not chunk:
                raise ConnectionError("receiver closed the control connection")
            if len(chunk) >= AnswerHeader.SIZE:
                logger.info(describe_answer(Answer(AnswerHeader.unpack(chunk))))

    def _drain_udp(self, udp: socket.socket) -> None:
        while True:
            try:
                data, _ = udp.recvfrom(RECV_BUFFER)
            except BlockingIOError:
                return
            self.handle_datagram(data)

    def handle_datagram(self, data: bytes) -> np.ndarray | None:
        """Feed one stream datagram; return the spectrum it completes, if any.

        Datagrams whose size is not that of a 256-sample complex int32 packet
        are ignored.
        """
        if len(data) != PACKET_SIZE:
            return None
        samples = decode_samples(
            bytes(data[IqHeader.SIZE :]), IqFormat.COMPLEX_INT32, PART_SIZE
        )
        spectrum = self.accumulator.add_packet(samples)
        if spectrum is not None and self.on_spectrum is not None:
            self.on_spectrum(spectrum)
        return spectrum