"""Spectrum viewer window: receiver settings, start/stop and the live plot."""

from __future__ import annotations

import argparse
import logging
import math
import queue
import threading
from dataclasses import dataclass, field

import numpy as np

from .plot import GridLine, PlotGeometry
from .receiver import STREAM_PORT, Receiver

logger = logging.getLogger(__name__)

START_TEXT = "Включить"
STOP_TEXT = "Выключить"


@dataclass(frozen=True)
class Settings:
    """Connection settings entered by the user."""

    ip: str
    port: int
    freq_khz: int


def _parse_int(text: str, what: str) -> int:
    try:
        return int(str(text).strip())
    except ValueError:
        raise ValueError(f"{what} must be an integer, got {text!r}") from None


def parse_settings(ip: str, port: str, freq: str) -> Settings:
    """Validate the address, control port and frequency in kHz."""
    address = str(ip).strip()
    if not address:
        raise ValueError("receiver address is empty")
    port_number = _parse_int(port, "port")
    if not 0 < port_number <= 0xFFFF:
        raise ValueError(f"port out of range: {port_number}")
    freq_khz = _parse_int(freq, "frequency")
    if not 0 <= freq_khz * 1000 <= 0xFFFFFFFF:
        raise ValueError(f"frequency out of range: {freq_khz} kHz")
    return Settings(address, port_number, freq_khz)


@dataclass
class Scene:
    """Everything drawn in the plot: grid, axes and the current spectrum."""

    x_grid: list[GridLine]
    y_grid: list[GridLine]
    axes: tuple[tuple[float, float, float, float], ...]
    rect: tuple[float, float, float, float]
    path: list[tuple[float, float]] = field(default_factory=list)

    @classmethod
    def build(cls, geometry: PlotGeometry) -> Scene:
        return cls(
            x_grid=geometry.x_grid(),
            y_grid=geometry.y_grid(),
            axes=geometry.axes(),
            rect=geometry.scene_rect(),
        )


class SpectrumWindow:
    """State of the viewer window, independent of the toolkit that shows it.

    Spectra and the end of a session arrive from the receiver thread and are
    queued; :meth:`process_events` applies them on the caller's thread.
    """

    def __init__(
        self,
        ip: str = "",
        port: str = "",
        freq: str = "",
        *,
        view_size: tuple[int, int] = (800, 300),
        udp_port: int = STREAM_PORT,
    ) -> None:
        self.ip = ip
        self.port = port
        self.freq = freq
        self.geometry = PlotGeometry(*view_size)
        self.scene: Scene | None = None
        self.running = False
        self.error: OSError | None = None
        self._events: queue.Queue[tuple] = queue.Queue()
        self._thread: threading.Thread | None = None
        self.receiver = Receiver(
            on_spectrum=lambda spectrum: self._events.put(("spectrum", spectrum)),
            on_finished=lambda: self._events.put(("finished",)),
            udp_port=udp_port,
        )

    @property
    def button_text(self) -> str:
        """Caption of the start/stop button."""
        return STOP_TEXT if self.running else START_TEXT

    @property
    def inputs_enabled(self) -> bool:
        """Whether the settings fields may be edited."""
        return not self.running

    def toggle(self) -> None:
        """Start receiving with the current settings, or stop if running."""
        if self.running:
            self.receiver.stop()
            if self._thread is not None:
                self._thread.join()
                self._thread = None
            self.running = False
            return
        settings = parse_settings(self.ip, self.port, self.freq)
        self.init_scene()
        self.error = None
        self.running = True
        self._thread = threading.Thread(
            target=self._work, args=(settings,), name="receiver", daemon=True
        )
        self._thread.start()

    def _work(self, settings: Settings) -> None:
        try:
            self.receiver.run(settings.ip, settings.port, settings.freq_khz)
        except OSError as exc:
            logger.error("Receiver failed: %s", exc)
            self.error = exc

    def init_scene(self) -> None:
        """Create an empty plot with grid and axes for the current geometry."""
        self.scene = Scene.build(self.geometry)

    def clear_scene(self) -> None:
        """Drop the plot."""
        self.scene = None

    def draw_spectrum(self, numbers: np.ndarray) -> None:
        """Replace the spectrum path with one built from ``numbers``."""
        if self.scene is not None:
            self.scene.path = self.geometry.path_points(numbers)

    def resize(self, width: int, height: int) -> None:
        """Adopt a new view size; rebuild the plot while running."""
        self.geometry = PlotGeometry(width, height)
        if self.running:
            self.init_scene()

    def process_events(self) -> bool:
        """Apply queued spectra and session ends; tell whether anything changed."""
        changed = False
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                return changed
            if event[0] == "spectrum":
                self.draw_spectrum(event[1])
            else:
                self.clear_scene()
            changed = True

    def close(self) -> None:
        """Stop the receiver thread if it runs."""
        if self.running:
            self.toggle()


class _TkView:
    def __init__(self, root, window: SpectrumWindow) -> None:
        import tkinter as tk

        self._tk = tk
        self.root = root
        self.window = window
        root.title("Spectrum")

        controls = tk.Frame(root)
        controls.pack(side=tk.TOP, fill=tk.X)
        self.ip_var = tk.StringVar(value=window.ip)
        self.port_var = tk.StringVar(value=window.port)
        self.freq_var = tk.StringVar(value=window.freq)
        self.entries = []
        for caption, var in (("IP", self.ip_var), ("Port", self.port_var), ("kHz", self.freq_var)):
            tk.Label(controls, text=caption).pack(side=tk.LEFT)
            entry = tk.Entry(controls, textvariable=var, width=16)
            entry.pack(side=tk.LEFT, padx=4)
            self.entries.append(entry)
        self.button = tk.Button(controls, text=window.button_text, command=self._on_button)
        self.button.pack(side=tk.LEFT, padx=4)

        self.canvas = tk.Canvas(root, background="white", width=800, height=300)
        self.canvas.pack(side=tk.TOP, fill=tk.BOTH, expand=True)
        self.canvas.bind("<Configure>", self._on_resize)
        root.protocol("WM_DELETE_WINDOW", self.close)
        root.after(30, self._tick)

    def _on_button(self) -> None:
        from tkinter import messagebox

        self.window.ip = self.ip_var.get()
        self.window.port = self.port_var.get()
        self.window.freq = self.freq_var.get()
        try:
            self.window.toggle()
        except ValueError as exc:
            messagebox.showerror("Spectrum", str(exc))
        self._sync_controls()
        self._redraw()

    def _sync_controls(self) -> None:
        state = self._tk.NORMAL if self.window.inputs_enabled else self._tk.DISABLED
        for entry in self.entries:
            entry.configure(state=state)
        self.button.configure(text=self.window.button_text)

    def _on_resize(self, event) -> None:
        self.window.resize(event.width, event.height)
        self._redraw()

    def _tick(self) -> None:
        if self.window.process_events():
            self._redraw()
        self.root.after(30, self._tick)

    def _redraw(self) -> None:
        canvas = self.canvas
        canvas.delete("all")
        scene = self.window.scene
        if scene is None:
            return
        x, y, w, h = scene.rect
        canvas.configure(scrollregion=(x, y, x + w, y + h))
        canvas.xview_moveto(0)
        canvas.yview_moveto(0)
        for line in (*scene.x_grid, *scene.y_grid):
            canvas.create_line(line.x1, line.y1, line.x2, line.y2, fill="lightgray", dash=(4, 2))
            canvas.create_text(
                line.label_x, line.label_y, text=line.label, fill="darkgray",
                anchor="nw", font=("TkDefaultFont", 7),
            )
        for axis in scene.axes:
            canvas.create_line(*axis, fill="black", width=2)
        bottom = y + h
        coords = []
        for px, py in scene.path:
            if math.isnan(py):
                continue
            coords.extend((px, min(max(py, y), bottom)))
        if len(coords) >= 4:
            canvas.create_line(*coords, fill="darkgreen", width=1)

    def close(self) -> None:
        self.window.close()
        self.root.destroy()


def main(argv: list[str] | None = None) -> int:
    """Open the spectrum viewer window."""
    parser = argparse.ArgumentParser(description="Live spectrum of a receiver IQ stream.")
    parser.add_argument("--ip", default="", help="receiver address")
    parser.add_argument("--port", default="", help="receiver control port")
    parser.add_argument("--freq", default="", help="carrier frequency in kHz")
    args = parser.parse_args(argv)

    import tkinter as tk

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    root = tk.Tk()
    window = SpectrumWindow(args.ip, args.port, args.freq)
    _TkView(root, window)
    root.mainloop()
    return 0