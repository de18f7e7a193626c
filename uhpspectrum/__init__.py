"""Live spectrum viewer and control-protocol toolkit for HF receivers."""

__version__ = "0.1.0"