"""Frame manifest export."""

from vocalwave.io.exporter import FrameExporter

__all__ = ["FrameExporter"]
