"""Local audio I/O.

Only the protocols are exported here so importing the package never loads
PortAudio; the sounddevice-backed devices live in ``src.devices.sounddevice_io``.
"""

from .types import CaptureDevice, PlaybackDevice

__all__ = ["CaptureDevice", "PlaybackDevice"]
