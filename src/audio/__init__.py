from .frames import AudioFormat, AudioFrame, MIC_FORMAT, SPEAKER_FORMAT
from .codec import decode_b64, encode_b64, frame_from_b64, estimate_b64_decoded_bytes

__all__ = [
    "MIC_FORMAT",
    "SPEAKER_FORMAT",
    "AudioFormat",
    "AudioFrame",
    "decode_b64",
    "encode_b64",
    "estimate_b64_decoded_bytes",
    "frame_from_b64",
]
