from __future__ import annotations

import io
from dataclasses import dataclass, field

import numpy as np
import soundfile as sf

from media_providers.core.errors import ArgumentError, DecodeError

STT_SAMPLE_RATE = 16000


@dataclass
class AudioClip:
    """
    Decoded PCM audio.

    samples: float32 in [-1, 1]; 1-D for mono, (frames, channels) otherwise.
    """

    samples: np.ndarray
    sample_rate: int
    name: str = ""
    released: bool = field(default=False, compare=False)

    @property
    def channels(self) -> int:
        return 1 if self.samples.ndim == 1 else int(self.samples.shape[1])

    @property
    def frames(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return self.frames / float(self.sample_rate)

    def release(self) -> None:
        """Drop the sample buffer. A released clip must not be played or cached."""
        self.samples = np.zeros(0, dtype=np.float32)
        self.released = True


def describe(clip: AudioClip) -> str:
    return (
        f"[{clip.name or 'clip'}] Duration: {clip.duration:.2f}s, Channels: {clip.channels}, "
        f"Frequency: {clip.sample_rate}Hz, Samples: {clip.frames}"
    )


def decode_audio(data: bytes, name: str = "") -> AudioClip:
    """Decode WAV/FLAC/OGG/MP3 bytes (whatever libsndfile supports) into a clip."""
    if not data:
        raise DecodeError("No audio data received.")

    try:
        samples, sample_rate = sf.read(io.BytesIO(data), dtype="float32", always_2d=False)
    except (RuntimeError, TypeError, ValueError) as e:
        raise DecodeError(f"Failed to decode audio ({len(data)} bytes): {e}") from e

    if samples is None or samples.size == 0:
        raise DecodeError("Decoded audio is empty.")

    return AudioClip(samples=samples, sample_rate=int(sample_rate), name=name)


def to_mono(clip: AudioClip) -> AudioClip:
    if clip.channels == 1:
        return clip
    mono = clip.samples.mean(axis=1).astype(np.float32)
    return AudioClip(samples=mono, sample_rate=clip.sample_rate, name=f"{clip.name}_mono")


def resample(clip: AudioClip, target_rate: int) -> AudioClip:
    """Linear-interpolation resampling; enough for speech recognition input."""
    if target_rate <= 0:
        raise ArgumentError(f"Invalid target sample rate: {target_rate}")
    if clip.sample_rate == target_rate:
        return clip

    ratio = clip.sample_rate / float(target_rate)
    new_frames = int(clip.frames / ratio)
    source_positions = np.arange(new_frames) * ratio
    original_positions = np.arange(clip.frames)

    if clip.channels == 1:
        resampled = np.interp(source_positions, original_positions, clip.samples)
    else:
        resampled = np.stack(
            [
                np.interp(source_positions, original_positions, clip.samples[:, ch])
                for ch in range(clip.channels)
            ],
            axis=1,
        )

    return AudioClip(
        samples=resampled.astype(np.float32),
        sample_rate=target_rate,
        name=f"{clip.name}_resampled",
    )


def encode_wav(clip: AudioClip) -> bytes:
    """16-bit PCM WAV."""
    buf = io.BytesIO()
    sf.write(buf, np.clip(clip.samples, -1.0, 1.0), clip.sample_rate, format="WAV", subtype="PCM_16")
    return buf.getvalue()


def prepare_for_stt(clip: AudioClip, target_rate: int = STT_SAMPLE_RATE) -> bytes:
    """Mono, resampled to target_rate, WAV-encoded."""
    if clip is None or clip.released or clip.frames == 0:
        raise ArgumentError("Audio clip is empty.")
    prepared = resample(to_mono(clip), target_rate)
    if prepared.frames == 0:
        raise ArgumentError(f"Audio clip is too short to resample to {target_rate}Hz.")
    return encode_wav(prepared)
