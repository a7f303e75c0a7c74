"""Audio transcoding using PyAV."""

import io
import logging
from dataclasses import dataclass
from pathlib import Path

import av
import numpy as np

from .exceptions import AudioConversionError, NoAudioStreamError
from .settings import settings

logger = logging.getLogger(__name__)


@dataclass
class TranscodeResult:
    """WAV output of a transcode."""

    data: bytes
    sample_rate: int
    sample_count: int
    peak_level: float

    @property
    def duration_seconds(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return self.sample_count / self.sample_rate

    @property
    def is_silent(self) -> bool:
        return self.peak_level < settings.silence_peak_threshold


def transcode_to_wav(source: bytes | str | Path) -> TranscodeResult:
    """Transcode any audio or video container to mono 16 kHz PCM WAV.

    Only the first audio stream is decoded; video streams are discarded.

    Args:
        source: Container bytes or a path to a file on disk

    Returns:
        TranscodeResult with the WAV bytes and sample statistics

    Raises:
        NoAudioStreamError: If the input has no audio stream
        AudioConversionError: If decoding or encoding fails
    """
    input_source = io.BytesIO(source) if isinstance(source, bytes) else str(source)
    output_buffer = io.BytesIO()
    sample_count = 0
    peak = 0

    try:
        with av.open(input_source, mode="r") as in_container:
            if not in_container.streams.audio:
                raise NoAudioStreamError("No audio stream found")

            with av.open(
                output_buffer, mode="w", format=settings.output_format
            ) as out_container:
                out_stream = out_container.add_stream(
                    settings.output_codec, rate=settings.target_sample_rate
                )
                out_stream.layout = settings.target_layout

                resampler = av.AudioResampler(
                    format="s16",
                    layout=settings.target_layout,
                    rate=settings.target_sample_rate,
                )

                for frame in in_container.decode(audio=0):
                    for resampled in resampler.resample(frame):
                        samples = resampled.to_ndarray()
                        sample_count += resampled.samples
                        if samples.size:
                            peak = max(peak, int(np.abs(samples.astype(np.int32)).max()))
                        for packet in out_stream.encode(resampled):
                            out_container.mux(packet)

                for resampled in resampler.resample(None):
                    sample_count += resampled.samples
                    for packet in out_stream.encode(resampled):
                        out_container.mux(packet)

                for packet in out_stream.encode(None):
                    out_container.mux(packet)

    except AudioConversionError:
        raise
    except (av.error.FFmpegError, ValueError, OSError) as e:
        raise AudioConversionError(f"Failed to convert audio to WAV: {e}") from e

    if sample_count == 0:
        raise AudioConversionError("No audio samples decoded")

    result = TranscodeResult(
        data=output_buffer.getvalue(),
        sample_rate=settings.target_sample_rate,
        sample_count=sample_count,
        peak_level=peak / 32768.0,
    )
    logger.info(
        f"Transcoded audio to WAV: {result.duration_seconds:.2f}s, "
        f"{len(result.data)} bytes, peak={result.peak_level:.3f}"
    )
    if result.is_silent:
        logger.warning("Transcoded audio appears to be silent")
    return result


def convert_to_wav(audio_data: bytes) -> bytes:
    """Convert container bytes to mono 16 kHz PCM WAV bytes."""
    return transcode_to_wav(audio_data).data


class AudioConverter:
    """AudioConverterProtocol implementation backed by PyAV."""

    def convert_to_wav(self, audio_data: bytes) -> bytes:
        return convert_to_wav(audio_data)
