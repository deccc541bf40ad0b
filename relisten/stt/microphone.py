"""Microphone capture of single utterances, cut by an RMS energy gate."""

import asyncio
import logging
import threading

import numpy as np
import sounddevice as sd

from relisten.config import (
    AUDIO_SAMPLE_RATE,
    STT_LISTEN_TIMEOUT,
    STT_MAX_RECORD_DURATION,
    STT_SILENCE_DURATION,
    STT_SILENCE_THRESHOLD,
)

logger = logging.getLogger(__name__)

CHUNK_SECONDS = 0.1


class MicrophoneCapture:
    """Records one utterance per ``capture_until_silence()`` call.

    Each capture is handed its own cancel event by the engine attempt that
    owns it. Captures share the device one at a time: a new capture waits
    until the previous one has closed its input stream.
    """

    def __init__(self) -> None:
        self._available: bool = False
        self._device_lock = threading.Lock()

    async def start(self) -> None:
        """Probe for an input device. Capture stays disabled without one."""
        try:
            sd.query_devices(kind="input")
        except Exception:
            self._available = False
            logger.warning("No microphone input device, capture disabled")
            return
        self._available = True
        logger.info("Microphone input device detected, capture enabled")

    async def stop(self) -> None:
        """Disable capture. Running captures finish after their current chunk."""
        self._available = False

    @property
    def is_available(self) -> bool:
        return self._available

    async def capture_until_silence(self, cancel: threading.Event) -> bytes | None:
        """Record one utterance as 16-bit mono PCM.

        Returns None when capture is disabled, when no speech starts within
        ``STT_LISTEN_TIMEOUT`` or when *cancel* is set before speech starts.
        Setting *cancel* once speech started returns the audio heard so far.
        """
        if not self._available or cancel.is_set():
            return None
        try:
            return await asyncio.to_thread(self._capture_sync, cancel)
        except Exception:
            logger.warning("Microphone capture failed", exc_info=True)
            return None

    def _capture_sync(self, cancel: threading.Event) -> bytes | None:
        chunk = int(AUDIO_SAMPLE_RATE * CHUNK_SECONDS)
        frames: list[np.ndarray] = []

        with self._device_lock:
            if self._halted(cancel):
                return None
            try:
                with sd.InputStream(
                    samplerate=AUDIO_SAMPLE_RATE,
                    channels=1,
                    dtype="int16",
                    blocksize=chunk,
                ) as stream:
                    if self._wait_for_onset(stream, chunk, cancel, frames):
                        self._record(stream, chunk, cancel, frames)
            except Exception:
                logger.warning("Microphone stream error", exc_info=True)

        if not frames:
            return None
        return np.concatenate(frames).tobytes()

    def _halted(self, cancel: threading.Event) -> bool:
        return cancel.is_set() or not self._available

    def _wait_for_onset(self, stream, chunk: int, cancel, frames) -> bool:
        """Read until one chunk is louder than the threshold and keep that chunk."""
        waited = 0.0
        while waited < STT_LISTEN_TIMEOUT and not self._halted(cancel):
            data, _overflowed = stream.read(chunk)
            waited += CHUNK_SECONDS
            if self._compute_rms(data) > STT_SILENCE_THRESHOLD:
                frames.append(data.copy())
                return True
        return False

    def _record(self, stream, chunk: int, cancel, frames) -> None:
        """Append chunks until enough trailing silence, the length cap or cancel."""
        recorded = CHUNK_SECONDS
        quiet = 0.0
        while recorded < STT_MAX_RECORD_DURATION and not self._halted(cancel):
            data, _overflowed = stream.read(chunk)
            frames.append(data.copy())
            recorded += CHUNK_SECONDS

            if self._compute_rms(data) >= STT_SILENCE_THRESHOLD:
                quiet = 0.0
                continue
            quiet += CHUNK_SECONDS
            if quiet >= STT_SILENCE_DURATION:
                return

    @staticmethod
    def _compute_rms(data: np.ndarray) -> float:
        """RMS of int16 samples on a 0.0-1.0 scale."""
        samples = data.astype(np.float32) / 32768.0
        return float(np.sqrt(np.mean(samples**2)))
