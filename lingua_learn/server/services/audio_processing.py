"""
Audio Processing Service.

Measures and stores pronunciation recordings for words and sentences,
applies word timings to a sentence and renders waveform data.

Durations and metadata come from :mod:`wave` for WAV files and from
``mutagen`` for everything else. Waveforms are decoded by ``ffmpeg`` into
8 kHz mono 16-bit PCM.
"""

from __future__ import annotations

import math
import os
import subprocess
import tempfile
import wave
from array import array
from collections import deque
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Deque, Dict, Iterator, List, Optional, Sequence, Tuple

import mutagen
from sqlalchemy import func, select
from starlette.concurrency import run_in_threadpool

from lingua_learn.core.database.entities import Sentence, SentenceWord, Word
from lingua_learn.core.errors import AudioProcessingError, ValidationFailedError
from lingua_learn.core.logging_config import get_logger
from lingua_learn.server.core.config import settings

from .media import MediaService

logger = get_logger(__name__)

SIGNIFICANT_GAP_SECONDS = 0.1
PCM_FULL_SCALE = 32768
LOSSLESS_FORMATS = ("wav", "flac", "alac", "aiff")


@contextmanager
def temporary_audio_file(data: bytes, file_name: Optional[str]) -> Iterator[str]:
    """Write ``data`` to a temp file keeping the upload's extension."""
    suffix = Path(file_name or "").suffix or ".mp3"
    handle, path = tempfile.mkstemp(suffix=suffix)
    try:
        with os.fdopen(handle, "wb") as stream:
            stream.write(data)
        yield path
    finally:
        if os.path.exists(path):
            os.unlink(path)


def _is_wav(path: str) -> bool:
    return Path(path).suffix.lower() == ".wav"


def get_audio_duration(path: str) -> float:
    """Length of the recording at ``path`` in seconds.

    Raises:
        AudioProcessingError: The file could not be analysed.
    """
    try:
        if _is_wav(path):
            with wave.open(path, "rb") as wav:
                rate = wav.getframerate()
                if not rate:
                    raise AudioProcessingError("Could not determine audio file duration")
                return wav.getnframes() / float(rate)
        audio = mutagen.File(path)
        if audio is None or getattr(audio.info, "length", None) is None:
            raise AudioProcessingError("Could not determine audio file duration")
        return float(audio.info.length)
    except AudioProcessingError:
        raise
    except (OSError, EOFError, wave.Error, mutagen.MutagenError) as exc:
        raise AudioProcessingError(f"Failed to analyze audio file: {exc}") from exc


def extract_metadata(path: str) -> Dict[str, Any]:
    """Technical details of the recording at ``path``."""
    try:
        if _is_wav(path):
            with wave.open(path, "rb") as wav:
                rate = wav.getframerate()
                channels = wav.getnchannels()
                width = wav.getsampwidth()
                return {
                    "duration": wav.getnframes() / float(rate) if rate else None,
                    "format": "wav",
                    "sample_rate": rate,
                    "channels": channels,
                    "bitrate": rate * channels * width * 8,
                    "encoder": None,
                    "lossless": True,
                }
        audio = mutagen.File(path)
    except (OSError, EOFError, wave.Error, mutagen.MutagenError) as exc:
        raise AudioProcessingError(f"Failed to extract audio metadata: {exc}") from exc
    if audio is None:
        raise AudioProcessingError("Invalid audio file format")
    info = audio.info
    file_format = (audio.mime[0].split("/")[-1] if getattr(audio, "mime", None) else type(audio).__name__).lower()
    return {
        "duration": getattr(info, "length", None),
        "format": file_format,
        "sample_rate": getattr(info, "sample_rate", None),
        "channels": getattr(info, "channels", None),
        "bitrate": getattr(info, "bitrate", None),
        "encoder": getattr(info, "encoder_info", None) or None,
        "lossless": any(name in file_format for name in LOSSLESS_FORMATS),
    }


def generate_waveform_data(path: str, samples: int = 100, ffmpeg_binary: Optional[str] = None) -> List[float]:
    """Mean absolute amplitude of ``samples`` equal chunks, normalised to 0..1.

    Raises:
        AudioProcessingError: ffmpeg failed or produced no audio.
    """
    command = [
        ffmpeg_binary or settings.media.ffmpeg_binary,
        "-i",
        path,
        "-f",
        "s16le",
        "-acodec",
        "pcm_s16le",
        "-ac",
        "1",
        "-ar",
        "8000",
        "-",
    ]
    try:
        process = subprocess.run(command, capture_output=True, check=False)
    except OSError as exc:
        raise AudioProcessingError(f"Failed to start ffmpeg: {exc}") from exc
    raw = process.stdout or b""
    if process.returncode != 0 or not raw:
        logger.warning(f"ffmpeg exited with {process.returncode}: {(process.stderr or b'')[-200:]!r}")
        raise AudioProcessingError("Failed to process audio file for waveform")

    pcm = array("h")
    pcm.frombytes(raw[: len(raw) - len(raw) % 2])
    if not pcm:
        raise AudioProcessingError("Failed to process audio file for waveform")
    chunk_size = math.ceil(len(pcm) / max(1, samples))
    waveform = []
    for start in range(0, len(pcm), chunk_size):
        chunk = pcm[start : start + chunk_size]
        waveform.append(sum(abs(value) for value in chunk) / len(chunk) / PCM_FULL_SCALE)
    return waveform


def validate_timings(timings: Sequence[Dict[str, Any]], audio_duration: float) -> bool:
    """Whether ``timings`` fit inside the recording without overlapping.

    False when the latest ``end_time`` lies past ``audio_duration`` or when a
    timing starts before the previous one (in start order) has ended.
    """
    if not timings:
        return True
    if max(timing["end_time"] for timing in timings) > audio_duration:
        return False
    previous_end = 0.0
    for timing in sorted(timings, key=lambda item: item["start_time"]):
        if timing["start_time"] < previous_end:
            return False
        previous_end = timing["end_time"]
    return True


def analyse_upload(data: bytes, file_name: Optional[str], with_metadata: bool = False) -> Dict[str, Any]:
    """Duration (and optionally metadata) of an uploaded recording.

    Blocking: reads a temp file and parses it, so async callers run it in a
    thread.
    """
    with temporary_audio_file(data, file_name) as path:
        analysis: Dict[str, Any] = {"duration": get_audio_duration(path)}
        if with_metadata:
            analysis["metadata"] = extract_metadata(path)
    return analysis


class AudioProcessingService:
    """Pronunciation uploads and word timing updates."""

    def __init__(self, session, media: Optional[MediaService] = None) -> None:
        self.session = session
        self.media = media or MediaService(session)

    async def process_sentence_audio(
        self, sentence: Sentence, data: bytes, original_name: str, mime_type: Optional[str], is_slow: bool = False
    ) -> Dict[str, Any]:
        analysis = await run_in_threadpool(analyse_upload, data, original_name, True)
        duration, metadata = analysis["duration"], analysis["metadata"]
        collection = "slow_pronunciation" if is_slow else "pronunciation"
        count = await self.session.execute(
            select(func.count()).select_from(SentenceWord).where(SentenceWord.sentence_id == sentence.id)
        )
        media = await self.media.add_media_bytes(
            "sentence",
            sentence.id,
            data,
            collection,
            mime_type=mime_type,
            original_name=original_name,
            custom_properties={
                "duration": duration,
                "is_slow": is_slow,
                "word_count": count.scalar_one(),
                "format": metadata["format"],
                "sample_rate": metadata["sample_rate"],
            },
            file_name=f"{sentence.id}_{'slow' if is_slow else 'normal'}.mp3",
        )
        await self.media.commit()
        logger.info(f"Stored {collection} audio for sentence {sentence.id} ({duration:.2f}s)")
        return {"url": media.url, "duration": duration, "collection": collection, "media_id": media.id}

    async def process_word_audio(
        self, word: Word, data: bytes, original_name: str, mime_type: Optional[str], language: Optional[str] = None
    ) -> Dict[str, Any]:
        duration = (await run_in_threadpool(analyse_upload, data, original_name))["duration"]
        collection = f"pronunciation_{language}" if language else "pronunciation"
        media = await self.media.add_media_bytes(
            "word",
            word.id,
            data,
            collection,
            mime_type=mime_type,
            original_name=original_name,
            custom_properties={"duration": duration, "language": language, "word_text": word.text},
            file_name=f"{word.id}{'_' + language if language else ''}.mp3",
        )
        await self.media.commit()
        return {"url": media.url, "duration": duration, "collection": collection, "media_id": media.id}

    async def update_word_timings(
        self, sentence: Sentence, timings: List[Dict[str, Any]], audio_duration: float
    ) -> Dict[str, Any]:
        """Write validated ``timings`` onto the sentence's words and summarise them.

        A word used more than once receives its timings in start order, one
        per occurrence in position order. Each stored timing is then checked
        against its neighbouring words and the per-word duration limit.

        Raises:
            ValidationFailedError: A timing names more occurrences of a word
                than the sentence has, or fails the per-word checks. Nothing
                is stored in that case.
        """
        result = await self.session.execute(
            select(SentenceWord).where(SentenceWord.sentence_id == sentence.id).order_by(SentenceWord.position)
        )
        links = list(result.scalars().all())
        occurrences: Dict[int, Deque[SentenceWord]] = {}
        for link in links:
            occurrences.setdefault(link.word_id, deque()).append(link)

        stats: Dict[str, Any] = {
            "total_words": len(timings),
            "total_duration": audio_duration,
            "timing_gaps": [],
            "emphasis_points": [],
        }
        placed: List[Tuple[int, SentenceWord]] = []
        previous: Optional[Dict[str, Any]] = None
        for index, timing in sorted(enumerate(timings), key=lambda item: item[1]["start_time"]):
            slots = occurrences.get(timing["word_id"])
            if not slots:
                await self.session.rollback()
                raise ValidationFailedError.single(
                    f"timings.{index}.word_id", "The word has more timings than occurrences in the sentence."
                )
            link = slots.popleft()
            metadata = timing.get("metadata")
            link.start_time = timing["start_time"]
            link.end_time = timing["end_time"]
            link.meta_data = metadata
            placed.append((index, link))
            if previous is not None:
                gap = timing["start_time"] - previous["end_time"]
                if gap > SIGNIFICANT_GAP_SECONDS:
                    stats["timing_gaps"].append(
                        {
                            "between_words": {"first": previous["word_id"], "second": timing["word_id"]},
                            "duration": gap,
                        }
                    )
            if isinstance(metadata, dict) and metadata.get("emphasis") is True:
                stats["emphasis_points"].append({"word_id": timing["word_id"], "time": timing["start_time"]})
            previous = timing

        errors = {f"timings.{index}": link.timing_errors(links) for index, link in placed}
        errors = {key: messages for key, messages in errors.items() if messages}
        if errors:
            await self.session.rollback()
            raise ValidationFailedError(errors)

        durations = [timing["end_time"] - timing["start_time"] for timing in timings]
        stats["average_word_duration"] = sum(durations) / len(durations) if durations else None
        await self.session.commit()
        return stats
