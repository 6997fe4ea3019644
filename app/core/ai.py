import asyncio
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Protocol

from google import genai
from google.genai import errors, types
from pydub import AudioSegment
from pydub.exceptions import CouldntEncodeError

from app.core.errors import GenerationFailed
from app.models import Voice

from .config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpeechResult:
    data: bytes
    duration: float


class MediaGenerator(Protocol):
    async def text_to_speech(self, text: str, voice: Voice) -> SpeechResult: ...

    async def text_to_image(self, prompt: str) -> bytes | None: ...


def get_voice(voice: str) -> str:
    """
    Returns the Gemini prebuilt voice used for each selectable voice type.
    """
    voice_profiles: dict[str, str] = {
        "alloy": "Zephyr",  # Bright
        "echo": "Charon",  # Informative
        "fable": "Fenrir",  # Excitable
        "onyx": "Orus",  # Firm
        "nova": "Leda",  # Youthful
        "shimmer": "Aoede",  # Breezy
    }
    return voice_profiles[voice] if voice in voice_profiles else "Zephyr"


def process_audio(data: bytes) -> tuple[bytes, float]:
    """Encode raw 24kHz 16-bit mono PCM to MP3 and return it with its duration."""
    audio = AudioSegment(
        data=data,
        sample_width=2,
        frame_rate=24000,
        channels=1,
    )
    duration = audio.duration_seconds

    buffer = BytesIO()
    try:
        audio.export(buffer, format="mp3", bitrate="128k")
        encoded = buffer.getvalue()
    finally:
        buffer.close()

    if not encoded:
        raise ValueError("Empty audio buffer")

    return encoded, duration


class GeminiGenerator:
    def __init__(self, client: genai.Client, tts_model: str, image_model: str):
        self.client = client
        self.tts_model = tts_model
        self.image_model = image_model

    async def text_to_speech(self, text: str, voice: Voice) -> SpeechResult:
        try:
            response = await self.client.aio.models.generate_content(
                model=self.tts_model,
                contents=text,
                config=types.GenerateContentConfig(
                    response_modalities=["audio"],
                    speech_config=types.SpeechConfig(
                        voice_config=types.VoiceConfig(
                            prebuilt_voice_config=types.PrebuiltVoiceConfig(
                                voice_name=get_voice(voice)
                            )
                        ),
                    ),
                ),
            )
        except errors.APIError as e:
            raise GenerationFailed(f"Speech generation failed: {e.message}") from e

        content = response.candidates[0].content if response.candidates else None
        part = content.parts[0] if content and content.parts else None
        data = part.inline_data.data if part and part.inline_data else None
        if not data:
            return SpeechResult(data=b"", duration=0.0)

        try:
            encoded, duration = await asyncio.to_thread(process_audio, data)
        except (ValueError, CouldntEncodeError) as e:
            raise GenerationFailed("Speech could not be encoded") from e

        logger.info("Generated %.1fs of speech with voice %s", duration, voice)
        return SpeechResult(data=encoded, duration=duration)

    async def text_to_image(self, prompt: str) -> bytes | None:
        try:
            response = await self.client.aio.models.generate_images(
                model=self.image_model,
                prompt=prompt,
                config=types.GenerateImagesConfig(
                    number_of_images=1,
                    aspect_ratio="1:1",
                ),
            )
        except errors.APIError as e:
            raise GenerationFailed(f"Image generation failed: {e.message}") from e

        if not response.generated_images:
            return None

        image = response.generated_images[0].image
        return image.image_bytes if image else None


gemini_client = genai.Client(
    api_key=settings.gemini_api_key,
    http_options=types.HttpOptions(timeout=settings.gemini_timeout_ms),
)

generator = GeminiGenerator(
    gemini_client,
    tts_model=settings.gemini_tts_model,
    image_model=settings.gemini_image_model,
)
