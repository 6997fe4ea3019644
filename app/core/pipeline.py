"""Prompt to stored asset: the generation half of podcast creation.

Each function propagates the first failure. Nothing here retries, and nothing
is stored unless generation produced usable bytes.
"""

import logging
from dataclasses import dataclass
from uuid import uuid4

from app.core.ai import MediaGenerator
from app.core.errors import GenerationFailed
from app.core.storage import ObjectStore, StoredAsset
from app.models import Voice

logger = logging.getLogger(__name__)

AUDIO_MIME_TYPE = "audio/mpeg"
IMAGE_MIME_TYPE = "image/png"


@dataclass(frozen=True)
class GeneratedAudio:
    data: bytes
    duration: float


@dataclass(frozen=True)
class StoredAudio:
    asset: StoredAsset
    duration: float


async def generate_audio(generator: MediaGenerator, prompt: str, voice: Voice) -> GeneratedAudio:
    try:
        speech = await generator.text_to_speech(prompt, voice)
    except GenerationFailed:
        raise
    except Exception as e:
        raise GenerationFailed("Speech generation failed") from e

    if not speech.data:
        raise GenerationFailed("Speech generation returned no audio")

    return GeneratedAudio(data=speech.data, duration=max(speech.duration, 0.0))


async def generate_image(generator: MediaGenerator, prompt: str) -> bytes:
    try:
        data = await generator.text_to_image(prompt)
    except GenerationFailed:
        raise
    except Exception as e:
        raise GenerationFailed("Image generation failed") from e

    if not data:
        raise GenerationFailed("No image generated")

    return data


async def store_asset(
    store: ObjectStore, data: bytes, suggested_name: str, mime_type: str
) -> StoredAsset:
    asset = await store.put(data, suggested_name, mime_type)
    logger.info("Stored %s (%d bytes) as %s", mime_type, len(data), asset.reference)
    return asset


async def generate_podcast_audio(
    generator: MediaGenerator, store: ObjectStore, prompt: str, voice: Voice
) -> StoredAudio:
    audio = await generate_audio(generator, prompt, voice)
    asset = await store_asset(store, audio.data, f"podcast-{uuid4()}.mp3", AUDIO_MIME_TYPE)
    return StoredAudio(asset=asset, duration=audio.duration)


async def generate_thumbnail(
    generator: MediaGenerator, store: ObjectStore, prompt: str
) -> StoredAsset:
    data = await generate_image(generator, prompt)
    return await store_asset(store, data, f"thumbnail-{uuid4()}.png", IMAGE_MIME_TYPE)


async def upload_thumbnail(store: ObjectStore, data: bytes, content_type: str) -> StoredAsset:
    """Store a user-supplied image in place of a generated thumbnail."""
    extension = content_type.rsplit("/", 1)[-1] if "/" in content_type else "png"
    return await store_asset(store, data, f"thumbnail-{uuid4()}.{extension}", content_type)


async def get_asset_url(store: ObjectStore, reference: str) -> str:
    return await store.get_url(reference)
