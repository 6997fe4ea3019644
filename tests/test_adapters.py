from types import SimpleNamespace

import pytest
from urllib3.exceptions import HTTPError

from app.core.ai import GeminiGenerator, get_voice
from app.core.errors import StorageFailed
from app.core.security import create_access_token, verify_admin_key, verify_token
from app.core.storage import MinioStore
from app.models import VOICES


class StubModels:
    def __init__(self, content=None, images=None):
        self.content = content
        self.images = images
        self.calls = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        return self.content

    async def generate_images(self, **kwargs):
        self.calls.append(kwargs)
        return self.images


def stub_generator(models: StubModels) -> GeminiGenerator:
    client = SimpleNamespace(aio=SimpleNamespace(models=models))
    return GeminiGenerator(client, tts_model="tts", image_model="imagen")


def test_every_voice_maps_to_a_distinct_prebuilt_voice():
    names = [get_voice(voice) for voice in VOICES]

    assert len(set(names)) == len(VOICES)
    assert get_voice("unknown") == "Zephyr"


async def test_text_to_image_requests_one_square_image():
    image = SimpleNamespace(image_bytes=b"png")
    models = StubModels(images=SimpleNamespace(generated_images=[SimpleNamespace(image=image)]))

    assert await stub_generator(models).text_to_image("A lighthouse") == b"png"

    config = models.calls[0]["config"]
    assert config.number_of_images == 1
    assert config.aspect_ratio == "1:1"


async def test_text_to_image_without_candidates():
    models = StubModels(images=SimpleNamespace(generated_images=[]))

    assert await stub_generator(models).text_to_image("Nothing") is None


async def test_text_to_speech_without_audio_returns_empty():
    models = StubModels(content=SimpleNamespace(candidates=[]))

    speech = await stub_generator(models).text_to_speech("Hello", "alloy")

    assert speech.data == b""
    voice = models.calls[0]["config"].speech_config.voice_config.prebuilt_voice_config
    assert voice.voice_name == "Zephyr"


class StubMinio:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.put_calls = []

    def put_object(self, **kwargs):
        if self.fail:
            raise HTTPError("connection refused")
        self.put_calls.append(kwargs)

    def remove_object(self, bucket_name, object_name):
        if self.fail:
            raise HTTPError("connection refused")


async def test_minio_store_put_returns_reference_and_url():
    client = StubMinio()
    store = MinioStore(client, "podcasts")

    asset = await store.put(b"abc", "podcast-1.mp3", "audio/mpeg")

    assert asset.reference == "podcast-1.mp3"
    assert asset.url.endswith("/podcast-1.mp3")
    assert client.put_calls[0]["length"] == 3
    assert client.put_calls[0]["content_type"] == "audio/mpeg"


async def test_minio_store_put_failure():
    store = MinioStore(StubMinio(fail=True), "podcasts")

    with pytest.raises(StorageFailed):
        await store.put(b"abc", "podcast-1.mp3", "audio/mpeg")


async def test_minio_store_delete_failure():
    store = MinioStore(StubMinio(fail=True), "podcasts")

    with pytest.raises(StorageFailed):
        await store.delete("podcast-1.mp3")


def test_token_round_trip_and_rejection():
    token = create_access_token({"sub": "user_alice", "email": "alice@example.com"})

    auth = verify_token(token)
    assert auth.subject == "user_alice"
    assert auth.email == "alice@example.com"

    assert verify_token("garbage") is None
    assert verify_token(create_access_token({"email": "no-subject@example.com"})) is None


def test_verify_admin_key():
    assert verify_admin_key("test-admin-key")
    assert not verify_admin_key("nope")
