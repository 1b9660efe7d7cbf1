"""Vendor client tests with stubbed SDKs and httpx mock transports."""

import json
from types import SimpleNamespace

import httpx
import pytest

from clipforge.config import EdenAIConfig, GoogleConfig, HostingConfig, OpenAIConfig, RenderConfig
from clipforge.errors import CapabilityNotConfigured, HostingUnavailable, UpstreamUnavailable
from clipforge.schemas.pipeline import RenderRequest
from clipforge.services.base import MediaAsset
from clipforge.services.file_manager import FileManager
from clipforge.services.image_generator import EdenAIImageGenerator
from clipforge.services.media_host import S3MediaHost
from clipforge.services.prompt_validator import GeminiPromptValidator
from clipforge.services.script_generator import OpenAIScriptGenerator
from clipforge.services.speech_synthesizer import OpenAISpeechSynthesizer
from clipforge.services.video_assembler import CreatomateVideoAssembler


@pytest.fixture
def file_manager(tmp_path):
    return FileManager(tmp_path / "media", "http://127.0.0.1:5000")


# ---------------------------------------------------------------------------
# Prompt validator
# ---------------------------------------------------------------------------

class StubGenai:
    """Mimics genai.Client().aio.models.generate_content."""

    def __init__(self, text=None, error=None):
        self.requests = []
        self._text = text
        self._error = error
        self.aio = SimpleNamespace(models=SimpleNamespace(generate_content=self._generate))

    async def _generate(self, model, contents, config):
        self.requests.append((model, contents, config))
        if self._error:
            raise self._error
        return SimpleNamespace(text=self._text)


@pytest.mark.asyncio
async def test_validator_parses_verdict():
    stub = StubGenai(text=json.dumps({"approved": False, "reason": "violence"}))
    validator = GeminiPromptValidator(GoogleConfig(api_key="k"), client=stub)

    verdict = await validator.validate("p", "tiktok")

    assert verdict.approved is False
    assert verdict.reason == "violence"
    assert stub.requests[0][2].temperature == 0.0


@pytest.mark.asyncio
async def test_validator_is_repeatable():
    stub = StubGenai(text=json.dumps({"approved": True, "analysis": "Young audience"}))
    validator = GeminiPromptValidator(GoogleConfig(api_key="k"), client=stub)

    first = await validator.validate("receitas saudáveis", "tiktok")
    second = await validator.validate("receitas saudáveis", "tiktok")

    assert first == second
    assert stub.requests[0][1] == stub.requests[1][1]


@pytest.mark.asyncio
async def test_validator_fills_empty_analysis():
    validator = GeminiPromptValidator(GoogleConfig(api_key="k"), client=StubGenai(text='{"approved": true}'))

    verdict = await validator.validate("p", "vsl")

    assert verdict.analysis == "vsl content approved for production."


@pytest.mark.asyncio
@pytest.mark.parametrize("stub", [
    StubGenai(text="not json"),
    StubGenai(error=RuntimeError("quota")),
])
async def test_validator_errors_are_upstream_unavailable(stub):
    validator = GeminiPromptValidator(GoogleConfig(api_key="k"), client=stub)

    with pytest.raises(UpstreamUnavailable):
        await validator.validate("p", "tiktok")


@pytest.mark.asyncio
async def test_validator_without_credentials():
    validator = GeminiPromptValidator(GoogleConfig())

    with pytest.raises(CapabilityNotConfigured):
        await validator.validate("p", "tiktok")


# ---------------------------------------------------------------------------
# Script generator and speech synthesizer
# ---------------------------------------------------------------------------

def _chat_stub(content):
    async def create(**kwargs):
        create.kwargs = kwargs
        message = SimpleNamespace(content=content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create))), create


@pytest.mark.asyncio
async def test_script_generator_returns_stripped_text():
    client, create = _chat_stub("  Roteiro final \n")
    generator = OpenAIScriptGenerator(OpenAIConfig(api_key="k", max_tokens=1500), timeout=5, client=client)

    assert await generator.generate("receitas", "tiktok") == "Roteiro final"
    assert create.kwargs["max_tokens"] == 1500
    assert "receitas" in create.kwargs["messages"][1]["content"]


@pytest.mark.asyncio
async def test_script_generator_empty_completion():
    client, _ = _chat_stub("")
    generator = OpenAIScriptGenerator(OpenAIConfig(api_key="k"), timeout=5, client=client)

    with pytest.raises(UpstreamUnavailable):
        await generator.generate("p", "tiktok")


@pytest.mark.asyncio
async def test_script_generator_without_credentials():
    with pytest.raises(CapabilityNotConfigured):
        await OpenAIScriptGenerator(OpenAIConfig(), timeout=5).generate("p", "tiktok")


@pytest.mark.asyncio
async def test_speech_synthesizer_saves_audio(file_manager):
    async def create(**kwargs):
        create.kwargs = kwargs
        return SimpleNamespace(content=b"ID3-audio")

    client = SimpleNamespace(audio=SimpleNamespace(speech=SimpleNamespace(create=create)))
    synthesizer = OpenAISpeechSynthesizer(OpenAIConfig(api_key="k"), file_manager, timeout=5, client=client)

    url = await synthesizer.synthesize("olá mundo" * 10, max_length=5)

    assert create.kwargs["input"] == "olá m"
    assert url.startswith("http://127.0.0.1:5000/media/")
    path = file_manager.resolve_public_url(url)
    assert path is not None and path.read_bytes() == b"ID3-audio"


# ---------------------------------------------------------------------------
# Image generator and video assembler (httpx)
# ---------------------------------------------------------------------------

def _mock_client(handler, **kwargs):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), **kwargs)


@pytest.mark.asyncio
async def test_image_generator_parses_provider_items():
    seen = {}

    def handler(request):
        seen.update(json.loads(request.content))
        return httpx.Response(200, json={"openai": {"items": [{"image_resource_url": "https://img/1.png"}]}})

    generator = EdenAIImageGenerator(EdenAIConfig(api_key="k"), timeout=5)
    generator._client = _mock_client(handler)

    assert await generator.generate("p", "tiktok") == "https://img/1.png"
    assert seen["resolution"] == "512x768"
    await generator.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    httpx.Response(500, json={}),
    httpx.Response(200, json={"openai": {"items": []}}),
])
async def test_image_generator_failures(response):
    generator = EdenAIImageGenerator(EdenAIConfig(api_key="k"), timeout=5)
    generator._client = _mock_client(lambda request: response)

    with pytest.raises(UpstreamUnavailable):
        await generator.generate("p", "vsl")


@pytest.mark.asyncio
async def test_video_assembler_submit_and_status():
    def handler(request):
        if request.method == "POST":
            payload = json.loads(request.content)
            assert payload["template_id"] == "tpl-vsl"
            assert payload["modifications"]["audio-track"] == "https://a.mp3"
            return httpx.Response(202, json=[{"id": "render-9", "status": "planned"}])
        assert request.url.path.endswith("/renders/render-9")
        return httpx.Response(200, json={"id": "render-9", "status": "succeeded", "url": "https://v.mp4"})

    assembler = CreatomateVideoAssembler(RenderConfig(api_key="k", templates={"vsl": "tpl-vsl"}), timeout=5)
    assembler._client = _mock_client(handler, base_url="https://api.test/v1")

    job_id = await assembler.submit(
        RenderRequest(script="s", image_url="https://i.png", audio_url="https://a.mp3", content_type="vsl")
    )
    status = await assembler.status(job_id)

    assert job_id == "render-9"
    assert status.status == "succeeded"
    assert status.url == "https://v.mp4"
    await assembler.close()


@pytest.mark.asyncio
async def test_video_assembler_client_error_is_not_retried():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(400, json={"error": "bad template"})

    assembler = CreatomateVideoAssembler(RenderConfig(api_key="k"), timeout=5)
    assembler._client = _mock_client(handler, base_url="https://api.test/v1")

    with pytest.raises(UpstreamUnavailable):
        await assembler.submit(RenderRequest(script="s", content_type="tiktok"))
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_video_assembler_without_credentials():
    assembler = CreatomateVideoAssembler(RenderConfig(), timeout=5)

    with pytest.raises(CapabilityNotConfigured):
        await assembler.status("job")


# ---------------------------------------------------------------------------
# Media host
# ---------------------------------------------------------------------------

class StubS3:
    def __init__(self, error=None):
        self.objects = {}
        self._error = error

    def put_object(self, Bucket, Key, Body, ContentType):
        if self._error:
            raise self._error
        self.objects[Key] = (Bucket, Body, ContentType)


def test_media_asset_requires_exactly_one_source():
    with pytest.raises(ValueError):
        MediaAsset()
    with pytest.raises(ValueError):
        MediaAsset(url="https://x", text="y")


@pytest.mark.asyncio
async def test_media_host_uploads_text(file_manager):
    host = S3MediaHost(HostingConfig(bucket="media", public_base_url="https://cdn.test"), file_manager, timeout=5)
    host._s3 = StubS3()

    url = await host.upload(MediaAsset(text="Roteiro"), "script")

    assert url.startswith("https://cdn.test/clipforge/scripts/")
    assert url.endswith(".txt")
    (bucket, body, content_type), = host._s3.objects.values()
    assert bucket == "media"
    assert body == "Roteiro".encode("utf-8")
    assert content_type.startswith("text/plain")


@pytest.mark.asyncio
async def test_media_host_reads_local_narration_from_disk(file_manager):
    path = file_manager.save_audio(b"mp3-bytes")
    host = S3MediaHost(HostingConfig(bucket="media", region="us-east-1"), file_manager, timeout=5)
    host._s3 = StubS3()

    url = await host.upload(MediaAsset(url=file_manager.public_url(path)), "audio")

    assert url.startswith("https://media.s3.us-east-1.amazonaws.com/clipforge/audios/")
    (_, body, content_type), = host._s3.objects.values()
    assert body == b"mp3-bytes"
    assert content_type == "audio/mpeg"


@pytest.mark.asyncio
async def test_media_host_unreadable_asset(file_manager, tmp_path):
    host = S3MediaHost(HostingConfig(bucket="media"), file_manager, timeout=5)
    host._s3 = StubS3()

    with pytest.raises(HostingUnavailable):
        await host.upload(MediaAsset(path=tmp_path / "missing.mp4"), "video")


@pytest.mark.asyncio
async def test_media_host_without_bucket(file_manager):
    host = S3MediaHost(HostingConfig(), file_manager, timeout=5)

    with pytest.raises(CapabilityNotConfigured):
        await host.upload(MediaAsset(text="x"), "script")


# ---------------------------------------------------------------------------
# File manager
# ---------------------------------------------------------------------------

def test_file_manager_public_url_roundtrip(file_manager):
    path = file_manager.save_audio(b"abc", batch_id="batch1")

    url = file_manager.public_url(path)

    assert url.startswith("http://127.0.0.1:5000/media/batch1/audio/narration_")
    assert file_manager.resolve_public_url(url) == path


@pytest.mark.parametrize("url", [
    "https://elsewhere.test/media/x.mp3",
    "http://127.0.0.1:5000/media/../../etc/passwd",
    "http://127.0.0.1:5000/media/missing.mp3",
])
def test_file_manager_ignores_foreign_urls(file_manager, url):
    assert file_manager.resolve_public_url(url) is None


def test_file_manager_rejects_traversal(file_manager):
    with pytest.raises(ValueError):
        file_manager.save_audio(b"abc", batch_id="../../escape")
