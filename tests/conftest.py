"""Pytest configuration and fixtures."""
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from voice_relay.app import create_app
from voice_relay.core import IntentClassifier, MockDispatcher, SpeechSynthesizer, VoiceRelay, WhisperTranscriber
from voice_relay.settings import Settings
from tests.mocks.fake_openai import FakeOpenAI
from tests.mocks.llm import create_mock_llm_with_responses


@pytest.fixture
def upload_dir(tmp_path) -> Path:
    d = tmp_path / "uploads"
    d.mkdir()
    return d


@pytest.fixture
def make_settings(upload_dir):
    """Build an isolated Settings value; never reads .env."""
    def _make(**overrides) -> Settings:
        values = {
            "OPENAI_API_KEY": "",
            "N8N_WEBHOOK_URL": None,
            "UPLOAD_DIR": str(upload_dir),
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def fake_openai():
    """Create a fake OpenAI audio client."""
    return FakeOpenAI()


@pytest.fixture
def mock_llm():
    """Create a mock LLM with predefined responses."""
    return create_mock_llm_with_responses()


@pytest.fixture
def relay(fake_openai, mock_llm):
    return VoiceRelay(
        transcriber=WhisperTranscriber(client=fake_openai),
        classifier=IntentClassifier(llm=mock_llm),
        dispatcher=MockDispatcher(),
        synthesizer=SpeechSynthesizer(client=fake_openai),
        openai_client=fake_openai,
    )


@pytest.fixture
def app(make_settings, relay):
    """Create FastAPI app for testing with fake upstream services."""
    app = create_app(make_settings())
    # lifespan isn't triggered under ASGITransport, swap the relay directly
    app.state.relay = relay
    return app


@pytest.fixture
async def client(app):
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def audio_file_bytes():
    """Create mock audio file bytes for testing."""
    return b"mock-audio-data-m4a-format" * 100
