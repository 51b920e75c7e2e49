import sys
from pathlib import Path

import pytest
from pydantic import SecretStr

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from Vibe_Builder.models import GenerationRequest, Settings, token_manager  # noqa: E402


@pytest.fixture(autouse=True)
def offline_token_counter():
    """Keep tiktoken from downloading encodings during tests"""
    loaded, tokenizer = token_manager._loaded, token_manager.tokenizer
    token_manager._loaded, token_manager.tokenizer = True, None
    yield
    token_manager._loaded, token_manager.tokenizer = loaded, tokenizer


@pytest.fixture
def settings():
    return Settings(api_key=SecretStr("sk-test-key"), generation_timeout=0.5)


@pytest.fixture
def todo_request():
    return GenerationRequest(idea="A todo app for groceries", theme="minimal", layout="dual")


@pytest.fixture
def weather_request():
    return GenerationRequest(idea="Weather for my city", theme="techy", layout="quad")
