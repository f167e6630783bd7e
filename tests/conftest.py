"""Test fixtures and configuration."""

import os
from pathlib import Path
from typing import Callable

import httpx
import pytest

from make_mcp_server.config import Config


@pytest.fixture(scope="session", autouse=True)
def test_environment():
    """Run tests from the repo root so config/ paths resolve."""
    original_cwd = os.getcwd()
    repo_root = Path(__file__).parent.parent
    os.chdir(repo_root)

    yield

    os.chdir(original_cwd)


@pytest.fixture
def mock_env_vars():
    """Environment variables for a complete configuration."""
    return {
        "MAKE_API_KEY": "test_api_key",
        "MAKE_ZONE": "eu2.make.com",
        "MAKE_TEAM": "42",
        "RESULTS_API_URL": "https://results.example.com/",
        "RESULTS_API_SECRET_KEY": "test_secret",
    }


@pytest.fixture
def config(mock_env_vars):
    return Config.load(environ=mock_env_vars)


@pytest.fixture
def mock_client() -> Callable[..., httpx.AsyncClient]:
    """Factory for an AsyncClient whose requests are answered by ``handler``."""

    def factory(handler, base_url: str = "") -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=base_url, transport=httpx.MockTransport(handler))

    return factory
