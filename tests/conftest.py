#!/usr/bin/env python3

"""
Test Configuration and Fixtures

Shared fixtures for unit, integration and end-to-end tests.
"""

import shutil
import tempfile
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from shrinkray.app import create_app
from shrinkray.audio_processor import AudioDecoder
from shrinkray.config import ServerConfig
from shrinkray.providers import LocalMediaProvider

from tests.test_utils import MockMediaProvider, float32le, write_fake_decoder

@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    temp_path = tempfile.mkdtemp(prefix="shrinkray_test_")
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)

@pytest.fixture
def decoder_temp_dir(temp_dir):
    """Directory the decoder writes its temporary files into"""
    path = temp_dir / "decoder"
    path.mkdir()
    return path

@pytest.fixture
def canonical_samples():
    """A short ramp of canonical samples as the fake decoder emits them"""
    return [0.0, 0.25, -0.25, 0.5, -0.5, 1.0, -1.0, 0.125]

@pytest.fixture
def fake_decoder(temp_dir, decoder_temp_dir, canonical_samples):
    """AudioDecoder wired to a fake ffmpeg emitting canonical_samples"""
    script, _ = write_fake_decoder(temp_dir / "bin", output=float32le(canonical_samples))
    return AudioDecoder(ffmpeg_binary=str(script), temp_dir=str(decoder_temp_dir))

@pytest.fixture
def mock_provider():
    return MockMediaProvider()

@pytest.fixture
def test_config(temp_dir):
    return ServerConfig(temp_dir=str(temp_dir), max_upload_mb=1.0, log_level="DEBUG")

@pytest.fixture
def client(test_config, mock_provider, fake_decoder):
    """TestClient over an app using the mock provider and fake decoder"""
    app = create_app(test_config, provider=mock_provider, decoder=fake_decoder)
    with TestClient(app) as test_client:
        yield test_client

@pytest_asyncio.fixture
async def local_provider():
    provider = LocalMediaProvider(max_workers=1)
    await provider.initialize()
    yield provider
    await provider.shutdown()

def pytest_configure(config):
    """Configure pytest markers"""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "e2e: End-to-end tests")
    config.addinivalue_line("markers", "property: Property-based tests")
    config.addinivalue_line("markers", "pipeline: Pipeline builder tests")
    config.addinivalue_line("markers", "codec: Sample codec tests")
    config.addinivalue_line("markers", "validation: Upload and option validation tests")

def pytest_collection_modifyitems(config, items):
    """Add markers based on test file location"""
    for item in items:
        path = str(item.path)
        if "unit" in path:
            item.add_marker(pytest.mark.unit)
        elif "integration" in path:
            item.add_marker(pytest.mark.integration)
        elif "e2e" in path:
            item.add_marker(pytest.mark.e2e)
        elif "property_based" in path:
            item.add_marker(pytest.mark.property)
