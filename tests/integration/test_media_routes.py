#!/usr/bin/env python3

"""
Media Routes Integration Tests

HTTP contract of the audio, image and text endpoints: status codes, error
bodies, metadata headers and payload serialization.
"""

import base64
import gzip
import json
import struct

import pytest
from fastapi.testclient import TestClient

from shrinkray.app import create_app
from shrinkray.audio_processor import AudioDecoder
from shrinkray.codec import read_container_header
from shrinkray.providers import LocalMediaProvider

from tests.test_utils import (
    MockMediaProvider,
    create_test_image_data,
    create_test_wav_data,
    write_fake_decoder
)

def audio_upload(data: bytes = None):
    return {"file": ("clip.mp3", data if data is not None else create_test_wav_data(0.05), "audio/mpeg")}

def image_upload(data: bytes = None):
    return {"file": ("photo.png", data if data is not None else create_test_image_data(8, 8), "image/png")}

@pytest.mark.integration
class TestHealthEndpoint:

    def test_health(self, client, mock_provider):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["ffmpeg"] is True
        assert body["uptime"] >= 0
        assert body["provider"] == {"provider": "mock", "calls": 0}

    def test_provider_health_counts_runs(self, client):
        client.post("/api/text", json={"text": "abc", "trim": True})

        assert client.get("/health").json()["provider"]["calls"] == 1

    def test_unhealthy_provider_is_degraded(self, test_config, fake_decoder):
        provider = MockMediaProvider(healthy=False)
        with TestClient(create_app(test_config, provider=provider, decoder=fake_decoder)) as client:
            body = client.get("/health").json()

        assert body["status"] == "degraded"
        assert body["provider"] == {"error": "mock provider unavailable"}

    def test_local_provider_health(self, test_config, fake_decoder):
        provider = LocalMediaProvider(max_workers=1)
        with TestClient(create_app(test_config, provider=provider, decoder=fake_decoder)) as client:
            body = client.get("/health").json()

        assert body["provider"]["provider"] == "local"
        assert body["provider"]["executor_active"] is True

@pytest.mark.integration
class TestAudioEndpoint:

    def test_defaults_run_no_stages(self, client, mock_provider):
        response = client.post("/api/audio", files=audio_upload())

        assert response.status_code == 200
        assert response.headers["content-type"] == "audio/wav"
        assert 'filename="processed.wav"' in response.headers["content-disposition"]
        assert json.loads(response.headers["X-Operations"]) == []
        assert len(response.content) == 44 + 2 * 8
        assert mock_provider.last_operations == []

    def test_wav_body_matches_decoded_samples(self, client):
        response = client.post("/api/audio", files=audio_upload())

        header = read_container_header(response.content)
        assert header.sample_rate == 44100
        assert header.channels == 1
        values = struct.unpack('<8h', response.content[44:])
        assert values == (0, 8192, -8192, 16384, -16383, 32767, -32767, 4096)

    def test_options_select_stages(self, client, mock_provider):
        response = client.post("/api/audio", files=audio_upload(), data={
            "removeSilence": "true",
            "speedup": "1.5",
            "volume": "1.0",
            "normalize": "true"
        })

        assert response.status_code == 200
        assert json.loads(response.headers["X-Operations"]) == ["removeSilence", "speedup", "normalize"]
        assert mock_provider.last_operations == ["removeSilence", "speedup", "normalize"]

    def test_metadata_headers_are_json(self, client):
        response = client.post("/api/audio", files=audio_upload())

        metrics = json.loads(response.headers["X-Metrics"])
        details = json.loads(response.headers["X-Details"])
        assert set(metrics) == {"originalSize", "finalSize", "savedSize", "ratio", "percentage"}
        assert details["sampleRate"] == 44100

    def test_missing_file(self, client, mock_provider):
        response = client.post("/api/audio", data={"speedup": "1.5"})

        assert response.status_code == 400
        assert response.json() == {"error": "No file uploaded"}
        assert mock_provider.calls == []

    def test_non_numeric_option(self, client, mock_provider):
        response = client.post("/api/audio", files=audio_upload(), data={"speedup": "fast"})

        assert response.status_code == 400
        assert "speedup" in response.json()["error"]
        assert mock_provider.calls == []

    def test_oversized_upload(self, client):
        response = client.post("/api/audio", files=audio_upload(b"\x00" * (1024 * 1024 + 1)))

        assert response.status_code == 413
        assert "File too large" in response.json()["error"]

    def test_provider_failure(self, test_config, fake_decoder):
        provider = MockMediaProvider(failure="Audio processing failed: boom")
        with TestClient(create_app(test_config, provider=provider, decoder=fake_decoder)) as client:
            response = client.post("/api/audio", files=audio_upload())

        assert response.status_code == 500
        assert response.json() == {"error": "Audio processing failed: boom"}
        assert "X-Metrics" not in response.headers

    def test_decoder_failure(self, test_config, temp_dir, decoder_temp_dir):
        script, _ = write_fake_decoder(temp_dir / "bin", exit_code=1)
        decoder = AudioDecoder(ffmpeg_binary=str(script), temp_dir=str(decoder_temp_dir))
        provider = MockMediaProvider()

        with TestClient(create_app(test_config, provider=provider, decoder=decoder)) as client:
            response = client.post("/api/audio", files=audio_upload())

        assert response.status_code == 500
        assert "exited with code 1" in response.json()["error"]
        assert provider.calls == []
        assert list(decoder_temp_dir.iterdir()) == []

@pytest.mark.integration
class TestImageEndpoint:

    def test_default_format_is_jpeg(self, client, mock_provider):
        response = client.post("/api/image", files=image_upload())

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/jpeg"
        assert 'filename="processed.jpg"' in response.headers["content-disposition"]
        assert json.loads(response.headers["X-Operations"]) == ["quality", "format"]

    def test_options_are_forwarded(self, client, mock_provider):
        response = client.post("/api/image", files=image_upload(), data={
            "width": "4", "height": "2", "quality": "100", "format": "webp"
        })

        assert response.headers["content-type"] == "image/webp"
        domain, stages = mock_provider.calls[-1]
        assert [s.name for s in stages] == ["resize", "format"]
        assert stages[0].params_dict() == {"width": 4, "height": 2}

    def test_bad_quality(self, client):
        response = client.post("/api/image", files=image_upload(), data={"quality": "500"})

        assert response.status_code == 400
        assert "quality" in response.json()["error"]

    def test_missing_file(self, client):
        response = client.post("/api/image", data={"width": "10"})
        assert response.status_code == 400
        assert response.json() == {"error": "No file uploaded"}

    def test_local_processing(self, test_config, fake_decoder):
        provider = LocalMediaProvider(max_workers=1)
        with TestClient(create_app(test_config, provider=provider, decoder=fake_decoder)) as client:
            response = client.post("/api/image", files=image_upload(create_test_image_data(40, 20)), data={
                "width": "20", "height": "10", "format": "png"
            })

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        details = json.loads(response.headers["X-Details"])
        assert (details["width"], details["height"]) == (20, 10)
        assert (details["originalWidth"], details["originalHeight"]) == (40, 20)

    def test_undecodable_image(self, test_config, fake_decoder):
        provider = LocalMediaProvider(max_workers=1)
        with TestClient(create_app(test_config, provider=provider, decoder=fake_decoder)) as client:
            response = client.post("/api/image", files=image_upload(b"definitely not pixels"))

        assert response.status_code == 500
        assert response.json()["error"].startswith("Image processing failed")

@pytest.mark.integration
class TestTextEndpoint:

    @pytest.fixture
    def local_client(self, test_config, fake_decoder):
        provider = LocalMediaProvider(max_workers=1)
        with TestClient(create_app(test_config, provider=provider, decoder=fake_decoder)) as client:
            yield client

    def test_trim(self, local_client):
        response = local_client.post("/api/text", json={"text": "  a   b  ", "trim": True})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"] == "a   b"
        assert body["operations"] == ["trim"]
        assert body["metrics"]["finalSize"] < body["metrics"]["originalSize"]
        assert body["details"]["encoding"] == "utf-8"

    def test_compressed_output_is_base64(self, local_client):
        text = "squeeze " * 64
        response = local_client.post("/api/text", json={"text": text, "compression": "gzip"})

        body = response.json()
        assert body["details"]["encoding"] == "base64"
        assert body["details"]["compression"] == "gzip"
        assert gzip.decompress(base64.b64decode(body["data"])).decode("utf-8") == text

    def test_missing_text(self, client, mock_provider):
        response = client.post("/api/text", json={"trim": True})

        assert response.status_code == 400
        assert response.json() == {"error": "Text is required"}
        assert mock_provider.calls == []

    def test_malformed_json(self, client):
        response = client.post(
            "/api/text",
            content=b'{"text": "unterminated',
            headers={"content-type": "application/json"}
        )

        assert response.status_code == 400
        assert "error" in response.json()

    def test_unsupported_compression(self, client, mock_provider):
        response = client.post("/api/text", json={"text": "abc", "compression": "rar"})

        assert response.status_code == 400
        assert "compression" in response.json()["error"]
        assert mock_provider.calls == []

    @pytest.mark.parametrize("value", [False, None])
    def test_falsy_compression_means_none(self, client, mock_provider, value):
        response = client.post("/api/text", json={"text": "abc", "compression": value})

        assert response.status_code == 200
        assert response.json()["operations"] == []
        assert mock_provider.last_operations == []

    def test_non_string_text(self, client, mock_provider):
        response = client.post("/api/text", json={"text": 42})

        assert response.status_code == 400
        assert "text" in response.json()["error"]
        assert mock_provider.calls == []

    def test_non_object_body(self, client):
        response = client.post("/api/text", json=["not", "an", "object"])
        assert response.status_code == 400

    def test_provider_exception_is_500(self, test_config, fake_decoder):
        provider = MockMediaProvider(raises=RuntimeError("worker crashed"))
        with TestClient(create_app(test_config, provider=provider, decoder=fake_decoder)) as client:
            response = client.post("/api/text", json={"text": "abc", "trim": True})

        assert response.status_code == 500
        assert "worker crashed" in response.json()["error"]
