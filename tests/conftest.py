"""Shared pytest fixtures for all tests."""

import json

import httpx
import pytest

from buildstash_upload.config import Config
from buildstash_upload.registry_client import RegistryClient


STORAGE_HOST = 'storage.test'


class FakeRegistry:
    """
    In-memory registry and object store behind an httpx.MockTransport.

    Configure `negotiate_response` before use. Part writes can be made to
    fail with `part_failures` ({part_number: failures_before_success}); the
    failure is a network error unless `failure_status` is set.
    """

    def __init__(self):
        self.negotiate_response = {}
        self.verify_response = {
            'build_id': 'build_123',
            'pending_processing': False,
            'build_info_url': 'https://app.buildstash.com/builds/build_123',
            'download_url': 'https://app.buildstash.com/builds/build_123/download',
        }
        self.part_failures = {}
        self.part_url_failures = {}
        self.failure_status = None
        self.omit_etag_parts = set()
        self.negotiate_requests = []
        self.part_url_requests = []
        self.verify_requests = []
        self.part_puts = []
        self.direct_puts = []
        self.part_bodies = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path

        if request.url.host == STORAGE_HOST:
            return self._handle_storage(request)

        if path.endswith('/upload/request/multipart'):
            body = json.loads(request.content)
            self.part_url_requests.append(body)
            part_number = body['part_number']
            if self.part_url_failures.get(part_number, 0) > 0:
                self.part_url_failures[part_number] -= 1
                return httpx.Response(503, json={'message': 'Try again'})
            return httpx.Response(200, json={
                'part_presigned_url': f'https://{STORAGE_HOST}/parts/{part_number}?X-Amz-Signature=abc'
            })
        if path.endswith('/upload/request'):
            self.negotiate_requests.append(json.loads(request.content))
            return httpx.Response(200, json=self.negotiate_response)
        if path.endswith('/upload/verify'):
            self.verify_requests.append(json.loads(request.content))
            return httpx.Response(200, json=self.verify_response)

        return httpx.Response(404)

    def _handle_storage(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.startswith('/parts/'):
            part_number = int(path.rsplit('/', 1)[1])
            self.part_puts.append(part_number)
            if self.part_failures.get(part_number, 0) > 0:
                self.part_failures[part_number] -= 1
                if self.failure_status is not None:
                    return httpx.Response(self.failure_status)
                raise httpx.ConnectError("Connection reset by peer", request=request)
            self.part_bodies[part_number] = request.content
            headers = {}
            if part_number not in self.omit_etag_parts:
                headers['ETag'] = f'"etag-{part_number}"'
            return httpx.Response(200, headers=headers)

        self.direct_puts.append(request)
        return httpx.Response(200, headers={'ETag': '"whole-file"'})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def direct_target(name: str) -> dict:
    """Negotiate response entry for a single-shot file."""
    return {
        'chunked_upload': False,
        'presigned_data': {
            'url': f'https://{STORAGE_HOST}/direct/{name}',
            'headers': {
                'Content-Type': 'application/octet-stream',
                'Content-Disposition': f'attachment; filename="{name}"',
                'Content-Length': '0',
            },
        },
    }


def chunked_target(number_of_parts: int, part_size_mb: float) -> dict:
    """Negotiate response entry for a multipart file."""
    return {
        'chunked_upload': True,
        'chunked_number_parts': number_of_parts,
        'chunked_part_size_mb': part_size_mb,
    }


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .buildstash directory
    """
    config_dir = tmp_path / '.buildstash'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir, monkeypatch):
    """
    Create temporary config instance.

    Returns:
        Config instance with temp config file
    """
    monkeypatch.delenv('BUILDSTASH_API_URL', raising=False)
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def fake_registry():
    """Fresh FakeRegistry for each test."""
    return FakeRegistry()


@pytest.fixture
def registry_client(temp_config, fake_registry):
    """RegistryClient wired to the fake registry."""
    client = RegistryClient(temp_config, 'bs_test_key', transport=fake_registry.transport())
    yield client
    client.close()


@pytest.fixture
def make_artifact(tmp_path):
    """
    Factory writing a file of the given size with position-dependent bytes.

    Returns:
        Callable (name, size) -> Path
    """
    def _make(name: str, size: int):
        file_path = tmp_path / name
        file_path.write_bytes(bytes(i % 251 for i in range(size)))
        return file_path

    return _make


@pytest.fixture
def sample_file(make_artifact):
    """Small artifact for single-shot uploads."""
    return make_artifact('app.apk', 100)


@pytest.fixture
def recorded_sleeps():
    """List collecting every backoff the driver waited for."""
    return []


@pytest.fixture
def fake_sleep(recorded_sleeps):
    """Sleep replacement that records durations instead of waiting."""
    def _sleep(seconds: float) -> None:
        recorded_sleeps.append(seconds)

    return _sleep
