"""Tests for single part transfer."""

import logging

import httpx
import pytest

import buildstash_upload.part_transport as part_transport_module
from buildstash_upload.exceptions import NegotiationError, PartTransferError
from buildstash_upload.part_transport import PartTransport
from buildstash_upload.registry_client import RegistryClient
from buildstash_upload.types import FileRole, PartDescriptor, UploadSession


@pytest.fixture
def session():
    return UploadSession(session_id='pu_123', role=FileRole.PRIMARY, total_size=25)


@pytest.fixture
def artifact(make_artifact):
    return make_artifact('game.ipa', 25)


def test_transfer_part_streams_exact_range(registry_client, fake_registry, session, artifact):
    """The PUT body is exactly the descriptor's bytes and the ETag is returned."""
    transport = PartTransport(registry_client, str(artifact))
    descriptor = PartDescriptor(part_number=2, start=10, end=19)

    result = transport.transfer_part(session, descriptor)

    assert result.part_number == 2
    assert result.etag == '"etag-2"'
    assert result.success
    assert fake_registry.part_bodies[2] == artifact.read_bytes()[10:20]


def test_transfer_part_requests_presigned_url(registry_client, fake_registry, session, artifact):
    transport = PartTransport(registry_client, str(artifact))

    transport.transfer_part(session, PartDescriptor(part_number=3, start=20, end=24))

    assert fake_registry.part_url_requests == [
        {'pending_upload_id': 'pu_123', 'part_number': 3, 'content_length': 5}
    ]


def test_transfer_part_sends_length_and_binary_content_type(temp_config, session, artifact):
    """Part writes declare Content-Length and never carry the registry API key."""
    seen = {}

    def handler(request):
        if request.url.host == 'storage.test':
            seen['headers'] = request.headers
            seen['body'] = request.content
            return httpx.Response(200, headers={'ETag': '"abc"'})
        return httpx.Response(200, json={'part_presigned_url': 'https://storage.test/p/1'})

    client = RegistryClient(temp_config, 'bs_secret', transport=httpx.MockTransport(handler))
    PartTransport(client, str(artifact)).transfer_part(
        session, PartDescriptor(part_number=1, start=0, end=9)
    )

    assert seen['headers']['Content-Length'] == '10'
    assert seen['headers']['Content-Type'] == 'application/octet-stream'
    assert 'Authorization' not in seen['headers']
    assert 'Transfer-Encoding' not in seen['headers']
    assert len(seen['body']) == 10


def test_missing_etag_is_warning_not_failure(registry_client, fake_registry, session, artifact, caplog):
    """A write without ETag still succeeds with an empty acknowledgment."""
    fake_registry.omit_etag_parts.add(1)
    transport = PartTransport(registry_client, str(artifact))

    with caplog.at_level(logging.WARNING):
        result = transport.transfer_part(session, PartDescriptor(part_number=1, start=0, end=9))

    assert result.etag == ''
    assert result.success
    assert any('No ETag returned for primary part 1' in r.getMessage() for r in caplog.records)


def test_network_error_raises_part_transfer_error(registry_client, fake_registry, session, artifact):
    fake_registry.part_failures = {1: 1}
    transport = PartTransport(registry_client, str(artifact))

    with pytest.raises(PartTransferError):
        transport.transfer_part(session, PartDescriptor(part_number=1, start=0, end=9))


def test_non_2xx_write_raises_with_status(registry_client, fake_registry, session, artifact):
    fake_registry.part_failures = {1: 1}
    fake_registry.failure_status = 403
    transport = PartTransport(registry_client, str(artifact))

    with pytest.raises(PartTransferError) as exc_info:
        transport.transfer_part(session, PartDescriptor(part_number=1, start=0, end=9))

    assert exc_info.value.status_code == 403


def test_presigned_url_failure_is_not_retried_here(registry_client, fake_registry, session, artifact):
    """Failure to get a part URL propagates without touching storage."""
    fake_registry.part_url_failures = {1: 5}
    transport = PartTransport(registry_client, str(artifact))

    with pytest.raises(NegotiationError) as exc_info:
        transport.transfer_part(session, PartDescriptor(part_number=1, start=0, end=9))

    assert exc_info.value.status_code == 503
    assert len(fake_registry.part_url_requests) == 1
    assert fake_registry.part_puts == []


def test_read_window_closed_after_failure(registry_client, fake_registry, session, artifact, monkeypatch):
    """The file window is released when the write fails."""
    windows = []
    original = part_transport_module.FileRange

    def tracking_range(*args, **kwargs):
        window = original(*args, **kwargs)
        windows.append(window)
        return window

    monkeypatch.setattr(part_transport_module, 'FileRange', tracking_range)
    fake_registry.part_failures = {1: 1}

    with pytest.raises(PartTransferError):
        PartTransport(registry_client, str(artifact)).transfer_part(
            session, PartDescriptor(part_number=1, start=0, end=9)
        )

    assert len(windows) == 1
    assert windows[0].closed
