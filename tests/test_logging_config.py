"""Tests for logging setup and sensitive data masking."""

import logging

from buildstash_upload.logging_config import SensitiveDataFilter, setup_logging


def _filtered(message, *args):
    record = logging.LogRecord('test', logging.INFO, __file__, 1, message, args, None)
    SensitiveDataFilter().filter(record)
    return record.getMessage()


def test_bearer_token_masked():
    assert 'bs_secret' not in _filtered("Authorization: Bearer bs_secret")


def test_api_key_masked_in_args():
    message = _filtered("Loaded %s", "api_key=bs_secret")

    assert 'bs_secret' not in message
    assert '***MASKED***' in message


def test_presigned_signature_masked():
    url = (
        "https://bucket.s3.amazonaws.com/app.apk?X-Amz-Credential=AKIA123%2Fus-east-1"
        "&X-Amz-Signature=deadbeef&partNumber=2"
    )

    message = _filtered(f"PUT {url}")

    assert 'deadbeef' not in message
    assert 'AKIA123' not in message
    assert 'partNumber=2' in message


def test_plain_messages_untouched():
    assert _filtered("Uploaded primary part 2/3") == "Uploaded primary part 2/3"


def test_setup_logging_is_idempotent():
    logger = setup_logging('buildstash_upload_test_component', log_level='debug')
    again = setup_logging('buildstash_upload_test_component', log_level='debug')

    assert logger is again
    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    assert not logger.propagate
    assert any(isinstance(f, SensitiveDataFilter) for f in logger.handlers[0].filters)


def test_setup_logging_applies_latest_level():
    setup_logging('buildstash_upload_level_component', log_level='DEBUG')
    logger = setup_logging('buildstash_upload_level_component', log_level='WARNING')

    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
