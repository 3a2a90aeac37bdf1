"""CLI entry point."""

import json
import os
import sys
from pathlib import Path
from typing import Any, Optional

from buildstash_upload.config import DEFAULT_CONFIG_PATH, Config
from buildstash_upload.exceptions import NegotiationError, PartUploadFailedError, UploadError
from buildstash_upload.inputs import load_inputs
from buildstash_upload.logging_config import setup_logging
from buildstash_upload.uploader import Uploader


def _registry_payload(error: BaseException) -> Any:
    """Registry error body carried by the error, looking through part failures."""
    if isinstance(error, PartUploadFailedError):
        error = error.cause
    if isinstance(error, NegotiationError):
        return error.payload
    return None


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for CLI."""
    args = list(sys.argv[1:] if argv is None else argv)
    log_level = 'DEBUG' if '--debug' in args else os.getenv('LOG_LEVEL', 'INFO')

    logger = setup_logging('buildstash_upload', log_level=log_level)

    if '--debug' in args:
        logger.info("Debug logging enabled")

    config_path = Path(os.getenv('BUILDSTASH_CONFIG', str(DEFAULT_CONFIG_PATH)))

    try:
        inputs = load_inputs()
        config = Config(config_path)
        result = Uploader(config, inputs).run()
    except (UploadError, OSError) as e:
        logger.error(f"Upload failed: {e}")
        payload = _registry_payload(e)
        if payload is not None:
            logger.error(f"Response data: {json.dumps(payload)}")
        print(f"::error::{e}")
        return 1

    logger.info(f"Build ID: {result.build_id}")
    logger.info(f"Pending processing: {result.pending_processing}")
    if result.build_info_url:
        logger.info(f"Build info: {result.build_info_url}")
    if result.download_url:
        logger.info(f"Download: {result.download_url}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
