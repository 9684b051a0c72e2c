"""
Tests for media storage backend selection.
"""

import logging
import pytest

from app.services import media_storage
from app.services.media_storage import (
    MediaStorageError,
    S3MediaStorage,
    get_optional_media_storage,
    reset_media_storage,
)


@pytest.fixture(autouse=True)
def fresh_storage_cache():
    reset_media_storage()
    yield
    reset_media_storage()


def test_unconfigured_storage_is_reported_once(monkeypatch, caplog):
    calls = []

    def failing_build():
        calls.append(1)
        raise MediaStorageError("Missing S3 configuration: S3_BUCKET_NAME")

    monkeypatch.setattr(media_storage, "build_media_storage", failing_build)

    with caplog.at_level(logging.WARNING, logger="app.services.media_storage"):
        results = [get_optional_media_storage() for _ in range(3)]

    assert results == [None, None, None]
    assert len(calls) == 1
    warnings = [r for r in caplog.records if "Media storage unavailable" in r.getMessage()]
    assert len(warnings) == 1


def test_reset_allows_a_retry(monkeypatch):
    def failing_build():
        raise MediaStorageError("not configured")

    monkeypatch.setattr(media_storage, "build_media_storage", failing_build)
    assert get_optional_media_storage() is None

    configured = S3MediaStorage(bucket="task-media", region="us-east-1", client=object())
    monkeypatch.setattr(media_storage, "build_media_storage", lambda: configured)
    reset_media_storage()

    assert get_optional_media_storage() is configured
