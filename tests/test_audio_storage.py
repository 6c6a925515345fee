"""Tests for on-disk audio storage."""

import pytest


@pytest.mark.asyncio
async def test_save_writes_file_and_returns_url(audio_storage):
    url = await audio_storage.save(b"mp3-bytes")

    assert url.startswith("/audio/response-")
    assert url.endswith(".mp3")
    assert audio_storage.path_for_url(url).read_bytes() == b"mp3-bytes"


@pytest.mark.asyncio
async def test_filenames_are_unique(audio_storage):
    urls = {await audio_storage.save(b"x", prefix="welcome") for _ in range(5)}
    assert len(urls) == 5


@pytest.mark.asyncio
async def test_delete(audio_storage):
    url = await audio_storage.save(b"x")
    path = audio_storage.path_for_url(url)

    assert audio_storage.delete(url) is True
    assert not path.exists()
    assert audio_storage.delete(url) is False


def test_urls_outside_prefix_are_ignored(audio_storage, tmp_path):
    outside = tmp_path / "keep.txt"
    outside.write_text("keep")

    assert audio_storage.path_for_url("/static/keep.txt") is None
    assert audio_storage.delete("/static/keep.txt") is False
    assert audio_storage.path_for_url("/audio/../keep.txt") == audio_storage.audio_dir / "keep.txt"
    assert outside.exists()


@pytest.mark.asyncio
async def test_delete_many_counts_removed(audio_storage):
    urls = [await audio_storage.save(b"x") for _ in range(3)]
    audio_storage.path_for_url(urls[0]).unlink()

    assert audio_storage.delete_many(urls) == 2
