"""Tests for the upload cache."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from bundlectl.core.cache import CachedItem, UploadCache, default_cache_path
from bundlectl.core.exceptions import ConfigurationError
from bundlectl.models.asset import MetadataDocument
from bundlectl.models.progress import BatchResult


def _doc(name: str, image: str) -> MetadataDocument:
    return MetadataDocument.model_validate(
        {"name": name, "image": image, "properties": {"files": []}}
    )


def _result() -> BatchResult:
    return BatchResult(
        keys=["0", "1"],
        link_uris=["https://g/l0", "https://g/l1"],
        updated_metadata=[_doc("Asset #0", "https://g/p0"), _doc("Asset #1", "https://g/p1")],
        size=100,
        transaction_ids=["tx"],
    )


class TestDefaultCachePath:
    def test_sits_beside_assets_dir(self, assets_dir: Path):
        path = default_cache_path(assets_dir)

        assert path.parent == assets_dir.resolve().parent
        assert path.name == "assets.bundlectl-cache.json"


class TestUploadCache:
    def test_load_missing_file_is_empty(self, temp_dir: Path):
        cache = UploadCache.load(temp_dir / "cache.json")

        assert cache.items == {}
        assert cache.submitted_units == {}

    def test_record_batch_and_reload(self, temp_dir: Path):
        path = temp_dir / "cache.json"
        cache = UploadCache.load(path)

        cache.record_batch(_result())
        cache.save()
        reloaded = UploadCache.load(path)

        assert reloaded.has("0") and reloaded.has("1")
        assert not reloaded.has("2")
        assert reloaded.items["1"].link == "https://g/l1"
        assert reloaded.items["1"].image == "https://g/p1"
        assert reloaded.items["1"].name == "Asset #1"

    def test_record_batch_rejects_mismatched_lengths(self, temp_dir: Path):
        result = _result()
        result.link_uris.pop()

        with pytest.raises(ValueError):
            UploadCache(temp_dir / "cache.json").record_batch(result)

    def test_record_unit_saves_immediately(self, temp_dir: Path):
        path = temp_dir / "cache.json"

        UploadCache.load(path).record_unit("unit-1", "tx-1")

        assert json.loads(path.read_text())["submitted_units"] == {"unit-1": "tx-1"}
        assert not path.with_name("cache.json.tmp").exists()

    def test_corrupt_file_raises(self, temp_dir: Path):
        path = temp_dir / "cache.json"
        path.write_text("{broken")

        with pytest.raises(ConfigurationError):
            UploadCache.load(path)

    def test_summary(self, temp_dir: Path):
        cache = UploadCache(temp_dir / "cache.json")
        cache.record_batch(_result())
        cache.submitted_units["u"] = "t"

        summary = cache.summary()

        assert summary["uploaded_pairs"] == 2
        assert summary["submitted_units"] == 1


class TestCachedItem:
    def test_from_dict_without_timestamp(self):
        item = CachedItem.from_dict({"link": "l", "image": "i"})

        assert item.link == "l"
        assert item.name == ""
        assert item.uploaded_at is not None
