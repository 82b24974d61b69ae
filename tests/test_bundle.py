"""Tests for aggregate bundle encoding."""

from __future__ import annotations

import pytest

from bundlectl.core.signing import Tag
from bundlectl.uploaders.bundle import bundle_and_sign, decode_bundle_header, encode_bundle


class TestEncodeBundle:
    def test_header_lists_each_unit(self, fake_signer):
        units = [fake_signer.sign(b"a" * n, [Tag("k", str(n))]) for n in (1, 10, 100)]

        blob = encode_bundle(units)

        assert decode_bundle_header(blob) == [(len(u.raw), u.id) for u in units]
        assert blob.endswith(b"".join(u.raw for u in units))

    def test_empty_bundle(self):
        assert decode_bundle_header(encode_bundle([])) == []

    def test_truncated_blob_raises(self, fake_signer):
        blob = encode_bundle([fake_signer.sign(b"data", [])])

        with pytest.raises(ValueError):
            decode_bundle_header(blob[:-1])
        with pytest.raises(ValueError):
            decode_bundle_header(blob[:40])


class TestBundleAndSign:
    def test_aggregate_tags_and_body(self, fake_signer):
        units = [fake_signer.sign(b"x", []), fake_signer.sign(b"y", [])]

        aggregate = bundle_and_sign(units, fake_signer, "My App")

        assert aggregate.tag_value("Bundle-Format") == "binary"
        assert aggregate.tag_value("Bundle-Version") == "2.0.0"
        assert aggregate.tag_value("App-Name") == "My App"
        assert [uid for _, uid in decode_bundle_header(aggregate.data)] == [u.id for u in units]
