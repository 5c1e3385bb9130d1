"""
Petstagram Backend — Feed Decoding Tests
==========================================

What:  decode_feed() on well-formed and malformed payloads.

What we test:
    ✅ A three-post payload decodes in payload order with exact fields
    ✅ ["bad json"] fails as a whole (no empty or partial result)
    ✅ Missing fields and non-array documents are rejected
"""

from datetime import datetime, timezone

import pytest

from petstagram.exceptions import ValidationError
from petstagram.schemas.feed import decode_feed


class TestDecodeFeed:
    def test_good_feed(self, good_feed):
        posts = decode_feed(good_feed)

        assert len(posts) == 3
        assert [p.photo_url for p in posts] == [
            "/photos/image1.jpg",
            "/photos/image2.jpg",
            "/photos/image3.jpg",
        ]
        assert posts[0].created_at == datetime(2020, 4, 1, 12, 0, tzinfo=timezone.utc)
        assert posts[0].caption == "Living her best life! #corgi #puppyStyle"
        assert posts[2].caption == "Not sure if alien or dog..."

    def test_keeps_payload_order(self):
        payload = """[
            {"photoUrl": "/a.jpg", "createdAt": "2019-01-01T00:00:00Z", "caption": "old"},
            {"photoUrl": "/b.jpg", "createdAt": "2021-01-01T00:00:00Z", "caption": "new"}
        ]"""
        assert [p.caption for p in decode_feed(payload)] == ["old", "new"]

    def test_accepts_bytes(self, good_feed):
        assert len(decode_feed(good_feed.encode("utf-8"))) == 3

    def test_empty_array(self):
        assert decode_feed("[]") == []

    def test_offset_timestamps_are_converted_to_utc(self):
        payload = '[{"photoUrl": null, "createdAt": "2020-04-01T14:00:00+02:00", "caption": "x"}]'
        (post,) = decode_feed(payload)
        assert post.photo_url is None
        assert post.created_at == datetime(2020, 4, 1, 12, 0, tzinfo=timezone.utc)
        assert post.created_at.tzinfo == timezone.utc

    def test_bad_json_fails_as_a_whole(self, bad_json):
        with pytest.raises(ValidationError) as exc_info:
            decode_feed(bad_json)
        assert exc_info.value.field == "feed"

    def test_one_bad_item_rejects_the_payload(self):
        payload = """[
            {"photoUrl": "/a.jpg", "createdAt": "2020-01-01T00:00:00Z", "caption": "fine"},
            {"photoUrl": "/b.jpg", "caption": "no date"}
        ]"""
        with pytest.raises(ValidationError):
            decode_feed(payload)

    @pytest.mark.parametrize("payload", [
        '{"photoUrl": "/a.jpg", "createdAt": "2020-01-01T00:00:00Z", "caption": "x"}',
        "not json at all",
        "",
        '[{"photoUrl": "/a.jpg", "createdAt": "yesterday", "caption": "x"}]',
    ])
    def test_malformed_documents(self, payload):
        with pytest.raises(ValidationError):
            decode_feed(payload)
