"""Tests for the content-addressed ObjectStore."""

import hashlib

import pytest

from groot import NotFound, ObjectStore, content_digest
from groot.kv.memory import Memory


class CountingMemory(Memory):
    def __init__(self) -> None:
        super().__init__()
        self.writes: list[str] = []

    def set(self, key: str, value: bytes) -> None:
        self.writes.append(key)
        super().set(key, value)


class TestContentDigest:
    def test_is_sha1_hex(self):
        assert content_digest(b"hello") == hashlib.sha1(b"hello").hexdigest()
        assert len(content_digest(b"")) == 40

    def test_whitespace_sensitive(self):
        assert content_digest(b"a\n") != content_digest(b"a\r\n")
        assert content_digest(b"a") != content_digest(b"a ")


class TestObjectStore:
    def test_put_get(self):
        objects = ObjectStore(Memory())
        digest = objects.put(b"a\nb\n")
        assert objects.get(digest) == b"a\nb\n"

    def test_put_returns_content_digest(self):
        objects = ObjectStore(Memory())
        assert objects.put(b"data") == content_digest(b"data")

    def test_put_twice_same_digest_single_entry(self):
        objects = ObjectStore(Memory())
        d1 = objects.put(b"same")
        d2 = objects.put(b"same")
        assert d1 == d2
        assert list(objects) == [d1]
        assert len(objects) == 1

    def test_put_existing_does_not_rewrite(self):
        store = CountingMemory()
        objects = ObjectStore(store)
        objects.put(b"same")
        objects.put(b"same")
        assert len(store.writes) == 1

    def test_empty_content(self):
        objects = ObjectStore(Memory())
        digest = objects.put(b"")
        assert objects.get(digest) == b""

    def test_get_unknown(self):
        objects = ObjectStore(Memory())
        with pytest.raises(NotFound):
            objects.get("0" * 40)

    def test_get_malformed_digest(self):
        objects = ObjectStore(Memory())
        with pytest.raises(NotFound, match="Not a valid object digest"):
            objects.get("../HEAD")

    def test_contains(self):
        objects = ObjectStore(Memory())
        digest = objects.put(b"x")
        assert digest in objects
        assert "0" * 40 not in objects
        assert "HEAD" not in objects

    def test_iter_ignores_other_keys(self):
        store = Memory()
        store.set("HEAD", b"")
        store.set("index", b"[]")
        objects = ObjectStore(store)
        d1 = objects.put(b"one")
        d2 = objects.put(b"two")
        assert set(objects) == {d1, d2}

    def test_rejects_str(self):
        objects = ObjectStore(Memory())
        with pytest.raises(TypeError, match="Expected bytes"):
            objects.put("text")  # type: ignore
