"""Tests for crypto utility functions."""

from __future__ import annotations

from txauthor.utils.crypto import sha256, sha256d


def test_sha256():
    """SHA-256 of empty string should produce the well-known hash."""
    result = sha256(b"")
    assert result.hex() == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_sha256d():
    """Double SHA-256 of empty string."""
    result = sha256d(b"")
    assert result.hex() == "5df6e0e2761359d30a8275058e299fcc0381534545f55cf43e41983f5d4c9456"
    assert result == sha256(sha256(b""))
