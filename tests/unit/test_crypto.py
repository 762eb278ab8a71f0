"""
Unit tests for byte hashing and the pluggable hashers.

Tests cover:
1. SHA-256 / Keccak-256 known vectors
2. Hex helpers
3. Domain-separated leaf and node hashing
4. Hasher registry
"""

import pytest

from mmr.crypto import (
    sha256,
    keccak256,
    bytes_to_hex,
    hex_to_bytes,
    Hasher,
    Sha256Hasher,
    Keccak256Hasher,
    PoseidonHasher,
    HASHERS,
    DEFAULT_HASHER,
    get_hasher,
    empty_root,
)


class TestHashing:
    """Tests for raw hash functions."""

    def test_sha256_empty(self):
        assert sha256(b"").hex() == (
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )

    def test_keccak256_empty(self):
        """Keccak padding, not SHA3-256."""
        assert keccak256(b"").hex() == (
            "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
        )

    def test_keccak256_abc(self):
        assert keccak256(b"abc").hex() == (
            "4e03657aea45a94fc7d47ba826c8d667c0d1e6e33a64a036ec44f58fa12d6c45"
        )

    def test_hex_roundtrip(self):
        data = bytes(range(32))
        assert hex_to_bytes(bytes_to_hex(data)) == data
        assert bytes_to_hex(b"\xab").startswith("0x")
        assert hex_to_bytes("0XAB") == b"\xab"
        assert hex_to_bytes("ab") == b"\xab"


class TestSha256Hasher:
    """Tests for the default hasher."""

    def test_leaf_hash_prefix(self):
        hasher = Sha256Hasher()
        assert hasher.leaf_hash(b"data") == sha256(b"\x00data")

    def test_node_hash_prefix(self):
        hasher = Sha256Hasher()
        left, right = sha256(b"l"), sha256(b"r")
        assert hasher.node_hash(left, right) == sha256(b"\x01" + left + right)

    def test_node_hash_is_ordered(self):
        hasher = Sha256Hasher()
        a, b = sha256(b"a"), sha256(b"b")
        assert hasher.node_hash(a, b) != hasher.node_hash(b, a)

    def test_leaf_and_node_domains_differ(self):
        """A 64-byte leaf must not collide with the node over its halves."""
        hasher = Sha256Hasher()
        a, b = sha256(b"a"), sha256(b"b")
        assert hasher.leaf_hash(a + b) != hasher.node_hash(a, b)

    def test_node_hash_wrong_size(self):
        hasher = Sha256Hasher()
        with pytest.raises(ValueError):
            hasher.node_hash(b"short", sha256(b"x"))

    def test_check_value(self):
        hasher = Sha256Hasher()
        hasher.check_value(b"\xff" * 32)
        with pytest.raises(ValueError):
            hasher.check_value(b"\x00" * 33)

    def test_digest_size(self):
        hasher = Sha256Hasher()
        assert hasher.digest_size == 32
        assert len(hasher.leaf_hash(b"")) == 32


class TestKeccak256Hasher:
    """Tests for the EVM-oriented hasher."""

    def test_leaf_hash_prefix(self):
        hasher = Keccak256Hasher()
        assert hasher.leaf_hash(b"data") == keccak256(b"\x00data")

    def test_node_hash_prefix(self):
        hasher = Keccak256Hasher()
        left, right = keccak256(b"l"), keccak256(b"r")
        assert hasher.node_hash(left, right) == keccak256(b"\x01" + left + right)

    def test_differs_from_sha256(self):
        assert Keccak256Hasher().leaf_hash(b"x") != Sha256Hasher().leaf_hash(b"x")


class TestRegistry:
    """Tests for hasher lookup."""

    def test_default_is_sha256(self):
        assert DEFAULT_HASHER == "sha256"
        assert isinstance(get_hasher(), Sha256Hasher)

    @pytest.mark.parametrize("name,cls", [
        ("sha256", Sha256Hasher),
        ("keccak256", Keccak256Hasher),
        ("poseidon", PoseidonHasher),
        ("SHA256", Sha256Hasher),
    ])
    def test_get_hasher(self, name, cls):
        assert isinstance(get_hasher(name), cls)

    def test_unknown_hasher(self):
        with pytest.raises(ValueError):
            get_hasher("md5")

    def test_all_registered_satisfy_protocol(self):
        for name in HASHERS:
            hasher = get_hasher(name)
            assert isinstance(hasher, Hasher)
            assert hasher.name == name

    def test_empty_root_sentinel(self):
        assert empty_root(Sha256Hasher()) == bytes(32)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
