"""
Integration tests: eager and lazy engines are observably identical.

Tests cover:
1. Identical roots, peaks and proofs over a long append sequence
2. Cross-verification between variants
3. Every built-in hasher
4. Concurrent readers while one writer appends
"""

import random
import threading

import pytest

from mmr.core.engine import EagerMMR, LazyMMR
from mmr.core.proof import VerifyStatus, bag_peaks, verify
from mmr.crypto import get_hasher


def build_pair(hasher_name="sha256"):
    return EagerMMR(hasher=get_hasher(hasher_name)), LazyMMR(hasher=get_hasher(hasher_name))


class TestEquivalence:
    """Eager and lazy must agree on every observable."""

    def test_step_by_step(self):
        eager, lazy = build_pair()
        for i in range(130):
            data = b"entry-%d" % i
            assert eager.append(data) == lazy.append(data)
            assert eager.node_count == lazy.node_count
            assert eager.peaks() == lazy.peaks()
            assert eager.root() == lazy.root()

    def test_proofs_identical(self):
        eager, lazy = build_pair()
        for i in range(77):
            eager.append(b"%d" % i)
            lazy.append(b"%d" % i)
        for i in range(77):
            assert eager.generate_proof(i).to_bytes() == lazy.generate_proof(i).to_bytes()

    def test_cross_verification(self):
        eager, lazy = build_pair()
        for i in range(45):
            eager.append(b"%d" % i)
            lazy.append(b"%d" % i)
        root = eager.root()
        for i in range(45):
            assert lazy.verify(root, eager.get_leaf(i), eager.generate_proof(i)) == VerifyStatus.ACCEPT
            assert eager.verify(root, lazy.get_leaf(i), lazy.generate_proof(i)) == VerifyStatus.ACCEPT

    @pytest.mark.parametrize("hasher_name,count", [
        ("sha256", 40),
        ("keccak256", 40),
        ("poseidon", 6),
    ])
    def test_hashers(self, hasher_name, count):
        eager, lazy = build_pair(hasher_name)
        for i in range(count):
            eager.append(b"%d" % i)
            lazy.append(b"%d" % i)
        assert eager.root() == lazy.root()
        hasher = get_hasher(hasher_name)
        root = eager.root()
        for i in range(count):
            proof = lazy.generate_proof(i)
            assert verify(root, lazy.get_leaf(i), proof, hasher) == VerifyStatus.ACCEPT


class TestConcurrentReaders:
    """Readers see consistent snapshots while a writer appends."""

    @pytest.mark.parametrize("engine_cls", [EagerMMR, LazyMMR], ids=["eager", "lazy"])
    def test_readers_during_appends(self, engine_cls):
        mmr = engine_cls()
        mmr.append(b"seed")
        failures = []
        done = threading.Event()

        def writer():
            try:
                for i in range(400):
                    mmr.append(b"w-%d" % i)
            finally:
                done.set()

        def reader(seed):
            rng = random.Random(seed)
            while not done.is_set():
                count = mmr.leaf_count
                index = rng.randrange(count)
                proof = mmr.generate_proof(index)
                # Peaks in a proof come from one snapshot, so they bag to that root.
                root = bag_peaks(mmr.hasher, proof.peaks)
                status = verify(root, mmr.get_leaf(index), proof)
                if status != VerifyStatus.ACCEPT:
                    failures.append((index, status))

        threads = [threading.Thread(target=reader, args=(s,)) for s in range(3)]
        threads.append(threading.Thread(target=writer))
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=60)

        assert failures == []
        assert mmr.leaf_count == 401

    def test_parallel_writers_are_serialized(self):
        mmr = EagerMMR()

        def writer(tag):
            for i in range(100):
                mmr.append(b"%s-%d" % (tag, i))

        threads = [threading.Thread(target=writer, args=(t,)) for t in (b"a", b"b", b"c")]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=60)

        assert mmr.leaf_count == 300
        assert mmr.node_count == 2 * 300 - bin(300).count("1")
        root = mmr.root()
        for i in range(0, 300, 7):
            assert mmr.verify(root, mmr.get_leaf(i), mmr.generate_proof(i)) == VerifyStatus.ACCEPT
