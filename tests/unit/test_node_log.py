"""Unit tests for the Node Log."""

import pytest

from mmr.core.node_log import Node, NodeLog


@pytest.fixture
def log():
    node_log = NodeLog()
    node_log.append(0, b"a")
    node_log.append(0, b"b")
    node_log.append(1, b"ab")
    return node_log


class TestNodeLog:
    """Tests for NodeLog."""

    def test_append_returns_position(self):
        node_log = NodeLog()
        assert node_log.append(0, b"x") == 0
        assert node_log.append(0, b"y") == 1
        assert len(node_log) == 2

    def test_get(self, log):
        assert log.get(2) == Node(position=2, height=1, value=b"ab")
        assert log.value(0) == b"a"
        assert log.height(2) == 1

    def test_out_of_range(self, log):
        with pytest.raises(IndexError):
            log.get(3)
        with pytest.raises(IndexError):
            log.value(-1)

    def test_negative_height(self):
        with pytest.raises(ValueError):
            NodeLog().append(-1, b"x")

    def test_nodes_slice(self, log):
        assert [n.value for n in log.nodes(1)] == [b"b", b"ab"]
        assert [n.position for n in log.nodes(0, 2)] == [0, 1]
        assert len(log.nodes(0, 100)) == 3

    def test_nodes_negative_start(self, log):
        with pytest.raises(IndexError):
            log.nodes(-1)

    def test_iter(self, log):
        assert [n.height for n in log] == [0, 0, 1]

    def test_node_is_frozen(self, log):
        node = log.get(0)
        with pytest.raises(AttributeError):
            node.value = b"z"
