"""Shared pytest fixtures for partitionlayout tests."""
import os

# Qt widgets are created without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import numpy as np
import pytest

from partitionlayout.model.colors import ColorAllocator
from partitionlayout.model.partition import SplitDirection
from partitionlayout.model.tree import PartitionTree


@pytest.fixture
def rng():
    return np.random.default_rng(20240917)


@pytest.fixture
def tree(rng):
    """A tree holding only its root, with reproducible colors."""
    return PartitionTree(ColorAllocator(rng))


@pytest.fixture
def split_root(tree):
    """Root split vertically; returns (tree, first_id, second_id)."""
    tree.split_partition(tree.root_id, SplitDirection.VERTICAL)
    first_id, second_id = tree.root.children
    return tree, first_id, second_id


@pytest.fixture
def three_way(split_root):
    """Root with three children at 50/30/20; returns (tree, [ids])."""
    tree, first_id, second_id = split_root
    third_id = tree.create_partition(tree.root_id)
    for child_id, size in zip([first_id, second_id, third_id], [50.0, 30.0, 20.0]):
        tree.partitions[child_id].size = size
    return tree, [first_id, second_id, third_id]


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication
    app = QApplication.instance() or QApplication([])
    yield app
