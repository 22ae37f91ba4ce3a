# bartwalk/tests/test_grove.py
#
# Copyright (c) 2026, The Bartwalk Contributors
#
# This file is part of bartwalk.
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""Test `bartwalk.grove`."""

import copy

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from bartwalk.debug import check_tree
from bartwalk.grove import Decision, TreeNode
from tests.util import ScriptedSource, find_node, manual_tree, pick

X4 = [[0, 1, 2, 3], [5, 5, 7, 7], [1, 1, 1, 1]]
Y4 = [1.0, 2.0, 3.0, 4.0]


@pytest.fixture
def tree4() -> TreeNode:
    R"""
    Tree over 4 observations with 3 leaves.

    Structure:
          x0 <= 1.5
          /       \
      [0, 1]   x0 <= 2.5
                /     \
              [2]     [3]
    """
    return manual_tree(X4, Y4, {'': (0, 1.5), 'r': (0, 2.5)})


class TestStump:
    """Test `TreeNode.stump`."""

    def test_contents(self):
        """Check the root of a new tree."""
        root = TreeNode.stump(np.array(X4), Y4)
        assert root.is_terminal
        assert root.is_stump()
        assert root.depth == 0
        assert_array_equal(root.indices, np.arange(4))
        assert root.available_vars == (0, 1)
        assert root.response_sum == 10.0
        assert root.leaf_value is None
        assert root.num_leaves == 1
        assert check_tree(root) == 0

    def test_bad_X(self):
        """Check that X must be a non-empty matrix."""
        with pytest.raises(ValueError, match='matrix'):
            TreeNode.stump(np.zeros(4), Y4)
        with pytest.raises(ValueError, match='matrix'):
            TreeNode.stump(np.zeros((2, 0)), [])

    def test_bad_y(self):
        """Check that y must match X."""
        with pytest.raises(ValueError, match='does not match'):
            TreeNode.stump(np.array(X4), Y4[:3])


class TestStructure:
    """Test the structure queries of `TreeNode`."""

    def test_partition(self, tree4):
        """Check how observations are distributed."""
        assert not tree4.is_stump()
        assert_array_equal(find_node(tree4, 'l').indices, [0, 1])
        assert_array_equal(find_node(tree4, 'r').indices, [2, 3])
        assert_array_equal(find_node(tree4, 'rl').indices, [2])
        assert_array_equal(find_node(tree4, 'rr').indices, [3])
        assert find_node(tree4, 'rr').depth == 2
        assert find_node(tree4, 'r').response_sum == 7.0
        assert check_tree(tree4) == 0

    def test_available_vars(self, tree4):
        """Check that only predictors that vary are available."""
        assert tree4.available_vars == (0, 1)
        assert find_node(tree4, 'l').available_vars == (0,)
        assert find_node(tree4, 'r').available_vars == (0,)
        assert find_node(tree4, 'rl').available_vars == ()

    def test_iteration(self, tree4):
        """Check the order of nodes and leaves."""
        paths = ['', 'l', 'r', 'rl', 'rr']
        nodes = [find_node(tree4, p) for p in paths]
        assert list(tree4.nodes()) == nodes
        assert list(tree4.leaves()) == [nodes[1], nodes[3], nodes[4]]
        assert tree4.num_leaves == 3

    def test_terminals_with_min_points(self, tree4):
        """Check the selection of leaves by size."""
        assert tree4.terminals_with_min_points(1) == list(tree4.leaves())
        assert tree4.terminals_with_min_points(2) == [find_node(tree4, 'l')]
        assert tree4.terminals_with_min_points(3) == []

    def test_prunable_and_changeable(self, tree4):
        """Check that only nodes with two leaf children qualify."""
        assert tree4.prunable_and_changeable() == [find_node(tree4, 'r')]
        stump = TreeNode.stump(np.array(X4), Y4)
        assert stump.prunable_and_changeable() == []

    def test_structure_eq(self, tree4):
        """Check the comparison of trees."""
        other = manual_tree(X4, Y4, {'': (0, 1.5), 'r': (0, 2.5)})
        assert tree4.structure_eq(other)
        other = manual_tree(X4, Y4, {'': (0, 1.5)})
        assert not tree4.structure_eq(other)
        other = manual_tree(X4, Y4, {'': (0, 1.5), 'r': (0, 2.75)})
        assert not tree4.structure_eq(other)
        other = manual_tree(X4, Y4, {'': (0, 0.5), 'r': (0, 2.5)})
        assert not tree4.structure_eq(other)


class TestMutation:
    """Test the methods that modify a `TreeNode`."""

    def test_set_decision(self):
        """Check growing a leaf."""
        root = TreeNode.stump(np.array(X4), Y4)
        root.leaf_value = 2.5
        root.set_decision(Decision(1, 6.0))
        assert not root.is_terminal
        assert root.leaf_value is None
        assert root.left.is_terminal
        assert root.right.is_terminal
        assert root.populate(Y4)
        assert_array_equal(root.left.indices, [0, 1])
        assert_array_equal(root.right.indices, [2, 3])
        assert root.left.depth == root.right.depth == 1
        assert check_tree(root) == 0

    def test_set_decision_replaces_children(self, tree4):
        """Check that a new decision discards the subtree."""
        tree4.set_decision(Decision(1, 6.0))
        assert tree4.populate(Y4)
        assert tree4.num_leaves == 2
        assert check_tree(tree4) == 0

    def test_make_terminal(self, tree4):
        """Check pruning a node."""
        node = find_node(tree4, 'r')
        node.make_terminal()
        assert node.is_terminal
        assert node.left is None
        assert node.right is None
        assert tree4.populate(Y4)
        assert_array_equal(node.indices, [2, 3])
        assert node.available_vars == (0,)
        assert check_tree(tree4) == 0

    def test_min_points_per_leaf(self, tree4):
        """Check that populate reports leaves that are too small."""
        assert tree4.populate(Y4, 1)
        assert not tree4.populate(Y4, 2)

    def test_empty_leaf(self):
        """Check that a rule that sends everything left fails."""
        root = TreeNode.stump(np.array(X4), Y4)
        root.set_decision(Decision(0, 3.0))
        assert not root.populate(Y4)

    def test_populate_bad_y(self, tree4):
        """Check that the responses must match the predictors."""
        with pytest.raises(ValueError, match='does not match'):
            tree4.populate(Y4 + [5.0])

    def test_copy(self, tree4):
        """Check that a copy is independent of the original."""
        new = tree4.copy()
        assert new.structure_eq(tree4)
        assert all(a is not b for a, b in zip(new.nodes(), tree4.nodes()))
        assert new.X is tree4.X

        find_node(new, 'r').make_terminal()
        assert new.populate(Y4)
        find_node(new, 'l').leaf_value = 1.0
        assert tree4.num_leaves == 3
        assert find_node(tree4, 'l').leaf_value is None
        assert not new.structure_eq(tree4)

    def test_deepcopy(self, tree4):
        """Check that `copy.deepcopy` does a structural copy."""
        new = copy.deepcopy(tree4)
        assert new.structure_eq(tree4)
        assert new.X is tree4.X
        assert new.left is not tree4.left

    def test_assign(self, tree4):
        """Check restoring a node from a saved copy."""
        node = find_node(tree4, 'r')
        saved = node.copy()
        node.make_terminal()
        node.assign(saved)
        assert tree4.structure_eq(manual_tree(X4, Y4, {'': (0, 1.5), 'r': (0, 2.5)}))


class TestChooseRule:
    """Test the choice of decision rules."""

    def test_split_candidates(self):
        """Check that candidates are midpoints between distinct values."""
        root = TreeNode.stump(np.array([[3, 1, 1, 2], [4, 4, 4, 4]]), Y4)
        assert_array_equal(root.split_candidates(0), [1.5, 2.5])
        assert root.split_candidates(1).size == 0

    def test_split_candidates_float(self):
        """Check candidates with non-integer predictors."""
        root = TreeNode.stump(np.array([[0.5, -1.0, 0.25, 0.5]]), Y4)
        assert_array_equal(root.split_candidates(0), [-0.375, 0.375])

    def test_split_candidates_subset(self, tree4):
        """Check that candidates only consider the observations in the node."""
        assert_array_equal(find_node(tree4, 'r').split_candidates(0), [2.5])
        assert_array_equal(tree4.split_candidates(0), [0.5, 1.5, 2.5])

    def test_choose_var(self):
        """Check that the predictor is picked amongst the available ones."""
        X = [[0, 1, 2, 3], [1, 1, 1, 1], [0, 0, 1, 1]]
        root = TreeNode.stump(np.array(X), Y4)
        rng = ScriptedSource([pick(0, 2), pick(1, 2)])
        assert root.choose_var(rng) == 0
        assert root.choose_var(rng) == 2

    def test_choose_var_none(self, tree4):
        """Check that a leaf with constant predictors has no variable."""
        rng = ScriptedSource([0.5])
        assert find_node(tree4, 'rl').choose_var(rng) is None
        assert rng.num_left == 1

    def test_choose_split(self, tree4):
        """Check that the split is picked amongst the candidates."""
        rng = ScriptedSource([pick(2, 3), pick(0, 3)])
        assert tree4.choose_split(rng, 0) == 2.5
        assert tree4.choose_split(rng, 0) == 0.5

    def test_choose_split_none(self):
        """Check that a constant predictor gives no split."""
        root = TreeNode.stump(np.array(X4), Y4)
        rng = ScriptedSource([0.5])
        assert root.choose_split(rng, 2) is None
        assert rng.num_left == 1
