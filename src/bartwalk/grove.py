# bartwalk/src/bartwalk/grove.py
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

"""Binary decision trees that are modified in place by the MCMC moves."""

import copy
from collections.abc import Iterator
from typing import Any

import numpy
from equinox import Module
from jaxtyping import Bool, Float, Int, Real
from numpy import ndarray

from bartwalk.jaxext import RandomSource, randrange


class Decision(Module):
    """
    A decision rule of a non-terminal node.

    Parameters
    ----------
    var
        The index of the predictor the rule looks at.
    split
        The decision boundary. A point goes to the left child iff
        ``x[var] <= split``.
    """

    var: int
    split: float

    def goes_left(self, x: Real[ndarray, ' n']) -> Bool[ndarray, ' n']:
        """Return a mask of the values of predictor `var` that go left."""
        return x <= self.split


class TreeNode:
    """
    A node of a binary decision tree.

    A node is either terminal, with no decision and no children, or internal,
    with a decision and exactly two children. A node owns its children; the
    root is owned by whoever created it.

    Parameters
    ----------
    X
        The predictors, shared by all the nodes of the tree. Never modified.
    indices
        The sorted indices of the observations that fall into the node.
    depth
        The depth of the node, 0 for the root.

    Attributes
    ----------
    decision
        The decision rule, `None` if the node is terminal.
    left
    right
        The children, `None` if the node is terminal.
    available_vars
        The predictors with at least two distinct values on the observations of
        the node, i.e., those that admit a split rule.
    leaf_value
        A cached value for a terminal node, set by whoever evaluates the leaf.
        Cleared by every change of structure.
    response_sum
        The sum of the responses of the observations in the node, as of the
        last call to `populate`.

    Notes
    -----
    Nodes are not copied by assignment. Use `copy` to get an independent
    tree.
    """

    X: Real[ndarray, 'p n']
    indices: Int[ndarray, ' m']
    depth: int
    decision: Decision | None
    left: 'TreeNode | None'
    right: 'TreeNode | None'
    available_vars: tuple[int, ...]
    leaf_value: float | None
    response_sum: float

    def __init__(
        self, X: Real[ndarray, 'p n'], indices: Int[ndarray, ' m'], depth: int = 0
    ):
        self.X = X
        self.indices = indices
        self.depth = depth
        self.decision = None
        self.left = None
        self.right = None
        self.available_vars = ()
        self.leaf_value = None
        self.response_sum = 0.0

    @classmethod
    def stump(cls, X: Real[Any, 'p n'], y: Float[Any, ' n']) -> 'TreeNode':
        """
        Make a tree with only the root node.

        Parameters
        ----------
        X
            The predictors, with shape ``(p, n)``. Must be finite.
        y
            The responses.

        Returns
        -------
        A terminal root node holding all the observations.

        Raises
        ------
        ValueError
            If `X` is not a matrix or has no observations, or if `y` does not
            match `X`.
        """
        X = numpy.asarray(X)
        if X.ndim != 2 or X.shape[1] == 0:
            msg = f'X must be a (p, n) matrix with n >= 1, got {X.shape=}'
            raise ValueError(msg)
        root = cls(X, numpy.arange(X.shape[1]))
        root.populate(y)
        return root

    @property
    def is_terminal(self) -> bool:
        """Whether the node is a leaf."""
        return self.decision is None

    @property
    def num_points(self) -> int:
        """The number of observations in the node."""
        return self.indices.size

    @property
    def num_leaves(self) -> int:
        """The number of leaves at or below the node."""
        return sum(1 for _ in self.leaves())

    def is_stump(self) -> bool:
        """Whether the tree rooted at this node consists only of the root."""
        return self.is_terminal

    def nodes(self) -> Iterator['TreeNode']:
        """Iterate over the nodes at or below this node, in pre-order."""
        yield self
        if not self.is_terminal:
            yield from self.left.nodes()
            yield from self.right.nodes()

    def leaves(self) -> Iterator['TreeNode']:
        """Iterate over the terminal nodes at or below this node, in pre-order."""
        return (node for node in self.nodes() if node.is_terminal)

    def terminals_with_min_points(self, n: int) -> list['TreeNode']:
        """Return the terminal nodes with at least `n` observations."""
        return [node for node in self.leaves() if node.num_points >= n]

    def prunable_and_changeable(self) -> list['TreeNode']:
        """
        Return the nodes that can be pruned or changed.

        These are the non-terminal nodes whose children are both terminal. The
        list is in pre-order and includes this node if it qualifies.
        """
        return [
            node
            for node in self.nodes()
            if not node.is_terminal and node.left.is_terminal and node.right.is_terminal
        ]

    def copy(self) -> 'TreeNode':
        """
        Copy the tree rooted at this node.

        Every node is duplicated, so that modifying the structure of the copy
        does not affect the original. The predictors and the index arrays are
        shared because they are never modified in place.
        """
        new = copy.copy(self)
        if not self.is_terminal:
            new.left = self.left.copy()
            new.right = self.right.copy()
        return new

    def __deepcopy__(self, _memo: dict) -> 'TreeNode':
        return self.copy()

    def assign(self, other: 'TreeNode') -> None:
        """Overwrite this node in place with the contents of `other`."""
        vars(self).update(vars(other))

    def set_decision(self, decision: Decision) -> None:
        """
        Make the node non-terminal with a new decision rule.

        Any existing children are discarded and replaced with two empty
        terminal nodes. Call `populate` afterwards to distribute the
        observations.
        """
        self.decision = decision
        self.leaf_value = None
        self.left = TreeNode(self.X, self.indices[:0], self.depth + 1)
        self.right = TreeNode(self.X, self.indices[:0], self.depth + 1)

    def make_terminal(self) -> None:
        """Remove the decision rule and the children of the node."""
        self.decision = None
        self.left = None
        self.right = None
        self.leaf_value = None

    def populate(self, y: Float[Any, ' n'], min_points_per_leaf: int = 1) -> bool:
        """
        Distribute the observations of this node down its subtree.

        The children's observations, depths, available predictors and
        response sums are recomputed from the node's own observations and
        the decision rules.

        Parameters
        ----------
        y
            The responses, indexed like the columns of `X`.
        min_points_per_leaf
            The minimum number of observations in a leaf.

        Returns
        -------
        Whether every leaf of the subtree has at least `min_points_per_leaf`
        observations. If `False`, the subtree may be only partially updated.

        Raises
        ------
        ValueError
            If `y` does not have one element per observation.
        """
        y = numpy.asarray(y)
        if y.shape != (self.X.shape[1],):
            msg = f'{y.shape=} does not match {self.X.shape=}'
            raise ValueError(msg)
        return self._populate(y, min_points_per_leaf)

    def _populate(self, y: Float[ndarray, ' n'], min_points_per_leaf: int) -> bool:
        x = self.X[:, self.indices]
        varies = numpy.any(x != x[:, :1], axis=1)
        self.available_vars = tuple(numpy.flatnonzero(varies).tolist())
        self.response_sum = float(numpy.sum(y[self.indices]))

        if self.is_terminal:
            return self.num_points >= min_points_per_leaf

        goes_left = self.decision.goes_left(self.X[self.decision.var, self.indices])
        for child, mask in [(self.left, goes_left), (self.right, ~goes_left)]:
            child.indices = self.indices[mask]
            child.depth = self.depth + 1
            if not child._populate(y, min_points_per_leaf):
                return False
        return True

    def split_candidates(self, var: int) -> Float[ndarray, ' k']:
        """
        Return the allowed decision boundaries along a predictor.

        Parameters
        ----------
        var
            The index of the predictor.

        Returns
        -------
        The midpoints between consecutive distinct values of the predictor
        on the observations of the node, in increasing order. Empty if the
        predictor is constant on the node.
        """
        u = numpy.unique(self.X[var, self.indices])
        # x_i + (x_i+1 - x_i) / 2 instead of (x_i + x_i+1) / 2 to avoid
        # overflow
        return u[:-1] + (u[1:] - u[:-1]) / 2

    def choose_var(self, rng: RandomSource) -> int | None:
        """Pick uniformly one of `available_vars`, `None` if there are none."""
        if not self.available_vars:
            return None
        return self.available_vars[randrange(rng, len(self.available_vars))]

    def choose_split(self, rng: RandomSource, var: int) -> float | None:
        """Pick uniformly one of the `split_candidates`, `None` if there are none."""
        splits = self.split_candidates(var)
        if not splits.size:
            return None
        return float(splits[randrange(rng, splits.size)])

    def structure_eq(self, other: 'TreeNode') -> bool:
        """
        Check if two trees have the same shape, rules and observations.

        Cached leaf values are not compared.
        """
        if self.is_terminal != other.is_terminal or self.depth != other.depth:
            return False
        if not numpy.array_equal(self.indices, other.indices):
            return False
        if self.is_terminal:
            return True
        return (
            self.decision.var == other.decision.var
            and self.decision.split == other.decision.split
            and self.left.structure_eq(other.left)
            and self.right.structure_eq(other.right)
        )

    def __repr__(self) -> str:
        if self.is_terminal:
            return f'TreeNode(depth={self.depth}, num_points={self.num_points})'
        return (
            f'TreeNode(depth={self.depth}, num_points={self.num_points}, '
            f'var={self.decision.var}, split={self.decision.split})'
        )
