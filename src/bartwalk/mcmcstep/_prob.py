# bartwalk/src/bartwalk/mcmcstep/_prob.py
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

"""Probabilities of proposing the tree moves."""

import math
from typing import Protocol

from bartwalk.grove import TreeNode
from bartwalk.mcmcstep._params import MoveParams


class ProbModel(Protocol):
    """Unconditional probability of proposing a type of move on a tree."""

    def __call__(self, tree: TreeNode) -> float: ...


def grow_probability(tree: TreeNode, params: MoveParams) -> float:
    """Return the probability of proposing a grow move, 1 on a stump."""
    return 1.0 if tree.is_stump() else params.p_grow


def prune_probability(tree: TreeNode, params: MoveParams) -> float:
    """Return the probability of proposing a prune move, 0 on a stump."""
    return 0.0 if tree.is_stump() else params.p_prune


def _log(x: float) -> float:
    return math.log(x) if x > 0 else -math.inf


def log_grow_probability(
    tree: TreeNode, node: TreeNode, grow_model: ProbModel
) -> float:
    """
    Compute the probability of proposing a given grow move.

    Parameters
    ----------
    tree
        The tree before the move.
    node
        The node to grow, with the decision rule the move gives it. Its
        observations and available predictors must be those it has as a leaf
        of `tree`.
    grow_model
        The probability of proposing a grow move.

    Returns
    -------
    The logarithm of the probability of choosing a grow move, then `node`
    amongst the leaves with at least 2 observations, then the predictor, then
    the split.
    """
    num_growable = len(tree.terminals_with_min_points(2))
    num_vars = len(node.available_vars)
    num_splits = node.split_candidates(node.decision.var).size
    return (
        _log(grow_model(tree))
        - _log(num_growable)
        - _log(num_vars)
        - _log(num_splits)
    )


def log_prune_probability(tree: TreeNode, prune_model: ProbModel) -> float:
    """
    Compute the probability of proposing a given prune move.

    Parameters
    ----------
    tree
        The tree before the move.
    prune_model
        The probability of proposing a prune move.

    Returns
    -------
    The logarithm of the probability of choosing a prune move, then a specific
    node amongst the prunable ones.
    """
    num_prunable = len(tree.prunable_and_changeable())
    return _log(prune_model(tree)) - _log(num_prunable)


def log_change_probability(tree: TreeNode, node: TreeNode, p_change: float) -> float:
    """
    Compute the probability of proposing a given change move.

    Parameters
    ----------
    tree
        The tree before the move.
    node
        The node to change, with the decision rule the move gives it.
    p_change
        The probability of proposing a change move.

    Returns
    -------
    The logarithm of the probability of choosing a change move, then `node`,
    then the predictor, then the split.
    """
    num_changeable = len(tree.prunable_and_changeable())
    num_vars = len(node.available_vars)
    num_splits = node.split_candidates(node.decision.var).size
    return _log(p_change) - _log(num_changeable) - _log(num_vars) - _log(num_splits)
