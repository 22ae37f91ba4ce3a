# bartwalk/src/bartwalk/mcmcstep/_moves.py
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

"""Implement the grow, prune and change moves on a single tree."""

import math
from typing import Any

from jaxtyping import Float

from bartwalk.grove import Decision, TreeNode
from bartwalk.jaxext import RandomSource, randrange
from bartwalk.mcmcstep._params import Move
from bartwalk.mcmcstep._prob import (
    ProbModel,
    log_change_probability,
    log_grow_probability,
    log_prune_probability,
)

REJECTED: tuple[float, float] = (-math.inf, -math.inf)
"""The log transition probabilities of a move that can not be done.

Since the forward probability is 0, the Metropolis-Hastings step always rejects
the move."""


def choose_move(
    rng: RandomSource,
    tree: TreeNode,
    grow_model: ProbModel,
    prune_model: ProbModel,
) -> Move:
    """
    Choose the type of move to propose.

    Parameters
    ----------
    rng
        The source of randomness. One uniform draw is consumed.
    tree
        The current tree.
    grow_model
    prune_model
        The probabilities of proposing a grow or prune move. Their sum must be
        at most 1. The remaining probability goes to the change move.

    Returns
    -------
    The type of move.
    """
    p_grow = grow_model(tree)
    p_prune = prune_model(tree)
    u = rng.uniform()
    if u < p_grow:  # use < instead of <= because u is in [0, 1)
        return Move.grow
    if u < p_grow + p_prune:
        return Move.prune
    return Move.change


def choose_grow_node(rng: RandomSource, tree: TreeNode) -> TreeNode | None:
    """
    Choose a leaf to grow.

    The leaf is chosen uniformly amongst those with at least 2 observations.

    Parameters
    ----------
    rng
        The source of randomness. One uniform draw is consumed, unless there
        are no candidate leaves.
    tree
        The tree to pick the leaf from.

    Returns
    -------
    The leaf, or `None` if there are no candidates or if the chosen leaf does
    not have predictors to split on.
    """
    leaves = tree.terminals_with_min_points(2)
    if not leaves:
        return None
    node = leaves[randrange(rng, len(leaves))]
    if not node.available_vars:
        return None
    return node


def choose_prune_or_change_node(rng: RandomSource, tree: TreeNode) -> TreeNode | None:
    """
    Choose a node to prune or change.

    The node is chosen uniformly amongst the non-terminal nodes with two
    terminal children. The same candidates serve both moves.

    Parameters
    ----------
    rng
        The source of randomness. One uniform draw is consumed, unless the
        tree is a stump.
    tree
        The tree to pick the node from.

    Returns
    -------
    The node, or `None` if the tree is a stump.
    """
    if tree.is_stump():
        return None
    nodes = tree.prunable_and_changeable()
    if not nodes:  # pragma: no cover, a non-stump tree always has one
        return None
    return nodes[randrange(rng, len(nodes))]


def grow(
    rng: RandomSource,
    current: TreeNode,
    proposal: TreeNode,
    grow_model: ProbModel,
    prune_model: ProbModel,
    y: Float[Any, ' n'],
    min_points_per_leaf: int = 1,
) -> tuple[float, float]:
    """
    Propose a GROW move.

    A GROW move converts a leaf to a decision node with two leaf children.

    Parameters
    ----------
    rng
        The source of randomness. Draws are consumed to pick the leaf, then the
        predictor, then the split.
    current
        The tree before the move, not modified.
    proposal
        A copy of `current` that is modified in place.
    grow_model
    prune_model
        The probabilities of proposing a grow or prune move.
    y
        The responses.
    min_points_per_leaf
        The minimum number of observations in each new leaf.

    Returns
    -------
    log_forward : float
        The log probability of proposing the move from `current`.
    log_backward : float
        The log probability of proposing the inverse prune move from
        `proposal`.

    Notes
    -----
    If the move is not possible, return `REJECTED` and leave `proposal`
    unchanged.
    """
    node = choose_grow_node(rng, proposal)
    if node is None:
        return REJECTED

    var = node.choose_var(rng)
    if var is None:  # pragma: no cover, checked by choose_grow_node
        return REJECTED
    split = node.choose_split(rng, var)
    if split is None:
        return REJECTED

    saved = node.copy()
    node.set_decision(Decision(var, split))
    if not node.populate(y, min_points_per_leaf):
        node.assign(saved)
        return REJECTED

    log_forward = log_grow_probability(current, node, grow_model)
    log_backward = log_prune_probability(proposal, prune_model)
    return log_forward, log_backward


def prune(
    rng: RandomSource,
    current: TreeNode,
    proposal: TreeNode,
    grow_model: ProbModel,
    prune_model: ProbModel,
    y: Float[Any, ' n'],
    min_points_per_leaf: int = 1,
) -> tuple[float, float]:
    """
    Propose a PRUNE move.

    A PRUNE move converts a decision node with two leaf children to a leaf.

    Parameters
    ----------
    rng
        The source of randomness. One draw is consumed to pick the node.
    current
        The tree before the move, not modified.
    proposal
        A copy of `current` that is modified in place.
    grow_model
    prune_model
        The probabilities of proposing a grow or prune move.
    y
        The responses.
    min_points_per_leaf
        The minimum number of observations in the new leaf.

    Returns
    -------
    log_forward : float
        The log probability of proposing the move from `current`.
    log_backward : float
        The log probability of proposing the inverse grow move from
        `proposal`.

    Notes
    -----
    If the move is not possible, return `REJECTED` and leave `proposal`
    unchanged.
    """
    node = choose_prune_or_change_node(rng, proposal)
    if node is None:
        return REJECTED

    saved = node.copy()
    # the observations of the node are already the union of its children's
    node.make_terminal()
    if not node.populate(y, min_points_per_leaf):  # pragma: no cover
        node.assign(saved)
        return REJECTED

    log_forward = log_prune_probability(current, prune_model)
    log_backward = log_grow_probability(proposal, saved, grow_model)
    return log_forward, log_backward


def change(
    rng: RandomSource,
    current: TreeNode,
    proposal: TreeNode,
    p_change: float,
    y: Float[Any, ' n'],
    min_points_per_leaf: int = 1,
) -> tuple[float, float]:
    """
    Propose a CHANGE move.

    A CHANGE move replaces the decision rule of a decision node with two leaf
    children, and redistributes the observations between the children.

    Parameters
    ----------
    rng
        The source of randomness. Draws are consumed to pick the node, then
        the predictor, then the split.
    current
        The tree before the move, not modified.
    proposal
        A copy of `current` that is modified in place.
    p_change
        The probability of proposing a change move.
    y
        The responses.
    min_points_per_leaf
        The minimum number of observations in each of the new leaves.

    Returns
    -------
    log_forward : float
        The log probability of proposing the move from `current`.
    log_backward : float
        The log probability of proposing the inverse change move from
        `proposal`.

    Notes
    -----
    If the move is not possible, return `REJECTED` and leave `proposal`
    unchanged.
    """
    node = choose_prune_or_change_node(rng, proposal)
    if node is None:
        return REJECTED

    var = node.choose_var(rng)
    if var is None:  # pragma: no cover, a decision node has a variable
        return REJECTED
    split = node.choose_split(rng, var)
    if split is None:
        return REJECTED

    saved = node.copy()
    node.set_decision(Decision(var, split))
    if not node.populate(y, min_points_per_leaf):
        node.assign(saved)
        return REJECTED

    log_forward = log_change_probability(current, node, p_change)
    log_backward = log_change_probability(proposal, saved, p_change)
    return log_forward, log_backward
