# bartwalk/src/bartwalk/mcmcstep/_step.py
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

"""Implement `one_step` and `multi_step`."""

from functools import partial
from typing import Any, Protocol

import numpy
from jaxtyping import Float, Float64
from numpy import ndarray

from bartwalk.grove import TreeNode
from bartwalk.jaxext import RandomSource
from bartwalk.mcmcstep._moves import change, choose_move, grow, prune
from bartwalk.mcmcstep._params import Move, MoveParams
from bartwalk.mcmcstep._prob import grow_probability, prune_probability


class StepCallback(Protocol):
    """Callback type for `multi_step`."""

    def __call__(
        self,
        *,
        i_step: int,
        num_steps: int,
        move: Move,
        log_probs: Float64[ndarray, '2'],
        tree: TreeNode,
    ) -> None:
        """Do an arbitrary action after a step of the random walk.

        Parameters
        ----------
        i_step
            The index of the step just done (0-based).
        num_steps
            The total number of steps of the walk.
        move
            The type of move proposed in the step.
        log_probs
            The log forward and backward probabilities of the step alone.
        tree
            The tree after the step. Must not be modified.
        """
        ...


def one_step(
    rng: RandomSource,
    current: TreeNode,
    proposal: TreeNode,
    y: Float[Any, ' n'],
    params: MoveParams,
) -> tuple[TreeNode, Float64[ndarray, '2']]:
    """
    Propose a random move on a tree.

    Parameters
    ----------
    rng
        The source of randomness.
    current
        The tree before the move, not modified.
    proposal
        A copy of `current`, modified in place into the proposed tree.
    y
        The responses.
    params
        The hyperparameters of the moves.

    Returns
    -------
    proposal : TreeNode
        The `proposal` argument.
    log_probs : Float64[ndarray, '2']
        The log probabilities of proposing the move and the inverse move. Both
        are -inf if the move was not possible, in which case `proposal` is
        unchanged.
    """
    _, log_probs = _one_step(rng, current, proposal, y, params)
    return proposal, log_probs


def _one_step(
    rng: RandomSource,
    current: TreeNode,
    proposal: TreeNode,
    y: Float[Any, ' n'],
    params: MoveParams,
) -> tuple[Move, Float64[ndarray, '2']]:
    grow_model = partial(grow_probability, params=params)
    prune_model = partial(prune_probability, params=params)
    p_change = 1 - (grow_model(current) + prune_model(current))

    move = choose_move(rng, current, grow_model, prune_model)
    if move == Move.grow:
        log_probs = grow(
            rng,
            current,
            proposal,
            grow_model,
            prune_model,
            y,
            params.min_points_per_leaf,
        )
    elif move == Move.prune:
        log_probs = prune(
            rng,
            current,
            proposal,
            grow_model,
            prune_model,
            y,
            params.min_points_per_leaf,
        )
    else:
        log_probs = change(
            rng, current, proposal, p_change, y, params.min_points_per_leaf
        )

    return move, numpy.array(log_probs, numpy.float64)


def multi_step(
    rng: RandomSource,
    current: TreeNode,
    stride_mean: float,
    y: Float[Any, ' n'],
    params: MoveParams,
    *,
    callback: StepCallback | None = None,
) -> tuple[TreeNode, Float64[ndarray, '2']]:
    """
    Propose a sequence of random moves on a tree.

    Parameters
    ----------
    rng
        The source of randomness. The number of steps is drawn first, then
        each step consumes draws like `one_step`.
    current
        The initial tree, not modified.
    stride_mean
        The mean of the Poisson distribution of the number of steps.
    y
        The responses.
    params
        The hyperparameters of the moves.
    callback
        An optional function called after each step.

    Returns
    -------
    tree : TreeNode
        The tree after the last step. If there are no steps, a copy of
        `current`.
    log_probs : Float64[ndarray, '2']
        The sums over steps of the log probabilities of proposing each move
        and its inverse. ``[0, 0]`` if there are no steps.

    Notes
    -----
    Each step starts from a fresh copy of the tree produced by the previous
    step, and is done even if a previous step was not possible, so the sums
    stay -inf once a step is rejected.
    """
    num_steps = rng.poisson(stride_mean)
    tree = current.copy()
    log_probs = numpy.zeros(2)

    for i_step in range(num_steps):
        proposal = tree.copy()
        move, step_log_probs = _one_step(rng, tree, proposal, y, params)
        tree = proposal
        log_probs += step_log_probs

        if callback is not None:
            callback(
                i_step=i_step,
                num_steps=num_steps,
                move=move,
                log_probs=step_log_probs,
                tree=tree,
            )

    return tree, log_probs
