# bartwalk/src/bartwalk/mcmcstep/_params.py
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

"""Hyperparameters of the tree moves."""

from enum import Enum

from equinox import Module


class Move(str, Enum):
    """Indicator of the type of tree move."""

    grow = 'grow'
    prune = 'prune'
    change = 'change'


class MoveParams(Module):
    """
    Hyperparameters of the tree moves.

    Parameters
    ----------
    p_grow
    p_prune
        The probabilities of proposing a grow or a prune move, when the tree is
        not a stump. The remaining probability goes to the change move.
    min_points_per_leaf
        The minimum number of observations in a leaf. Moves that would produce
        a smaller leaf are rejected.

    Raises
    ------
    ValueError
        If the probabilities are negative or sum to more than 1, or if
        `min_points_per_leaf` is less than 1.
    """

    p_grow: float
    p_prune: float
    min_points_per_leaf: int = 1

    def __check_init__(self):
        if not (self.p_grow >= 0 and self.p_prune >= 0):
            msg = f'Negative move probability, {self.p_grow=}, {self.p_prune=}'
            raise ValueError(msg)
        if self.p_grow + self.p_prune > 1:
            msg = f'{self.p_grow=} + {self.p_prune=} > 1'
            raise ValueError(msg)
        if self.min_points_per_leaf < 1:
            msg = f'{self.min_points_per_leaf=} must be at least 1'
            raise ValueError(msg)

    @property
    def p_change(self) -> float:
        """The probability of proposing a change move on a non-stump tree."""
        return 1 - self.p_grow - self.p_prune
