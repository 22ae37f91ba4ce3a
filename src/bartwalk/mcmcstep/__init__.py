# bartwalk/src/bartwalk/mcmcstep/__init__.py
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

"""
Functions that propose Metropolis-Hastings moves on a BART tree.

A move modifies a proposal copy of the tree in place, and returns the
logarithms of the probabilities of proposing the move and its inverse. Deciding
whether to accept the move is left to the caller.

The entry points are:

  - `MoveParams`: The hyperparameters of the moves.
  - `one_step`: Proposes a single grow, prune or change move.
  - `multi_step`: Proposes a Poisson-distributed number of moves in sequence.
"""

# ruff: noqa: F401

from bartwalk.mcmcstep._moves import (
    REJECTED,
    change,
    choose_grow_node,
    choose_move,
    choose_prune_or_change_node,
    grow,
    prune,
)
from bartwalk.mcmcstep._params import Move, MoveParams
from bartwalk.mcmcstep._prob import (
    ProbModel,
    grow_probability,
    log_change_probability,
    log_grow_probability,
    log_prune_probability,
    prune_probability,
)
from bartwalk.mcmcstep._step import StepCallback, multi_step, one_step
