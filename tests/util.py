# bartwalk/tests/util.py
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

"""Functions intended to be shared across the test suite."""

from collections.abc import Sequence

import numpy as np
from jax import random
from jaxtyping import Array, Float, Int, Key

from bartwalk.grove import Decision, TreeNode


class ScriptedSource:
    """
    A random source that returns predetermined values.

    Parameters
    ----------
    uniforms
        The values returned by successive calls to `uniform`.
    poissons
        The values returned by successive calls to `poisson`, regardless of
        the requested mean.
    """

    def __init__(self, uniforms: Sequence[float], poissons: Sequence[int] = ()):
        self._uniforms = list(uniforms)
        self._poissons = list(poissons)

    @property
    def num_left(self) -> int:
        """The number of values not yet consumed."""
        return len(self._uniforms) + len(self._poissons)

    def uniform(self) -> float:
        if not self._uniforms:
            msg = 'No uniform values left'
            raise IndexError(msg)
        return self._uniforms.pop(0)

    def poisson(self, mean: float) -> int:  # noqa: ARG002
        if not self._poissons:
            msg = 'No Poisson values left'
            raise IndexError(msg)
        return self._poissons.pop(0)


def pick(i: int, n: int) -> float:
    """Return the uniform value that makes `randrange` pick `i` out of `n`."""
    return (i + 0.5) / n


def manual_tree(
    X: Sequence[Sequence[float]],
    y: Sequence[float],
    rules: dict[str, tuple[int, float]],
) -> TreeNode:
    """
    Facilitate the hardcoded definition of trees.

    Parameters
    ----------
    X
        The predictors, with shape (p, n).
    y
        The responses.
    rules
        Maps the path of each decision node to its (var, split) rule. The path
        is a string of 'l' and 'r' characters going down from the root, which
        has path ''.

    Returns
    -------
    The root of the tree.
    """
    root = TreeNode.stump(np.array(X), np.array(y, float))
    for path in sorted(rules, key=len):
        node = find_node(root, path)
        node.set_decision(Decision(*rules[path]))
    ok = root.populate(np.array(y, float))
    assert ok
    return root


def find_node(root: TreeNode, path: str) -> TreeNode:
    """Go down a tree following a path of 'l' and 'r' characters."""
    node = root
    for c in path:
        node = node.left if c == 'l' else node.right
    return node


def random_data(
    key: Key[Array, ''], p: int, n: int, num_values: int = 6
) -> tuple[Int[np.ndarray, 'p n'], Float[np.ndarray, ' n']]:
    """Generate predictors with ties and normal responses."""
    keys = random.split(key)
    X = random.randint(keys[0], (p, n), 0, num_values)
    y = random.normal(keys[1], (n,))
    return np.asarray(X), np.asarray(y, float)
