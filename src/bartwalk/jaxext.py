# bartwalk/src/bartwalk/jaxext.py
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

"""Random number generation on top of `jax.random`."""

import math
from typing import Protocol

from jax import jit, random
from jax import numpy as jnp
from jaxtyping import Array, Key


class RandomSource(Protocol):
    """A sequentially consumed stream of random draws.

    All the randomness used to propose a tree move goes through this interface,
    one draw at a time, so that a stream with a fixed seed reproduces the same
    proposals.
    """

    def uniform(self) -> float:
        """Return a uniform random number in [0, 1)."""
        ...

    def poisson(self, mean: float) -> int:
        """Return a Poisson random integer with the given mean."""
        ...


class KeyStream:
    """
    A `RandomSource` that consumes a jax random key.

    Each draw splits the key held by the stream, uses one of the two halves and
    keeps the other for the next draw, so no key is ever used twice.

    Parameters
    ----------
    key
        The initial jax random key.
    """

    _key: Key[Array, '']
    _num_used: int

    def __init__(self, key: Key[Array, '']):
        self._key = key
        self._num_used = 0

    @property
    def num_used(self) -> int:
        """The number of keys popped so far."""
        return self._num_used

    def pop(self) -> Key[Array, '']:
        """
        Pop the next key from the stream.

        Returns
        -------
        A fresh jax random key.
        """
        self._key, key = _split_unpack(self._key)
        self._num_used += 1
        return key

    def uniform(self) -> float:
        """Return a uniform random number in [0, 1) with 53 random bits."""
        hi, lo = random.bits(self.pop(), (2,), jnp.uint32).tolist()
        # 27 bits from the first word and 26 from the second, as numpy does
        return ((hi >> 5) * 2**26 + (lo >> 6)) / 2**53

    def poisson(self, mean: float) -> int:
        """
        Return a Poisson random integer.

        Parameters
        ----------
        mean
            The mean of the distribution.

        Returns
        -------
        A non-negative integer.

        Raises
        ------
        ValueError
            If `mean` is negative or not a number.
        """
        if not mean >= 0:
            msg = f'Poisson mean must be non-negative, got {mean=}'
            raise ValueError(msg)
        return random.poisson(self.pop(), jnp.float32(mean)).item()


@jit
def _split_unpack(key: Key[Array, '']) -> tuple[Key[Array, ''], Key[Array, '']]:
    keys = random.split(key)
    return keys[0], keys[1]


def randrange(rng: RandomSource, n: int) -> int:
    """
    Return a uniform random integer in ``[0, n)``.

    Parameters
    ----------
    rng
        The source of randomness. Exactly one uniform draw is consumed.
    n
        The exclusive upper bound.

    Returns
    -------
    ``floor(u * n)``, where ``u`` is a uniform draw.

    Raises
    ------
    ValueError
        If `n` is less than 1.
    """
    if n < 1:
        msg = f'Cannot draw from an empty range, {n=}'
        raise ValueError(msg)
    u = rng.uniform()
    # u * n may round up to n for large n
    return min(math.floor(u * n), n - 1)
