# bartwalk/src/bartwalk/debug.py
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

"""Debugging utilities for trees and moves."""

from collections.abc import Callable

import numpy
from jaxtyping import Float64
from numpy import ndarray

from bartwalk.grove import TreeNode
from bartwalk.mcmcstep import Move


def format_tree(tree: TreeNode) -> str:
    """Convert a tree to a human-readable string.

    Parameters
    ----------
    tree
        The root of the tree to format.

    Returns
    -------
    A string representation of the tree. Each line starts with the number of
    observations in the node.
    """
    tee = '├──'
    corner = '└──'
    join = '│  '
    space = '   '
    down = '┐'

    ndigits = len(str(tree.num_points))

    def traverse_tree(
        lines: list[str],
        node: TreeNode,
        indent: str,
        first_indent: str,
        next_indent: str,
    ):
        if node.is_terminal:
            link = ' '
            if node.leaf_value is None:
                node_str = 'leaf'
            else:
                node_str = f'{node.leaf_value:#.2g}'
        else:
            link = down
            node_str = f'x{node.decision.var} <= {node.decision.split:#.4g}'

        number = str(node.num_points).rjust(ndigits)
        lines.append(f' {number} {indent}{first_indent}{link}{node_str}')

        if node.is_terminal:
            return
        indent += next_indent
        traverse_tree(lines, node.left, indent, tee, join)
        traverse_tree(lines, node.right, indent, corner, space)

    lines = []
    traverse_tree(lines, tree, '', '', '')
    return '\n'.join(lines)


check_functions = []


CheckFunc = Callable[[TreeNode], bool]


def check(func: CheckFunc) -> CheckFunc:
    """Add a function to a list of functions used to check trees.

    Use to decorate functions that check whether a tree is valid in some way.
    These functions are invoked automatically by `check_tree`.

    Parameters
    ----------
    func
        The function to add to the list. It must accept the root of a tree and
        return whether the tree is ok.

    Returns
    -------
    The function unchanged.
    """
    check_functions.append(func)
    return func


@check
def check_node_kind(tree: TreeNode) -> bool:
    """Check that each node has either a decision and two children, or none."""
    for node in _walk_nodes(tree):
        has_left = node.left is not None
        has_right = node.right is not None
        if not (has_left == has_right == (not node.is_terminal)):
            return False
    return True


def _walk_nodes(tree: TreeNode):
    stack = [tree]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(child for child in (node.right, node.left) if child is not None)


@check
def check_depths(tree: TreeNode) -> bool:
    """Check that the root has depth 0 and children are one level deeper."""
    if tree.depth != 0:
        return False
    return all(
        node.left.depth == node.right.depth == node.depth + 1
        for node in tree.nodes()
        if not node.is_terminal
    )


@check
def check_sorted_indices(tree: TreeNode) -> bool:
    """Check that the observation indices of each node are strictly increasing."""
    return all(numpy.all(numpy.diff(node.indices) > 0) for node in tree.nodes())


@check
def check_root_partition(tree: TreeNode) -> bool:
    """Check that the root has all observations and the leaves partition them."""
    n = tree.X.shape[1]
    if not numpy.array_equal(tree.indices, numpy.arange(n)):
        return False
    indices = numpy.concatenate([leaf.indices for leaf in tree.leaves()])
    return numpy.array_equal(numpy.sort(indices), tree.indices)


@check
def check_internal_partition(tree: TreeNode) -> bool:
    """Check that each decision node sends its observations to the right child."""
    for node in tree.nodes():
        if node.is_terminal:
            continue
        goes_left = node.decision.goes_left(node.X[node.decision.var, node.indices])
        if not (
            numpy.array_equal(node.left.indices, node.indices[goes_left])
            and numpy.array_equal(node.right.indices, node.indices[~goes_left])
        ):
            return False
    return True


@check
def check_available_vars(tree: TreeNode) -> bool:
    """Check that the available predictors are those that vary in each node."""
    for node in tree.nodes():
        x = node.X[:, node.indices]
        varies = numpy.any(x != x[:, :1], axis=1)
        if node.available_vars != tuple(numpy.flatnonzero(varies).tolist()):
            return False
    return True


@check
def check_leaf_values(tree: TreeNode) -> bool:
    """Check that only terminal nodes have a cached leaf value."""
    return all(
        node.leaf_value is None for node in tree.nodes() if not node.is_terminal
    )


def check_tree(tree: TreeNode) -> int:
    """Check the validity of a tree.

    Use `describe_error` to parse the error code returned by this function.

    Parameters
    ----------
    tree
        The root of the tree to check.

    Returns
    -------
    An integer where each bit indicates whether a check failed.

    Notes
    -----
    If `check_node_kind` fails, the other checks are skipped because they
    assume a well formed tree.
    """
    error = 0
    for i, func in enumerate(check_functions):
        ok = func(tree)
        error |= (not ok) << i
        if func is check_node_kind and not ok:
            break
    return error


def describe_error(error: int) -> list[str]:
    """Describe the error code returned by `check_tree`.

    Parameters
    ----------
    error
        The error code returned by `check_tree`.

    Returns
    -------
    A list of the function names that implement the failed checks.
    """
    return [func.__name__ for i, func in enumerate(check_functions) if error & (1 << i)]


def print_callback(
    *,
    i_step: int,
    num_steps: int,
    move: Move,
    log_probs: Float64[ndarray, '2'],
    tree: TreeNode,
) -> None:
    """Print a one line report after each step of `mcmcstep.multi_step`."""
    log_forward, log_backward = log_probs
    status = 'rejected' if log_forward == -numpy.inf else 'proposed'
    print(  # noqa: T201, this is the user-requested report
        f'Step {i_step + 1}/{num_steps} {move.value} {status} '
        f'log_fwd={log_forward:.3g} log_bwd={log_backward:.3g} '
        f'leaves={tree.num_leaves}'
    )
