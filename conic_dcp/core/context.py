"""
Variable registry.

Expressions only hold variable ids in their conic forms; the registry maps
those ids back to live variables so the problem-assembly layer can scatter a
solution vector onto them after a solve.
"""

import logging
import threading
from typing import Dict, Iterable, List, Tuple

import numpy as np

from conic_dcp.core.errors import ShapeMismatchError
from conic_dcp.core.vexity import Sign

logger = logging.getLogger(__name__)


class Context:
    """
    Caller-owned table from variable id to variable.

    Entries are never removed implicitly: a variable stays reachable until
    clear() is called. Registration is guarded by a lock; everything else
    assumes a single modeling session per thread.

    Usage:
        ctx = Context('session')
        x = Variable(3, context=ctx)
        offsets = ctx.variable_offsets([x.id_hash])
        ctx.load_solution(solution, offsets)
    """

    def __init__(self, name: str = 'default'):
        self.name = name
        self._variables: Dict[int, object] = {}
        self._lock = threading.Lock()

    def register(self, variable) -> None:
        """
        Add a variable to the registry.

        Raises:
            ValueError: If a variable with the same id is already registered
        """
        with self._lock:
            if variable.id_hash in self._variables:
                raise ValueError(
                    f"Variable {variable.id_hash} already registered in context '{self.name}'"
                )
            self._variables[variable.id_hash] = variable

    def lookup(self, var_id: int):
        """
        Get the variable registered under var_id.

        Raises:
            KeyError: If no such variable exists in this context
        """
        try:
            return self._variables[var_id]
        except KeyError:
            raise KeyError(f"No variable with id {var_id} in context '{self.name}'") from None

    def __contains__(self, var_id: int) -> bool:
        return var_id in self._variables

    def __len__(self) -> int:
        return len(self._variables)

    def variables(self) -> List:
        """Registered variables in registration order"""
        return list(self._variables.values())

    def clear(self) -> None:
        with self._lock:
            self._variables.clear()

    # =========================================================================
    # Solution scatter
    # =========================================================================

    def variable_offsets(self, var_ids: Iterable[int]) -> Dict[int, Tuple[int, int]]:
        """
        Lay out variables in a flat solution vector.

        Real variables occupy length entries; complex variables occupy
        2*length entries (real block, then imaginary block).

        Returns:
            Ordered dict {var_id: (offset, width)}
        """
        offsets = {}
        offset = 0
        for var_id in var_ids:
            if var_id in offsets:
                continue
            var = self.lookup(var_id)
            width = solution_width(var)
            offsets[var_id] = (offset, width)
            offset += width
        return offsets

    def load_solution(self, x, offsets: Dict[int, Tuple[int, int]]) -> None:
        """
        Scatter a solution vector back onto the registered variables.

        Args:
            x: Flat solution vector
            offsets: Layout from variable_offsets()

        Raises:
            KeyError: If an id is not registered
            ShapeMismatchError: If x is shorter than the layout requires, or a
                width does not match its variable; nothing is written then
        """
        x = np.asarray(x).ravel()
        needed = max((off + width for off, width in offsets.values()), default=0)
        if len(x) < needed:
            raise ShapeMismatchError(
                f"Solution vector has {len(x)} entries, layout requires {needed}"
            )

        # Check the whole layout before any variable is written
        variables = {}
        for var_id, (_, width) in offsets.items():
            var = self.lookup(var_id)
            if width != solution_width(var):
                raise ShapeMismatchError(
                    f"Layout width {width} does not match variable {var_id} "
                    f"(expected {solution_width(var)})"
                )
            variables[var_id] = var

        for var_id, (offset, width) in offsets.items():
            var = variables[var_id]
            block = x[offset:offset + width]
            n = var.length
            if var.sign == Sign.COMPLEX:
                block = block[:n] + 1j * block[n:]

            if var.shape == (1, 1):
                var.set_value(block[0])
            else:
                var.set_value(block.reshape(var.shape, order='F'))
            logger.debug("loaded solution for variable %s", var_id)

    def __repr__(self) -> str:
        return f"Context('{self.name}', variables={len(self._variables)})"


def solution_width(variable) -> int:
    """Number of solution-vector entries a variable occupies."""
    if variable.sign == Sign.COMPLEX:
        return 2 * variable.length
    return variable.length


_default_context = Context('default')


def get_default_context() -> Context:
    return _default_context


def set_default_context(context: Context) -> Context:
    """Replace the default context; returns the previous one."""
    global _default_context
    previous = _default_context
    _default_context = context
    return previous
