# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Callable, Sequence, Literal
from copy import deepcopy
import opt_einsum as oe
from .backend import ArrayLike

OptimizeKind = Literal["optimal", "dp", "greedy", "random-greedy", "random-greedy-128", "branch-all", "branch-2", "auto", "auto-hq"]
DEFAULT_OPTIMIZER: OptimizeKind = "greedy"

class ArrayContractor[T: ArrayLike]:
    """
    Einsum contraction of a set of constant operands with one operand that changes on every call.
    The variable operand is the last one in the equation. The contraction path is optimized once.
    """

    _ops: Sequence[T]
    _expr: Callable[..., T]

    def __init__(
            self,
            eq: str,
            *ops: T,
            free_shape: Sequence[int],
            optimizer: OptimizeKind = DEFAULT_OPTIMIZER) -> None:
        self._ops = [deepcopy(op) for op in ops]
        self._expr = oe.contract_expression(
            eq,
            *self._ops,
            tuple(free_shape),
            constants=list(range(len(self._ops))),
            optimize=optimizer)

    def __call__(self, vec: T) -> T:
        return self._expr(vec) # type: ignore

def contract[T: ArrayLike](eq: str, *ops: T, optimizer: OptimizeKind = DEFAULT_OPTIMIZER) -> T:
    """One-off contraction of constant operands."""
    return oe.contract(eq, *ops, optimize=optimizer) # type: ignore
