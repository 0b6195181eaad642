# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Optional, Sequence

from .backend import ArrayLike
from .bigmatrix import BigMatrix
from .operand import is_null

class SumOperator[T: ArrayLike]:
    """Sum of linear operators acting on the same vector space."""

    ops: Sequence[BigMatrix[T]]

    def __init__(self, *ops: BigMatrix[T]) -> None:
        if len(ops) == 0:
            raise ValueError("No operators provided.")
        if any(op.size() != ops[0].size() for op in ops[1:]):
            raise ValueError("All operators must act on vectors of the same size.")
        self.ops = ops

    def product(self, vec: T, /) -> T:
        return sum((op.product(vec) for op in self.ops[1:]), start=self.ops[0].product(vec))

    def size(self) -> int:
        return self.ops[0].size()

    def diag(self) -> Optional[T]:
        diags = [op.diag() for op in self.ops]
        if any(is_null(d) for d in diags):
            return None
        return sum(diags[1:], start=diags[0]) # type: ignore
