# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Optional, Sequence
from math import prod
import logging

from .backend import ArrayLike, shape
from .contractor import ArrayContractor, OptimizeKind, DEFAULT_OPTIMIZER, contract

logger = logging.getLogger(__name__)

class EinsumOperator[T: ArrayLike]:
    """
    Linear operator defined by an einsum equation, whose last operand is the vector the operator
    acts on. The effective Hamiltonian of a matrix product state with left environment L, matrix
    product operator W and right environment R reads

    ``EinsumOperator("axA,xsSy,byB,ASB->asb", L, W, R)``

    The i-th index of the vector is paired with the i-th index of the result. The diagonal is
    computed by replacing the vector indices with their paired result indices, which requires
    that vector and result do not share indices at different positions.
    """

    eq: str
    optimizer: OptimizeKind
    vec_shape: tuple[int, ...]
    _ops: Sequence[T]
    _contr: ArrayContractor[T]
    _diag_eq: Optional[str]
    _diag: Optional[T]

    def __init__(
            self,
            eq: str,
            *ops: T,
            optimizer: OptimizeKind = DEFAULT_OPTIMIZER) -> None:
        eq = eq.replace(" ", "")
        inputs, output = self._split(eq, len(ops))
        sizes = self._sizes(inputs[:-1], ops)
        vec_labels = inputs[-1]
        if len(vec_labels) != len(output):
            raise ValueError("The operator has to map the vector onto a result of the same shape.")
        for vlabel, olabel in zip(vec_labels, output):
            if vlabel not in sizes or olabel not in sizes:
                raise ValueError("Every index of the vector and the result must appear in an operator tensor.")
            if sizes[vlabel] != sizes[olabel]:
                raise ValueError(f"Paired indices {vlabel} and {olabel} differ in size.")

        self.eq = eq
        self.optimizer = optimizer
        self.vec_shape = tuple(sizes[label] for label in output)
        self._ops = list(ops)
        self._contr = ArrayContractor(eq, *ops, free_shape=self.vec_shape, optimizer=optimizer)
        self._diag_eq = self._diagonal_equation(inputs[:-1], vec_labels, output)
        self._diag = None

    def product(self, vec: T, /) -> T:
        if tuple(vec.shape) != self.vec_shape:
            raise ValueError(f"Expected vector of shape {self.vec_shape}, got {vec.shape}.")
        return self._contr(vec)

    def size(self) -> int:
        return prod(self.vec_shape)

    def diag(self) -> Optional[T]:
        if self._diag_eq is None:
            return None
        if self._diag is None:
            self._diag = contract(self._diag_eq, *self._ops, optimizer=self.optimizer)
        return self._diag

    def _split(self, eq: str, nops: int) -> tuple[list[str], str]:
        if "->" not in eq:
            raise ValueError("Equation must contain an explicit result, e.g. 'ij,j->i'.")
        lhs, output = eq.split("->")
        inputs = lhs.split(",")
        if len(inputs) != nops + 1:
            raise ValueError(f"Equation has {len(inputs)} operands, expected {nops} operators and one vector.")
        return inputs, output

    def _sizes(self, labels: Sequence[str], ops: Sequence[T]) -> dict[str, int]:
        sizes: dict[str, int] = {}
        for label, op in zip(labels, ops):
            op_shape = shape(op)
            if len(label) != len(op_shape):
                raise ValueError(f"Indices '{label}' do not match operand of shape {op_shape}.")
            for char, dim in zip(label, op_shape):
                if sizes.setdefault(char, dim) != dim:
                    raise ValueError(f"Index {char} has inconsistent sizes.")
        return sizes

    def _diagonal_equation(
            self,
            op_labels: Sequence[str],
            vec_labels: str,
            output: str) -> Optional[str]:
        trans = {}
        for vlabel, olabel in zip(vec_labels, output):
            if vlabel == olabel:
                continue
            if vlabel in output or olabel in vec_labels:
                logger.debug("No diagonal for %s, vector and result share indices.", self.eq)
                return None
            trans[vlabel] = olabel
        table = str.maketrans(trans)
        return ",".join(label.translate(table) for label in op_labels) + "->" + output
