# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Optional, Sequence
from math import prod

from .backend import ArrayLike, namespace_of_arrays, shape

class MatrixOperator[T: ArrayLike]:
    """
    Dense square matrix acting on operands of arbitrary shape. Operands are flattened in row major
    order before the multiplication.
    """

    matrix: T
    vec_shape: tuple[int, ...]
    use_diag: bool

    def __init__(
            self,
            matrix: T,
            vec_shape: Optional[Sequence[int]] = None,
            use_diag: bool = True) -> None:
        mshape = shape(matrix)
        if len(mshape) != 2 or mshape[0] != mshape[1]:
            raise ValueError(f"Operator matrix must be square, got shape {mshape}.")
        if vec_shape is None:
            vec_shape = (mshape[0],)
        if prod(vec_shape) != mshape[0]:
            raise ValueError(f"Vector shape {tuple(vec_shape)} does not match matrix dimension {mshape[0]}.")
        self.matrix = matrix
        self.vec_shape = tuple(vec_shape)
        self.use_diag = use_diag

    def product(self, vec: T, /) -> T:
        if tuple(vec.shape) != self.vec_shape:
            raise ValueError(f"Expected vector of shape {self.vec_shape}, got {vec.shape}.")
        xp = namespace_of_arrays(self.matrix, vec)
        res = xp.matmul(self.matrix, xp.reshape(vec, (-1,)))
        return xp.reshape(res, self.vec_shape)

    def size(self) -> int:
        return shape(self.matrix)[0]

    def diag(self) -> Optional[T]:
        if not self.use_diag:
            return None
        xp = namespace_of_arrays(self.matrix)
        return xp.reshape(xp.linalg.diagonal(self.matrix), self.vec_shape)
