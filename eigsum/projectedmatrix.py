# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Optional, Sequence

from .backend import ArrayLike, ArrayNamespace, DType, Device, device as device_of

class ProjectedMatrix[T: ArrayLike]:
    """
    Projection :math:`M_{ij} = \\langle V_i|A|V_j \\rangle` of an operator onto a growing basis.
    The matrix is stored complex valued. Expanding allocates a new matrix and copies the
    previous one into its top left block, previously returned arrays are never modified.
    """

    data: T
    _xp: ArrayNamespace[T]

    @property
    def dim(self) -> int:
        return self.data.shape[0] # type: ignore

    @property
    def real(self) -> T:
        return self._xp.real(self.data)

    @property
    def imag(self) -> T:
        return self._xp.imag(self.data)

    def __init__(
            self,
            xp: ArrayNamespace[T],
            value: complex,
            dtype: DType,
            device: Device = None) -> None:
        self._xp = xp
        self.data = xp.full((1, 1), complex(value), dtype=dtype, device=device)

    def expand(
            self,
            col: Sequence[complex],
            row: Optional[Sequence[complex]] = None) -> None:
        """
        Add a row and a column. Without row, the matrix is assumed to be hermitian and the
        row is the conjugated column.
        """
        xp, n = self._xp, self.dim
        if len(col) != n+1:
            raise ValueError(f"New column must have {n+1} entries, got {len(col)}.")
        if row is None:
            row = [val.conjugate() for val in col[:n]] + [complex(col[n].real)]
        elif len(row) != n+1:
            raise ValueError(f"New row must have {n+1} entries, got {len(row)}.")

        dtype, dev = self.data.dtype, device_of(self.data)
        new = xp.zeros((n+1, n+1), dtype=dtype, device=dev)
        new[:n,:n] = self.data
        new[:n,n] = xp.asarray([complex(val) for val in col[:n]], dtype=dtype, device=dev)
        new[n,:] = xp.asarray([complex(val) for val in row], dtype=dtype, device=dev)
        self.data = new
