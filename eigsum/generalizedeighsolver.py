# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from .backend import ArrayLike, namespace_of_arrays
from .eighsolver import check_square

class GeneralizedEigHSolver:
    """
    Solves :math:`M u = d N u` for hermitian M and positive definite N by a Cholesky reduction
    :math:`N = L L^H` to the standard problem :math:`L^{-1} M L^{-H} y = d y`. The eigenvectors
    :math:`u = L^{-H} y` are N-normalized.
    """

    def __call__[T: ArrayLike](self, mat: T, overlap: T) -> tuple[T, T]:
        check_square(mat)
        if mat.shape != overlap.shape:
            raise ValueError("Both matrices of the generalized eigenvalue problem must have the same shape.")
        xp = namespace_of_arrays(mat, overlap)
        if not hasattr(xp, "linalg"):
            raise NotImplementedError(
                f"Extension linalg is missing from namespace {xp}.")

        chol = xp.linalg.cholesky(overlap)
        tmp = xp.linalg.solve(chol, mat)
        red = xp.linalg.solve(chol, xp.conj(tmp.T))
        red = 0.5 * (red + xp.conj(red.T))
        vals, vecs = xp.linalg.eigh(red)
        vecs = xp.linalg.solve(xp.conj(chol.T), vecs)
        return vals, vecs
