# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from .backend import ArrayLike, namespace_of_arrays

def check_square(mat: ArrayLike) -> None:
    if len(mat.shape) != 2 or mat.shape[0] != mat.shape[1]:
        raise ValueError(f"Expected a square matrix, got shape {mat.shape}.")

class EigHSolver:
    """Eigenvalues in ascending order and eigenvectors of a real symmetric or complex hermitian matrix."""

    def __call__[T: ArrayLike](self, mat: T) -> tuple[T, T]:
        check_square(mat)
        xp = namespace_of_arrays(mat)
        if not hasattr(xp, "linalg"):
            raise NotImplementedError(
                f"Extension linalg is missing from namespace {xp}.")
        vals, vecs = xp.linalg.eigh(mat)
        return vals, vecs
