# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from .backend import ArrayLike, namespace_of_arrays
from .eighsolver import check_square

class EigSolver:
    """
    Unsorted eigenvalues and right eigenvectors of a general square matrix. The general
    eigenvalue decomposition is not part of the array API standard, the namespace has to
    provide linalg.eig itself.
    """

    def __call__[T: ArrayLike](self, mat: T) -> tuple[T, T]:
        check_square(mat)
        xp = namespace_of_arrays(mat)
        if not (hasattr(xp, "linalg")) or not (hasattr(xp.linalg, "eig")):
            raise NotImplementedError(
                f"Method linalg.eig is not implemented for backend {xp}.")
        vals, vecs = xp.linalg.eig(mat)
        return vals, vecs
