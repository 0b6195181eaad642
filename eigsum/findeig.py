# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from .backend import ArrayLike

def find_eig(num: int, real: ArrayLike, imag: ArrayLike) -> int:
    """
    Index of the eigenvalue with the num-th (zero based) largest squared magnitude
    :math:`\\Re^2 + \\Im^2` among unsorted eigenvalues. Eigenvalues of equal magnitude form a
    single rank, the first one in input order is returned.
    """
    if real.shape != imag.shape:
        raise ValueError("Real and imaginary parts must have the same length.")
    if len(real.shape) != 1 or real.shape[0] == 0:
        raise ValueError("Eigenvalues must be a non-empty vector.")
    if num < 0:
        raise ValueError(f"num must be a positive, got {num}")

    mags = [float(val) for val in (real**2 + imag**2)]

    # selection by repeated exclusion of the current maximum
    maxj, idx = -1.0, -1
    for i, val in enumerate(mags):
        if val > maxj:
            maxj, idx = val, i
    for _ in range(num):
        nmax = -1.0
        for i, val in enumerate(mags):
            if nmax < val < maxj:
                nmax, idx = val, i
        maxj = nmax
    return idx
