# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, MutableSequence
from dataclasses import dataclass
import logging
import time

from .backend import ArrayLike, size
from .bigmatrix import BigMatrix
from .operand import norm, inner, to_scalar
from .utils import check_pos, check_non_neg, check_guesses

logger = logging.getLogger(__name__)

@dataclass(kw_only=True)
class PowerMethodResult[T: ArrayLike]:
    #: Eigenvectors, one for each initial vector.
    arrays: list[T]
    #: Magnitudes of the eigenvalues, one for each initial vector.
    values: list[float]
    #: Time taken to compute the eigenvectors and eigenvalues.
    time: float
    #: Number of products for each eigenvector.
    iterations: list[int]

@dataclass
class PowerMethod:
    """
    Power iteration for the eigenvalues of largest magnitude. Eigenvectors found earlier are
    deflated from the operator, so the t-th initial vector converges to the t-th largest one.
    """

    #: Maximum number of products per eigenvector.
    maxiter: int = 1000

    #: Bound for the change of the eigenvalue between consecutive steps.
    errgoal: float = 1e-4

    #: Verbosity of the progress logging, nothing is logged below 1.
    debug_level: int = 0

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "maxiter":
            check_pos(name, value)
        elif name == "errgoal":
            check_non_neg(name, value)
        super().__setattr__(name, value)

    def __call__[T: ArrayLike](
            self,
            mat: BigMatrix[T],
            vecs: MutableSequence[T], /) -> PowerMethodResult[T]:
        check_guesses(vecs)
        if size(vecs[0]) != mat.size():
            raise ValueError(f"Size of the initial vectors ({size(vecs[0])}) does not match the operator size ({mat.size()}).")
        if any(norm(vec) == 0.0 for vec in vecs):
            raise ValueError("Initial vectors must have a norm above zero.")
        stamp = time.time()

        eigs = [1000.0] * len(vecs)
        iterations = []
        for t in range(len(vecs)):
            vec = vecs[t] / norm(vecs[t])
            lam = eigs[t]
            steps = 0
            for ii in range(1, self.maxiter+1):
                steps = ii
                image = mat.product(vec)
                for j in range(t):
                    image = image - eigs[j] * to_scalar(inner(vecs[j], vec)) * vecs[j]
                vec = image
                last_lambda = lam
                lam = norm(vec)
                vec = vec / lam
                if self.debug_level >= 1:
                    logger.info("%d %d %.10f", t, ii, lam)
                if abs(lam - last_lambda) < self.errgoal:
                    break
            vecs[t] = vec
            eigs[t] = lam
            iterations.append(steps)

        return PowerMethodResult(arrays=list(vecs),
                                 values=eigs,
                                 time=time.time() - stamp,
                                 iterations=iterations)
