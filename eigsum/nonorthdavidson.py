# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Optional
from dataclasses import dataclass
from math import sqrt
import logging
import time

from .backend import ArrayLike, namespace_of_arrays, size, complex_dtype, is_complex, device
from .bigmatrix import BigMatrix
from .operand import norm, inner, combine, is_null, to_scalar
from .preconditioner import PseudoInverter
from .projectedmatrix import ProjectedMatrix
from .matrixeigenvaluedecomposition import GeneralizedEigenvalueDecomposition
from .generalizedeighsolver import GeneralizedEigHSolver
from .utils import check_pos, check_non_neg

logger = logging.getLogger(__name__)

@dataclass(kw_only=True)
class NonOrthDavidsonResult[T: ArrayLike]:
    #: Eigenvector, B-normalized.
    array: T
    #: Eigenvalue.
    value: float
    #: Time taken to compute the eigenvector and eigenvalue.
    time: float
    #: Norm of the residual at each step.
    residuals: list[float]
    #: Number of steps.
    iterations: int

class NonOrthDavidsonData[T: ArrayLike]:
    """Non-orthogonal basis together with its images under A and B and both projections."""

    basis: list[T]
    aimages: list[T]
    bimages: list[T]
    amat: ProjectedMatrix
    bmat: ProjectedMatrix
    is_complex: bool

    def __init__(self, mat_a: BigMatrix[T], mat_b: BigMatrix[T], guess: T) -> None:
        xp = namespace_of_arrays(guess)
        aimage, bimage = mat_a.product(guess), mat_b.product(guess)
        self.basis = [guess]
        self.aimages = [aimage]
        self.bimages = [bimage]
        dtype = xp.result_type(guess.dtype, aimage.dtype, bimage.dtype)
        self.is_complex = is_complex(xp, dtype)
        cdtype = complex_dtype(xp, dtype)
        self.amat = ProjectedMatrix(xp, inner(guess, aimage), cdtype, device(guess))
        self.bmat = ProjectedMatrix(xp, inner(guess, bimage), cdtype, device(guess))

    def matrices(self) -> tuple[Any, Any]:
        if self.is_complex:
            return self.amat.data, self.bmat.data
        return self.amat.real, self.bmat.real

@dataclass
class NonOrthDavidson:
    """
    Davidson solver for the generalized eigenvalue problem :math:`A x = \\lambda B x` with a
    positive definite B. The basis is not orthogonalized, its overlap is carried by the projection
    of B and every step solves the small generalized problem :math:`M u = d N u`.
    """

    #: Maximum number of steps, limited by the size of the operator.
    maxiter: int = 2

    #: Bound for the residual norm and the eigenvalue change between consecutive steps.
    errgoal: float = 1e-4

    #: Verbosity of the progress logging, nothing is logged below 1.
    debug_level: int = -1

    #: Orthogonalize new basis vectors against the basis with a single Gram-Schmidt pass.
    gram_schmidt: bool = False

    #: Precondition residuals with the pseudo inverse of :math:`\\lambda diag(B) - diag(A)`.
    precondition: bool = False

    #: Dense solver for the projected generalized problem.
    solver: GeneralizedEigenvalueDecomposition = GeneralizedEigHSolver()

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "maxiter":
            check_pos(name, value)
        elif name == "errgoal":
            check_non_neg(name, value)
        super().__setattr__(name, value)

    def __call__[T: ArrayLike](
            self,
            mat_a: BigMatrix[T],
            mat_b: BigMatrix[T],
            phi: T, /) -> NonOrthDavidsonResult[T]:
        """
        Find the lowest eigenpair starting from phi. phi is overwritten with the eigenvector if
        the dtypes agree, the eigenvector is always part of the result.
        """
        self._check_input(mat_a, mat_b, phi)
        stamp = time.time()

        ovlp = inner(phi, mat_b.product(phi)).real
        if ovlp <= 0.0:
            raise ValueError("B is not positive definite on the initial vector.")
        guess = phi / sqrt(ovlp)

        actual_maxiter = min(self.maxiter, mat_a.size())
        adiag, bdiag = (mat_a.diag(), mat_b.diag()) if self.precondition else (None, None)

        lam = last_lambda = 1e30
        residuals: list[float] = []
        coeffs: Optional[list[complex | float]] = None
        data = NonOrthDavidsonData(mat_a, mat_b, guess)
        iterations = 0
        for ii in range(1, actual_maxiter+1):
            iterations += 1
            if ii == 1:
                mval = complex(data.amat.data[0,0]).real
                nval = complex(data.bmat.data[0,0]).real
                lam = mval / (nval + 1e-33)
                q = data.aimages[0] - lam * data.bimages[0]
            else:
                evals, evecs = self.solver(*data.matrices())
                lam = float(evals[0])
                coeffs = [to_scalar(complex(val)) for val in evecs[:,0]]
                diffs = [a - lam * b for a, b in zip(data.aimages, data.bimages)]
                q = combine(coeffs, diffs)

            qnorm = norm(q)
            residuals.append(qnorm)
            if (qnorm < self.errgoal and abs(lam - last_lambda) < self.errgoal) or qnorm < 1e-12:
                break

            if self.debug_level > 1 or (ii == 1 and self.debug_level > 0):
                logger.info("I %d q %.0E E %.10f", ii, qnorm, lam)

            if not (is_null(adiag) or is_null(bdiag)):
                q = q * PseudoInverter()(lam * bdiag - adiag) # type: ignore

            vec = q
            if self.gram_schmidt:
                overlaps = [inner(v, q) for v in data.basis]
                vec = q - combine(overlaps, data.basis)
            vec = vec / (norm(vec) + 1e-33)

            last_lambda = lam
            if ii < actual_maxiter:
                self._expand(mat_a, mat_b, vec, data)

        if self.debug_level > 0:
            logger.info("I %d q %.0E E %.10f", iterations, residuals[-1], lam)

        res = data.basis[0] if coeffs is None else combine(coeffs, data.basis)
        if res.dtype == phi.dtype:
            phi[...] = res

        return NonOrthDavidsonResult(array=res,
                                     value=lam,
                                     time=time.time() - stamp,
                                     residuals=residuals,
                                     iterations=iterations)

    def _expand[T: ArrayLike](
            self,
            mat_a: BigMatrix[T],
            mat_b: BigMatrix[T],
            vec: T,
            data: NonOrthDavidsonData[T]) -> None:
        aimage, bimage = mat_a.product(vec), mat_b.product(vec)
        # non-negative first row of N
        if inner(data.basis[0], bimage).real < 0.0:
            vec, aimage, bimage = -vec, -aimage, -bimage

        data.basis.append(vec)
        data.aimages.append(aimage)
        data.bimages.append(bimage)
        data.bmat.expand([inner(v, bimage) for v in data.basis])
        data.amat.expand([inner(v, aimage) for v in data.basis])

    def _check_input[T: ArrayLike](self, mat_a: BigMatrix[T], mat_b: BigMatrix[T], phi: T) -> None:
        if mat_a.size() != mat_b.size():
            raise ValueError("A and B must act on vectors of the same size.")
        if norm(phi) == 0.0:
            raise ValueError("Initial vector must have a norm above zero.")
        if size(phi) != mat_a.size():
            raise ValueError(f"Size of the initial vector ({size(phi)}) does not match the operator size ({mat_a.size()}).")
