# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, MutableSequence, Optional
from dataclasses import dataclass, replace
from enum import Enum
from math import nan
import logging
import time

import numpy as np

from .backend import ArrayLike, namespace_of_arrays, size, complex_dtype, device
from .bigmatrix import BigMatrix
from .operand import norm, inner, combine, is_null, randomize, map_elems, to_scalar
from .findeig import find_eig
from .preconditioner import DavidsonPrecond, PreconditionerFactory
from .projectedmatrix import ProjectedMatrix
from .matrixeigenvaluedecomposition import MatrixEigenvalueDecomposition
from .eighsolver import EigHSolver
from .eigsolver import EigSolver
from .utils import check_pos, check_non_neg, check_guesses

logger = logging.getLogger(__name__)

#: Threshold below which imaginary parts are treated as numerical noise.
APPROX0 = 1e-12
#: Sentinel of the eigenvalue of the previous step.
_NO_LAMBDA = complex(1000.0, 0.0)

class DiagMode(Enum):
    """Arithmetic of the dense eigenvalue decomposition. Switches once from REAL to COMPLEX."""
    REAL = 0
    COMPLEX = 1

class DavidsonState(Enum):
    #: Refining the eigenpair of the current target index.
    TARGETING = 0
    #: The last target met the convergence rule.
    CONVERGED = 1
    #: No independent basis vector could be found, results are best estimates.
    EXHAUSTED = 2
    #: The iteration budget ran out before the last target converged.
    MAXITER = 3

class SubspaceExhausted(RuntimeError):
    """Raised when the residual can not be orthogonalized against the basis."""

@dataclass(kw_only=True)
class DavidsonResult[T: ArrayLike]:
    #: Eigenvectors, one for each initial vector.
    arrays: list[T]
    #: Eigenvalues, one for each initial vector.
    values: list[Any]
    #: Time taken to compute the eigenvectors and eigenvalues.
    time: float
    #: Norm of the residual at each step.
    residuals: list[float]
    #: Number of basis expansions.
    iterations: int
    #: Orthonormal basis of the final subspace.
    basis: list[T]
    #: State the solver finished in.
    state: DavidsonState

class DavidsonData[T: ArrayLike]:
    """Working storage of a single Davidson run."""

    basis: list[T]
    images: list[T]
    proj: ProjectedMatrix
    adiag: Optional[T]
    mode: DiagMode
    state: DavidsonState
    target: int
    eigvals: list[complex]
    evals: Optional[T]
    evecs: Optional[T]
    iterations: int
    rng: np.random.Generator

    def __init__(self, mat: BigMatrix[T], guess: T, nget: int, seed: Optional[int]) -> None:
        xp = namespace_of_arrays(guess)
        image = mat.product(guess)
        self.basis = [guess]
        self.images = [image]
        dtype = complex_dtype(xp, xp.result_type(guess.dtype, image.dtype))
        self.proj = ProjectedMatrix(xp, inner(guess, image).real, dtype, device(guess))
        self.adiag = mat.diag()
        self.mode = DiagMode.REAL
        self.state = DavidsonState.TARGETING
        self.target = 0
        self.eigvals = [complex(nan, nan)] * nget
        self.evals = None
        self.evecs = None
        self.iterations = 0
        self.rng = np.random.default_rng(seed)

@dataclass
class Davidson:
    """
    Davidson eigenvalue solver for linear operators that are only accessible through their
    product with vectors. Several eigenpairs are found by deflation: once the current target
    converges the next one is refined within the same growing subspace. With hermitian set,
    the targets are the smallest eigenvalues in ascending order. Otherwise eigenvalues are ranked
    by descending magnitude.
    """

    #: Maximum number of basis expansions, limited by the size of the operator.
    maxiter: int = 2

    #: Bound for the residual norm and the eigenvalue change between consecutive steps.
    errgoal: float = 1e-4

    #: Minimum number of basis expansions before convergence is accepted.
    miniter: int = 1

    #: Use the hermitian dense eigenvalue decomposition for the projected problem.
    hermitian: bool = True

    #: Verbosity of the progress logging, nothing is logged below 1.
    debug_level: int = -1

    #: Number of Gram-Schmidt passes for new basis vectors.
    npass: int = 1

    #: Maps the current eigenvalue estimate onto the preconditioner applied to the operator diagonal.
    preconditioner: PreconditionerFactory = DavidsonPrecond

    #: Seed for the random vectors replacing residuals that are not independent of the basis.
    seed: Optional[int] = None

    #: Dense solver for hermitian projected problems.
    eigh_solver: MatrixEigenvalueDecomposition = EigHSolver()

    #: Dense solver for general projected problems.
    eig_solver: MatrixEigenvalueDecomposition = EigSolver()

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "npass":
            check_pos(name, value)
        elif name in ("maxiter", "miniter", "errgoal"):
            check_non_neg(name, value)
        super().__setattr__(name, value)

    def __call__[T: ArrayLike](
            self,
            mat: BigMatrix[T],
            phi: MutableSequence[T], /) -> DavidsonResult[T]:
        """
        Find len(phi) eigenpairs starting from the initial vectors phi. The entries of phi are
        replaced by the eigenvectors. Imaginary parts of the eigenvalues are dropped.
        """
        res = self.solve_complex(mat, phi)
        values = []
        for j, val in enumerate(res.values):
            if abs(val.imag) > APPROX0:
                logger.warning("Dropping imaginary part of eigenvalue %d = (%.4E,%.4E).",
                               j, val.real, val.imag)
            values.append(val.real)
        return replace(res, values=values)

    def single[T: ArrayLike](self, mat: BigMatrix[T], phi: T, /) -> DavidsonResult[T]:
        """
        Find a single eigenpair. phi is overwritten with the eigenvector if the dtypes agree,
        the eigenvector is always part of the result.
        """
        vecs = [phi]
        res = self(mat, vecs)
        if vecs[0].dtype == phi.dtype:
            phi[...] = vecs[0]
        return res

    def solve_complex[T: ArrayLike](
            self,
            mat: BigMatrix[T],
            phi: MutableSequence[T], /) -> DavidsonResult[T]:
        """
        Find len(phi) eigenpairs with complex eigenvalues. The entries of phi are replaced by the
        eigenvectors.
        """
        self._check_input(mat, phi)
        stamp = time.time()

        nget = len(phi)
        for j in range(nget):
            phi[j] = phi[j] / norm(phi[j])

        maxsize = mat.size()
        actual_maxiter = min(self.maxiter, maxsize-1)
        if self.debug_level >= 2:
            logger.debug("maxsize-1 = %d, maxiter = %d, actual_maxiter = %d",
                         maxsize-1, self.maxiter, actual_maxiter)

        data = DavidsonData(mat, phi[0], nget, self.seed)
        if self.debug_level > 2:
            logger.debug("Initial Davidson energy = %.10f", data.proj.real[0,0])

        last_lambda = _NO_LAMBDA
        residuals: list[float] = []
        for ii in range(actual_maxiter+1):
            t = data.target
            if ii == 0:
                lam = complex(float(data.proj.real[0,0]), 0.0)
                data.eigvals[0] = lam
                q = data.images[0] - lam.real * data.basis[0]
            else:
                q = self._ritz_pair(data, phi)
                lam = data.eigvals[t]

            qnorm = norm(q)
            residuals.append(qnorm)
            reached = qnorm < self.errgoal and abs(lam - last_lambda) < self.errgoal
            small = qnorm < max(APPROX0, self.errgoal*1e-3)
            last_lambda = lam

            converged = qnorm < 1e-20 or ((reached or small) and ii >= self.miniter)
            if converged or ii == actual_maxiter:
                if t < nget-1 and ii < actual_maxiter:
                    data.target += 1
                    last_lambda = _NO_LAMBDA
                else:
                    data.state = DavidsonState.CONVERGED if converged else DavidsonState.MAXITER
                    self._log_exit(reached, small, qnorm, ii, actual_maxiter)
                    break

            if self.debug_level >= 2 or (ii == 0 and self.debug_level >= 1):
                self._log_step(data, qnorm)

            q = self._precondition(q, lam, data)
            try:
                q = self._orthogonalize(q, data, maxsize)
            except SubspaceExhausted as exc:
                logger.warning("Davidson subspace exhausted: %s", exc)
                data.state = DavidsonState.EXHAUSTED
                break
            self._expand(mat, q, data)

        self._fill_remaining(data, phi)

        if self.debug_level >= 3:
            self._log_orthonormality(data)
        if self.debug_level > 0:
            self._log_step(data, residuals[-1])

        return DavidsonResult(arrays=list(phi),
                              values=list(data.eigvals),
                              time=time.time() - stamp,
                              residuals=residuals,
                              iterations=data.iterations,
                              basis=list(data.basis),
                              state=data.state)

    def _ritz_pair[T: ArrayLike](self, data: DavidsonData[T], phi: MutableSequence[T]) -> T:
        """Diagonalize the projected problem, update the eigenpair of the target and return its residual."""
        t = data.target
        evals, evecs, idx = self._diagonalize(data, t)
        coeffs = self._coefficients(data, evecs, idx)

        phi_t = combine(coeffs, data.basis)
        q = combine(coeffs, data.images)
        lam = complex(evals[idx])
        if abs(lam.imag) <= APPROX0:
            q = q - lam.real * phi_t
        else:
            q = q - lam * phi_t

        # keeps the eigenvector continuous across steps
        if complex(coeffs[0]).real < 0:
            phi_t = -phi_t
            q = -q

        if self.debug_level >= 3:
            logger.debug("complex_diag = %s", data.mode is DiagMode.COMPLEX)
            logger.debug("D = %s", evals)

        phi[t] = phi_t
        data.eigvals[t] = lam
        return q

    def _diagonalize[T: ArrayLike](self, data: DavidsonData[T], num: int) -> tuple[T, T, int]:
        xp = namespace_of_arrays(data.proj.data)
        mat = data.proj.data if data.mode is DiagMode.COMPLEX else data.proj.real
        if self.hermitian:
            evals, evecs = self.eigh_solver(mat)
            idx = num
        else:
            evals, evecs = self.eig_solver(mat)
            idx = find_eig(num, xp.real(evals), xp.imag(evals))
        data.evals, data.evecs = evals, evecs
        return evals, evecs, idx # type: ignore

    def _coefficients[T: ArrayLike](self, data: DavidsonData[T], evecs: T, idx: int) -> list[complex | float]:
        xp = namespace_of_arrays(evecs)
        col = evecs[:,idx]
        if data.mode is DiagMode.REAL and norm(xp.imag(col)) <= APPROX0:
            return [float(val) for val in xp.real(col)]
        return [complex(val) for val in col]

    def _precondition[T: ArrayLike](self, q: T, lam: complex, data: DavidsonData[T]) -> T:
        if is_null(data.adiag):
            return q
        cond = map_elems(data.adiag, self.preconditioner(lam.real)) # type: ignore
        return q * cond

    def _orthogonalize[T: ArrayLike](self, q: T, data: DavidsonData[T], maxsize: int) -> T:
        """
        Gram-Schmidt passes of q against the basis. Every pass starts from a unit vector, a
        projection that removes more than 30% of the norm is repeated once.
        """
        basis = data.basis
        qn = norm(q)
        if qn > 0.0:
            q = q / qn
        count = 0
        npass = 0
        while npass < self.npass:
            count += 1
            q = self._project_out(q, basis)
            qn = norm(q)
            if 1e-10 <= qn < 0.7:
                q = self._project_out(q, basis)
                qn = norm(q)

            if qn < 1e-10:
                if self.debug_level >= 2:
                    logger.debug("Vector not independent, randomizing")
                q = randomize(basis[-1], data.rng)
                if len(basis) >= maxsize:
                    raise SubspaceExhausted("maximum Hilbert space size reached")
                if count > self.npass * 3:
                    raise SubspaceExhausted("orthogonalization failed repeatedly")
                q = q / norm(q)
                continue

            q = q / qn
            npass += 1
        return q

    def _project_out[T: ArrayLike](self, q: T, basis: list[T]) -> T:
        overlaps = [inner(vec, q) for vec in basis]
        for vec, ovlp in zip(basis, overlaps):
            q = q - to_scalar(ovlp) * vec
        return q

    def _expand[T: ArrayLike](self, mat: BigMatrix[T], q: T, data: DavidsonData[T]) -> None:
        image = mat.product(q)
        data.basis.append(q)
        data.images.append(image)
        ni = len(data.basis) - 1

        col = [inner(vec, image) for vec in data.basis]
        if self.hermitian:
            data.proj.expand(col)
        else:
            row = [inner(q, data.images[k]) for k in range(ni)] + [col[ni]]
            data.proj.expand(col, row)

        if data.mode is DiagMode.REAL and sum(val.imag**2 for val in col)**0.5 > self.errgoal:
            data.mode = DiagMode.COMPLEX
            if self.debug_level >= 2:
                logger.debug("Switching to complex diagonalization")
        data.iterations += 1

    def _fill_remaining[T: ArrayLike](self, data: DavidsonData[T], phi: MutableSequence[T]) -> None:
        """Eigenpairs that were never targeted are taken from the last decomposition."""
        t = data.target
        if t+1 >= len(phi):
            return
        if data.evals is None or data.evecs is None:
            logger.warning("No decomposition available, eigenpairs %d to %d keep their initial vectors.",
                           t+1, len(phi)-1)
            return

        xp = namespace_of_arrays(data.evecs)
        dim = data.evecs.shape[0]
        for j in range(t+1, len(phi)):
            if j >= dim:
                logger.warning("Subspace of dimension %d is too small for eigenpair %d.", dim, j)
                continue
            idx = j if self.hermitian else find_eig(j, xp.real(data.evals), xp.imag(data.evals))
            coeffs = self._coefficients(data, data.evecs, idx)
            phi[j] = combine(coeffs, data.basis[:dim])
            data.eigvals[j] = complex(data.evals[idx])

    def _check_input[T: ArrayLike](self, mat: BigMatrix[T], phi: MutableSequence[T]) -> None:
        check_guesses(phi)
        if any(norm(vec) == 0.0 for vec in phi):
            raise ValueError("Initial vectors must have a norm above zero.")
        if size(phi[0]) != mat.size():
            raise ValueError(f"Size of the initial vectors ({size(phi[0])}) does not match the operator size ({mat.size()}).")

    def _log_step[T: ArrayLike](self, data: DavidsonData[T], qnorm: float) -> None:
        eigs = []
        for val in data.eigvals:
            if val.real != val.real:
                break
            if abs(val.imag) > APPROX0:
                eigs.append(f"({val.real:.10f},{val.imag:.10f})")
            else:
                eigs.append(f"{val.real:.10f}")
        logger.info("I %d q %.0E E %s", data.iterations, qnorm, " ".join(eigs))

    def _log_exit(self, reached: bool, small: bool, qnorm: float, ii: int, actual_maxiter: int) -> None:
        if self.debug_level < 3:
            return
        if reached:
            logger.debug("Exiting Davidson because errgoal=%.0E reached", self.errgoal)
        elif small or ii < self.miniter:
            logger.debug("Exiting Davidson because small residual=%.0E obtained", qnorm)
        elif ii == actual_maxiter:
            logger.debug("Exiting Davidson because ii == actual_maxiter")

    def _log_orthonormality[T: ArrayLike](self, data: DavidsonData[T]) -> None:
        basis = data.basis
        dev = max((abs(inner(basis[i], basis[j]) - (1.0 if i == j else 0.0))
                   for i in range(len(basis)) for j in range(i, len(basis))), default=0.0)
        logger.debug("Maximum deviation of the basis from orthonormality = %.2E", dev)
