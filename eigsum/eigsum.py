# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Optional, Sequence
from dataclasses import dataclass
import numpy as np

from .backend import ArrayNamespace, DType, Device, get_namespace
from .bigmatrix import BigMatrix
from .contractor import OptimizeKind, DEFAULT_OPTIMIZER
from .matrixoperator import MatrixOperator
from .einsumoperator import EinsumOperator
from .sumoperator import SumOperator
from .preconditioner import DavidsonPrecond, PreconditionerFactory
from .matrixeigenvaluedecomposition import MatrixEigenvalueDecomposition, GeneralizedEigenvalueDecomposition
from .eighsolver import EigHSolver
from .eigsolver import EigSolver
from .generalizedeighsolver import GeneralizedEigHSolver
from .davidson import Davidson
from .nonorthdavidson import NonOrthDavidson
from .powermethod import PowerMethod

#-------------------------------------------------------------------------------------------------
# Construction wrapper
@dataclass(frozen=True)
class EigSum[NDArray: Any]:

    #: Array namespace for the underlying array library.
    namespace: ArrayNamespace[NDArray]

    def __init__(self, namespace: Any) -> None:
        object.__setattr__(self, "namespace", get_namespace(namespace))

    #-------------------------------------------------------------------------------------------------
    # operators

    def matrix_operator(
            self,
            matrix: NDArray,
            vec_shape: Optional[Sequence[int]] = None,
            use_diag: bool = True) -> MatrixOperator[NDArray]:
        """
        Dense square matrix acting on flattened operands of shape vec_shape.
        """
        return MatrixOperator(matrix, vec_shape, use_diag)

    def einsum_operator(
            self,
            eq: str,
            *ops: NDArray,
            optimizer: OptimizeKind = DEFAULT_OPTIMIZER) -> EinsumOperator[NDArray]:
        """
        Operator defined by an einsum equation, the last operand is the vector.
        """
        return EinsumOperator(eq, *ops, optimizer=optimizer)

    def sum_operator(self, *ops: BigMatrix[NDArray]) -> SumOperator[NDArray]:
        """
        Sum of operators acting on the same vector space.
        """
        return SumOperator(*ops)

    #-------------------------------------------------------------------------------------------------
    # solvers

    def davidson(
            self, *,
            maxiter: int = 2,
            errgoal: float = 1e-4,
            miniter: int = 1,
            hermitian: bool = True,
            debug_level: int = -1,
            npass: int = 1,
            preconditioner: PreconditionerFactory = DavidsonPrecond,
            seed: Optional[int] = None,
            eigh_solver: MatrixEigenvalueDecomposition = EigHSolver(),
            eig_solver: MatrixEigenvalueDecomposition = EigSolver()
            ) -> Davidson:
        """
        Davidson eigenvalue solver with deflation for several eigenpairs.
        """
        return Davidson(maxiter=maxiter, errgoal=errgoal, miniter=miniter, hermitian=hermitian,
                        debug_level=debug_level, npass=npass, preconditioner=preconditioner,
                        seed=seed, eigh_solver=eigh_solver, eig_solver=eig_solver)

    def nonorth_davidson(
            self, *,
            maxiter: int = 2,
            errgoal: float = 1e-4,
            debug_level: int = -1,
            gram_schmidt: bool = False,
            precondition: bool = False,
            solver: GeneralizedEigenvalueDecomposition = GeneralizedEigHSolver()
            ) -> NonOrthDavidson:
        """
        Davidson solver for the generalized problem :math:`A x = \\lambda B x`.
        """
        return NonOrthDavidson(maxiter=maxiter, errgoal=errgoal, debug_level=debug_level,
                               gram_schmidt=gram_schmidt, precondition=precondition,
                               solver=solver)

    def power_method(
            self, *,
            maxiter: int = 1000,
            errgoal: float = 1e-4,
            debug_level: int = 0) -> PowerMethod:
        """
        Power iteration for the eigenvalues of largest magnitude.
        """
        return PowerMethod(maxiter=maxiter, errgoal=errgoal, debug_level=debug_level)

    #-------------------------------------------------------------------------------------------------
    # operands

    def random(
            self,
            *shape: int,
            dtype: Optional[DType] = None,
            device: Device = None,
            seed: Optional[int] = None) -> NDArray:
        """
        Operand with uniformly distributed entries in [-1, 1), e.g. as initial vector.
        """
        xp = self.namespace
        rng = np.random.default_rng(seed)
        data = rng.uniform(-1.0, 1.0, size=shape)
        if dtype is None:
            dtype = xp.float64
        return xp.asarray(data, dtype=dtype, device=device)
