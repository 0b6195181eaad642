# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

"""typing has all classes used in the external API of eigsum."""

from .bigmatrix import BigMatrix
from .matrixoperator import MatrixOperator
from .einsumoperator import EinsumOperator
from .sumoperator import SumOperator

from .preconditioner import Preconditioner, PreconditionerFactory, DavidsonPrecond, LanczosPrecond, PseudoInverter
from .matrixeigenvaluedecomposition import MatrixEigenvalueDecomposition, GeneralizedEigenvalueDecomposition
from .eighsolver import EigHSolver
from .eigsolver import EigSolver
from .generalizedeighsolver import GeneralizedEigHSolver

from .davidson import Davidson, DavidsonResult, DavidsonState, DiagMode
from .nonorthdavidson import NonOrthDavidson, NonOrthDavidsonResult
from .powermethod import PowerMethod, PowerMethodResult

from .eigsum import EigSum
