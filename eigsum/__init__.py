# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from .eigsum import EigSum
from .findeig import find_eig
from .davidson import Davidson, DavidsonResult, DavidsonState
from .nonorthdavidson import NonOrthDavidson, NonOrthDavidsonResult
from .powermethod import PowerMethod, PowerMethodResult
from .matrixoperator import MatrixOperator
from .einsumoperator import EinsumOperator
from .sumoperator import SumOperator
