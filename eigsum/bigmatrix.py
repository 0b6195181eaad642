# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Optional, Protocol
from .backend import ArrayLike

class BigMatrix[T: ArrayLike](Protocol):
    """
    Protocol for a linear operator that is never stored as a dense matrix and only accessible
    through its action on vectors.
    """

    def product(self, vec: T, /) -> T:
        """
        Apply the operator to a vector. The result has the shape of the input.
        """
        ...

    def size(self) -> int:
        """
        Dimension of the vector space the operator acts on.
        """
        ...

    def diag(self) -> Optional[T]:
        """
        Diagonal of the operator in the shape of a vector, or None if it is not available.
        """
        ...
