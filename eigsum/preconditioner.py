# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Callable, Protocol
from dataclasses import dataclass

from .backend import ArrayLike, namespace_of_arrays

class Preconditioner(Protocol):
    """Protocol for an element-wise map applied to the diagonal of an operator."""

    def __call__[T: ArrayLike](self, vals: T, /) -> T:
        """
        Map the diagonal elements onto the factors multiplied with the residual.
        """
        ...

#: Creates a preconditioner for the current eigenvalue estimate.
type PreconditionerFactory = Callable[[float], Preconditioner]

@dataclass(frozen=True)
class DavidsonPrecond:
    """
    :math:`f(x) = 1/(\\theta - x)`. Entries with :math:`x = \\theta` are mapped onto zero.
    """

    #: Current eigenvalue estimate.
    theta: float

    def __call__[T: ArrayLike](self, vals: T, /) -> T:
        xp = namespace_of_arrays(vals)
        denom = self.theta - vals
        mask = denom == 0
        safe = xp.where(mask, xp.ones_like(denom), denom)
        return xp.where(mask, xp.zeros_like(denom), 1.0 / safe)

@dataclass(frozen=True)
class LanczosPrecond:
    """
    :math:`f(x) = 1/(\\theta - 1)`, independent of the diagonal. Reduces the Davidson algorithm to
    a rescaled Lanczos iteration.
    """

    #: Current eigenvalue estimate.
    theta: float

    def __call__[T: ArrayLike](self, vals: T, /) -> T:
        xp = namespace_of_arrays(vals)
        return xp.full_like(vals, 1.0 / (self.theta - 1.0 + 1e-33))

@dataclass(frozen=True)
class PseudoInverter:
    """
    :math:`f(x) = 1/x` for :math:`|x| \\geq cut` and zero otherwise.
    """

    cut: float = 1e-15

    def __call__[T: ArrayLike](self, vals: T, /) -> T:
        xp = namespace_of_arrays(vals)
        mask = xp.abs(vals) < self.cut
        safe = xp.where(mask, xp.ones_like(vals), vals)
        return xp.where(mask, xp.zeros_like(vals), 1.0 / safe)
