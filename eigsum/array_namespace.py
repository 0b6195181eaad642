# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Protocol

#: Device of an array, backend specific.
type Device = Any

#: Data type of an array, backend specific.
type DType = Any

class ArrayLike(Protocol):
    """Minimal structural type for arrays following the array API standard."""

    @property
    def shape(self) -> tuple[int | None, ...]: ...

    @property
    def dtype(self) -> DType: ...

    @property
    def device(self) -> Device: ...

    @property
    def ndim(self) -> int: ...

class ArrayNamespace[T: ArrayLike](Protocol):
    """Array API namespace producing arrays of type T."""

    def __getattr__(self, name: str) -> Any: ...
