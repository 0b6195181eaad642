# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any
import array_api_compat as api
from array_api_compat import device
from array_api_compat import size as _size

from .array_namespace import ArrayNamespace, ArrayLike, Device, DType


def get_namespace(obj: Any) -> ArrayNamespace:
    if not api.is_array_api_obj(obj):
        try:
            obj = obj.zeros(1)
        except Exception as exc:
            raise TypeError("Provided object is not a recognized array or namespace.") from exc
    return api.array_namespace(obj) # type: ignore

def namespace_of_arrays[T: ArrayLike](*arrays: T) -> ArrayNamespace[T]:
    return api.array_namespace(*arrays) # type: ignore

def size(array: ArrayLike) -> int:
    val = _size(array)
    if val is None:
        raise ValueError("Array size is unknown (None).")
    return val

def shape(array: ArrayLike) -> tuple[int, ...]:
    shp = array.shape
    if any(s is None for s in shp):
        raise ValueError("Array shape contains None dimension(s).")
    return shp  # type: ignore

def is_complex(xp: ArrayNamespace, dtype: DType) -> bool:
    return xp.isdtype(dtype, "complex floating")

def complex_dtype(xp: ArrayNamespace, dtype: DType) -> DType:
    """Complex counterpart of a floating point dtype with the same precision."""
    if is_complex(xp, dtype):
        return dtype
    if dtype == xp.float32:
        return xp.complex64
    return xp.complex128
