# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

"""
Vector operations the iterative solvers need from their operands. Operands are arrays of an
array API namespace with arbitrary shape, all operations treat them as flat vectors.
"""

from typing import Any, Callable, Optional, Sequence
import numpy as np

from .backend import ArrayLike, namespace_of_arrays, size, shape, device

def to_scalar(val: complex | float) -> complex | float:
    """Return a python float if the imaginary part vanishes, to avoid promoting real operands."""
    val = complex(val)
    return val.real if val.imag == 0.0 else val

def norm(vec: ArrayLike) -> float:
    xp = namespace_of_arrays(vec)
    return float(xp.sqrt(xp.sum(xp.abs(vec)**2)))

def inner(bra: ArrayLike, ket: ArrayLike) -> complex:
    """:math:`\\langle bra|ket \\rangle`, the bra is conjugated."""
    xp = namespace_of_arrays(bra, ket)
    return complex(xp.sum(xp.conj(bra) * ket))

def combine[T: ArrayLike](coeffs: Sequence[complex | float], vecs: Sequence[T]) -> T:
    """Linear combination :math:`\\sum_k c_k v_k` of the first len(coeffs) vectors."""
    if len(coeffs) == 0 or len(coeffs) > len(vecs):
        raise ValueError(f"Can not combine {len(vecs)} vectors with {len(coeffs)} coefficients.")
    res = to_scalar(coeffs[0]) * vecs[0]
    for coeff, vec in zip(coeffs[1:], vecs[1:]):
        res = res + to_scalar(coeff) * vec
    return res

def is_null(vec: Optional[ArrayLike]) -> bool:
    return vec is None or size(vec) == 0

def randomize[T: ArrayLike](vec: T, rng: np.random.Generator) -> T:
    """New operand with the shape, dtype and device of vec and uniformly distributed entries in [-1, 1)."""
    xp = namespace_of_arrays(vec)
    data = rng.uniform(-1.0, 1.0, size=shape(vec))
    return xp.asarray(data, dtype=vec.dtype, device=device(vec))

def map_elems[T: ArrayLike](vec: T, func: Callable[[T], Any]) -> T:
    """Apply a vectorized element-wise function."""
    res = func(vec)
    if res.shape != vec.shape:
        raise ValueError("Element-wise map changed the shape of the operand.")
    return res
