import numpy as np
import array_api_compat as api

backends = [api.array_namespace(np.zeros(1))]

#import torch as tr
#tr.set_default_dtype(tr.float64)
#backends.append(api.array_namespace(tr.zeros(1)))

#import cupy as cp
#backends.append(api.array_namespace(cp.zeros(1)))

def rand_data(xp, *shape: int, seed: int = 0):
    data = np.random.default_rng(seed).random(shape)
    return xp.asarray(data)

def diag_matrix(xp, vals):
    vals = xp.asarray(vals, dtype=xp.float64)
    return xp.eye(vals.shape[0], dtype=xp.float64) * vals

def sym_matrix(xp, n: int, seed: int = 0):
    """Random symmetric matrix with a dominant, well separated diagonal."""
    data = rand_data(xp, n, n, seed=seed)
    data = 0.05 * (data + data.T)
    return data + diag_matrix(xp, [float(i+1) for i in range(n)])

def herm_matrix(xp, n: int, seed: int = 0):
    rng = np.random.default_rng(seed)
    data = rng.random((n, n)) + 1j * rng.random((n, n))
    data = 0.05 * (data + data.conj().T) + np.diag(np.arange(1.0, n+1.0))
    return xp.asarray(data)

def ones(xp, n: int, dtype=None):
    return xp.ones(n, dtype=xp.float64 if dtype is None else dtype)

def orthogonality(xp, vecs) -> float:
    """Maximum deviation of the Gram matrix from the identity."""
    dev = 0.0
    for i, a in enumerate(vecs):
        for j, b in enumerate(vecs):
            val = complex(xp.sum(xp.conj(a) * b))
            dev = max(dev, abs(val - (1.0 if i == j else 0.0)))
    return dev
