"""
Tensor Algebra on Cell Fields
=============================
Point-wise helpers for per-cell vectors ``(n, 3)`` and tensors ``(n, 3, 3)``.

Every function accepts either a single tensor ``(3, 3)`` or a stacked field
``(..., 3, 3)`` and never mutates its input.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


def identity(n: int | None = None) -> npt.NDArray[np.float64]:
    """Identity tensor, or a field of ``n`` identity tensors."""
    eye = np.eye(3, dtype=np.float64)
    if n is None:
        return eye
    return np.broadcast_to(eye, (n, 3, 3)).copy()


def trn(T: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Transpose of every tensor in the field."""
    return np.swapaxes(T, -1, -2).copy()


def sym(T: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Symmetric part, (T + T^T) / 2."""
    return 0.5 * (T + np.swapaxes(T, -1, -2))


def skw(T: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Skew (antisymmetric) part, (T - T^T) / 2."""
    return 0.5 * (T - np.swapaxes(T, -1, -2))


def tr(T: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Trace of every tensor in the field."""
    return np.trace(T, axis1=-2, axis2=-1)


def dev(T: npt.NDArray[np.float64], scale: float = 1.0) -> npt.NDArray[np.float64]:
    """
    Deviatoric projection with trace scaling.

    ``dev(T, a) = T - (a / 3) tr(T) I``. With the default ``a = 1`` the result is
    traceless; ``a = 2`` is the form that appears in the explicit part of the
    Boussinesq stress.

    Args:
        T: Tensor or tensor field.
        scale: Multiplier ``a`` of the removed isotropic part.
    """
    out = np.array(T, dtype=np.float64, copy=True)
    iso = (scale / 3.0) * tr(T)
    for i in range(3):
        out[..., i, i] -= iso
    return out


def double_dot(A: npt.NDArray[np.float64], B: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Double contraction A : B = sum_ij A_ij B_ij."""
    return np.einsum("...ij,...ij->...", A, B)


def mag(v: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Euclidean magnitude along the last axis."""
    return np.linalg.norm(v, axis=-1)


def unit(v: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Unit vector(s); zero vectors stay zero."""
    m = mag(v)
    m = np.where(m > 0.0, m, 1.0)
    return v / m[..., np.newaxis] if np.ndim(v) > 1 else v / m


def scale_tensor(s: npt.NDArray[np.float64], T: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Per-cell scalar times per-cell tensor."""
    return np.asarray(s, dtype=np.float64)[..., np.newaxis, np.newaxis] * T
