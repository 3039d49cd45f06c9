# kernels.py
from __future__ import annotations

import numpy as np
import numpy.typing as npt
import numba as nb

# ---- JIT'd face -> cell accumulation kernels ----

@nb.njit(cache=True)
def scatter_faces(
    owner: npt.NDArray[np.int64],
    neighbour: npt.NDArray[np.int64],
    n_cells: int,
    face_values: npt.NDArray[np.float64],
) -> npt.NDArray[np.float64]:
    """
    Sum per-face contributions into the cells on both sides of each face.

    The owner receives ``+value`` and the neighbour ``-value``. Neighbours with an
    index ``>= n_cells`` are ghost cells and receive nothing.

    Args:
        owner: Owner cell per face, shape (n_faces,).
        neighbour: Neighbour (or ghost) cell per face, shape (n_faces,).
        n_cells: Number of interior cells.
        face_values: Per-face contributions, shape (n_faces, m).

    Returns:
        Accumulated values, shape (n_cells, m).
    """
    n_faces, m = face_values.shape
    out = np.zeros((n_cells, m), np.float64)
    for f in range(n_faces):
        o = owner[f]
        n = neighbour[f]
        for j in range(m):
            out[o, j] += face_values[f, j]
            if n < n_cells:
                out[n, j] -= face_values[f, j]
    return out


@nb.njit(cache=True)
def scatter_faces_symmetric(
    owner: npt.NDArray[np.int64],
    neighbour: npt.NDArray[np.int64],
    n_cells: int,
    face_values: npt.NDArray[np.float64],
) -> npt.NDArray[np.float64]:
    """Like ``scatter_faces`` but both sides receive ``+value`` (used for diagonals)."""
    n_faces, m = face_values.shape
    out = np.zeros((n_cells, m), np.float64)
    for f in range(n_faces):
        o = owner[f]
        n = neighbour[f]
        for j in range(m):
            out[o, j] += face_values[f, j]
            if n < n_cells:
                out[n, j] += face_values[f, j]
    return out


def as_face_columns(values: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Reshape any per-face array to a contiguous (n_faces, m) float64 block."""
    values = np.asarray(values, dtype=np.float64)
    return np.ascontiguousarray(values.reshape(values.shape[0], -1))
