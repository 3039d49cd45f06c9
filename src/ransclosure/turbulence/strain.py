"""
Characteristic strain magnitude driving turbulence production.
"""
from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Callable

import numpy as np

from ransclosure.fields.operators import double_dot, skw, sym

if TYPE_CHECKING:
    import numpy.typing as npt


class StrainModel(StrEnum):
    STRAIN = "strain"        # Smagorinsky: rate of strain only
    ROTATION = "rotation"    # Baldwin-Lomax: vorticity only
    COMBINED = "combined"    # Kato-Launder: geometric mean of both


def _strain(grad_u: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    S = sym(grad_u)
    return double_dot(S, S)


def _rotation(grad_u: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    O = skw(grad_u)
    return double_dot(O, O)


def _combined(grad_u: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    S = sym(grad_u)
    O = skw(grad_u)
    return np.sqrt(double_dot(S, S) * double_dot(O, O))


_MAGNITUDES: dict[StrainModel, Callable[[npt.NDArray[np.float64]], npt.NDArray[np.float64]]] = {
    StrainModel.STRAIN: _strain,
    StrainModel.ROTATION: _rotation,
    StrainModel.COMBINED: _combined,
}


def strain_invariant(grad_u: npt.NDArray[np.float64], model: StrainModel | str) -> npt.NDArray[np.float64]:
    """
    Twice the squared characteristic magnitude of the velocity gradient.

    Args:
        grad_u: Velocity gradient field, shape (n, 3, 3).
        model: Which part of the gradient to measure.

    Raises:
        ValueError: If ``model`` is not one of the StrainModel values.
    """
    return 2.0 * _MAGNITUDES[StrainModel(model)](grad_u)
