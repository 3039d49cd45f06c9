from __future__ import annotations

from enum import StrEnum
import logging
from typing import TYPE_CHECKING, Any, Iterable

from ransclosure.turbulence.base import TurbulenceModel
from ransclosure.turbulence.smagorinsky import SmagorinskyModel
from ransclosure.turbulence.two_equation import KXModel
from ransclosure.turbulence.variables import Epsilon, Omega

if TYPE_CHECKING:
    import numpy as np
    import numpy.typing as npt
    from ransclosure.config import FluidProperties
    from ransclosure.mesh.boundary import BoundaryCondition
    from ransclosure.mesh.mesh import Mesh

logger = logging.getLogger(__name__)


class TurbulenceModelType(StrEnum):
    LAMINAR = "laminar"
    SMAGORINSKY = "smagorinsky"
    K_EPSILON = "k-epsilon"
    K_OMEGA = "k-omega"


def make_turbulence_model(
    kind: TurbulenceModelType | str,
    mesh: Mesh,
    U: npt.NDArray[np.float64],
    fluid: FluidProperties,
    boundaries: Iterable[BoundaryCondition] = (),
    F: npt.NDArray[np.float64] | None = None,
    **options: Any,
) -> TurbulenceModel:
    """
    Create and enroll a closure by name.

    Args:
        kind: One of the TurbulenceModelType values.
        options: Model keyword options (``strain_model``, ``wall_model``, ...).

    Raises:
        ValueError: If ``kind`` or any selector in ``options`` is unknown.
    """
    try:
        kind = TurbulenceModelType(kind)
    except ValueError:
        raise ValueError(
            f"Unknown turbulence model '{kind}'. Choose one of {[t.value for t in TurbulenceModelType]}."
        ) from None

    if kind == TurbulenceModelType.LAMINAR:
        if options:
            raise ValueError(f"The laminar model takes no options, got {sorted(options)}.")
        model: TurbulenceModel = TurbulenceModel(mesh, U, fluid, boundaries, F)
    elif kind == TurbulenceModelType.SMAGORINSKY:
        model = SmagorinskyModel(mesh, U, fluid, boundaries, F, **options)
    elif kind == TurbulenceModelType.K_EPSILON:
        model = KXModel(mesh, U, fluid, boundaries, F, variable=Epsilon(), **options)
    else:
        model = KXModel(mesh, U, fluid, boundaries, F, variable=Omega(), **options)

    model.enroll()
    logger.debug(f"Enrolled parameters: {model.params.names()}")
    return model
