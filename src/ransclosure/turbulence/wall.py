"""
Wall Treatment
==============
Building blocks of the wall-function procedure applied to wall-adjacent cells.

Near a wall the turbulence length scales are usually under-resolved, so the
bulk values of k, x and eddy viscosity in the first cell are replaced by values
derived from the law of the wall. The per-face procedure itself lives on the
closures (``apply_wall_function``); this module supplies the relations it uses.
"""
from __future__ import annotations

from enum import StrEnum
import logging
import math
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt
    from ransclosure.mesh.law_of_wall import LawOfWall

logger = logging.getLogger(__name__)

WALL_DISTANCE_FLOOR = 1.0e-12
UP_FLOOR = 1.0e-12


class WallModel(StrEnum):
    NONE = "none"
    STANDARD = "standard"    # friction velocity from the law of the wall, k imposed
    LAUNDER = "launder"      # friction velocity from the transported k (equilibrium)


def floored_distance(y: float) -> float:
    if not y > WALL_DISTANCE_FLOOR:
        logger.warning(f"Wall distance {y} below floor, using {WALL_DISTANCE_FLOOR}.")
        return WALL_DISTANCE_FLOOR
    return y


def standard_friction_velocity(law_of_wall: LawOfWall, nu: float, speed: float, y: float) -> float:
    """Friction velocity from the cell speed via the law of the wall."""
    return law_of_wall.get_ustar(nu, speed, y)


def equilibrium_friction_velocity(cmu: float, k: float) -> float:
    """Friction velocity ``Cmu^(1/4) sqrt(k)`` assuming production balances dissipation."""
    return math.pow(cmu, 0.25) * math.sqrt(max(k, 0.0))


def wall_kinetic_energy(ustar: float, cmu: float) -> float:
    """Turbulent kinetic energy in equilibrium with ``ustar``: ``ustar^2 / sqrt(Cmu)``."""
    return ustar * ustar / math.sqrt(cmu)


def wall_eddy_viscosity(
    law_of_wall: LawOfWall,
    rho: float,
    nu: float,
    ustar: float,
    y: float,
) -> float:
    """
    Eddy viscosity that reproduces the wall shear stress of the law of the wall.

    ``mu_t = rho nu (y+ / u+ - 1)``; zero in the viscous sublayer and never
    negative.
    """
    yp = ustar * y / nu
    up = max(law_of_wall.get_up(ustar, nu, yp), UP_FLOOR)
    eddy_mu = rho * nu * (yp / up - 1.0)
    if not np.isfinite(eddy_mu):
        logger.warning(f"Non-finite wall eddy viscosity (ustar={ustar}, y={y}); set to zero.")
        return 0.0
    return max(eddy_mu, 0.0)


def wall_production(
    dU: npt.NDArray[np.float64],
    y: float,
    ustar: float,
    kappa: float,
    eddy_mu: float,
) -> float:
    """
    Production in a wall cell from the resolved and the log-law velocity gradients.

    ``Pk = |dU / y| * ustar / (kappa y) * mu_t``.
    """
    mag_dudy = float(np.linalg.norm(dU / y))
    mag_dudy_log = ustar / (kappa * y)
    return mag_dudy * mag_dudy_log * eddy_mu
