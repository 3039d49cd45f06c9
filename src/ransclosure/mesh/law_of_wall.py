"""
Law of the Wall
===============
Analytic near-wall velocity profile attached to wall boundary conditions.

The profile is the two-layer law:

    u+ = y+                       for y+ <= y_lam   (viscous sublayer)
    u+ = ln(E y+) / kappa         for y+ >  y_lam   (log layer)

where ``y_lam`` is the intersection of both branches.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from scipy.optimize import brentq

logger = logging.getLogger(__name__)


@dataclass
class LawOfWall:
    """
    Parameter bundle and root relations of the two-layer wall law.

    Attributes:
        kappa: Von Karman constant.
        E: Log-law constant for smooth walls.
    """
    kappa: float = 0.41
    E: float = 9.793
    y_lam: float = field(init=False)

    def __post_init__(self) -> None:
        if self.kappa <= 0.0:
            raise ValueError(f"kappa must be positive, got {self.kappa}.")
        if self.E <= 1.0:
            raise ValueError(f"E must be greater than 1, got {self.E}.")
        # Both branches only meet if E / kappa > e
        if math.log(self.E / self.kappa) <= 1.0:
            raise ValueError(
                f"Sublayer and log layer do not intersect for kappa={self.kappa}, E={self.E}; "
                f"E / kappa must exceed e."
            )
        self.y_lam = self._intersection()

    def _intersection(self) -> float:
        # y = ln(E y) / kappa has its upper root above the minimum at 1/kappa
        def residual(yp: float) -> float:
            return yp - math.log(self.E * yp) / self.kappa

        lo = 1.0 / self.kappa
        hi = 2.0 * lo
        while residual(hi) <= 0.0:
            hi *= 2.0
        return float(brentq(residual, lo, hi))

    def get_up(self, ustar: float, nu: float, yp: float) -> float:
        """
        Dimensionless velocity u+ at dimensionless distance y+.

        Args:
            ustar: Friction velocity (unused by the two-layer law, kept for variants that need it).
            nu: Kinematic viscosity.
            yp: Dimensionless wall distance.
        """
        if yp <= self.y_lam:
            return yp
        return math.log(self.E * yp) / self.kappa

    def get_ustar(self, nu: float, U: float, y: float) -> float:
        """
        Friction velocity from the tangential speed ``U`` at wall distance ``y``.

        Tries the sublayer relation ``ustar = sqrt(nu U / y)`` first; if that puts the
        point in the log layer, solves ``U / ustar = ln(E ustar y / nu) / kappa``.

        Args:
            nu: Kinematic viscosity.
            U: Speed of the wall-adjacent cell relative to the wall.
            y: Wall distance of the cell centre.
        """
        if U <= 0.0 or y <= 0.0:
            return 0.0

        ustar = math.sqrt(nu * U / y)
        if ustar * y / nu <= self.y_lam:
            return ustar

        def residual(us: float) -> float:
            return us * math.log(self.E * us * y / nu) - self.kappa * U

        # In the log layer u+ < y+, so the root lies above the sublayer estimate;
        # residual(U) > 0 because U y / nu > y_lam^2 here.
        ustar = float(brentq(residual, ustar, U, xtol=1e-14, rtol=1e-12))
        logger.debug(f"Log-law friction velocity {ustar:.6g} for U={U:.6g}, y={y:.6g}")
        return ustar
