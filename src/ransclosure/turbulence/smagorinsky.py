from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

import numpy as np

from ransclosure.turbulence.eddy_viscosity import EddyViscosityModel
from ransclosure.turbulence.strain import StrainModel
from ransclosure.turbulence.wall import (
    WallModel,
    floored_distance,
    standard_friction_velocity,
    wall_eddy_viscosity,
)

if TYPE_CHECKING:
    import numpy.typing as npt
    from ransclosure.config import FluidProperties
    from ransclosure.mesh.boundary import BoundaryCondition
    from ransclosure.mesh.law_of_wall import LawOfWall
    from ransclosure.mesh.mesh import Mesh

logger = logging.getLogger(__name__)


class SmagorinskyModel(EddyViscosityModel):
    """
    Algebraic eddy viscosity ``mu_t = rho (Cs Delta)^2 sqrt(S2)`` with the filter
    width ``Delta = V^(1/3)`` of each cell.

    No transport equations; k is not modelled and reported as zero. Only the
    standard wall function applies, since the equilibrium variant needs k.
    """
    default_wall_model = WallModel.STANDARD

    def __init__(
        self,
        mesh: Mesh,
        U: npt.NDArray[np.float64],
        fluid: FluidProperties,
        boundaries: Iterable[BoundaryCondition] = (),
        F: npt.NDArray[np.float64] | None = None,
        *,
        strain_model: StrainModel | str = StrainModel.STRAIN,
        wall_model: WallModel | str | None = None,
        cs: float = 0.17,
    ) -> None:
        super().__init__(mesh, U, fluid, boundaries, F, strain_model=strain_model, wall_model=wall_model)
        if self.wall_model == WallModel.LAUNDER:
            raise ValueError("The 'launder' wall model needs a transported k; use 'standard' or 'none'.")
        self.cs = cs

        delta = np.zeros(mesh.n_total, dtype=np.float64)
        delta[:mesh.n_cells] = np.cbrt(mesh.cell_volumes)
        self.delta = mesh.fill_ghosts(delta)
        logger.info(f"Created {self!r} with Cs={cs}")

    def enroll(self) -> None:
        self.params.enroll("Cs", self, "cs")
        super().enroll()

    def calc_eddy_viscosity(self, grad_u: npt.NDArray[np.float64]) -> None:
        self.eddy_mu[:] = self.rho * (self.cs * self.delta) ** 2 * np.sqrt(self.strain_invariant(grad_u))

    def apply_wall_function(self, face: int, law_of_wall: LawOfWall) -> None:
        if self.wall_model == WallModel.NONE:
            return
        c1 = int(self.mesh.face_owner[face])
        y = floored_distance(self.mesh.wall_distance(face))
        ustar = standard_friction_velocity(law_of_wall, self.nu, float(np.linalg.norm(self.U[c1])), y)
        self.eddy_mu[c1] = wall_eddy_viscosity(law_of_wall, self.rho, self.nu, ustar, y)
