"""
Base two-equation k-x turbulence model.

k is the turbulent kinetic energy; x is a second transported variable
(dissipation rate, specific dissipation rate, ...) supplied as a
``TransportVariable``. Eddy viscosity and production follow from both.
"""
from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Iterable

import numpy as np

from ransclosure.fields.discretization import convection, face_mass_flux, laplacian
from ransclosure.mesh.boundary import apply_boundary_conditions, for_field
from ransclosure.turbulence.eddy_viscosity import EddyViscosityModel
from ransclosure.turbulence.strain import StrainModel
from ransclosure.turbulence.wall import (
    WallModel,
    equilibrium_friction_velocity,
    floored_distance,
    standard_friction_velocity,
    wall_eddy_viscosity,
    wall_kinetic_energy,
    wall_production,
)

if TYPE_CHECKING:
    import numpy.typing as npt
    from ransclosure.config import FluidProperties
    from ransclosure.fields.matrix import MeshMatrix
    from ransclosure.mesh.boundary import BoundaryCondition
    from ransclosure.mesh.law_of_wall import LawOfWall
    from ransclosure.mesh.mesh import Mesh
    from ransclosure.turbulence.variables import ModelCoefficients, TransportVariable

logger = logging.getLogger(__name__)


class KXModel(EddyViscosityModel):
    """
    Generic two-equation eddy-viscosity model.

    The fields ``k``, ``x``, ``eddy_mu`` and ``Pk`` are owned by the model. k and
    x are produced by ``solve`` and persist between calls; eddy viscosity and
    production are rebuilt by every ``add_turbulent_stress``.
    """
    default_wall_model = WallModel.LAUNDER

    def __init__(
        self,
        mesh: Mesh,
        U: npt.NDArray[np.float64],
        fluid: FluidProperties,
        boundaries: Iterable[BoundaryCondition] = (),
        F: npt.NDArray[np.float64] | None = None,
        *,
        variable: TransportVariable,
        strain_model: StrainModel | str = StrainModel.STRAIN,
        wall_model: WallModel | str | None = None,
        coefficients: ModelCoefficients | None = None,
        k0: float = 1.0e-4,
        x0: float | None = None,
    ) -> None:
        """
        Initialize the model.

        Args:
            variable: The second transport variable (e.g. ``Epsilon()``, ``Omega()``).
            coefficients: Model coefficients; the variable's defaults when omitted.
            k0: Initial turbulent kinetic energy.
            x0: Initial value of the second variable; the variable's default when omitted.
        """
        super().__init__(mesh, U, fluid, boundaries, F, strain_model=strain_model, wall_model=wall_model)
        self.variable = variable
        self.coefficients = coefficients or variable.default_coefficients()

        self.k_under_relaxation: float = 0.7
        self.x_under_relaxation: float = 0.7

        self.k = mesh.cell_field(k0)
        self.x = mesh.cell_field(variable.initial_value if x0 is None else x0)
        self.Pk = mesh.cell_field(0.0)

        logger.info(f"Created {self!r} with {self.coefficients}")

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(k-{self.variable.name}, cells={self.mesh.n_cells}, "
                f"strain_model={self.strain_model.value}, wall_model={self.wall_model.value})")

    @property
    def cmu(self) -> float:
        return self.coefficients.cmu

    def enroll(self) -> None:
        self.params.enroll("k_UR", self, "k_under_relaxation")
        self.params.enroll("x_UR", self, "x_under_relaxation")
        self.params.enroll("Cmu", self.coefficients, "cmu")
        self.params.enroll("SigmaK", self.coefficients, "sigma_k")
        self.params.enroll("SigmaX", self.coefficients, "sigma_x")
        self.params.enroll("C1x", self.coefficients, "c1x")
        self.params.enroll("C2x", self.coefficients, "c2x")
        super().enroll()

    def turbulent_kinetic_energy(self) -> npt.NDArray[np.float64]:
        return self.k

    def calc_eddy_mu(self) -> None:
        self.eddy_mu[:] = self.variable.eddy_viscosity(self.k, self.x, self.rho, self.cmu)

    def calc_x(self, ustar: float, kappa: float, y: float) -> float:
        return self.variable.wall_value(ustar, kappa, y, self.cmu)

    def wall_coefficient(self, cell: int) -> float:
        """Cmu used by the wall function in ``cell``."""
        return self.cmu

    def calc_eddy_viscosity(self, grad_u: npt.NDArray[np.float64]) -> None:
        self.calc_eddy_mu()
        self.Pk[:] = self.strain_invariant(grad_u) * self.eddy_mu

    def apply_wall_function(self, face: int, law_of_wall: LawOfWall) -> None:
        """
        Replace k, x, eddy viscosity (and for the equilibrium model, production) in
        the owner cell of a wall face by values from the law of the wall.
        """
        if self.wall_model == WallModel.NONE:
            return

        mesh = self.mesh
        c1 = int(mesh.face_owner[face])
        c2 = int(mesh.face_neighbour[face])
        y = floored_distance(mesh.wall_distance(face))
        cmu = self.wall_coefficient(c1)

        # 1) friction velocity
        if self.wall_model == WallModel.STANDARD:
            ustar = standard_friction_velocity(law_of_wall, self.nu, float(np.linalg.norm(self.U[c1])), y)
            self.k[c1] = wall_kinetic_energy(ustar, cmu)
        else:
            ustar = equilibrium_friction_velocity(cmu, float(self.k[c1]))

        # 2) second variable
        self.x[c1] = self.calc_x(ustar, law_of_wall.kappa, y)

        # 3) eddy viscosity
        self.eddy_mu[c1] = wall_eddy_viscosity(law_of_wall, self.rho, self.nu, ustar, y)

        # 4) turbulence generation
        if self.wall_model == WallModel.LAUNDER:
            self.Pk[c1] = wall_production(self.U[c2] - self.U[c1], y, ustar, law_of_wall.kappa, self.eddy_mu[c1])

    def transport_boundaries(self, field_name: str) -> list[BoundaryCondition]:
        return for_field(self.boundaries, field_name)

    def _transport_matrix(
        self,
        phi: npt.NDArray[np.float64],
        sigma: float,
        F: npt.NDArray[np.float64],
        boundaries: list[BoundaryCondition],
        su: npt.NDArray[np.float64],
        sp: npt.NDArray[np.float64],
    ) -> MeshMatrix:
        mesh = self.mesh
        n = mesh.n_cells
        volumes = mesh.cell_volumes

        gamma = self.rho * self.nu + self.eddy_mu / sigma
        M = convection(mesh, F, phi) - laplacian(mesh, phi, gamma, boundaries)
        M.add_source(su[:n] * volumes)
        M.add_diagonal(sp[:n] * volumes)

        if not self.fluid.steady:
            dt = self.fluid.time_step
            if dt is None or not dt > 0.0:
                raise ValueError(f"A transient solve (steady=False) needs a positive time_step, got {dt}.")
            ddt = self.rho * volumes / dt
            M.add_diagonal(ddt)
            M.add_source(ddt * phi[:n])
        return M

    def solve(self) -> None:
        """
        Solve the k and x transport equations once.

        Uses the eddy viscosity and production of the last ``add_turbulent_stress``.
        The x equation is pinned to the wall-function value in wall-adjacent cells.
        """
        mesh = self.mesh
        n = mesh.n_cells
        c = self.coefficients
        F = self.F if self.F is not None else face_mass_flux(mesh, self.U, self.rho)

        k_bcs = self.transport_boundaries("k")
        x_bcs = self.transport_boundaries(self.variable.name)
        apply_boundary_conditions(mesh, self.k, k_bcs)
        apply_boundary_conditions(mesh, self.x, x_bcs)

        # k equation
        sp_k = self.variable.k_sink(self.k, self.x, self.rho, c.cmu)
        Mk = self._transport_matrix(self.k, c.sigma_k, F, k_bcs, self.Pk, sp_k)
        Mk.relax(self.k, self.k_under_relaxation)
        self.k[:n] = Mk.solve()
        apply_boundary_conditions(mesh, self.k, k_bcs)

        # x equation
        su_x, sp_x = self.variable.x_sources(self.k, self.x, self.Pk, self.rho, c)
        Mx = self._transport_matrix(self.x, c.sigma_x, F, x_bcs, su_x, sp_x)
        Mx.relax(self.x, self.x_under_relaxation)
        if self.wall_model != WallModel.NONE:
            cells = self.wall_cells()
            Mx.fix_values(cells, self.x[cells])
        self.x[:n] = Mx.solve()
        apply_boundary_conditions(mesh, self.x, x_bcs)

        logger.debug(
            f"k in [{self.k[:n].min():.4g}, {self.k[:n].max():.4g}], "
            f"{self.variable.name} in [{self.x[:n].min():.4g}, {self.x[:n].max():.4g}]"
        )


def wall_friction_velocities(model: KXModel) -> dict[str, float]:
    """
    Mean friction velocity over each wall patch, for reporting.

    With the standard wall model this is the law-of-the-wall value the wall
    function uses; otherwise it is the equilibrium estimate from k.
    """
    mesh = model.mesh
    out: dict[str, float] = {}
    for bc in model.wall_boundaries():
        if bc.faces.size == 0:
            continue
        values = []
        for face in bc.faces:
            c1 = int(mesh.face_owner[face])
            if model.wall_model == WallModel.STANDARD:
                y = floored_distance(mesh.wall_distance(int(face)))
                speed = float(np.linalg.norm(model.U[c1]))
                values.append(standard_friction_velocity(bc.law_of_wall, model.nu, speed, y))
            else:
                values.append(equilibrium_friction_velocity(model.wall_coefficient(c1), float(model.k[c1])))
        out[bc.patch] = math.fsum(values) / len(values)
    return out
