"""
Demo Cases
==========
Ready-made setups that exercise the closures without an external solver.

The channel case stands in for the surrounding Navier-Stokes solver: it owns
the velocity field, keeps its ghost values in sync with the boundary
descriptors and hands a fresh momentum operator to the closure every outer
iteration. It does not solve for the velocity.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, Any

import numpy as np

from ransclosure.config import FluidProperties, TurbulenceConfig
from ransclosure.fields.matrix import MeshMatrix
from ransclosure.mesh.boundary import (
    BoundaryCondition,
    apply_boundary_conditions,
    fixed_value,
    for_field,
    wall,
    zero_gradient,
)
from ransclosure.mesh.mesh import Mesh
from ransclosure.turbulence.eddy_viscosity import EddyViscosityModel
from ransclosure.turbulence.two_equation import KXModel, wall_friction_velocities

if TYPE_CHECKING:
    import numpy.typing as npt
    from ransclosure.turbulence.base import TurbulenceModel

logger = logging.getLogger(__name__)


@dataclass
class ChannelCase:
    """Plane channel between walls at y = 0 and y = height, fed by a uniform inlet."""
    nx: int = 20
    ny: int = 16
    length: float = 1.0
    height: float = 0.1
    bulk_velocity: float = 1.0
    fluid: FluidProperties = field(default_factory=FluidProperties)
    turbulence_intensity: float = 0.05
    mixing_length_ratio: float = 0.07

    mesh: Mesh = field(init=False)
    U: npt.NDArray[np.float64] = field(init=False)
    boundaries: list[BoundaryCondition] = field(init=False)

    def __post_init__(self) -> None:
        self.mesh = Mesh.channel(self.nx, self.ny, self.length, self.height)
        self.U = self.initial_velocity()
        self.boundaries = self.make_boundaries()
        apply_boundary_conditions(self.mesh, self.U, for_field(self.boundaries, "U"))

    @property
    def inlet_k(self) -> float:
        return 1.5 * (self.turbulence_intensity * self.bulk_velocity) ** 2

    @property
    def inlet_epsilon(self) -> float:
        length_scale = self.mixing_length_ratio * self.height
        return 0.09 ** 0.75 * self.inlet_k ** 1.5 / length_scale

    @property
    def inlet_omega(self) -> float:
        return self.inlet_epsilon / (0.09 * self.inlet_k)

    def initial_velocity(self) -> npt.NDArray[np.float64]:
        """1/7th power-law profile with the requested bulk velocity."""
        y = self.mesh.cell_centers[:, 1]
        eta = np.clip(np.minimum(y, self.height - y) / (0.5 * self.height), 0.0, 1.0)
        U = np.zeros((self.mesh.n_total, 3), dtype=np.float64)
        U[:, 0] = (8.0 / 7.0) * self.bulk_velocity * eta ** (1.0 / 7.0)
        return U

    def make_boundaries(self) -> list[BoundaryCondition]:
        m = self.mesh
        inlet_u = np.array([self.bulk_velocity, 0.0, 0.0])
        return [
            fixed_value(m, "U", "left", inlet_u),
            zero_gradient(m, "U", "right"),
            wall(m, "bottom"),
            wall(m, "top"),
            fixed_value(m, "k", "left", self.inlet_k),
            fixed_value(m, "epsilon", "left", self.inlet_epsilon),
            fixed_value(m, "omega", "left", self.inlet_omega),
        ]

    def build(self, config: TurbulenceConfig) -> TurbulenceModel:
        model = config.build(self.mesh, self.U, self.fluid, self.boundaries)
        if isinstance(model, KXModel):
            model.k[:] = self.inlet_k
            model.x[:] = self.inlet_epsilon if model.variable.name == "epsilon" else self.inlet_omega
        return model

    def run(self, config: TurbulenceConfig, iterations: int = 10) -> dict[str, Any]:
        """
        Assemble the turbulent stress and advance the turbulence fields.

        Returns:
            Summary with the final eddy-viscosity range, the momentum operator and,
            for k-x models, the mean wall friction velocity per wall patch.
        """
        if iterations < 1:
            raise ValueError(f"At least one iteration is needed, got {iterations}.")
        model = self.build(config)
        logger.info(f"Running {model!r} on {self.mesh!r} for {iterations} iterations")
        n = self.mesh.n_cells
        for iteration in range(1, iterations + 1):
            M = MeshMatrix.zeros(n, 3)
            model.add_turbulent_stress(M)
            model.solve()
            if isinstance(model, EddyViscosityModel):
                logger.info(
                    f"Iteration {iteration}: eddy_mu in "
                    f"[{model.eddy_mu[:n].min():.4e}, {model.eddy_mu[:n].max():.4e}]"
                )

        summary: dict[str, Any] = {"model": repr(model), "operator": M}
        if isinstance(model, EddyViscosityModel):
            summary["eddy_mu_min"] = float(model.eddy_mu[:n].min())
            summary["eddy_mu_max"] = float(model.eddy_mu[:n].max())
        if isinstance(model, KXModel):
            summary["ustar"] = wall_friction_velocities(model)
            for patch, ustar in summary["ustar"].items():
                logger.info(f"Wall '{patch}': mean friction velocity {ustar:.4e}")
        return summary
