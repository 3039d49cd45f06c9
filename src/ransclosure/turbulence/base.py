"""
Navier-Stokes without source term:
    d(rho*u)/dt + div(rho*uu) = -grad(p) + div(mu*grad(u))
RANS:
    d(rho*U)/dt + div(rho*UU) = -grad(P) + div(V + R)
with the viscous stress V = mu*grad(U) and the Reynolds stress R = -rho*u'u'.

The base model is laminar: it adds only V. Richer models add a model for R.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

import numpy as np

from ransclosure.config import ParameterList
from ransclosure.fields.discretization import grad, laplacian
from ransclosure.fields.operators import scale_tensor, sym
from ransclosure.mesh.boundary import for_field

if TYPE_CHECKING:
    import numpy.typing as npt
    from ransclosure.config import FluidProperties
    from ransclosure.fields.matrix import MeshMatrix
    from ransclosure.mesh.boundary import BoundaryCondition
    from ransclosure.mesh.mesh import Mesh

logger = logging.getLogger(__name__)


class TurbulenceModel:
    """
    Laminar closure and the extension points of every turbulence model.

    The velocity field and the fluid properties are references owned by the
    surrounding solver; the model reads them on every call and never copies them.
    Concurrent calls on one instance are not supported.
    """
    def __init__(
        self,
        mesh: Mesh,
        U: npt.NDArray[np.float64],
        fluid: FluidProperties,
        boundaries: Iterable[BoundaryCondition] = (),
        F: npt.NDArray[np.float64] | None = None,
    ) -> None:
        """
        Initialize the model.

        Args:
            mesh: The finite-volume mesh.
            U: Velocity field over interior and ghost cells, shape (n_total, 3).
            fluid: Density, kinematic viscosity and steadiness flag.
            boundaries: Boundary descriptors of every field the model touches.
            F: Optional face mass flux; computed from U where needed if omitted.
        """
        if U.shape != (mesh.n_total, 3):
            raise ValueError(f"Velocity field must have shape ({mesh.n_total}, 3), got {U.shape}.")
        self.mesh = mesh
        self.U = U
        self.F = F
        self.fluid = fluid
        self.boundaries: list[BoundaryCondition] = list(boundaries)
        self.params = ParameterList("turbulence")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(cells={self.mesh.n_cells})"

    @property
    def rho(self) -> float:
        return self.fluid.density

    @property
    def nu(self) -> float:
        return self.fluid.kinematic_viscosity

    def enroll(self) -> None:
        """Register tunable coefficients in ``params``."""

    def solve(self) -> None:
        """Advance the model's own transport equations (none for the laminar model)."""

    def velocity_gradient(self) -> npt.NDArray[np.float64]:
        """Gradient of U; the ghost slots of U must already hold the boundary values."""
        return grad(self.mesh, self.U)

    def add_turbulent_stress(self, M: MeshMatrix) -> None:
        """Add the viscous stress to the momentum operator: ``M -= lap(U, rho*nu)``."""
        M -= laplacian(self.mesh, self.U, self.fluid.dynamic_viscosity, for_field(self.boundaries, "U"))

    def viscous_stress(self) -> npt.NDArray[np.float64]:
        """V = 2 rho nu sym(grad U)."""
        return scale_tensor(2.0 * self.rho * self.nu, sym(self.velocity_gradient()))

    def reynolds_stress(self) -> npt.NDArray[np.float64]:
        """R; zero without a turbulence model."""
        return np.zeros((self.mesh.n_total, 3, 3), dtype=np.float64)

    def turbulent_kinetic_energy(self) -> npt.NDArray[np.float64]:
        """k; zero without a turbulence model."""
        return np.zeros(self.mesh.n_total, dtype=np.float64)
