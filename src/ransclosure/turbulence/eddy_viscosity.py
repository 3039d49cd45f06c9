"""
Eddy viscosity models based on Boussinesq's assumption that the action of the
Reynolds and the viscous stress are similar.

    Traceless(R) = 2 * emu * Traceless(S),   S = (gU + gUt) / 2
    R = emu * gU + emu * dev(gUt, 2) - 2/3 * rho * k * I

Viscous and Reynolds stress together:

    V + R = (mu + emu) * gU + emu * dev(gUt, 2) - 2/3 * rho * k * I
    div(V + R) = div(eff_mu * gU) + div(emu * dev(gUt, 2)) - div(2/3 * rho * k * I)
                    implicit           explicit              absorbed in pressure

The k term is absorbed into the modified pressure p_m = p + 2/3 * rho * k, so the
momentum operator only needs a model for emu.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from typing import TYPE_CHECKING, Iterable

import numpy as np

from ransclosure.fields.discretization import divergence, laplacian
from ransclosure.fields.operators import dev, identity, scale_tensor, sym, trn
from ransclosure.mesh.boundary import for_field
from ransclosure.turbulence.base import TurbulenceModel
from ransclosure.turbulence.strain import StrainModel, strain_invariant
from ransclosure.turbulence.wall import WallModel

if TYPE_CHECKING:
    import numpy.typing as npt
    from ransclosure.config import FluidProperties
    from ransclosure.fields.matrix import MeshMatrix
    from ransclosure.mesh.boundary import BoundaryCondition
    from ransclosure.mesh.law_of_wall import LawOfWall
    from ransclosure.mesh.mesh import Mesh

logger = logging.getLogger(__name__)


class EddyViscosityModel(TurbulenceModel, ABC):
    """
    Abstract eddy-viscosity closure.

    Subclasses supply the bulk eddy viscosity (``calc_eddy_viscosity``) and the
    per-face near-wall override (``apply_wall_function``). The strain and wall
    model selectors are fixed at construction.
    """
    default_wall_model: WallModel = WallModel.STANDARD

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
    ) -> None:
        """
        Initialize the model.

        Args:
            strain_model: Characteristic strain formulation driving production.
            wall_model: Near-wall treatment; the class default when omitted.

        Raises:
            ValueError: If either selector is not a known value.
        """
        super().__init__(mesh, U, fluid, boundaries, F)
        self._strain_model = StrainModel(strain_model)
        self._wall_model = WallModel(wall_model if wall_model is not None else self.default_wall_model)
        self.eddy_mu: npt.NDArray[np.float64] = mesh.cell_field(0.0)

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(cells={self.mesh.n_cells}, "
                f"strain_model={self.strain_model.value}, wall_model={self.wall_model.value})")

    @property
    def strain_model(self) -> StrainModel:
        return self._strain_model

    @property
    def wall_model(self) -> WallModel:
        return self._wall_model

    @abstractmethod
    def calc_eddy_viscosity(self, grad_u: npt.NDArray[np.float64]) -> None:
        """Compute the bulk ``eddy_mu`` on every cell."""
        pass

    @abstractmethod
    def apply_wall_function(self, face: int, law_of_wall: LawOfWall) -> None:
        """Override the near-wall quantities of the owner cell of a wall face."""
        pass

    def strain_invariant(self, grad_u: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Characteristic strain magnitude for the configured strain model."""
        return strain_invariant(grad_u, self.strain_model)

    def wall_boundaries(self) -> list[BoundaryCondition]:
        """Descriptors flagged as walls for the velocity field."""
        return [bc for bc in self.boundaries if bc.is_wall_for("U")]

    def wall_cells(self) -> npt.NDArray[np.int64]:
        """Owner cells of all wall faces."""
        faces = [bc.faces for bc in self.wall_boundaries() if bc.faces.size]
        if not faces:
            return np.empty(0, dtype=np.int64)
        return np.unique(self.mesh.face_owner[np.concatenate(faces)])

    def set_wall_eddy_mu(self) -> None:
        """Apply the wall function to every face of every wall boundary."""
        for bc in self.wall_boundaries():
            if bc.faces.size:
                for face in bc.faces:
                    self.apply_wall_function(int(face), bc.law_of_wall)
                logger.debug(f"Wall function applied on {bc.faces.size} faces of '{bc.patch}'.")

    def add_turbulent_stress(self, M: MeshMatrix) -> None:
        """
        Add the viscous and the modelled Reynolds stress to the momentum operator.

        The eddy viscosity is recomputed and overridden at the walls before either
        term is built; both terms read the same field.
        """
        grad_u = self.velocity_gradient()
        self.calc_eddy_viscosity(grad_u)
        self.set_wall_eddy_mu()
        self.mesh.fill_ghosts(self.eddy_mu)

        eff_mu = self.eddy_mu + self.rho * self.nu
        M -= laplacian(self.mesh, self.U, eff_mu, for_field(self.boundaries, "U"))
        M -= divergence(self.mesh, scale_tensor(self.eddy_mu, dev(trn(grad_u), 2.0)))

        logger.debug(f"eddy_mu range [{self.eddy_mu.min():.4g}, {self.eddy_mu.max():.4g}]")

    def reynolds_stress(self) -> npt.NDArray[np.float64]:
        """R = 2 emu dev(sym(grad U)) - I (2/3) rho k."""
        grad_u = self.velocity_gradient()
        k = self.turbulent_kinetic_energy()
        return (scale_tensor(2.0 * self.eddy_mu, dev(sym(grad_u)))
                - scale_tensor(2.0 * self.rho * k / 3.0, identity(self.mesh.n_total)))
