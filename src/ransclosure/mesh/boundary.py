"""
Boundary Conditions Data Model
==============================
Per-field boundary descriptors passed explicitly to the closures.

A descriptor belongs to one field ("U", "k", "epsilon", ...) and one patch of
faces. Wall descriptors for "U" also carry the law-of-the-wall bundle used by
the wall functions. Faces without a descriptor are treated as zero-gradient.
"""
from __future__ import annotations

from dataclasses import dataclass, field as dataclass_field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Iterable
import logging

import numpy as np

from ransclosure.mesh.law_of_wall import LawOfWall

if TYPE_CHECKING:
    import numpy.typing as npt
    from ransclosure.mesh.mesh import Mesh

logger = logging.getLogger(__name__)


class BoundaryType(StrEnum):
    FIXED_VALUE = "fixed-value"
    ZERO_GRADIENT = "zero-gradient"


@dataclass
class BoundaryCondition:
    field: str
    patch: str
    faces: npt.NDArray[np.int64]
    kind: BoundaryType = BoundaryType.ZERO_GRADIENT
    value: Any = 0.0
    is_wall: bool = False
    law_of_wall: LawOfWall = dataclass_field(default_factory=LawOfWall)

    def __post_init__(self) -> None:
        self.kind = BoundaryType(self.kind)
        self.faces = np.asarray(self.faces, dtype=np.int64).reshape(-1)

    def __repr__(self) -> str:
        wall = ", wall" if self.is_wall else ""
        return f"{self.__class__.__name__}({self.field}@{self.patch}, {self.kind.value}, faces={self.faces.size}{wall})"

    def is_wall_for(self, field_name: str) -> bool:
        """True if this descriptor marks a wall for the given field."""
        return self.is_wall and self.field == field_name


def fixed_value(mesh: Mesh, field_name: str, patch: str, value: Any) -> BoundaryCondition:
    return BoundaryCondition(field_name, patch, mesh.patch_faces(patch), BoundaryType.FIXED_VALUE, value)


def zero_gradient(mesh: Mesh, field_name: str, patch: str) -> BoundaryCondition:
    return BoundaryCondition(field_name, patch, mesh.patch_faces(patch), BoundaryType.ZERO_GRADIENT)


def wall(mesh: Mesh, patch: str, velocity: Any = (0.0, 0.0, 0.0), law_of_wall: LawOfWall | None = None) -> BoundaryCondition:
    """No-slip velocity descriptor flagged as a wall for "U"."""
    return BoundaryCondition(
        field="U",
        patch=patch,
        faces=mesh.patch_faces(patch),
        kind=BoundaryType.FIXED_VALUE,
        value=np.asarray(velocity, dtype=np.float64),
        is_wall=True,
        law_of_wall=law_of_wall or LawOfWall(),
    )


def for_field(boundaries: Iterable[BoundaryCondition], field_name: str) -> list[BoundaryCondition]:
    """Descriptors that belong to ``field_name``."""
    return [bc for bc in boundaries if bc.field == field_name]


def fixed_value_faces(mesh: Mesh, boundaries: Iterable[BoundaryCondition]) -> npt.NDArray[np.bool_]:
    """Mask over all faces that are boundary faces with a fixed-value descriptor."""
    mask = np.zeros(mesh.n_faces, dtype=bool)
    for bc in boundaries:
        if bc.kind == BoundaryType.FIXED_VALUE:
            mask[bc.faces] = True
    return mask


def apply_boundary_conditions(
    mesh: Mesh,
    phi: npt.NDArray[np.float64],
    boundaries: Iterable[BoundaryCondition],
) -> npt.NDArray[np.float64]:
    """
    Fill the ghost slots of ``phi`` in place.

    Every ghost first receives its owner value; fixed-value descriptors then
    overwrite their faces' ghosts.
    """
    mesh.fill_ghosts(phi)
    for bc in boundaries:
        if bc.kind == BoundaryType.FIXED_VALUE and bc.faces.size:
            phi[mesh.face_neighbour[bc.faces]] = bc.value
    return phi
