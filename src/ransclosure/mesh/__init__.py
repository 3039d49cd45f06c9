"""
Mesh layer: finite-volume connectivity, boundary descriptors and the law of the wall.
"""
from ransclosure.mesh.law_of_wall import LawOfWall
from ransclosure.mesh.mesh import Mesh
from ransclosure.mesh.boundary import (
    BoundaryCondition,
    BoundaryType,
    apply_boundary_conditions,
    fixed_value,
    wall,
    zero_gradient,
)

__all__ = [
    "LawOfWall",
    "Mesh",
    "BoundaryCondition",
    "BoundaryType",
    "apply_boundary_conditions",
    "fixed_value",
    "wall",
    "zero_gradient",
]
