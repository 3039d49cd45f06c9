import numpy as np
import pytest

from ransclosure.config import FluidProperties
from ransclosure.mesh.boundary import apply_boundary_conditions, fixed_value, for_field, wall, zero_gradient
from ransclosure.mesh.mesh import Mesh


@pytest.fixture
def fluid():
    return FluidProperties(density=1.0, kinematic_viscosity=1.0e-5)


@pytest.fixture
def mesh():
    """4 x 3 channel, dx = 0.25, dy = 0.1."""
    return Mesh.channel(4, 3, 1.0, 0.3)


@pytest.fixture
def boundaries(mesh):
    return [
        fixed_value(mesh, "U", "left", np.array([1.0, 0.0, 0.0])),
        zero_gradient(mesh, "U", "right"),
        wall(mesh, "bottom"),
        wall(mesh, "top"),
        fixed_value(mesh, "k", "left", 1.0e-3),
        fixed_value(mesh, "epsilon", "left", 1.0e-3),
        fixed_value(mesh, "omega", "left", 10.0),
    ]


@pytest.fixture
def shear_velocity(mesh, boundaries):
    """Parabolic channel profile with ghosts set from the boundary descriptors."""
    y = mesh.cell_centers[:, 1]
    U = np.zeros((mesh.n_total, 3))
    U[:, 0] = 4.0 * y * (0.3 - y) / 0.09 + 0.1
    return apply_boundary_conditions(mesh, U, for_field(boundaries, "U"))
