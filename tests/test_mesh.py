"""Tests for the channel mesh, boundary descriptors and ghost handling."""

import numpy as np
import pytest

from ransclosure.mesh.boundary import (
    BoundaryCondition,
    BoundaryType,
    apply_boundary_conditions,
    fixed_value,
    fixed_value_faces,
    wall,
    zero_gradient,
)
from ransclosure.mesh.mesh import Mesh


class TestChannelMesh:

    def test_counts(self, mesh):
        assert mesh.n_cells == 12
        assert mesh.n_faces == 17 + 14
        assert mesh.n_total == 12 + 14
        assert mesh.boundary_faces.size == 14
        np.testing.assert_array_equal(mesh.ghost_cells, np.arange(12, 26))

    def test_patches(self, mesh):
        assert {name: mesh.patch_faces(name).size for name in mesh.patches} == {
            "left": 3, "right": 3, "bottom": 4, "top": 4,
        }

    def test_unknown_patch_raises(self, mesh):
        with pytest.raises(KeyError, match="inlet"):
            mesh.patch_faces("inlet")

    def test_volumes_sum_to_domain(self, mesh):
        np.testing.assert_allclose(mesh.cell_volumes.sum(), 0.3)

    def test_cells_are_closed(self, mesh):
        # In-plane area vectors of every cell sum to zero
        summed = np.zeros((mesh.n_cells, 3))
        np.add.at(summed, mesh.face_owner, mesh.face_normals)
        interior = mesh.face_neighbour < mesh.n_cells
        np.add.at(summed, mesh.face_neighbour[interior], -mesh.face_normals[interior])
        np.testing.assert_allclose(summed, 0.0, atol=1e-14)

    def test_wall_distance_is_half_cell(self, mesh):
        for face in mesh.patch_faces("bottom"):
            assert mesh.wall_distance(face) == pytest.approx(0.05)

    def test_boundary_face_weights_take_ghost(self, mesh):
        np.testing.assert_allclose(mesh.face_weights[mesh.boundary_faces], 0.0, atol=1e-14)

    def test_graded_mesh(self):
        graded = Mesh.channel(2, 4, 1.0, 1.0, y_grading=2.0)
        column = graded.cell_volumes[::2]
        np.testing.assert_allclose(column[1:] / column[:-1], 2.0)
        np.testing.assert_allclose(graded.cell_volumes.sum(), 1.0)

    def test_invalid_channel(self):
        with pytest.raises(ValueError):
            Mesh.channel(0, 3, 1.0, 1.0)
        with pytest.raises(ValueError):
            Mesh.channel(2, 3, -1.0, 1.0)

    def test_inconsistent_arrays_rejected(self, mesh):
        with pytest.raises(ValueError, match="cell centres"):
            Mesh(mesh.cell_centers[:-1], mesh.cell_volumes, mesh.face_owner, mesh.face_neighbour,
                 mesh.face_normals, mesh.face_centers)
        with pytest.raises(ValueError):
            Mesh(mesh.cell_centers, mesh.cell_volumes, mesh.face_owner[:-1], mesh.face_neighbour,
                 mesh.face_normals, mesh.face_centers)


class TestGhosts:

    def test_fill_ghosts_copies_owner(self, mesh):
        phi = mesh.cell_field(0.0)
        phi[:mesh.n_cells] = np.arange(mesh.n_cells)
        mesh.fill_ghosts(phi)
        np.testing.assert_array_equal(phi[mesh.ghost_cells], mesh.face_owner[mesh.boundary_faces])

    def test_cell_field_shapes(self, mesh):
        assert mesh.cell_field(1.0).shape == (26,)
        U = mesh.cell_field([1.0, 2.0, 3.0], n_components=3)
        assert U.shape == (26, 3)
        np.testing.assert_array_equal(U[5], [1.0, 2.0, 3.0])


class TestBoundaryConditions:

    def test_apply_fixed_value_over_zero_gradient(self, mesh):
        U = mesh.cell_field([2.0, 0.0, 0.0], n_components=3)
        bcs = [wall(mesh, "bottom"), fixed_value(mesh, "U", "left", [1.0, 0.0, 0.0])]
        apply_boundary_conditions(mesh, U, bcs)
        np.testing.assert_array_equal(U[mesh.face_neighbour[mesh.patch_faces("bottom")]], 0.0)
        np.testing.assert_array_equal(U[mesh.face_neighbour[mesh.patch_faces("left")], 0], 1.0)
        np.testing.assert_array_equal(U[mesh.face_neighbour[mesh.patch_faces("top")], 0], 2.0)

    def test_wall_descriptor(self, mesh):
        bc = wall(mesh, "top")
        assert bc.kind == BoundaryType.FIXED_VALUE
        assert bc.is_wall_for("U")
        assert not bc.is_wall_for("k")
        assert bc.law_of_wall.kappa == pytest.approx(0.41)

    def test_fixed_value_faces_mask(self, mesh):
        mask = fixed_value_faces(mesh, [fixed_value(mesh, "k", "left", 1.0), zero_gradient(mesh, "k", "right")])
        assert mask.sum() == 3
        assert mask[mesh.patch_faces("left")].all()

    def test_kind_accepts_strings(self, mesh):
        bc = BoundaryCondition("k", "left", mesh.patch_faces("left"), "fixed-value", 1.0)
        assert bc.kind is BoundaryType.FIXED_VALUE
        with pytest.raises(ValueError):
            BoundaryCondition("k", "left", mesh.patch_faces("left"), "slip")
