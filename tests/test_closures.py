"""Tests for the laminar, Boussinesq and Smagorinsky closures."""

import numpy as np
import pytest

from ransclosure.config import FluidProperties
from ransclosure.fields.discretization import divergence, grad, laplacian
from ransclosure.fields.matrix import MeshMatrix
from ransclosure.fields.operators import dev, scale_tensor, sym, tr, trn
from ransclosure.mesh.boundary import for_field
from ransclosure.turbulence.base import TurbulenceModel
from ransclosure.turbulence.eddy_viscosity import EddyViscosityModel
from ransclosure.turbulence.smagorinsky import SmagorinskyModel
from ransclosure.turbulence.two_equation import KXModel
from ransclosure.turbulence.variables import Epsilon, Omega


def assemble(model):
    M = MeshMatrix.zeros(model.mesh.n_cells, 3)
    model.add_turbulent_stress(M)
    return M


class TestLaminar:

    def test_stress_adds_molecular_laplacian(self, mesh, shear_velocity, fluid, boundaries):
        model = TurbulenceModel(mesh, shear_velocity, fluid, boundaries)
        M = assemble(model)
        expected = -laplacian(mesh, shear_velocity, fluid.dynamic_viscosity, for_field(boundaries, "U"))
        np.testing.assert_allclose(M.matrix.toarray(), expected.matrix.toarray())
        np.testing.assert_allclose(M.source, expected.source)

    def test_viscous_stress(self, mesh, shear_velocity, boundaries):
        fluid = FluidProperties(density=2.0, kinematic_viscosity=3.0e-3)
        model = TurbulenceModel(mesh, shear_velocity, fluid, boundaries)
        expected = 2.0 * 2.0 * 3.0e-3 * sym(grad(mesh, shear_velocity))
        np.testing.assert_allclose(model.viscous_stress(), expected)

    def test_no_turbulence(self, mesh, shear_velocity, fluid):
        model = TurbulenceModel(mesh, shear_velocity, fluid)
        np.testing.assert_array_equal(model.reynolds_stress(), 0.0)
        np.testing.assert_array_equal(model.turbulent_kinetic_energy(), 0.0)
        model.solve()
        assert model.params.names() == []

    def test_velocity_shape_checked(self, mesh, fluid):
        with pytest.raises(ValueError):
            TurbulenceModel(mesh, np.zeros((mesh.n_cells, 3)), fluid)

    def test_fluid_is_shared(self, mesh, shear_velocity):
        fluid = FluidProperties(kinematic_viscosity=1e-5)
        model = TurbulenceModel(mesh, shear_velocity, fluid)
        fluid.kinematic_viscosity = 2e-5
        assert model.nu == 2e-5


class TestBoussinesq:

    @pytest.fixture(params=["standard", "launder"])
    def model(self, request, mesh, shear_velocity, boundaries):
        fluid = FluidProperties(density=1.2, kinematic_viscosity=1e-5)
        model = KXModel(mesh, shear_velocity, fluid, boundaries, variable=Epsilon(),
                        wall_model=request.param, k0=1e-2, x0=1e-3)
        model.k[:mesh.n_cells] += np.linspace(0.0, 1e-2, mesh.n_cells)
        return model

    def test_abstract_hooks_enforced(self, mesh, shear_velocity, fluid):
        with pytest.raises(TypeError):
            EddyViscosityModel(mesh, shear_velocity, fluid)

    def test_reynolds_stress_trace(self, model):
        assemble(model)
        R = model.reynolds_stress()
        np.testing.assert_allclose(tr(R), -2.0 * 1.2 * model.k, rtol=1e-12, atol=1e-14)

    def test_reynolds_stress_is_symmetric(self, model):
        assemble(model)
        R = model.reynolds_stress()
        np.testing.assert_allclose(R, trn(R), atol=1e-14)

    def test_idempotent(self, model):
        M1 = assemble(model)
        mu1 = model.eddy_mu.copy()
        M2 = assemble(model)
        np.testing.assert_array_equal(model.eddy_mu, mu1)
        np.testing.assert_array_equal(M1.matrix.toarray(), M2.matrix.toarray())
        np.testing.assert_array_equal(M1.source, M2.source)

    def test_operator_uses_wall_corrected_viscosity(self, model, mesh, shear_velocity, boundaries):
        M = assemble(model)
        mu = model.eddy_mu

        expected = MeshMatrix.zeros(mesh.n_cells, 3)
        expected -= laplacian(mesh, shear_velocity, mu + 1.2e-5, for_field(boundaries, "U"))
        expected -= divergence(mesh, scale_tensor(mu, dev(trn(grad(mesh, shear_velocity)), 2.0)))
        np.testing.assert_allclose(M.matrix.toarray(), expected.matrix.toarray(), rtol=1e-12)
        np.testing.assert_allclose(M.source, expected.source, rtol=1e-12, atol=1e-15)

    def test_wall_values_override_bulk(self, model, mesh):
        assemble(model)
        cells = model.wall_cells()
        bulk = model.variable.eddy_viscosity(model.k, model.x, model.rho, model.cmu)
        assert not np.allclose(model.eddy_mu[cells], bulk[cells])
        assert np.all(model.eddy_mu[cells] >= 0.0)

    def test_eddy_viscosity_ghosts_filled(self, model, mesh):
        assemble(model)
        owners = mesh.face_owner[mesh.boundary_faces]
        np.testing.assert_array_equal(model.eddy_mu[mesh.ghost_cells], model.eddy_mu[owners])

    def test_selectors_are_read_only(self, model):
        with pytest.raises(AttributeError):
            model.wall_model = "none"
        with pytest.raises(AttributeError):
            model.strain_model = "rotation"


class TestSmagorinsky:

    def test_bulk_eddy_viscosity(self, mesh, shear_velocity, fluid, boundaries):
        model = SmagorinskyModel(mesh, shear_velocity, fluid, boundaries, wall_model="none")
        assemble(model)
        g = grad(mesh, shear_velocity)
        S = sym(g)
        s2 = 2.0 * np.einsum("nij,nij->n", S, S)
        delta = np.cbrt(mesh.cell_volumes)
        expected = (0.17 * delta) ** 2 * np.sqrt(s2[:mesh.n_cells])
        np.testing.assert_allclose(model.eddy_mu[:mesh.n_cells], expected, rtol=1e-12)

    def test_wall_function_non_negative(self, mesh, shear_velocity, fluid, boundaries):
        model = SmagorinskyModel(mesh, shear_velocity, fluid, boundaries)
        assemble(model)
        assert np.all(model.eddy_mu >= 0.0)
        np.testing.assert_array_equal(model.turbulent_kinetic_energy(), 0.0)

    def test_launder_rejected(self, mesh, shear_velocity, fluid):
        with pytest.raises(ValueError, match="launder"):
            SmagorinskyModel(mesh, shear_velocity, fluid, wall_model="launder")

    def test_constant_is_tunable(self, mesh, shear_velocity, fluid):
        model = SmagorinskyModel(mesh, shear_velocity, fluid, wall_model="none")
        model.enroll()
        assemble(model)
        reference = model.eddy_mu.copy()
        model.params.set("Cs", 0.34)
        assemble(model)
        np.testing.assert_allclose(model.eddy_mu, 4.0 * reference, rtol=1e-12)


class TestTwoEquationBulk:

    def test_epsilon_eddy_viscosity(self, mesh, shear_velocity, fluid):
        model = KXModel(mesh, shear_velocity, fluid, variable=Epsilon(), k0=0.02, x0=0.5)
        model.calc_eddy_mu()
        np.testing.assert_allclose(model.eddy_mu, 0.09 * 0.02 ** 2 / 0.5)

    def test_omega_eddy_viscosity(self, mesh, shear_velocity, fluid):
        model = KXModel(mesh, shear_velocity, fluid, variable=Omega(), k0=0.02, x0=4.0)
        model.calc_eddy_mu()
        np.testing.assert_allclose(model.eddy_mu, 0.02 / 4.0)

    def test_production(self, mesh, shear_velocity, fluid):
        model = KXModel(mesh, shear_velocity, fluid, variable=Epsilon(), strain_model="rotation", wall_model="none")
        assemble(model)
        g = grad(mesh, shear_velocity)
        np.testing.assert_allclose(model.Pk, model.strain_invariant(g) * model.eddy_mu)
        assert np.all(model.Pk >= 0.0)

    def test_kinetic_energy_is_the_field(self, mesh, shear_velocity, fluid):
        model = KXModel(mesh, shear_velocity, fluid, variable=Epsilon())
        assert model.turbulent_kinetic_energy() is model.k

    def test_transport_variable_is_abstract(self):
        from ransclosure.turbulence.variables import TransportVariable
        with pytest.raises(TypeError):
            TransportVariable()
