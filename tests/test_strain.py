"""Tests for the characteristic strain invariant."""

import numpy as np
import pytest

from ransclosure.turbulence.strain import StrainModel, strain_invariant

# grad[i, j] = dU_j / dx_i
RIGID_ROTATION = np.array([[[0.0, 1.0, 0.0], [-1.0, 0.0, 0.0], [0.0, 0.0, 0.0]]])
PURE_SHEAR = np.array([[[0.0, 1.0, 0.0], [1.0, 0.0, 0.0], [0.0, 0.0, 0.0]]])
SIMPLE_SHEAR = np.array([[[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 0.0, 0.0]]])


class TestStrainInvariant:

    def test_rigid_rotation(self):
        assert strain_invariant(RIGID_ROTATION, StrainModel.STRAIN)[0] == pytest.approx(0.0)
        assert strain_invariant(RIGID_ROTATION, StrainModel.ROTATION)[0] == pytest.approx(4.0)
        assert strain_invariant(RIGID_ROTATION, StrainModel.COMBINED)[0] == pytest.approx(0.0)

    def test_pure_shear(self):
        assert strain_invariant(PURE_SHEAR, StrainModel.STRAIN)[0] == pytest.approx(4.0)
        assert strain_invariant(PURE_SHEAR, StrainModel.ROTATION)[0] == pytest.approx(0.0)

    def test_simple_shear_all_models_agree(self):
        # S:S = O:O = 1/2 for dU_x/dy = 1
        values = [strain_invariant(SIMPLE_SHEAR, m)[0] for m in StrainModel]
        np.testing.assert_allclose(values, 1.0)

    def test_accepts_strings(self):
        np.testing.assert_allclose(strain_invariant(SIMPLE_SHEAR, "combined"), 1.0)

    def test_unknown_model(self):
        with pytest.raises(ValueError):
            strain_invariant(SIMPLE_SHEAR, "vorticity")

    def test_non_negative_for_random_gradients(self):
        grad_u = np.random.default_rng(3).normal(size=(50, 3, 3))
        for model in StrainModel:
            assert np.all(strain_invariant(grad_u, model) >= 0.0)
