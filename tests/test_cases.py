"""Tests for the demo channel case and the command-line entry point."""

import json
import logging

import numpy as np
import pytest

from ransclosure.__main__ import build_parser, main
from ransclosure.cases import ChannelCase
from ransclosure.config import TurbulenceConfig
from ransclosure.turbulence.two_equation import KXModel


@pytest.fixture
def case():
    return ChannelCase(nx=6, ny=6)


@pytest.fixture
def reset_package_logger():
    yield
    logger = logging.getLogger("ransclosure")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True


class TestChannelCase:

    def test_velocity_ghosts_follow_boundaries(self, case):
        mesh = case.mesh
        np.testing.assert_array_equal(case.U[mesh.face_neighbour[mesh.patch_faces("left")], 0], 1.0)
        np.testing.assert_array_equal(case.U[mesh.face_neighbour[mesh.patch_faces("bottom")]], 0.0)
        np.testing.assert_array_equal(case.U[mesh.face_neighbour[mesh.patch_faces("top")]], 0.0)

    def test_bulk_velocity(self, case):
        n = case.mesh.n_cells
        mean = np.average(case.U[:n, 0], weights=case.mesh.cell_volumes)
        assert mean == pytest.approx(1.0, rel=0.05)

    def test_inlet_turbulence(self, case):
        assert case.inlet_k == pytest.approx(1.5 * 0.05 ** 2)
        assert case.inlet_omega == pytest.approx(case.inlet_epsilon / (0.09 * case.inlet_k))

    def test_build_initialises_transport_fields(self, case):
        model = case.build(TurbulenceConfig(model="k-omega"))
        assert isinstance(model, KXModel)
        np.testing.assert_allclose(model.k, case.inlet_k)
        np.testing.assert_allclose(model.x, case.inlet_omega)

    @pytest.mark.parametrize("kind", ["laminar", "smagorinsky", "k-epsilon", "k-omega"])
    def test_run(self, case, kind):
        summary = case.run(TurbulenceConfig(model=kind), iterations=3)
        operator = summary["operator"]
        assert operator.n_components == 3
        assert np.all(np.isfinite(operator.source))
        if kind != "laminar":
            assert 0.0 <= summary["eddy_mu_min"] <= summary["eddy_mu_max"]
        if kind.startswith("k-"):
            assert set(summary["ustar"]) == {"bottom", "top"}

    def test_operator_is_from_last_iteration(self, case):
        config = TurbulenceConfig(model="k-epsilon")
        one = case.run(config, iterations=1)["operator"]
        two = case.run(config, iterations=2)["operator"]
        assert not np.array_equal(one.matrix.toarray(), two.matrix.toarray())

    def test_needs_an_iteration(self, case):
        with pytest.raises(ValueError):
            case.run(TurbulenceConfig(model="laminar"), iterations=0)


@pytest.mark.usefixtures("reset_package_logger")
class TestCommandLine:

    def test_defaults(self):
        args = build_parser().parse_args([])
        assert (args.nx, args.ny, args.iterations) == (20, 16, 10)
        assert args.model is None

    def test_rejects_unknown_model(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--model", "spalart-allmaras"])

    def test_runs_with_config_file(self, tmp_path):
        config = tmp_path / "case.json"
        config.write_text(json.dumps({"turbulence": {"model": "k-epsilon", "wall_model": "standard"}}))
        log_file = tmp_path / "run.log"
        code = main(["--config", str(config), "--nx", "4", "--ny", "4", "--iterations", "2",
                     "--log-file", str(log_file)])
        assert code == 0
        assert "Done." in log_file.read_text(encoding="utf-8")

    def test_model_flag_overrides(self, tmp_path):
        log_file = tmp_path / "run.log"
        assert main(["--model", "laminar", "--nx", "3", "--ny", "3", "--iterations", "1",
                     "--log-file", str(log_file)]) == 0
        assert "TurbulenceModel" in log_file.read_text(encoding="utf-8")
