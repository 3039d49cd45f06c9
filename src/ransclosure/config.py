"""
Configuration
=============
Fluid properties, tunable model parameters and the serialisable model selection.

Exports:
    FluidProperties: density, kinematic viscosity and time-stepping mode, shared by reference.
    ParameterList: registry of named coefficients a model exposes for tuning.
    TurbulenceConfig: JSON-friendly description of which closure to build.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, Optional

if TYPE_CHECKING:
    import numpy as np
    import numpy.typing as npt
    from ransclosure.mesh.boundary import BoundaryCondition
    from ransclosure.mesh.mesh import Mesh
    from ransclosure.turbulence.base import TurbulenceModel

logger = logging.getLogger(__name__)


@dataclass
class FluidProperties:
    """
    Fluid scalars owned by the surrounding solver.

    Closures keep a reference to this object, so changes made by the solver
    (e.g. switching ``steady`` off) are seen on the next evaluation.
    """
    density: float = 1.0
    kinematic_viscosity: float = 1.0e-5
    steady: bool = True
    time_step: Optional[float] = None

    def __post_init__(self) -> None:
        if self.density <= 0.0:
            raise ValueError(f"density must be positive, got {self.density}.")
        if self.kinematic_viscosity <= 0.0:
            raise ValueError(f"kinematic_viscosity must be positive, got {self.kinematic_viscosity}.")
        if not self.steady and (self.time_step is None or self.time_step <= 0.0):
            raise ValueError("A transient setup (steady=False) needs a positive time_step.")

    @property
    def dynamic_viscosity(self) -> float:
        return self.density * self.kinematic_viscosity


class ParameterList:
    """
    Named coefficients enrolled by a model for external tuning.

    Each entry binds a public name to an attribute of some owner object; reading
    and writing go straight through to that attribute.
    """
    def __init__(self, name: str) -> None:
        self.name = name
        self._entries: dict[str, tuple[object, str]] = {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}('{self.name}', {self.names()})"

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def enroll(self, key: str, owner: object, attribute: str | None = None) -> None:
        attribute = attribute or key
        if not hasattr(owner, attribute):
            raise AttributeError(f"{owner!r} has no attribute '{attribute}' to enroll as '{key}'.")
        self._entries[key] = (owner, attribute)

    def names(self) -> list[str]:
        return list(self._entries)

    def _entry(self, key: str) -> tuple[object, str]:
        try:
            return self._entries[key]
        except KeyError:
            raise KeyError(f"Unknown parameter '{key}' in '{self.name}'. Known: {self.names()}") from None

    def get(self, key: str) -> float:
        owner, attribute = self._entry(key)
        return getattr(owner, attribute)

    def set(self, key: str, value: float) -> None:
        owner, attribute = self._entry(key)
        setattr(owner, attribute, float(value))
        logger.debug(f"{self.name}.{key} = {value}")

    def update(self, values: dict[str, float]) -> None:
        for key, value in values.items():
            self.set(key, value)

    def to_dict(self) -> dict[str, float]:
        return {key: self.get(key) for key in self._entries}


@dataclass
class TurbulenceConfig:
    """Which closure to build and how to tune it."""
    model: str = "k-epsilon"
    strain_model: str = "strain"
    wall_model: Optional[str] = None
    parameters: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "model": self.model,
            "strain_model": self.strain_model,
            "wall_model": self.wall_model,
            "parameters": dict(self.parameters),
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> TurbulenceConfig:
        unknown = set(data) - {"model", "strain_model", "wall_model", "parameters"}
        if unknown:
            raise ValueError(f"Unknown turbulence configuration keys: {sorted(unknown)}")
        return TurbulenceConfig(
            model=data.get("model", "k-epsilon"),
            strain_model=data.get("strain_model", "strain"),
            wall_model=data.get("wall_model"),
            parameters={k: float(v) for k, v in data.get("parameters", {}).items()},
        )

    @staticmethod
    def load(path: str | Path) -> TurbulenceConfig:
        logger.info(f"Loading turbulence configuration from: {path}")
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        # A case file may nest the closure settings under "turbulence"
        return TurbulenceConfig.from_dict(data.get("turbulence", data))

    def save(self, path: str | Path) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"turbulence": self.to_dict()}, f, indent=2)
        logger.info(f"Turbulence configuration saved to: {path}")

    def build(
        self,
        mesh: Mesh,
        U: npt.NDArray[np.float64],
        fluid: FluidProperties,
        boundaries: Iterable[BoundaryCondition] = (),
        F: npt.NDArray[np.float64] | None = None,
    ) -> TurbulenceModel:
        """Create, enroll and tune the configured model."""
        from ransclosure.turbulence.registry import make_turbulence_model

        options: dict[str, Any] = {}
        if self.model != "laminar":
            options["strain_model"] = self.strain_model
            if self.wall_model is not None:
                options["wall_model"] = self.wall_model

        model = make_turbulence_model(self.model, mesh, U, fluid, boundaries, F=F, **options)
        model.params.update(self.parameters)
        return model
