from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
import math
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt

# Denominator floor for k and x in the source linearisation
TRANSPORT_FLOOR = 1.0e-12


@dataclass
class ModelCoefficients:
    """
    Coefficients of a two-equation model.

    Attributes:
        cmu: Eddy-viscosity constant (beta* for k-omega).
        sigma_k: Turbulent Prandtl number of k.
        sigma_x: Turbulent Prandtl number of the second variable.
        c1x: Production coefficient of the second variable.
        c2x: Destruction coefficient of the second variable.
    """
    cmu: float
    sigma_k: float
    sigma_x: float
    c1x: float
    c2x: float


class TransportVariable(ABC):
    """
    Abstract second transport variable x of a k-x model.

    A concrete variable fixes how eddy viscosity follows from (k, x), the value x
    takes next to a wall, and the source terms of both transport equations.
    """
    name: str = ""
    initial_value: float = 1.0

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}('{self.name}')"

    @abstractmethod
    def default_coefficients(self) -> ModelCoefficients:
        """Standard coefficient set of the model."""
        pass

    @abstractmethod
    def eddy_viscosity(
        self,
        k: npt.NDArray[np.float64],
        x: npt.NDArray[np.float64],
        rho: float,
        cmu: float,
    ) -> npt.NDArray[np.float64]:
        """Dynamic eddy viscosity from k and x."""
        pass

    @abstractmethod
    def wall_value(self, ustar: float, kappa: float, y: float, cmu: float) -> float:
        """Value of x in a wall-adjacent cell at distance ``y``."""
        pass

    @abstractmethod
    def k_sink(
        self,
        k: npt.NDArray[np.float64],
        x: npt.NDArray[np.float64],
        rho: float,
        cmu: float,
    ) -> npt.NDArray[np.float64]:
        """Implicit coefficient Sp of the k dissipation, i.e. dissipation = Sp * k."""
        pass

    @abstractmethod
    def x_sources(
        self,
        k: npt.NDArray[np.float64],
        x: npt.NDArray[np.float64],
        pk: npt.NDArray[np.float64],
        rho: float,
        coefficients: ModelCoefficients,
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """Explicit production Su and implicit destruction coefficient Sp of the x equation."""
        pass


class Epsilon(TransportVariable):
    """Standard k-epsilon (Launder-Spalding): x is the dissipation rate."""
    name = "epsilon"
    initial_value = 1.0e-4

    def default_coefficients(self) -> ModelCoefficients:
        return ModelCoefficients(cmu=0.09, sigma_k=1.0, sigma_x=1.3, c1x=1.44, c2x=1.92)

    def eddy_viscosity(self, k, x, rho, cmu):
        return rho * cmu * k * k / np.maximum(x, TRANSPORT_FLOOR)

    def wall_value(self, ustar: float, kappa: float, y: float, cmu: float) -> float:
        return ustar ** 3 / (kappa * y)

    def k_sink(self, k, x, rho, cmu):
        return rho * x / np.maximum(k, TRANSPORT_FLOOR)

    def x_sources(self, k, x, pk, rho, coefficients):
        ratio = x / np.maximum(k, TRANSPORT_FLOOR)
        return coefficients.c1x * pk * ratio, coefficients.c2x * rho * ratio


class Omega(TransportVariable):
    """Wilcox k-omega: x is the specific dissipation rate."""
    name = "omega"
    initial_value = 1.0

    def default_coefficients(self) -> ModelCoefficients:
        return ModelCoefficients(cmu=0.09, sigma_k=2.0, sigma_x=2.0, c1x=5.0 / 9.0, c2x=0.075)

    def eddy_viscosity(self, k, x, rho, cmu):
        return rho * k / np.maximum(x, TRANSPORT_FLOOR)

    def wall_value(self, ustar: float, kappa: float, y: float, cmu: float) -> float:
        return ustar / (math.sqrt(cmu) * kappa * y)

    def k_sink(self, k, x, rho, cmu):
        return rho * cmu * x

    def x_sources(self, k, x, pk, rho, coefficients):
        su = coefficients.c1x * pk * x / np.maximum(k, TRANSPORT_FLOOR)
        return su, coefficients.c2x * rho * x
