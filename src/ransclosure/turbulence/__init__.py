"""
Turbulence closures.

TurbulenceModel (laminar) -> EddyViscosityModel (Boussinesq) -> SmagorinskyModel
                                                             -> KXModel + TransportVariable
"""
from ransclosure.turbulence.base import TurbulenceModel
from ransclosure.turbulence.eddy_viscosity import EddyViscosityModel
from ransclosure.turbulence.registry import TurbulenceModelType, make_turbulence_model
from ransclosure.turbulence.smagorinsky import SmagorinskyModel
from ransclosure.turbulence.strain import StrainModel, strain_invariant
from ransclosure.turbulence.two_equation import KXModel
from ransclosure.turbulence.variables import Epsilon, ModelCoefficients, Omega, TransportVariable
from ransclosure.turbulence.wall import WallModel

__all__ = [
    "TurbulenceModel",
    "EddyViscosityModel",
    "SmagorinskyModel",
    "KXModel",
    "TransportVariable",
    "Epsilon",
    "Omega",
    "ModelCoefficients",
    "StrainModel",
    "strain_invariant",
    "WallModel",
    "TurbulenceModelType",
    "make_turbulence_model",
]
