"""
RANS turbulence closures for finite-volume Navier-Stokes solvers.

The closures add the viscous and modelled Reynolds stress to a momentum
operator owned by the caller; they never solve the momentum equation.
"""
from ransclosure.config import FluidProperties, TurbulenceConfig
from ransclosure.logging_config import setup_logging

__all__ = ["FluidProperties", "TurbulenceConfig", "setup_logging"]
