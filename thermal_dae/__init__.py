"""Assemble thermal networks into symbolic DAE systems."""

from thermal_dae.core import (
    Component,
    ConnectionSet,
    EquationSystem,
    HeatPort,
    SingularParameterError,
    StructuralError,
    ThermalDAEError,
    ThermalGraph,
    ValidationError,
    connect,
)

__version__ = '0.1.0'

__all__ = [
    'Component',
    'ConnectionSet',
    'EquationSystem',
    'HeatPort',
    'SingularParameterError',
    'StructuralError',
    'ThermalDAEError',
    'ThermalGraph',
    'ValidationError',
    'connect',
]
