"""Core abstractions for thermal network assembly."""

from thermal_dae.core.port import Port, HeatPort
from thermal_dae.core.variable import Variable
from thermal_dae.core.equation import Equation
from thermal_dae.core.component import Component, Element1D, TransportElement
from thermal_dae.core.connection import ConnectionSet, connect
from thermal_dae.core.system import EquationSystem
from thermal_dae.core.graph import ThermalGraph
from thermal_dae.core.exceptions import (
    ThermalDAEError,
    ValidationError,
    StructuralError,
    SingularParameterError,
)

__all__ = [
    'Port',
    'HeatPort',
    'Variable',
    'Equation',
    'Component',
    'Element1D',
    'TransportElement',
    'ConnectionSet',
    'connect',
    'EquationSystem',
    'ThermalGraph',
    'ThermalDAEError',
    'ValidationError',
    'StructuralError',
    'SingularParameterError',
]
