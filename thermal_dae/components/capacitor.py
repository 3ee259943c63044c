"""
Lumped heat storage.
"""

import math
from numbers import Real
from typing import List

import sympy

from thermal_dae.constants import DEFAULT_TEMPERATURE_K
from thermal_dae.core.component import Component
from thermal_dae.core.equation import Equation
from thermal_dae.core.exceptions import ValidationError
from thermal_dae.core.port import HeatPort
from thermal_dae.core.variable import Variable


class HeatCapacitor(Component):
    """
    Lumped thermal element storing heat.

    Governing equations:
        1. port.T = T                         [algebraic]
        2. d(T)/dt = port.Q_flow / C          [differential]

    State variables:
        - T: Temperature of the element [K] (differential)

    Parameters:
        C: Heat capacity [J/K] (= cp·m), strictly positive
        T_initial: Initial temperature [K] (default 20 °C)

    Example:
        >>> room = HeatCapacitor('room', C=5e5, T_initial=295.0)
        >>> graph.add_component(room)
        >>> graph.connect(wall.port_b, room.port)
    """

    def __init__(self, name: str, C: float, T_initial: float = DEFAULT_TEMPERATURE_K):
        super().__init__(name)

        if not isinstance(C, Real) or not math.isfinite(C) or C <= 0:
            raise ValidationError(f"Heat capacity must be positive, got {C}", component=name)

        self.C = self.add_parameter('C', C, 'J/K')
        self.T_initial = float(T_initial)
        self.port = self.add_port(HeatPort('port'))

    def get_variables(self) -> List[Variable]:
        return [
            Variable('T', kind='state', default=self.T_initial, units='K'),
        ]

    def get_equations(self, t: sympy.Symbol) -> List[Equation]:
        T = self.var('T', t)
        return [
            self.equation(self.port.potential(t), T, 'wiring'),
            self.equation(sympy.Derivative(T, t), self.port.flow(t) / self.param('C'),
                          'differential'),
        ]

    def __repr__(self):
        return f"HeatCapacitor('{self.name}', C={self.C:g} J/K, T_init={self.T_initial:g} K)"
