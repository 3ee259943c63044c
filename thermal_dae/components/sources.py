"""
Boundary conditions: fixed and externally driven temperature / heat flow.

Sources are one-port stubs. They contribute exactly one equation for their
port and hold no state.
"""

from typing import List

import sympy

from thermal_dae.constants import DEFAULT_TEMPERATURE_K
from thermal_dae.core.component import Component
from thermal_dae.core.equation import Equation
from thermal_dae.core.port import HeatPort
from thermal_dae.core.variable import Variable


class _BoundarySource(Component):
    """Single HeatPort named ``port``."""

    def __init__(self, name: str):
        super().__init__(name)
        self.port = self.add_port(HeatPort('port'))

    def get_variables(self) -> List[Variable]:
        return []


class FixedHeatFlow(_BoundarySource):
    """
    Injects a constant heat flow into whatever is connected to ``port``.

    Governing equations:
        port.Q_flow = -Q_flow

    Parameters:
        Q_flow: Heat flow rate [W]; positive heats the connected component
    """

    def __init__(self, name: str, Q_flow: float = 1.0):
        super().__init__(name)
        self.Q_flow = self.add_parameter('Q_flow', Q_flow, 'W')

    def get_equations(self, t: sympy.Symbol) -> List[Equation]:
        return [self.equation(self.port.flow(t), -self.param('Q_flow'), 'boundary')]


class FixedTemperature(_BoundarySource):
    """
    Fixed temperature boundary condition.

    Governing equations:
        port.T = T

    Parameters:
        T: Boundary temperature [K]
    """

    def __init__(self, name: str, T: float):
        super().__init__(name)
        self.T = self.add_parameter('T', T, 'K')

    def get_equations(self, t: sympy.Symbol) -> List[Equation]:
        return [self.equation(self.port.potential(t), self.param('T'), 'boundary')]


class PrescribedHeatFlow(_BoundarySource):
    """
    Heat flow given by the external input signal ``u`` [W].

    Governing equations:
        port.Q_flow = -u(t)
    """

    def get_variables(self) -> List[Variable]:
        return [Variable('u', kind='input', default=0.0, units='W')]

    def get_equations(self, t: sympy.Symbol) -> List[Equation]:
        return [self.equation(self.port.flow(t), -self.var('u', t), 'boundary')]


class PrescribedTemperature(_BoundarySource):
    """
    Temperature given by the external input signal ``u`` [K].

    Acts as an infinite reservoir that absorbs or supplies whatever heat is
    needed to hold the port at u(t).

    Governing equations:
        port.T = u(t)
    """

    def get_variables(self) -> List[Variable]:
        return [Variable('u', kind='input', default=DEFAULT_TEMPERATURE_K, units='K')]

    def get_equations(self, t: sympy.Symbol) -> List[Equation]:
        return [self.equation(self.port.potential(t), self.var('u', t), 'boundary')]
