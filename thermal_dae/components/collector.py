"""
Heat flow collector: m ports merged into one.
"""

from numbers import Integral
from typing import List

import sympy

from thermal_dae.core.component import Component
from thermal_dae.core.equation import Equation
from thermal_dae.core.exceptions import ValidationError
from thermal_dae.core.port import HeatPort
from thermal_dae.core.variable import Variable


class ThermalCollector(Component):
    """
    Collects the heat flows of m ports into a single port.

    The collector is itself a junction, so it states the connection laws
    directly instead of going through a ConnectionSet:

        port_b.Q_flow + sum(port_ai.Q_flow) = 0
        port_b.T = port_a1.T
        port_ai.T = port_a(i+1).T           for i = 1..m-1

    With m = 1 it is a pass-through.

    Parameters:
        m: Number of collected ports (port_a1 .. port_am), m >= 1
    """

    def __init__(self, name: str, m: int = 1):
        super().__init__(name)

        if isinstance(m, bool) or not isinstance(m, Integral) or m < 1:
            raise ValidationError(f"Number of collected ports must be an integer >= 1, got {m!r}",
                                  component=name)

        self.m = int(m)
        self.port_a: List[HeatPort] = [
            self.add_port(HeatPort(f'port_a{i}')) for i in range(1, self.m + 1)
        ]
        self.port_b = self.add_port(HeatPort('port_b'))

    def get_variables(self) -> List[Variable]:
        return []

    def get_equations(self, t: sympy.Symbol) -> List[Equation]:
        total = self.port_b.flow(t) + sympy.Add(*(p.flow(t) for p in self.port_a))
        eqs = [
            self.equation(total, 0, 'balance'),
            self.equation(self.port_b.potential(t), self.port_a[0].potential(t), 'equipotential'),
        ]
        for left, right in zip(self.port_a, self.port_a[1:]):
            eqs.append(self.equation(left.potential(t), right.potential(t), 'equipotential'))
        return eqs

    def __repr__(self):
        return f"ThermalCollector('{self.name}', m={self.m})"
