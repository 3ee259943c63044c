"""
Radiative heat exchange between two surfaces.
"""

import sympy

from thermal_dae.constants import STEFAN_BOLTZMANN
from thermal_dae.core.component import TransportElement
from thermal_dae.core.equation import Equation


class BodyRadiation(TransportElement):
    """
    Lumped thermal element for radiation heat transfer.

    Governing equations:
        1. dT = port_a.T - port_b.T
        2. port_a.Q_flow = Q_flow, port_b.Q_flow = -Q_flow
        3. Q_flow = G * sigma * (port_a.T**4 - port_b.T**4)

    Port temperatures must be absolute [K]; the law is not invariant under
    an offset of the temperature scale.

    Parameters:
        G: Net radiation conductance between the two surfaces [m²], G >= 0
    """

    def __init__(self, name: str, G: float):
        super().__init__(name)
        self.G = self.add_parameter('G', self._non_negative("Radiation conductance G", G), 'm^2')

    def constitutive(self, t: sympy.Symbol) -> Equation:
        e = self.element1d
        T_a = e.port_a.potential(t)
        T_b = e.port_b.potential(t)
        return self.equation(e.Q_flow(t),
                             self.param('G') * STEFAN_BOLTZMANN * (T_a**4 - T_b**4))

    def __repr__(self):
        return f"BodyRadiation('{self.name}', G={self.G:g} m²)"
