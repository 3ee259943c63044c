"""
Linear heat conduction in both formulations.

ThermalConductor (Q = G·dT) and ThermalResistor (dT = R·Q) describe the same
physics. G = 0 (perfect insulator) is only expressible as a conductor and
R = 0 (ideal thermal short) only as a resistor, so both are first-class and
conversion between them refuses to invert a zero parameter.
"""

from typing import Optional

import sympy

from thermal_dae.core.component import TransportElement
from thermal_dae.core.equation import Equation
from thermal_dae.core.exceptions import SingularParameterError


class ThermalConductor(TransportElement):
    """
    Lumped thermal element transporting heat without storing it.

    Governing equations:
        1. dT = port_a.T - port_b.T
        2. port_a.Q_flow = Q_flow, port_b.Q_flow = -Q_flow
        3. Q_flow = G * dT

    Parameters:
        G: Constant thermal conductance [W/K], G >= 0
    """

    def __init__(self, name: str, G: float):
        super().__init__(name)
        self.G = self.add_parameter('G', self._non_negative("Conductance G", G), 'W/K')

    @classmethod
    def from_resistance(cls, name: str, R: float) -> 'ThermalConductor':
        """
        Build the conductance formulation from a resistance value.

        Raises:
            SingularParameterError: If R == 0 (use ThermalResistor instead)
        """
        if R == 0:
            raise SingularParameterError(
                "Resistance R = 0 cannot be inverted into a conductance; "
                "use the resistor formulation", component=name)
        return cls(name, G=1.0 / R)

    def to_resistor(self, name: Optional[str] = None) -> 'ThermalResistor':
        if self.G == 0:
            raise SingularParameterError(
                "Conductance G = 0 cannot be inverted into a resistance; "
                "keep the conductor formulation", component=self.name)
        return self.resistor_type(name or self.name, R=1.0 / self.G)

    def constitutive(self, t: sympy.Symbol) -> Equation:
        e = self.element1d
        return self.equation(e.Q_flow(t), self.param('G') * e.dT(t))

    def __repr__(self):
        return f"{self.__class__.__name__}('{self.name}', G={self.G:g} W/K)"


class ThermalResistor(TransportElement):
    """
    Lumped thermal element transporting heat without storing it.

    Governing equations:
        1. dT = port_a.T - port_b.T
        2. port_a.Q_flow = Q_flow, port_b.Q_flow = -Q_flow
        3. dT = R * Q_flow

    Parameters:
        R: Constant thermal resistance [K/W], R >= 0
    """

    def __init__(self, name: str, R: float):
        super().__init__(name)
        self.R = self.add_parameter('R', self._non_negative("Resistance R", R), 'K/W')

    @classmethod
    def from_conductance(cls, name: str, G: float) -> 'ThermalResistor':
        """
        Build the resistance formulation from a conductance value.

        Raises:
            SingularParameterError: If G == 0 (use ThermalConductor instead)
        """
        if G == 0:
            raise SingularParameterError(
                "Conductance G = 0 cannot be inverted into a resistance; "
                "use the conductor formulation", component=name)
        return cls(name, R=1.0 / G)

    def to_conductor(self, name: Optional[str] = None) -> ThermalConductor:
        if self.R == 0:
            raise SingularParameterError(
                "Resistance R = 0 cannot be inverted into a conductance; "
                "keep the resistor formulation", component=self.name)
        return self.conductor_type(name or self.name, G=1.0 / self.R)

    def constitutive(self, t: sympy.Symbol) -> Equation:
        e = self.element1d
        return self.equation(e.dT(t), self.param('R') * e.Q_flow(t))

    def __repr__(self):
        return f"{self.__class__.__name__}('{self.name}', R={self.R:g} K/W)"


ThermalConductor.resistor_type = ThermalResistor
ThermalResistor.conductor_type = ThermalConductor
