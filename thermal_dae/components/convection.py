"""
Convective heat transfer between a solid surface and a fluid.

Same structure as the conduction elements, but the ports are named
``solid`` and ``fluid`` and Q_flow is positive from solid to fluid.
"""

from thermal_dae.components.conductor import ThermalConductor, ThermalResistor


class ConvectiveConductor(ThermalConductor):
    """
    Lumped thermal element for heat convection.

    Governing equations:
        1. dT = solid.T - fluid.T
        2. solid.Q_flow = Q_flow, fluid.Q_flow = -Q_flow
        3. Q_flow = G * dT

    Parameters:
        G: Convective thermal conductance [W/K] (h·A), G >= 0
    """
    port_names = ('solid', 'fluid')


class ConvectiveResistor(ThermalResistor):
    """
    Lumped thermal element for heat convection.

    Governing equations:
        1. dT = solid.T - fluid.T
        2. solid.Q_flow = Q_flow, fluid.Q_flow = -Q_flow
        3. dT = R * Q_flow

    Parameters:
        R: Convective thermal resistance [K/W] (1/(h·A)), R >= 0
    """
    port_names = ('solid', 'fluid')


ConvectiveConductor.resistor_type = ConvectiveResistor
ConvectiveResistor.conductor_type = ConvectiveConductor
