"""
Physical constants shared by the component library.
"""

#: Stefan-Boltzmann constant [W/(m²·K⁴)] (CODATA 2018)
STEFAN_BOLTZMANN: float = 5.6703744191844294e-8

#: 0 °C in kelvin
ZERO_CELSIUS_K: float = 273.15

#: Default initial temperature for storage elements and internal nodes [K] (20 °C)
DEFAULT_TEMPERATURE_K: float = ZERO_CELSIUS_K + 20.0
