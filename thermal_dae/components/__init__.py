"""Component library for thermal networks."""

from thermal_dae.components.conductor import ThermalConductor, ThermalResistor
from thermal_dae.components.convection import ConvectiveConductor, ConvectiveResistor
from thermal_dae.components.radiation import BodyRadiation
from thermal_dae.components.capacitor import HeatCapacitor
from thermal_dae.components.distributed import (
    DiscretizedSegment,
    ThermalDistributedResistor,
    discretize,
)
from thermal_dae.components.collector import ThermalCollector
from thermal_dae.components.sources import (
    FixedHeatFlow,
    FixedTemperature,
    PrescribedHeatFlow,
    PrescribedTemperature,
)

__all__ = [
    'ThermalConductor',
    'ThermalResistor',
    'ConvectiveConductor',
    'ConvectiveResistor',
    'BodyRadiation',
    'HeatCapacitor',
    'DiscretizedSegment',
    'ThermalDistributedResistor',
    'discretize',
    'ThermalCollector',
    'FixedHeatFlow',
    'FixedTemperature',
    'PrescribedHeatFlow',
    'PrescribedTemperature',
]
