"""
Distributed heat conduction with storage, discretized into lumped segments.

A wall (or rod) with total resistance R and total capacitance C is split
into n segments with R_e = R/n and C_e = C/n. The segment chain has n+2
node temperatures:

    node 1        = port_a.T
    node 2..n+1   = internal nodes, one differential state each
    node n+2      = port_b.T

Boundary fluxes use a half-segment coupling (factor 2/R_e), interior nodes
follow the second-order central difference of the 1-D diffusion equation:

    port_a.Q_flow   = (T_1 - T_2) * 2/R_e
    port_b.Q_flow   = -(T_{n+1} - T_{n+2}) * 2/R_e
    d(T_i)/dt       = (T_{i-1} - 2 T_i + T_{i+1}) / (R_e C_e)

With n = 1 the steady state is exactly a lumped resistor R.
"""

import logging
import math
from dataclasses import dataclass
from numbers import Integral, Real
from typing import List, Optional, Tuple

import sympy

from thermal_dae.constants import DEFAULT_TEMPERATURE_K
from thermal_dae.core.component import Component
from thermal_dae.core.equation import Equation
from thermal_dae.core.exceptions import ValidationError
from thermal_dae.core.port import HeatPort
from thermal_dae.core.variable import Variable

logger = logging.getLogger(__name__)


def check_discretization(R: float, C: float, n: int, component: Optional[str] = None) -> None:
    """
    Validate distributed-element parameters.

    Raises:
        ValidationError: If n is not an integer >= 1, or R, C are not strictly positive
    """
    if isinstance(n, bool) or not isinstance(n, Integral):
        raise ValidationError(f"Number of subdivisions must be an integer, got {n!r}",
                              component=component)
    if n < 1:
        raise ValidationError(f"Number of subdivisions must be at least 1, got {n}",
                              component=component)
    for label, value in (("Resistance R", R), ("Heat capacity C", C)):
        if not isinstance(value, Real) or not math.isfinite(value) or value <= 0:
            raise ValidationError(f"{label} must be positive, got {value}",
                                  component=component)


@dataclass(frozen=True)
class DiscretizedSegment:
    """
    Finite-difference expansion of one distributed element.

    Attributes:
        n: Number of subdivisions
        R_e: Per-segment resistance expression (R/n)
        C_e: Per-segment capacitance expression (C/n)
        nodes: The n+2 node temperatures, nodes[0] tied to port_a and
               nodes[-1] tied to port_b
        equations: Node wiring, boundary fluxes and n interior ODEs
    """
    n: int
    R_e: sympy.Expr
    C_e: sympy.Expr
    nodes: Tuple[sympy.Expr, ...]
    equations: Tuple[Equation, ...]

    @property
    def internal_nodes(self) -> Tuple[sympy.Expr, ...]:
        return self.nodes[1:-1]

    @property
    def interior_equations(self) -> Tuple[Equation, ...]:
        return tuple(eq for eq in self.equations if eq.kind == 'differential')


def discretize(element: 'ThermalDistributedResistor', t: sympy.Symbol) -> DiscretizedSegment:
    """
    Expand a distributed element into its segment chain.

    Args:
        element: Distributed element providing R, C, n, ports and naming
        t: Simulation time symbol

    Returns:
        DiscretizedSegment whose equations use the element's parameter symbols
    """
    n = element.n
    n1 = n + 2
    R_e = element.param('R') / n
    C_e = element.param('C') / n
    T = [element.var(f'T_{i}', t) for i in range(1, n1 + 1)]
    a, b = element.port_a, element.port_b

    eqs = [
        element.equation(element.var('dT', t), T[0] - T[-1], 'wiring'),
        element.equation(T[0], a.potential(t), 'wiring'),
        element.equation(T[-1], b.potential(t), 'wiring'),
        element.equation(a.flow(t), (T[0] - T[1]) * 2 / R_e),
        element.equation(b.flow(t), -(T[-2] - T[-1]) * 2 / R_e),
    ]
    for i in range(1, n1 - 1):
        eqs.append(element.equation(
            sympy.Derivative(T[i], t),
            (T[i - 1] - 2 * T[i] + T[i + 1]) / (R_e * C_e),
            'differential',
        ))

    logger.debug("Discretized '%s' into %d segments (%d equations)",
                 element.name, n, len(eqs))
    return DiscretizedSegment(n=n, R_e=R_e, C_e=C_e, nodes=tuple(T), equations=tuple(eqs))


class ThermalDistributedResistor(Component):
    """
    Distributed thermal element transporting heat with the ability to store it.

    State variables:
        - T_2 .. T_{n+1}: Internal node temperatures [K] (differential)
        - T_1, T_{n+2}: Boundary node temperatures [K] (algebraic)
        - dT: Temperature difference port_a.T - port_b.T [K]

    Parameters:
        R: Total thermal resistance [K/W], R > 0
        C: Total heat capacity [J/K], C > 0
        n: Number of subdivisions, n >= 1
        T_initial: Initial node temperature [K]
    """

    def __init__(self, name: str, R: float, C: float, n: int = 1,
                 T_initial: float = DEFAULT_TEMPERATURE_K):
        super().__init__(name)
        check_discretization(R, C, n, component=name)

        self.R = self.add_parameter('R', R, 'K/W')
        self.C = self.add_parameter('C', C, 'J/K')
        self.n = int(n)
        self.T_initial = float(T_initial)

        self.port_a = self.add_port(HeatPort('port_a'))
        self.port_b = self.add_port(HeatPort('port_b'))

    def get_variables(self) -> List[Variable]:
        n1 = self.n + 2
        variables = [Variable('dT', kind='potential', default=0.0, units='K')]
        for i in range(1, n1 + 1):
            kind = 'potential' if i in (1, n1) else 'state'
            variables.append(Variable(f'T_{i}', kind=kind, default=self.T_initial, units='K'))
        return variables

    def discretize(self, t: sympy.Symbol) -> DiscretizedSegment:
        return discretize(self, t)

    def get_equations(self, t: sympy.Symbol) -> List[Equation]:
        return list(self.discretize(t).equations)

    def __repr__(self):
        return (f"ThermalDistributedResistor('{self.name}', R={self.R:g} K/W, "
                f"C={self.C:g} J/K, n={self.n})")
