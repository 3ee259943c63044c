"""
Base class for all thermal network components.

Components are the building blocks of a network. Each component:
  - Exposes ports for connection to other components
  - Declares its internal variables and parameters
  - Emits its local equations for a given time symbol

A component never references another component's ports; coupling only
happens through connection sets owned by ThermalGraph.
"""

import math
from abc import ABC, abstractmethod
from numbers import Real
from typing import Dict, List, Tuple

import sympy

from thermal_dae.core.equation import Equation
from thermal_dae.core.exceptions import ValidationError
from thermal_dae.core.port import HeatPort, Port
from thermal_dae.core.variable import Variable


class Component(ABC):
    """
    Abstract base class for all components.

    Subclasses must implement:
        - get_variables(): declare internal (non-port, non-parameter) variables
        - get_equations(t): define the local equations

    Bookkeeping rule: a component emits exactly one equation per internal
    variable plus one per port. Connection sets (or the insulated-port rule)
    supply the remaining equation for each port.

    Attributes:
        name: Unique identifier for this component in the network
        ports: Ports in declaration order
        parameters: Mapping of parameter name to value
    """

    def __init__(self, name: str):
        """
        Initialize component.

        Args:
            name: Unique identifier (uniqueness is checked by ThermalGraph)
        """
        if not name or '.' in name:
            raise ValidationError(f"Invalid component name {name!r}: must be non-empty "
                                  f"and must not contain '.'")
        self.name = name
        self.ports: Dict[str, Port] = {}
        self.parameters: Dict[str, float] = {}
        self._parameter_units: Dict[str, str] = {}

    def add_port(self, port: Port) -> Port:
        if port.name in self.ports:
            raise ValidationError(f"Duplicate port '{port.name}'", component=self.name)
        port.component = self
        self.ports[port.name] = port
        return port

    def add_parameter(self, name: str, value: float, units: str = "") -> float:
        self.parameters[name] = float(value)
        self._parameter_units[name] = units
        return self.parameters[name]

    def param(self, name: str) -> sympy.Symbol:
        """Symbol for one of this component's parameters"""
        if name not in self.parameters:
            raise KeyError(f"Component '{self.name}' has no parameter '{name}'")
        return sympy.Symbol(f"{self.name}.{name}")

    def var(self, name: str, t: sympy.Symbol) -> sympy.Expr:
        """Time function for one of this component's internal variables"""
        return sympy.Function(f"{self.name}.{name}")(t)

    @abstractmethod
    def get_variables(self) -> List[Variable]:
        """
        Declare internal variables for this component (local names).

        Port variables and parameters are added automatically by
        all_variables(); only list what the component itself introduces.

        Example:
            return [
                Variable('dT', kind='potential', default=0.0, units='K'),
                Variable('Q_flow', kind='flow', default=0.0, units='W'),
            ]
        """
        pass

    @abstractmethod
    def get_equations(self, t: sympy.Symbol) -> List[Equation]:
        """
        Emit the local equations of this component.

        Args:
            t: Simulation time symbol. Every time-varying variable is built as
               a function of it and derivatives are taken with respect to it.

        Returns:
            List of Equation objects, tagged with this component as origin.
        """
        pass

    def all_variables(self) -> List[Variable]:
        """Port, internal and parameter variables, fully qualified"""
        variables: List[Variable] = []
        for port in self.ports.values():
            variables.extend(port.get_variables())
        variables.extend(v.qualified(self.name) for v in self.get_variables())
        variables.extend(
            Variable(f"{self.name}.{p}", kind='parameter', default=value,
                     units=self._parameter_units.get(p, ""))
            for p, value in self.parameters.items()
        )
        return variables

    def equation(self, lhs, rhs, kind='constitutive') -> Equation:
        return Equation(sympy.sympify(lhs), sympy.sympify(rhs), kind, self.name)

    def get_state_size(self) -> int:
        """Convenience: number of unknowns this component contributes"""
        return sum(1 for v in self.all_variables() if v.is_unknown)

    def get_state_names(self) -> List[str]:
        """Convenience: list of unknown names for debugging"""
        return [v.name for v in self.all_variables() if v.is_unknown]

    def __repr__(self) -> str:
        port_names = ', '.join(self.ports.keys())
        return f"{self.__class__.__name__}('{self.name}', ports=[{port_names}])"


class Element1D:
    """
    Two-port heat transport wiring, embedded by composition.

    Owns no state. Contributes the variables ``dT`` and ``Q_flow`` and the
    three equations shared by every transport element:

        dT = a.T - b.T
        a.Q_flow = Q_flow
        b.Q_flow = -Q_flow

    so that what enters at ``a`` leaves at ``b``. The owning element adds one
    constitutive law relating Q_flow to dT.
    """

    def __init__(self, owner: Component, port_names: Tuple[str, str] = ('port_a', 'port_b')):
        self.owner = owner
        self.port_a = owner.add_port(HeatPort(port_names[0]))
        self.port_b = owner.add_port(HeatPort(port_names[1]))

    def get_variables(self) -> List[Variable]:
        return [
            Variable('dT', kind='potential', default=0.0, units='K'),
            Variable('Q_flow', kind='flow', default=0.0, units='W'),
        ]

    def dT(self, t: sympy.Symbol) -> sympy.Expr:
        return self.owner.var('dT', t)

    def Q_flow(self, t: sympy.Symbol) -> sympy.Expr:
        return self.owner.var('Q_flow', t)

    def get_equations(self, t: sympy.Symbol) -> List[Equation]:
        a, b = self.port_a, self.port_b
        return [
            self.owner.equation(self.dT(t), a.potential(t) - b.potential(t), 'wiring'),
            self.owner.equation(a.flow(t), self.Q_flow(t), 'wiring'),
            self.owner.equation(b.flow(t), -self.Q_flow(t), 'wiring'),
        ]


class TransportElement(Component):
    """
    Lumped two-port element transporting heat without storing it.

    Embeds an Element1D as ``element1d`` and adds a single constitutive law.
    The embedded ports are also exposed as attributes named after
    ``port_names`` (``port_a``/``port_b`` or ``solid``/``fluid``).
    """

    port_names: Tuple[str, str] = ('port_a', 'port_b')

    def __init__(self, name: str):
        super().__init__(name)
        self.element1d = Element1D(self, self.port_names)
        setattr(self, self.port_names[0], self.element1d.port_a)
        setattr(self, self.port_names[1], self.element1d.port_b)

    @abstractmethod
    def constitutive(self, t: sympy.Symbol) -> Equation:
        """Law relating element1d.Q_flow(t) to element1d.dT(t)"""
        pass

    def get_variables(self) -> List[Variable]:
        return self.element1d.get_variables()

    def get_equations(self, t: sympy.Symbol) -> List[Equation]:
        return self.element1d.get_equations(t) + [self.constitutive(t)]

    def _non_negative(self, label: str, value: float) -> float:
        if not isinstance(value, Real) or not math.isfinite(value) or value < 0:
            raise ValidationError(f"{label} must be non-negative, got {value}",
                                  component=self.name)
        return value
