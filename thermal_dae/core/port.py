"""
Port definitions for typed connections between components.

A port is a (potential, flow) pair owned by exactly one component. Flow is
positive when the conserved quantity enters the owning component. Kind tags
are checked at connection time so that physically unrelated ports (heat vs.
anything else) can never be joined.
"""

from abc import ABC
from dataclasses import dataclass, field
from typing import ClassVar, List, Optional

import sympy

from thermal_dae.core.variable import Variable


@dataclass(eq=False)
class Port(ABC):
    """
    Base class for all port types.

    Subclasses fix the physical kind and the names/units of the potential and
    flow variables. Ports compare by identity: two ports with the same name on
    different components are different connection endpoints.

    Attributes:
        name: Identifier of this port within its component
        component: Owning component (set by Component.add_port)
    """
    name: str
    component: Optional[object] = field(default=None, repr=False)

    kind: ClassVar[str] = 'generic'
    potential_name: ClassVar[str] = 'e'
    flow_name: ClassVar[str] = 'f'
    potential_units: ClassVar[str] = ''
    flow_units: ClassVar[str] = ''
    potential_default: ClassVar[float] = 0.0

    #: +1: flow counts as entering the owning component
    sign: ClassVar[int] = 1

    def compatible_with(self, other: 'Port') -> bool:
        """Ports connect only to ports of the same physical kind"""
        return isinstance(other, Port) and self.kind == other.kind

    @property
    def qualified_name(self) -> str:
        owner = self.component.name if self.component is not None else "unattached"
        return f"{owner}.{self.name}"

    def potential(self, t: sympy.Symbol) -> sympy.Expr:
        return sympy.Function(f"{self.qualified_name}.{self.potential_name}")(t)

    def flow(self, t: sympy.Symbol) -> sympy.Expr:
        return sympy.Function(f"{self.qualified_name}.{self.flow_name}")(t)

    def get_variables(self) -> List[Variable]:
        return [
            Variable(f"{self.qualified_name}.{self.potential_name}", kind='potential',
                     default=self.potential_default, units=self.potential_units),
            Variable(f"{self.qualified_name}.{self.flow_name}", kind='flow',
                     default=0.0, units=self.flow_units),
        ]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.qualified_name})"


@dataclass(eq=False, repr=False)
class HeatPort(Port):
    """
    Pure heat transfer endpoint.

    Convention:
        - Q_flow > 0: heat flow INTO the component
        - Q_flow < 0: heat flow OUT of the component

    Variables:
        T: Absolute temperature [K]
        Q_flow: Heat flow rate [W]
    """
    kind: ClassVar[str] = 'thermal'
    potential_name: ClassVar[str] = 'T'
    flow_name: ClassVar[str] = 'Q_flow'
    potential_units: ClassVar[str] = 'K'
    flow_units: ClassVar[str] = 'W'
    potential_default: ClassVar[float] = 293.15
