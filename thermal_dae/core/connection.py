"""
Connection sets: the junctions of a network.

Joining ports does not share or copy port objects. Instead a ConnectionSet
records which ports meet at a junction and emits the two conservation laws
for it:

    equipotential:  p_i.T = p_1.T          for i = 2..k   (k-1 equations)
    flow balance:   p_1.Q + ... + p_k.Q = 0                (1 equation)

Every flow is "into the owning component", so the plain sum is the signed
sum. A junction of k ports therefore contributes exactly k equations.
"""

import logging
from typing import Iterable, List, Optional, Tuple

import sympy

from thermal_dae.core.equation import Equation
from thermal_dae.core.exceptions import ValidationError
from thermal_dae.core.port import Port

logger = logging.getLogger(__name__)


class ConnectionSet:
    """
    Two or more ports declared physically joined.

    Attributes:
        members: Ports in declaration order; the first is the potential reference
        name: Label used as the origin of emitted equations
    """

    def __init__(self, members: Iterable[Port], name: Optional[str] = None):
        self.members: Tuple[Port, ...] = tuple(members)
        self.name = name or "connect(" + ", ".join(p.qualified_name for p in self.members) + ")"

    @property
    def kind(self) -> str:
        return self.members[0].kind

    def __len__(self) -> int:
        return len(self.members)

    def __contains__(self, port: Port) -> bool:
        return any(port is member for member in self.members)

    def components(self) -> List[object]:
        """Owning components of the members, without repeats"""
        owners: List[object] = []
        for port in self.members:
            if not any(port.component is o for o in owners):
                owners.append(port.component)
        return owners

    def get_equations(self, t: sympy.Symbol) -> List[Equation]:
        reference = self.members[0]
        equations = [
            Equation(port.potential(t), reference.potential(t), 'equipotential', self.name)
            for port in self.members[1:]
        ]
        total_flow = sympy.Add(*(port.sign * port.flow(t) for port in self.members))
        equations.append(Equation(total_flow, sympy.Integer(0), 'balance', self.name))
        return equations

    def __repr__(self) -> str:
        return f"ConnectionSet({', '.join(p.qualified_name for p in self.members)})"


def connect(*ports: Port, name: Optional[str] = None,
            existing: Iterable[ConnectionSet] = ()) -> ConnectionSet:
    """
    Build a ConnectionSet from ports of one physical kind.

    Args:
        *ports: Ports to join
        name: Optional junction label
        existing: Connection sets already declared in the network. A port
            found in one of them cannot join another junction.
            ThermalGraph.connect passes its own connection sets here.

    Raises:
        ValidationError: fewer than two ports, a port listed twice, a port
            without an owning component, a port already in one of
            ``existing``, or mixed physical kinds
    """
    if len(ports) < 2:
        raise ValidationError(f"A connection needs at least 2 ports, got {len(ports)}")

    existing = list(existing)
    for i, port in enumerate(ports):
        if not isinstance(port, Port):
            raise ValidationError(f"Cannot connect {port!r}: not a port")
        if port.component is None:
            raise ValidationError(f"Cannot connect {port!r}: port has no owning component")
        if any(port is other for other in ports[:i]):
            raise ValidationError(f"Port {port.qualified_name} listed twice in one connection",
                                  component=port.component.name)
        for connection in existing:
            if port in connection:
                raise ValidationError(
                    f"Port {port.qualified_name} is already connected in {connection.name}",
                    component=port.component.name,
                )

    reference = ports[0]
    for port in ports[1:]:
        if not reference.compatible_with(port):
            raise ValidationError(
                f"Cannot connect {reference!r} to {port!r}: "
                f"incompatible kinds '{reference.kind}' and '{port.kind}'",
                component=port.component.name,
            )

    connection = ConnectionSet(ports, name=name)
    logger.debug("Created %r", connection)
    return connection
