"""
ThermalGraph: topology manager and equation assembler.

The graph is responsible for:
  - Storing components and their connection sets
  - Validating port kinds and port reuse at connection time
  - Assembling component and junction equations into an EquationSystem
  - Splitting the network into independent subnetworks
"""

import logging
from typing import Dict, List, Optional

import networkx as nx
import sympy

from thermal_dae.core.component import Component
from thermal_dae.core.connection import ConnectionSet, connect
from thermal_dae.core.equation import Equation
from thermal_dae.core.exceptions import ValidationError
from thermal_dae.core.port import Port
from thermal_dae.core.system import EquationSystem

logger = logging.getLogger(__name__)


class ThermalGraph:
    """
    Manages network topology and assembles the global DAE.

    Usage:
        graph = ThermalGraph()
        graph.add_component(wall)
        graph.add_component(room)
        graph.connect(wall.port_b, room.port)
        system = graph.assemble()

    Once assemble() has succeeded the graph is frozen: further
    add_component()/connect() calls raise ValidationError.
    """

    def __init__(self, name: str = 'network'):
        self.name = name
        self.components: List[Component] = []
        self.connections: List[ConnectionSet] = []
        self._frozen = False

    def add_component(self, component: Component) -> Component:
        """
        Add a component to the network.

        Raises:
            ValidationError: If a component with this name already exists or
                the graph has already been assembled
        """
        self._check_mutable()
        if component.name in [c.name for c in self.components]:
            raise ValidationError(f"Component '{component.name}' already exists")
        self.components.append(component)
        return component

    def add_components(self, *components: Component) -> None:
        for component in components:
            self.add_component(component)

    def get_component(self, name: str) -> Component:
        for comp in self.components:
            if comp.name == name:
                return comp
        raise KeyError(f"No component named '{name}'")

    def connect(self, *ports: Port, name: Optional[str] = None) -> ConnectionSet:
        """
        Join two or more ports at one junction.

        Args:
            *ports: Ports to join (all of one physical kind)
            name: Optional label for the junction

        Raises:
            ValidationError: If a port belongs to a component that is not in
                this graph, is already part of another connection set, or the
                ports are of incompatible kinds
        """
        self._check_mutable()
        for port in ports:
            owner = getattr(port, 'component', None)
            if owner is None or not any(owner is c for c in self.components):
                raise ValidationError(
                    f"Cannot connect {port!r}: its component is not part of this graph")

        connection = connect(*ports, name=name, existing=self.connections)
        self.connections.append(connection)
        return connection

    def connection_of(self, port: Port) -> Optional[ConnectionSet]:
        for connection in self.connections:
            if port in connection:
                return connection
        return None

    def unconnected_ports(self) -> List[Port]:
        return [
            port
            for comp in self.components
            for port in comp.ports.values()
            if self.connection_of(port) is None
        ]

    def _check_mutable(self) -> None:
        if self._frozen:
            raise ValidationError(
                f"Graph '{self.name}' has already been assembled and can no longer be modified")

    def assemble(self, t: Optional[sympy.Symbol] = None) -> EquationSystem:
        """
        Assemble the global equation system.

        Collects, in order: every component's local equations, every
        connection set's equipotential and balance equations, and a
        ``Q_flow = 0`` boundary equation for each unconnected (insulated)
        port.

        Args:
            t: Time symbol to build equations with (default: Symbol('t'))

        Returns:
            Validated EquationSystem

        Raises:
            ValidationError: If the graph is empty
            StructuralError: If the result is unbalanced or structurally singular
        """
        system = self._assemble(self.components, self.connections, t, self.name)
        self._frozen = True
        return system

    def _assemble(self, components: List[Component], connections: List[ConnectionSet],
                  t: Optional[sympy.Symbol], name: str) -> EquationSystem:
        if not components:
            raise ValidationError("Cannot assemble empty graph")
        if t is None:
            t = sympy.Symbol('t', real=True)

        variables = []
        equations: List[Equation] = []
        for comp in components:
            local = comp.get_equations(t)
            logger.debug("Component '%s': %d equations", comp.name, len(local))
            variables.extend(comp.all_variables())
            equations.extend(local)

        for connection in connections:
            equations.extend(connection.get_equations(t))

        connected = {id(p) for c in connections for p in c.members}
        for comp in components:
            for port in comp.ports.values():
                if id(port) not in connected:
                    logger.debug("Port %s is unconnected; treating it as insulated",
                                 port.qualified_name)
                    equations.append(
                        Equation(port.flow(t), sympy.Integer(0), 'boundary', comp.name))

        system = EquationSystem(variables, equations, t, name=name)
        logger.info("Assembled '%s': %d components, %d connection sets, %d equations, "
                    "%d states", name, len(components), len(connections),
                    len(system.equations), len(system.states))
        return system

    def subnetworks(self) -> List[List[Component]]:
        """
        Partition components into groups that share no connection set.

        Groups and their members keep insertion order.
        """
        topology = nx.Graph()
        topology.add_nodes_from(c.name for c in self.components)
        for connection in self.connections:
            owners = [c.name for c in connection.components()]
            topology.add_edges_from(zip(owners, owners[1:]))

        order = {c.name: i for i, c in enumerate(self.components)}
        groups = [sorted(group, key=order.__getitem__)
                  for group in nx.connected_components(topology)]
        groups.sort(key=lambda group: order[group[0]])
        by_name: Dict[str, Component] = {c.name: c for c in self.components}
        return [[by_name[n] for n in group] for group in groups]

    def assemble_subnetworks(self, t: Optional[sympy.Symbol] = None) -> List[EquationSystem]:
        """
        Assemble each independent subnetwork into its own EquationSystem.

        The systems can be built and consumed independently; merging them
        with EquationSystem.merge() gives the same equations as assemble(),
        grouped by subnetwork.
        """
        if t is None:
            t = sympy.Symbol('t', real=True)
        systems = []
        for i, group in enumerate(self.subnetworks()):
            members = {id(c) for c in group}
            connections = [c for c in self.connections
                           if id(c.members[0].component) in members]
            systems.append(self._assemble(group, connections, t, f"{self.name}[{i}]"))
        self._frozen = True
        return systems

    def validate_topology(self) -> List[str]:
        """
        Check for common topology issues.

        Returns:
            List of warning messages (empty if no issues)

        Checks:
            - Unconnected ports (assembled as insulated boundaries)
            - Components isolated from every other component
        """
        warnings_list = []

        for port in self.unconnected_ports():
            warnings_list.append(
                f"Component '{port.component.name}' has unconnected port '{port.name}'"
            )

        if len(self.components) > 1:
            for group in self.subnetworks():
                if len(group) == 1:
                    warnings_list.append(
                        f"Component '{group[0].name}' is not connected to any other component"
                    )

        return warnings_list
