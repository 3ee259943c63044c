"""
Configuration records and factories for building networks from plain data.

A network description is a mapping (or YAML file) of the form:

    name: wall_demo
    components:
      - kind: FixedTemperature
        name: outside
        parameters: {T: 263.15}
      - kind: ThermalDistributedResistor
        name: wall
        parameters: {R: 0.05, C: 2.0e5, n: 4}
      - kind: HeatCapacitor
        name: room
        parameters: {C: 5.0e5, T_initial: 293.15}
    connections:
      - [outside.port, wall.port_a]
      - name: inner_surface
        ports: [wall.port_b, room.port]

Each connection lists two or more ``<component>.<port>`` references joined
at one junction, either as a plain list or as a mapping with a label.

Descriptions are checked against a Cerberus schema before anything is built.
Numeric parameter values written as strings are coerced to numbers, which
covers exponents such as ``2.0e5`` that YAML 1.1 loads as strings.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Tuple, Type, Union

import cerberus
import yaml

from thermal_dae.components import (
    BodyRadiation,
    ConvectiveConductor,
    ConvectiveResistor,
    FixedHeatFlow,
    FixedTemperature,
    HeatCapacitor,
    PrescribedHeatFlow,
    PrescribedTemperature,
    ThermalCollector,
    ThermalConductor,
    ThermalDistributedResistor,
    ThermalResistor,
)
from thermal_dae.core.component import Component
from thermal_dae.core.exceptions import ValidationError
from thermal_dae.core.graph import ThermalGraph
from thermal_dae.core.port import Port

logger = logging.getLogger(__name__)

ELEMENT_TYPES: Dict[str, Type[Component]] = {
    cls.__name__: cls
    for cls in (
        ThermalConductor,
        ThermalResistor,
        ConvectiveConductor,
        ConvectiveResistor,
        BodyRadiation,
        HeatCapacitor,
        ThermalDistributedResistor,
        ThermalCollector,
        FixedHeatFlow,
        FixedTemperature,
        PrescribedHeatFlow,
        PrescribedTemperature,
    )
}

NAME_REGEX = r"^[^.\s]+$"
PORT_REFERENCE_REGEX = r"^[^.\s]+\.[^.\s]+$"


class NetworkValidator(cerberus.Validator):
    """Cerberus validator with numeric coercion and unique component names."""

    def _normalize_coerce_number(self, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                return float(value)
        return value

    def _validate_unique_elements_by_key(self, key_for_uniqueness: str, field: str, value: List[Dict]):
        """
        Validates that all dictionaries in a list have a unique value for a given key.
        The rule's arguments are validated against this schema:
        {'type': 'string'}
        """
        if not isinstance(value, list):
            return

        seen = set()
        duplicates = set()
        for item in value:
            if not isinstance(item, dict):
                continue
            key = item.get(key_for_uniqueness)
            if key in seen:
                duplicates.add(key)
            elif key is not None:
                seen.add(key)

        if duplicates:
            self._error(field, f"Duplicate values found for key '{key_for_uniqueness}': "
                               f"{sorted(duplicates)}")


_port_list_rule = {
    "type": "list", "minlength": 2,
    "schema": {"type": "string", "regex": PORT_REFERENCE_REGEX},
}

ELEMENT_SCHEMA = {
    "kind": {"type": "string", "required": True, "empty": False},
    "name": {"type": "string", "required": True, "empty": False, "regex": NAME_REGEX},
    "parameters": {
        "type": "dict", "default": {},
        "keysrules": {"type": "string", "empty": False},
        "valuesrules": {"coerce": "number", "type": "number"},
    },
}

NETWORK_SCHEMA = {
    "name": {"type": "string", "empty": False, "default": "network"},
    "components": {
        "type": "list", "default": [], "unique_elements_by_key": "name",
        "schema": {"type": "dict", "schema": ELEMENT_SCHEMA},
    },
    "connections": {
        "type": "list", "default": [],
        "schema": {
            "anyof": [
                _port_list_rule,
                {"type": "dict", "schema": {
                    "name": {"type": "string", "empty": False},
                    "ports": dict(_port_list_rule, required=True),
                }},
            ],
        },
    },
}


def _flatten_errors(errors: Mapping, path: Tuple = ()) -> Iterator[Tuple[str, str]]:
    for key, messages in errors.items():
        for message in messages:
            if isinstance(message, Mapping):
                yield from _flatten_errors(message, path + (key,))
            else:
                yield '.'.join(map(str, path + (key,))), message


def _validated(schema: Dict[str, Any], document: Any, what: str) -> Dict[str, Any]:
    """Validate and normalize ``document`` against ``schema``"""
    if not isinstance(document, Mapping):
        raise ValidationError(f"{what} must be a mapping, got {type(document).__name__}")
    validator = NetworkValidator(schema)
    if not validator.validate(dict(document)):
        details = "\n".join(f"  - In field '{path}': {message}"
                            for path, message in sorted(_flatten_errors(validator.errors)))
        raise ValidationError(f"{what} failed schema validation:\n{details}")
    return validator.document


@dataclass(frozen=True)
class ElementConfig:
    """
    Plain description of one element.

    Attributes:
        kind: Element class name (a key of ELEMENT_TYPES)
        name: Unique component name
        parameters: Constructor keyword arguments (R, C, G, n, T_initial, ...)
    """
    kind: str
    name: str
    parameters: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ElementConfig':
        return cls(**_validated(ELEMENT_SCHEMA, data, "Element description"))


def build_element(config: ElementConfig) -> Component:
    """
    Instantiate the element described by ``config``.

    Raises:
        ValidationError: Unknown kind, bad keyword arguments, or invalid
            parameter values (raised by the element itself)
    """
    cls = ELEMENT_TYPES.get(config.kind)
    if cls is None:
        raise ValidationError(
            f"Unknown element kind '{config.kind}'. "
            f"Choose one of: {', '.join(sorted(ELEMENT_TYPES))}",
            component=config.name,
        )
    try:
        return cls(config.name, **config.parameters)
    except TypeError as e:
        raise ValidationError(f"Invalid parameters for {config.kind}: {e}",
                              component=config.name) from e


def _resolve_port(graph: ThermalGraph, reference: str) -> Port:
    comp_name, _, port_name = reference.partition('.')
    try:
        comp = graph.get_component(comp_name)
    except KeyError as e:
        raise ValidationError(f"Connection refers to unknown component in '{reference}'") from e
    if port_name not in comp.ports:
        raise ValidationError(
            f"Connection refers to unknown port '{port_name}' "
            f"(available: {', '.join(comp.ports)})", component=comp_name)
    return comp.ports[port_name]


def build_network(description: Mapping[str, Any]) -> ThermalGraph:
    """
    Build an unassembled ThermalGraph from a network description mapping.

    Raises:
        ValidationError: The description does not match NETWORK_SCHEMA, or
            refers to unknown element kinds, components or ports
    """
    data = _validated(NETWORK_SCHEMA, description, "Network description")
    graph = ThermalGraph(name=data['name'])

    for entry in data['components']:
        graph.add_component(build_element(ElementConfig(**entry)))

    for entry in data['connections']:
        if isinstance(entry, dict):
            references, label = entry['ports'], entry.get('name')
        else:
            references, label = entry, None
        graph.connect(*(_resolve_port(graph, ref) for ref in references), name=label)

    logger.info("Built network '%s' with %d components and %d connection sets",
                graph.name, len(graph.components), len(graph.connections))
    return graph


def load_network(path: Union[str, Path]) -> ThermalGraph:
    """
    Load a network description from a YAML file.

    Raises:
        ValidationError: Missing file, invalid YAML, or a description that
            fails schema validation
    """
    source = Path(path)
    try:
        with open(source, 'r', encoding='utf-8') as f:
            content = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ValidationError(f"Network file not found at path: {source}") from e
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid YAML syntax in {source}: {e}") from e

    logger.debug("Loaded network description from %s", source)
    return build_network(content)
