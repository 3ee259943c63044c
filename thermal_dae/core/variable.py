"""
Variable metadata for the variable table of an assembled system.
"""

from dataclasses import dataclass, replace
from typing import Literal

import sympy

VariableKind = Literal['potential', 'flow', 'state', 'parameter', 'input']

#: Kinds the solver must determine. Parameters and inputs are known.
UNKNOWN_KINDS = ('potential', 'flow', 'state')


@dataclass(frozen=True)
class Variable:
    """
    Describes one variable of the system.

    Attributes:
        name: Identifier, local to a component ('dT') until qualified
              ('wall.dT') by the owning component
        kind: Role in the DAE (see UNKNOWN_KINDS)
        default: Initial value for states, guess for algebraic unknowns,
                 value for parameters
        units: String description for documentation (not enforced)
    """
    name: str
    kind: VariableKind
    default: float = 0.0
    units: str = ""

    @property
    def is_unknown(self) -> bool:
        return self.kind in UNKNOWN_KINDS

    def symbol(self, t: sympy.Symbol) -> sympy.Expr:
        """
        Symbolic handle for this variable.

        Parameters are constant symbols; everything else is a function of
        the explicit time symbol ``t``.
        """
        if self.kind == 'parameter':
            return sympy.Symbol(self.name)
        return sympy.Function(self.name)(t)

    def qualified(self, prefix: str) -> 'Variable':
        return replace(self, name=f"{prefix}.{self.name}")

    def __repr__(self) -> str:
        return f"Variable({self.name}: {self.kind}, x0={self.default} {self.units})"
