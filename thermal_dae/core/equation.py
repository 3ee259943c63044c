"""
Symbolic equalities as plain data.

An Equation is never executed; it only records ``lhs = rhs`` together with
what produced it, so that the assembled system can be inspected, exported
and lambdified by an external solver.
"""

from dataclasses import dataclass
from typing import Literal, Set

import sympy

EquationKind = Literal[
    'wiring',         # port/variable aliasing inside one component
    'constitutive',   # element law relating flow to potential
    'differential',   # D(x) = f(...)
    'equipotential',  # connection set: shared potential
    'balance',        # flow balance (connection set or collector)
    'boundary',       # source stubs and insulated ports
]


@dataclass(frozen=True)
class Equation:
    """
    Tagged symbolic equality ``lhs = rhs``.

    Attributes:
        lhs, rhs: sympy expressions
        kind: Which law produced the equation
        origin: Name of the component or connection set that emitted it
    """
    lhs: sympy.Expr
    rhs: sympy.Expr
    kind: EquationKind
    origin: str

    @property
    def residual(self) -> sympy.Expr:
        """Expression that vanishes when the equation holds"""
        return self.lhs - self.rhs

    def as_sympy(self) -> sympy.Eq:
        return sympy.Eq(self.lhs, self.rhs, evaluate=False)

    def functions(self) -> Set[sympy.Expr]:
        """Applied time functions (unknowns and inputs) appearing in the equation"""
        return self.residual.atoms(sympy.core.function.AppliedUndef)

    def symbols(self) -> Set[sympy.Symbol]:
        return self.residual.free_symbols

    def is_differential(self) -> bool:
        return bool(self.residual.atoms(sympy.Derivative))

    def __str__(self) -> str:
        return f"{self.lhs} ~ {self.rhs}"
