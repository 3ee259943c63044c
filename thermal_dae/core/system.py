"""
EquationSystem: the assembled DAE handed to an external solver.

The system is a variable table plus an ordered list of symbolic equations.
It is validated on construction and never modified afterwards; every
transformation (parameter substitution, steady-state reduction,
lambdification) returns new objects.
"""

import logging
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import sympy
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import maximum_bipartite_matching

from thermal_dae.core.equation import Equation
from thermal_dae.core.exceptions import StructuralError, ValidationError
from thermal_dae.core.variable import Variable

logger = logging.getLogger(__name__)

InputSignal = Union[float, Callable[[float], float]]


def _function_name(expr: sympy.Expr) -> str:
    return expr.func.__name__


class EquationSystem:
    """
    Immutable DAE description: F(t, x, dx/dt, p, u) = 0.

    Unknowns are the variables of kind potential, flow and state. Parameters
    carry fixed default values; inputs are external signals supplied when the
    system is lambdified.

    Raises:
        StructuralError: on duplicate variable names, references to undeclared
            variables, unequal equation/unknown counts, or a structurally
            singular incidence pattern
    """

    def __init__(self,
                 variables: Sequence[Variable],
                 equations: Sequence[Equation],
                 t: sympy.Symbol,
                 name: str = 'network'):
        self.variables: Tuple[Variable, ...] = tuple(variables)
        self.equations: Tuple[Equation, ...] = tuple(equations)
        self.t = t
        self.name = name

        self._by_name: Dict[str, Variable] = {}
        for var in self.variables:
            if var.name in self._by_name:
                raise StructuralError(f"Variable '{var.name}' declared twice")
            self._by_name[var.name] = var

        self.validate()

    # ------------------------------------------------------------------
    # Variable views
    # ------------------------------------------------------------------

    @property
    def unknowns(self) -> List[Variable]:
        return [v for v in self.variables if v.is_unknown]

    @property
    def states(self) -> List[Variable]:
        return [v for v in self.variables if v.kind == 'state']

    @property
    def parameters(self) -> List[Variable]:
        return [v for v in self.variables if v.kind == 'parameter']

    @property
    def inputs(self) -> List[Variable]:
        return [v for v in self.variables if v.kind == 'input']

    def variable(self, name: str) -> Variable:
        return self._by_name[name]

    def symbol(self, name: str) -> sympy.Expr:
        """Symbolic handle of a variable by qualified name (e.g. 'wall.port_a.T')"""
        return self._by_name[name].symbol(self.t)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """
        Structural checks required before the system may be exported.

        Checks:
            - Every function/symbol in an equation is a declared variable
            - Equation count equals unknown count
            - A perfect matching between equations and unknowns exists
        """
        for eq in self.equations:
            for func in eq.functions():
                var = self._by_name.get(_function_name(func))
                if var is None or var.kind == 'parameter':
                    raise StructuralError(
                        f"Equation '{eq}' references undeclared variable "
                        f"'{_function_name(func)}'", component=eq.origin)
            for sym in eq.symbols():
                if sym == self.t:
                    continue
                var = self._by_name.get(sym.name)
                if var is None or var.kind != 'parameter':
                    raise StructuralError(
                        f"Equation '{eq}' references undeclared parameter '{sym.name}'",
                        component=eq.origin)

        n_eq = len(self.equations)
        n_unknown = len(self.unknowns)
        if n_eq != n_unknown:
            raise StructuralError(
                f"System '{self.name}' is unbalanced: {n_eq} equations for "
                f"{n_unknown} unknowns"
            )

        if n_eq == 0:
            return

        matching = maximum_bipartite_matching(self.incidence_matrix(), perm_type='column')
        unmatched = [self.equations[i] for i in np.flatnonzero(matching < 0)]
        if unmatched:
            origins = sorted({eq.origin for eq in unmatched})
            raise StructuralError(
                f"System '{self.name}' is structurally singular: "
                f"{len(unmatched)} equation(s) cannot be assigned an unknown "
                f"(first: '{unmatched[0]}')",
                component=', '.join(origins),
            )

    def incidence_matrix(self) -> csr_matrix:
        """
        Equation/unknown incidence pattern.

        Entry (i, j) is 1 when unknown j, or its time derivative, appears in
        equation i. Rows follow self.equations, columns follow self.unknowns.
        """
        column = {v.name: j for j, v in enumerate(self.unknowns)}
        rows, cols = [], []
        for i, eq in enumerate(self.equations):
            for func in eq.functions():
                j = column.get(_function_name(func))
                if j is not None:
                    rows.append(i)
                    cols.append(j)
        data = np.ones(len(rows), dtype=np.int8)
        shape = (len(self.equations), len(column))
        matrix = csr_matrix((data, (rows, cols)), shape=shape)
        matrix.sum_duplicates()
        return matrix

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def variable_table(self) -> List[Dict[str, object]]:
        return [
            {'name': v.name, 'kind': v.kind, 'unit': v.units, 'default': v.default}
            for v in self.variables
        ]

    def to_dict(self) -> Dict[str, object]:
        """Plain-data export: variable table plus equations in string form"""
        return {
            'name': self.name,
            'time': str(self.t),
            'variables': self.variable_table(),
            'equations': [
                {'lhs': str(eq.lhs), 'rhs': str(eq.rhs), 'kind': eq.kind, 'origin': eq.origin}
                for eq in self.equations
            ],
        }

    def parameter_values(self, overrides: Optional[Mapping[str, float]] = None) -> Dict[sympy.Symbol, float]:
        overrides = dict(overrides or {})
        unknown = set(overrides) - {p.name for p in self.parameters}
        if unknown:
            raise ValidationError(f"Unknown parameter(s): {', '.join(sorted(unknown))}")
        return {
            sympy.Symbol(p.name): float(overrides.get(p.name, p.default))
            for p in self.parameters
        }

    def substitute_parameters(self, overrides: Optional[Mapping[str, float]] = None) -> List[Equation]:
        values = self.parameter_values(overrides)
        return [
            Equation(eq.lhs.xreplace(values), eq.rhs.xreplace(values), eq.kind, eq.origin)
            for eq in self.equations
        ]

    def steady_state_equations(self, parameters: Optional[Mapping[str, float]] = None,
                               substitute: bool = False) -> List[sympy.Eq]:
        """
        Equations with every time derivative set to zero.

        Args:
            parameters: Parameter overrides (only used when substitute=True)
            substitute: Replace parameter symbols by their values
        """
        equations = self.substitute_parameters(parameters) if substitute else self.equations
        result = []
        for eq in equations:
            expr = eq.residual
            zero = {d: sympy.Integer(0) for d in expr.atoms(sympy.Derivative)}
            result.append(sympy.Eq(expr.xreplace(zero), 0))
        return result

    def residual_function(self,
                          parameters: Optional[Mapping[str, float]] = None,
                          inputs: Optional[Mapping[str, InputSignal]] = None):
        """
        Lambdify the system into a numerical DAE residual.

        Args:
            parameters: Parameter overrides by qualified name
            inputs: Value or callable(t) for each input variable by name

        Returns:
            Tuple of:
                residual_func: Function(t, y, ydot) -> residuals
                y0: Initial unknown vector (variable defaults)
                ydot0: Initial derivative vector (zeros)
                algebraic_vars: Boolean list (True = algebraic, False = differential)

        Usage:
            >>> residual_func, y0, ydot0, alg_vars = system.residual_function()
            >>> # Pass to a DAE solver (IDA, scipy-based index-1 wrappers, ...)
        """
        inputs = dict(inputs or {})
        missing = [v.name for v in self.inputs if v.name not in inputs]
        if missing:
            raise ValidationError(f"No signal given for input(s): {', '.join(missing)}")

        unknowns = self.unknowns
        y_syms = sympy.symbols(f'y0:{len(unknowns)}')
        ydot_syms = sympy.symbols(f'ydot0:{len(unknowns)}')
        u_syms = sympy.symbols(f'u0:{len(self.inputs)}')

        derivative_map = {}
        value_map = {}
        for var, y, ydot in zip(unknowns, y_syms, ydot_syms):
            func = var.symbol(self.t)
            derivative_map[sympy.Derivative(func, self.t)] = ydot
            value_map[func] = y
        for var, u in zip(self.inputs, u_syms):
            value_map[var.symbol(self.t)] = u

        residuals = [
            eq.residual.xreplace(derivative_map).xreplace(value_map)
            for eq in self.substitute_parameters(parameters)
        ]
        compiled = sympy.lambdify([self.t, *y_syms, *ydot_syms, *u_syms], residuals, modules='numpy')
        signals = [inputs[v.name] for v in self.inputs]

        def residual_func(t: float, y: np.ndarray, ydot: np.ndarray) -> np.ndarray:
            """
            Global DAE residual function: F(t, y, dy/dt) = 0

            Args:
                t: Current time [s]
                y: Unknown vector (ordered as system.unknowns)
                ydot: Derivative vector (dy/dt)
            """
            u = [s(t) if callable(s) else s for s in signals]
            return np.asarray(compiled(t, *y, *ydot, *u), dtype=float)

        y0 = np.array([v.default for v in unknowns], dtype=float)
        ydot0 = np.zeros(len(unknowns))
        algebraic_vars = [v.kind != 'state' for v in unknowns]
        return residual_func, y0, ydot0, algebraic_vars

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    @classmethod
    def merge(cls, *systems: 'EquationSystem', name: str = 'network') -> 'EquationSystem':
        """
        Concatenate independently assembled systems.

        Variable tables are unioned by name; a name declared with different
        metadata in two systems is a StructuralError.
        """
        if not systems:
            raise ValidationError("Nothing to merge")
        t = systems[0].t
        variables: Dict[str, Variable] = {}
        equations: List[Equation] = []
        for system in systems:
            if system.t != t:
                raise ValidationError(
                    f"Cannot merge systems with different time symbols "
                    f"('{t}' and '{system.t}')")
            for var in system.variables:
                existing = variables.setdefault(var.name, var)
                if existing != var:
                    raise StructuralError(
                        f"Variable '{var.name}' declared differently in "
                        f"'{system.name}'")
            equations.extend(system.equations)
        logger.debug("Merging %d systems into '%s'", len(systems), name)
        return cls(list(variables.values()), equations, t, name=name)

    def __len__(self) -> int:
        return len(self.equations)

    def __repr__(self) -> str:
        return (f"EquationSystem('{self.name}', equations={len(self.equations)}, "
                f"unknowns={len(self.unknowns)}, states={len(self.states)})")
