"""Shared helpers for thermal_dae tests."""

import pytest
import sympy


def solve_steady_state(system, substitute=False):
    """
    Solve the steady-state equations of an assembled system symbolically.

    Unknown time functions are replaced by plain symbols before calling
    sympy.solve. Returns {qualified variable name: expression}; unknowns left
    free by the steady state map to their own placeholder symbol.
    """
    equations = system.steady_state_equations(substitute=substitute)
    placeholders = {
        v.symbol(system.t): sympy.Symbol(f"x_{i}")
        for i, v in enumerate(system.unknowns)
    }
    plain = [eq.xreplace(placeholders) for eq in equations]
    solutions = sympy.solve(plain, list(placeholders.values()), dict=True)
    assert len(solutions) == 1, f"Expected a unique steady state, got {solutions}"
    solution = solutions[0]
    return {
        v.name: sympy.simplify(solution.get(placeholders[v.symbol(system.t)],
                                            placeholders[v.symbol(system.t)]))
        for v in system.unknowns
    }


@pytest.fixture
def steady_state():
    return solve_steady_state
