"""Unit tests for EquationSystem validation, export and lambdification."""

import numpy as np
import pytest
import sympy

from thermal_dae.core.equation import Equation
from thermal_dae.core.exceptions import StructuralError, ValidationError
from thermal_dae.core.graph import ThermalGraph
from thermal_dae.core.system import EquationSystem
from thermal_dae.core.variable import Variable
from thermal_dae.components import (
    FixedTemperature,
    HeatCapacitor,
    PrescribedHeatFlow,
    ThermalConductor,
)

t = sympy.Symbol('t')


def rc_system(T_fixed=350.0, G=2.0, C=1000.0, T0=300.0):
    """source -- conductor -- capacitor"""
    graph = ThermalGraph('rc')
    source = FixedTemperature('src', T=T_fixed)
    cond = ThermalConductor('cond', G=G)
    cap = HeatCapacitor('cap', C=C, T_initial=T0)
    graph.add_components(source, cond, cap)
    graph.connect(source.port, cond.port_a)
    graph.connect(cond.port_b, cap.port)
    return graph.assemble(t=t)


class TestValidation:
    """Structural checks run when an EquationSystem is created"""

    def test_unbalanced_system_rejected(self):
        x = Variable('x', kind='potential')
        y = Variable('y', kind='flow')
        eq = Equation(x.symbol(t), sympy.Integer(1), 'boundary', 'test')

        with pytest.raises(StructuralError, match="1 equations for 2 unknowns"):
            EquationSystem([x, y], [eq], t)

    def test_structurally_singular_rejected(self):
        x = Variable('x', kind='potential')
        y = Variable('y', kind='flow')
        eqs = [
            Equation(x.symbol(t), sympy.Integer(1), 'boundary', 'first'),
            Equation(2 * x.symbol(t), sympy.Integer(2), 'boundary', 'second'),
        ]

        with pytest.raises(StructuralError, match="structurally singular"):
            EquationSystem([x, y], eqs, t)

    def test_undeclared_variable_rejected(self):
        x = Variable('x', kind='potential')
        ghost = sympy.Function('ghost')(t)
        eq = Equation(x.symbol(t), ghost, 'wiring', 'comp')

        with pytest.raises(StructuralError, match="undeclared variable 'ghost'") as excinfo:
            EquationSystem([x], [eq], t)
        assert excinfo.value.component == 'comp'

    def test_undeclared_parameter_rejected(self):
        x = Variable('x', kind='potential')
        eq = Equation(x.symbol(t), sympy.Symbol('k'), 'wiring', 'comp')

        with pytest.raises(StructuralError, match="undeclared parameter 'k'"):
            EquationSystem([x], [eq], t)

    def test_duplicate_variable_rejected(self):
        x = Variable('x', kind='potential')
        with pytest.raises(StructuralError, match="declared twice"):
            EquationSystem([x, x], [], t)

    def test_incidence_matrix(self):
        system = rc_system()
        incidence = system.incidence_matrix().toarray()

        assert incidence.shape == (len(system.equations), len(system.unknowns))
        # the capacitor ODE touches its state (through the derivative) and its port flow
        row = next(i for i, eq in enumerate(system.equations) if eq.kind == 'differential')
        names = [system.unknowns[j].name for j in np.flatnonzero(incidence[row])]
        assert sorted(names) == ['cap.T', 'cap.port.Q_flow']


class TestExport:
    """Variable table and plain-data export"""

    def test_variable_table(self):
        system = rc_system()
        table = {row['name']: row for row in system.variable_table()}

        assert table['cap.T'] == {'name': 'cap.T', 'kind': 'state', 'unit': 'K', 'default': 300.0}
        assert table['cond.G']['kind'] == 'parameter'
        assert table['cond.G']['default'] == 2.0
        assert table['src.port.Q_flow']['unit'] == 'W'

    def test_views(self):
        system = rc_system()

        assert [v.name for v in system.states] == ['cap.T']
        assert {v.name for v in system.parameters} == {'src.T', 'cond.G', 'cap.C'}
        assert system.inputs == []
        assert len(system) == len(system.unknowns) == 11

    def test_to_dict(self):
        data = rc_system().to_dict()

        assert data['name'] == 'rc'
        assert data['time'] == 't'
        assert len(data['equations']) == 11
        first = data['equations'][0]
        assert set(first) == {'lhs', 'rhs', 'kind', 'origin'}
        assert all(isinstance(eq['lhs'], str) for eq in data['equations'])

    def test_substitute_parameters(self):
        system = rc_system()
        substituted = system.substitute_parameters({'cond.G': 5.0})

        constitutive = next(eq for eq in substituted if eq.kind == 'constitutive')
        assert not constitutive.symbols() - {t}
        assert sympy.Symbol('cond.G') not in constitutive.rhs.free_symbols
        assert constitutive.rhs.coeff(system.symbol('cond.dT')) == 5.0

    def test_unknown_parameter_override(self):
        with pytest.raises(ValidationError, match="Unknown parameter"):
            rc_system().substitute_parameters({'nope.G': 1.0})

    def test_steady_state_equations_drop_derivatives(self):
        system = rc_system()
        steady = system.steady_state_equations()

        assert len(steady) == len(system.equations)
        assert not any(eq.atoms(sympy.Derivative) for eq in steady)


class TestResidualFunction:
    """Lambdified numerical residual F(t, y, ydot)"""

    def test_shapes_and_masks(self):
        system = rc_system()
        residual_func, y0, ydot0, algebraic_vars = system.residual_function()

        n = len(system.unknowns)
        assert y0.shape == (n,)
        assert ydot0.shape == (n,)
        assert np.all(ydot0 == 0.0)
        assert sum(1 for alg in algebraic_vars if not alg) == 1
        assert residual_func(0.0, y0, ydot0).shape == (n,)

    def test_consistent_point_has_zero_residual(self):
        """T_cap = 300 K, source 350 K, G = 2 W/K: 100 W into the capacitor"""
        system = rc_system()
        residual_func, y0, _, algebraic_vars = system.residual_function()

        values = {
            'src.port.T': 350.0, 'src.port.Q_flow': -100.0,
            'cond.port_a.T': 350.0, 'cond.port_a.Q_flow': 100.0,
            'cond.port_b.T': 300.0, 'cond.port_b.Q_flow': -100.0,
            'cond.dT': 50.0, 'cond.Q_flow': 100.0,
            'cap.port.T': 300.0, 'cap.port.Q_flow': 100.0,
            'cap.T': 300.0,
        }
        y = np.array([values[v.name] for v in system.unknowns])
        ydot = np.zeros(len(y))
        ydot[algebraic_vars.index(False)] = 100.0 / 1000.0

        np.testing.assert_allclose(residual_func(0.0, y, ydot), 0.0, atol=1e-12)

    def test_parameter_override(self):
        system = rc_system()
        residual_func, y0, ydot0, _ = system.residual_function(parameters={'src.T': 400.0})

        res = residual_func(0.0, y0, ydot0)
        src_row = next(i for i, eq in enumerate(system.equations) if eq.origin == 'src')
        # default port temperature guess is 293.15 K
        assert res[src_row] == pytest.approx(293.15 - 400.0)

    def test_inputs_required_and_evaluated(self):
        graph = ThermalGraph()
        heater = PrescribedHeatFlow('heater')
        cap = HeatCapacitor('cap', C=10.0)
        graph.add_components(heater, cap)
        graph.connect(heater.port, cap.port)
        system = graph.assemble(t=t)

        assert [v.name for v in system.inputs] == ['heater.u']
        with pytest.raises(ValidationError, match="heater.u"):
            system.residual_function()

        residual_func, y0, ydot0, _ = system.residual_function(inputs={'heater.u': lambda time: 2.0 * time})
        res = residual_func(3.0, y0, ydot0)
        heater_row = next(i for i, eq in enumerate(system.equations) if eq.origin == 'heater')
        # port.Q_flow (guess 0) + u(3) = 6
        assert res[heater_row] == pytest.approx(6.0)


class TestMerge:
    """Combining independently assembled systems"""

    def test_merge_rejects_conflicting_variables(self):
        a = Variable('x', kind='potential', default=1.0)
        b = Variable('x', kind='potential', default=2.0)
        s1 = EquationSystem([a], [Equation(a.symbol(t), sympy.Integer(1), 'boundary', 's1')], t)
        s2 = EquationSystem([b], [Equation(b.symbol(t), sympy.Integer(1), 'boundary', 's2')], t)

        with pytest.raises(StructuralError, match="declared differently"):
            EquationSystem.merge(s1, s2)

    def test_merge_rejects_different_time_symbols(self):
        tau = sympy.Symbol('tau')
        x = Variable('x', kind='potential')
        s1 = EquationSystem([x], [Equation(x.symbol(t), sympy.Integer(1), 'boundary', 's1')], t)
        s2 = EquationSystem([x], [Equation(x.symbol(tau), sympy.Integer(1), 'boundary', 's2')], tau)

        with pytest.raises(ValidationError, match="different time symbols"):
            EquationSystem.merge(s1, s2)

    def test_merge_revalidates(self):
        """Merging two systems that define the same unknown over-determines it"""
        x = Variable('x', kind='potential')
        s1 = EquationSystem([x], [Equation(x.symbol(t), sympy.Integer(1), 'boundary', 's1')], t)
        s2 = EquationSystem([x], [Equation(x.symbol(t), sympy.Integer(2), 'boundary', 's2')], t)

        with pytest.raises(StructuralError, match="unbalanced"):
            EquationSystem.merge(s1, s2)
