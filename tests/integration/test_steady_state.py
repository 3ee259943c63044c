"""
Integration tests: assemble complete networks and check their steady states.

Symbolic checks go through sympy.solve on the steady-state equations; the
numerical check drives the lambdified residual with scipy.optimize.root.
"""

import numpy as np
import pytest
import sympy
from scipy.optimize import root

from thermal_dae.core.exceptions import ValidationError
from thermal_dae.core.graph import ThermalGraph
from thermal_dae.components import (
    FixedHeatFlow,
    FixedTemperature,
    HeatCapacitor,
    ThermalCollector,
    ThermalConductor,
    ThermalDistributedResistor,
    ThermalResistor,
)


def between_temperatures(element, T_hot=400.0, T_cold=300.0):
    """hot -- element -- cold"""
    graph = ThermalGraph(element.name)
    hot = FixedTemperature('hot', T=T_hot)
    cold = FixedTemperature('cold', T=T_cold)
    graph.add_components(hot, element, cold)
    graph.connect(hot.port, element.port_a)
    graph.connect(element.port_b, cold.port)
    return graph.assemble()


def test_series_resistors_add(steady_state):
    """Two resistors in series carry (T_hot - T_cold) / (R1 + R2)"""
    graph = ThermalGraph('series')
    hot = FixedTemperature('hot', T=400.0)
    r1 = ThermalResistor('r1', R=0.2)
    r2 = ThermalResistor('r2', R=0.3)
    cold = FixedTemperature('cold', T=300.0)
    graph.add_components(hot, r1, r2, cold)
    graph.connect(hot.port, r1.port_a)
    graph.connect(r1.port_b, r2.port_a)
    graph.connect(r2.port_b, cold.port)

    solution = steady_state(graph.assemble())

    T_hot, T_cold = sympy.Symbol('hot.T'), sympy.Symbol('cold.T')
    R1, R2 = sympy.Symbol('r1.R'), sympy.Symbol('r2.R')
    assert sympy.simplify(solution['r1.Q_flow'] - (T_hot - T_cold) / (R1 + R2)) == 0
    assert sympy.simplify(solution['r2.Q_flow'] - solution['r1.Q_flow']) == 0


def test_series_resistors_numeric(steady_state):
    graph = ThermalGraph('series')
    hot = FixedTemperature('hot', T=400.0)
    r1 = ThermalResistor('r1', R=0.2)
    r2 = ThermalResistor('r2', R=0.3)
    cold = FixedTemperature('cold', T=300.0)
    graph.add_components(hot, r1, r2, cold)
    graph.connect(hot.port, r1.port_a)
    graph.connect(r1.port_b, r2.port_a)
    graph.connect(r2.port_b, cold.port)

    solution = steady_state(graph.assemble(), substitute=True)

    assert float(solution['r1.Q_flow']) == pytest.approx(200.0)
    assert float(solution['r1.port_b.T']) == pytest.approx(360.0)


def test_single_segment_matches_lumped_resistor(steady_state):
    """With n = 1 the distributed element is exactly a resistor R at steady state"""
    distributed = steady_state(between_temperatures(
        ThermalDistributedResistor('wall', R=0.5, C=1e4, n=1)))
    lumped = steady_state(between_temperatures(ThermalResistor('wall', R=0.5)))

    for name in ('wall.port_a.Q_flow', 'wall.port_b.Q_flow', 'wall.dT'):
        assert sympy.simplify(distributed[name] - lumped[name]) == 0


@pytest.mark.parametrize('n', [1, 3, 6])
def test_distributed_boundary_flows_cancel(steady_state, n):
    """Heat entering port_a leaves through port_b once the profile has settled"""
    solution = steady_state(between_temperatures(
        ThermalDistributedResistor('wall', R=0.5, C=1e4, n=n)), substitute=True)

    assert float(solution['wall.port_a.Q_flow'] + solution['wall.port_b.Q_flow']) == pytest.approx(0.0, abs=1e-9)
    assert float(solution['wall.port_a.Q_flow']) > 0.0
    # interior profile is linear between the boundary nodes
    nodes = [float(solution[f'wall.T_{i}']) for i in range(1, n + 3)]
    np.testing.assert_allclose(np.diff(nodes), np.diff(nodes)[0])


def test_boundary_flows_sum_to_zero(steady_state):
    """Energy leaving the fixed temperatures balances at steady state"""
    graph = ThermalGraph('tee')
    hot = FixedTemperature('hot', T=350.0)
    warm = FixedTemperature('warm', T=320.0)
    cold = FixedTemperature('cold', T=280.0)
    g1 = ThermalConductor('g1', G=2.0)
    g2 = ThermalConductor('g2', G=3.0)
    g3 = ThermalConductor('g3', G=4.0)
    graph.add_components(hot, warm, cold, g1, g2, g3)
    graph.connect(hot.port, g1.port_a)
    graph.connect(warm.port, g2.port_a)
    graph.connect(cold.port, g3.port_b)
    graph.connect(g1.port_b, g2.port_b, g3.port_a, name='hub')

    solution = steady_state(graph.assemble(), substitute=True)

    total = sum(float(solution[f'{name}.port.Q_flow']) for name in ('hot', 'warm', 'cold'))
    assert total == pytest.approx(0.0, abs=1e-9)
    # hub temperature is the conductance-weighted mean
    expected = (2.0 * 350.0 + 3.0 * 320.0 + 4.0 * 280.0) / 9.0
    assert float(solution['g3.port_a.T']) == pytest.approx(expected)


def test_collector_balance(steady_state):
    """Flows 5, -2 and -3 W into the collector leave nothing for port_b"""
    graph = ThermalGraph('collector')
    col = ThermalCollector('col', m=3)
    sink = FixedTemperature('sink', T=310.0)
    graph.add_components(col, sink)
    for i, (port, flow) in enumerate(zip(col.port_a, (5.0, -2.0, -3.0)), start=1):
        source = FixedHeatFlow(f'q{i}', Q_flow=flow)
        graph.add_component(source)
        graph.connect(source.port, port)
    graph.connect(col.port_b, sink.port)

    solution = steady_state(graph.assemble(), substitute=True)

    assert float(solution['col.port_b.Q_flow']) == pytest.approx(0.0, abs=1e-12)
    potentials = {float(solution[f'col.{p}.T']) for p in col.ports}
    assert potentials == {310.0}


def test_capacitor_settles_to_source(steady_state):
    graph = ThermalGraph('rc')
    source = FixedTemperature('src', T=350.0)
    cond = ThermalConductor('cond', G=2.0)
    cap = HeatCapacitor('cap', C=1000.0)
    graph.add_components(source, cond, cap)
    graph.connect(source.port, cond.port_a)
    graph.connect(cond.port_b, cap.port)

    solution = steady_state(graph.assemble(), substitute=True)

    assert float(solution['cap.T']) == pytest.approx(350.0)
    assert float(solution['cap.port.Q_flow']) == pytest.approx(0.0, abs=1e-12)


def test_invalid_parameters_rejected_before_assembly():
    with pytest.raises(ValidationError):
        HeatCapacitor('cap', C=0.0)
    with pytest.raises(ValidationError):
        ThermalDistributedResistor('wall', R=1.0, C=1.0, n=0)


def test_numerical_steady_state():
    """
    inside (293.15 K) -- resistor 0.05 K/W -- wall (n = 1, R = 0.05 K/W) -- outside (263.15 K)

    Solving F(t, y, 0) = 0 gives 300 W through both elements.
    """
    graph = ThermalGraph('envelope')
    inside = FixedTemperature('inside', T=293.15)
    film = ThermalResistor('film', R=0.05)
    wall = ThermalDistributedResistor('wall', R=0.05, C=2e5, n=1)
    outside = FixedTemperature('outside', T=263.15)
    graph.add_components(inside, film, wall, outside)
    graph.connect(inside.port, film.port_a)
    graph.connect(film.port_b, wall.port_a)
    graph.connect(wall.port_b, outside.port)
    system = graph.assemble()

    residual_func, y0, ydot0, _ = system.residual_function()
    result = root(lambda y: residual_func(0.0, y, ydot0), y0)

    assert result.success
    values = dict(zip((v.name for v in system.unknowns), result.x))
    assert values['film.Q_flow'] == pytest.approx(300.0, rel=1e-6)
    assert values['wall.port_a.Q_flow'] == pytest.approx(300.0, rel=1e-6)
    assert values['wall.port_b.Q_flow'] == pytest.approx(-300.0, rel=1e-6)
    assert values['wall.port_a.T'] == pytest.approx(278.15, rel=1e-6)
