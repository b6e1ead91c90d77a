import math

import numpy as np
import pytest

from groverlab.quantum.circuits import circuit_probabilities
from groverlab.quantum.engine import EngineConfig, StatevectorEngine, bits_to_int
from groverlab.quantum.errors import ConfigurationError
from groverlab.quantum.grover import (
    GroverDriver,
    GroverStage,
    SearchParameters,
    arbitrary_state,
    asymptotic_iterations,
    diffusion,
    exact_iterations,
    run_grover,
)
from groverlab.quantum.oracle import equality_oracle, isbn_oracle, marking_oracle_from_predicate, phase_kickback


def make_engine():
    return StatevectorEngine(EngineConfig(seed=0))


def test_asymptotic_iterations():
    assert asymptotic_iterations(2**10, 72) == 3
    assert asymptotic_iterations(2**6, 24) == 1


def test_exact_iterations_depends_only_on_domain_size():
    assert exact_iterations(10) == 2
    assert exact_iterations(4) == 1
    assert exact_iterations(11) == 2
    assert {exact_iterations(10) for _ in range(5)} == {2}


def test_iteration_estimators_reject_bad_counts():
    with pytest.raises(ConfigurationError):
        asymptotic_iterations(4, 5)
    with pytest.raises(ConfigurationError):
        asymptotic_iterations(4, 0)
    with pytest.raises(ConfigurationError):
        exact_iterations(0)


def test_search_parameters_choose_formula():
    assert SearchParameters(10, 72).iterations == 3
    assert SearchParameters(4, 1, domain_size=10).iterations == 2
    with pytest.raises(ConfigurationError):
        SearchParameters(4, 1, domain_size=17)
    with pytest.raises(ConfigurationError):
        SearchParameters(2, 5)


def test_diffusion_fixes_the_uniform_state():
    engine = make_engine()
    reg = engine.allocate(3)
    for q in reg:
        engine.h(q)
    diffusion(engine, reg)
    assert np.allclose(engine.probabilities(reg), np.full(8, 1 / 8))


def test_arbitrary_state_preparation_and_inverse():
    engine = make_engine()
    prep = arbitrary_state([1.0] * 10)
    reg = engine.allocate(4)
    prep.forward(engine, reg)
    probs = engine.probabilities(reg)
    assert np.allclose(probs[:10], 0.1)
    assert np.allclose(probs[10:], 0.0)
    prep.inverse(engine, reg)
    assert engine.probabilities(reg)[0] == pytest.approx(1.0)


def test_arbitrary_state_rejects_bad_amplitudes():
    with pytest.raises(ConfigurationError):
        arbitrary_state([0.0, 0.0])
    with pytest.raises(ConfigurationError):
        arbitrary_state([1j, 1.0])
    with pytest.raises(ConfigurationError):
        arbitrary_state([])


def test_single_solution_is_amplified_in_one_iteration():
    engine = make_engine()
    predicate = lambda bits: bits_to_int(bits) == 2  # noqa: E731
    oracle = phase_kickback(marking_oracle_from_predicate(2, predicate))
    reg = engine.allocate(2)
    run_grover(engine, reg, oracle, iterations=1)
    probs = engine.probabilities(reg)
    assert probs[2] > 0.25
    assert probs[2] == pytest.approx(1.0)
    assert np.allclose(probs, circuit_probabilities(2, predicate, 1))


def test_equality_oracle_matches_closed_form():
    engine = make_engine()
    reg = engine.allocate(2)
    run_grover(engine, reg, phase_kickback(equality_oracle(1)), iterations=1)
    probs = engine.probabilities(reg)
    theta = math.asin(math.sqrt(2 / 4))
    assert probs[0] + probs[3] == pytest.approx(math.sin(3 * theta) ** 2)


def test_isbn_digit_is_amplified_over_ten_values():
    engine = make_engine()
    reg = engine.allocate(4)
    oracle = phase_kickback(isbn_oracle(6, 9))
    run_grover(engine, reg, oracle, exact_iterations(10), preparation=arbitrary_state([1.0] * 10))
    probs = engine.probabilities(reg)
    assert probs[4] > 0.99
    assert np.allclose(probs[10:], 0.0, atol=1e-9)
    assert engine.n_allocated == 4


def test_driver_stages():
    engine = make_engine()
    reg = engine.allocate(2)
    driver = GroverDriver(engine, reg, phase_kickback(equality_oracle(1)))
    assert driver.stage is GroverStage.UNINITIALIZED
    with pytest.raises(ConfigurationError):
        driver.iterate()
    driver.prepare()
    assert driver.stage is GroverStage.SUPERPOSED
    driver.iterate()
    assert driver.stage is GroverStage.ITERATING
    assert driver.iteration == 1


def test_driver_rejects_negative_iterations():
    engine = make_engine()
    reg = engine.allocate(2)
    with pytest.raises(ConfigurationError):
        run_grover(engine, reg, phase_kickback(equality_oracle(1)), iterations=-1)
