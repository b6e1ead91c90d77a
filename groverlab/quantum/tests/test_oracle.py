import itertools

import numpy as np
import pytest

from groverlab.quantum.arithmetic import modular_multiply_add, xor_constant
from groverlab.quantum.engine import EngineConfig, StatevectorEngine, bits_to_int, int_to_bits
from groverlab.quantum.errors import ConfigurationError
from groverlab.quantum.oracle import (
    equality_oracle,
    isbn_oracle,
    mark_equal,
    marking_oracle_from_predicate,
    phase_kickback,
    vertex_coloring_oracle,
)


def make_engine():
    return StatevectorEngine(EngineConfig(seed=0))


def evaluate(engine, oracle, bits):
    """Run a marking oracle on a classical input; return (target flipped, register after)."""
    with engine.borrow(len(bits)) as reg, engine.borrow(1) as (target,):
        engine.load_bits(reg, bits)
        oracle(engine, reg, target)
        (flipped,) = engine.measure([target])
        restored = engine.measure(reg)
    return flipped, restored


def test_equality_oracle_marks_equal_pairs():
    engine = make_engine()
    oracle = equality_oracle(2)
    for x, y in itertools.product(range(4), repeat=2):
        bits = int_to_bits(x, 2) + int_to_bits(y, 2)
        flipped, restored = evaluate(engine, oracle, bits)
        assert flipped == (x == y)
        assert restored == bits
    assert engine.n_allocated == 0


def test_equality_oracle_rejects_mismatched_registers():
    engine = make_engine()
    with pytest.raises(ConfigurationError):
        evaluate(engine, equality_oracle(2), (False, True, False))
    reg = engine.allocate(4)
    with pytest.raises(ConfigurationError):
        mark_equal(engine, reg[:1], reg[1:3], reg[3])


def test_vertex_coloring_oracle_matches_classical_check():
    engine = make_engine()
    edges = ((0, 1), (1, 2))
    oracle = vertex_coloring_oracle(3, edges)
    for value in range(2**6):
        bits = int_to_bits(value, 6)
        colors = [bits_to_int(bits[2 * v : 2 * v + 2]) for v in range(3)]
        flipped, restored = evaluate(engine, oracle, bits)
        assert flipped == all(colors[a] != colors[b] for a, b in edges)
        assert restored == bits
    assert engine.n_allocated == 0


def test_vertex_coloring_oracle_validates_inputs():
    with pytest.raises(ConfigurationError):
        vertex_coloring_oracle(2, [(0, 2)])
    with pytest.raises(ConfigurationError):
        vertex_coloring_oracle(2, [(1, 1)])
    engine = make_engine()
    with pytest.raises(ConfigurationError):
        evaluate(engine, vertex_coloring_oracle(2, [(0, 1)]), (False,) * 3)


def test_isbn_oracle_marks_solutions_of_the_check_equation():
    engine = make_engine()
    oracle = isbn_oracle(6, 9)
    for x in range(16):
        bits = int_to_bits(x, 4)
        flipped, restored = evaluate(engine, oracle, bits)
        assert flipped == ((9 + 6 * x) % 11 == 0)
        assert restored == bits
    assert engine.n_allocated == 0


def test_modular_multiply_add_and_its_inverse():
    engine = make_engine()
    op = modular_multiply_add(6, 11, 4, 4)
    x_reg = engine.allocate(4)
    y_reg = engine.allocate(4)
    engine.load_bits(x_reg, int_to_bits(7, 4))
    xor_constant(engine, 3, y_reg)
    engine.apply(op, x_reg + y_reg)
    assert bits_to_int(engine.measure(y_reg)) == (3 + 6 * 7) % 11
    engine.apply(op.adjoint(), x_reg + y_reg)
    xor_constant(engine, 3, y_reg)
    assert engine.measure(y_reg) == (False,) * 4


def test_modular_multiply_add_validates_sizes():
    with pytest.raises(ConfigurationError):
        modular_multiply_add(6, 17, 4, 4)
    with pytest.raises(ConfigurationError):
        modular_multiply_add(6, 11, 0, 4)


def test_controlled_marking_oracle_needs_all_controls():
    engine = make_engine()
    oracle = marking_oracle_from_predicate(2, lambda bits: bits_to_int(bits) == 3)
    for control_on in (False, True):
        with engine.borrow(1) as (ctrl,), engine.borrow(2) as reg, engine.borrow(1) as (target,):
            engine.load_bits(reg, (True, True))
            if control_on:
                engine.x(ctrl)
            oracle.controlled(engine, [ctrl], reg, target)
            assert engine.measure([target]) == (control_on,)


def test_phase_kickback_flips_sign_of_marked_states():
    engine = make_engine()
    oracle = phase_kickback(equality_oracle(1))
    reg = engine.allocate(2)
    for q in reg:
        engine.h(q)
    oracle(engine, reg)
    assert engine.n_allocated == 2
    expected = np.array([-0.5, 0.5, 0.5, -0.5])
    assert np.allclose(engine.statevector().data, expected)


def test_phase_oracle_inverse_restores_state():
    engine = make_engine()
    oracle = phase_kickback(isbn_oracle(6, 9))
    reg = engine.allocate(4)
    for q in reg:
        engine.h(q)
    before = engine.statevector().data
    oracle(engine, reg)
    oracle.inverse(engine, reg)
    assert np.allclose(engine.statevector().data, before)
