import numpy as np
import pytest

from groverlab.quantum.engine import EngineConfig, StatevectorEngine, bits_to_int, int_to_bits, within
from groverlab.quantum.errors import (
    AllocationError,
    ConfigurationError,
    InvalidOperandError,
    UseAfterFreeError,
)


def make_engine(**kwargs):
    return StatevectorEngine(EngineConfig(seed=0, **kwargs))


def test_bits_are_little_endian():
    assert bits_to_int((True, False, True)) == 5
    assert int_to_bits(6, 4) == (False, True, True, False)
    assert bits_to_int(int_to_bits(11, 4)) == 11


def test_allocate_starts_in_zero_state():
    engine = make_engine()
    reg = engine.allocate(3)
    assert engine.n_allocated == 3
    assert engine.probabilities(reg)[0] == pytest.approx(1.0)
    assert engine.measure(reg) == (False, False, False)


def test_allocation_limit_is_enforced():
    engine = make_engine(max_qubits=2)
    engine.allocate(2)
    with pytest.raises(AllocationError):
        engine.allocate(1)
    with pytest.raises(AllocationError):
        make_engine().allocate(0)


def test_engine_config_is_validated():
    with pytest.raises(ConfigurationError):
        EngineConfig(max_qubits=0)


def test_measure_and_release():
    engine = make_engine()
    reg = engine.allocate(3)
    engine.x(reg[0])
    engine.x(reg[2])
    bits = engine.measure(reg)
    assert bits == (True, False, True)
    engine.reset_all(reg)
    engine.release(reg)
    assert engine.n_allocated == 0


def test_release_without_reset_fails():
    engine = make_engine()
    reg = engine.allocate(2)
    engine.x(reg[1])
    with pytest.raises(UseAfterFreeError):
        engine.release(reg)
    assert engine.n_allocated == 2


def test_probabilities_need_allocated_qubits():
    engine = make_engine()
    with pytest.raises(InvalidOperandError):
        engine.probabilities(())
    reg = engine.allocate(1)
    assert engine.probabilities(()).tolist() == [1.0]
    engine.release(reg)
    with pytest.raises(InvalidOperandError):
        engine.probabilities(reg)


def test_released_qubit_is_rejected():
    engine = make_engine()
    reg = engine.allocate(1)
    engine.release(reg)
    with pytest.raises(InvalidOperandError):
        engine.x(reg[0])
    with pytest.raises(InvalidOperandError):
        engine.release(reg)


def test_duplicate_operands_are_rejected():
    engine = make_engine()
    (q,) = engine.allocate(1)
    with pytest.raises(InvalidOperandError):
        engine.cx(q, q)


def test_release_from_the_middle_keeps_other_qubits():
    engine = make_engine()
    a = engine.allocate(1)
    b = engine.allocate(1)
    c = engine.allocate(1)
    engine.x(a[0])
    engine.x(c[0])
    engine.release(b)
    assert engine.n_allocated == 2
    assert engine.measure(a + c) == (True, True)


def test_measurement_collapses_superposition():
    engine = make_engine()
    reg = engine.allocate(1)
    engine.h(reg[0])
    assert np.allclose(engine.probabilities(reg), [0.5, 0.5])
    first = engine.measure(reg)
    assert engine.measure(reg) == first
    assert engine.probabilities(reg)[bits_to_int(first)] == pytest.approx(1.0)


def test_reset_forces_zero():
    engine = make_engine()
    reg = engine.allocate(2)
    engine.h(reg[0])
    engine.cx(reg[0], reg[1])
    engine.reset_all(reg)
    assert engine.probabilities(reg)[0] == pytest.approx(1.0)
    engine.release(reg)


def test_borrow_releases_on_error():
    engine = make_engine()
    with pytest.raises(RuntimeError):
        with engine.borrow(2) as reg:
            engine.h(reg[0])
            engine.x(reg[1])
            raise RuntimeError("boom")
    assert engine.n_allocated == 0


def test_within_uncomputes_on_every_exit_path():
    engine = make_engine()
    reg = engine.allocate(2)

    def flip():
        engine.x(reg[0])

    with pytest.raises(ValueError):
        with within(flip):
            assert engine.measure([reg[0]]) == (True,)
            raise ValueError("stop")
    assert engine.measure(reg) == (False, False)


def test_controlled_on_zero_flip():
    engine = make_engine()
    reg = engine.allocate(3)
    engine.mcx(reg[:2], reg[2], ctrl_state=0)
    assert engine.measure(reg) == (False, False, True)
    engine.x(reg[0])
    engine.mcx(reg[:2], reg[2], ctrl_state=0b01)
    assert engine.measure(reg) == (True, False, False)


def test_sequence_followed_by_its_inverse_returns_to_zero():
    engine = make_engine()
    reg = engine.allocate(3)

    def forward():
        engine.h(reg[0])
        engine.cx(reg[0], reg[1])
        engine.h(reg[2])
        engine.mcx([reg[0], reg[2]], reg[1])

    def inverse():
        engine.mcx([reg[0], reg[2]], reg[1])
        engine.h(reg[2])
        engine.cx(reg[0], reg[1])
        engine.h(reg[0])

    forward()
    inverse()
    assert engine.probabilities(reg)[0] == pytest.approx(1.0)
    assert engine.measure(reg) == (False, False, False)
