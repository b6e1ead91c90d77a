from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence, Tuple

from .arithmetic import modular_multiply_add, xor_constant
from .engine import Bits, Qubit, StatevectorEngine, int_to_bits, within
from .errors import ConfigurationError

MarkingBody = Callable[[StatevectorEngine, Sequence[Qubit], Qubit, Tuple[Qubit, ...]], None]
PhaseBody = Callable[[StatevectorEngine, Sequence[Qubit], Tuple[Qubit, ...]], None]


@dataclass(frozen=True)
class MarkingOracle:
    """
    Flips `target` exactly when the input register satisfies a predicate.

    - forward(engine, register, target)
    - inverse(engine, register, target)
    - controlled(engine, controls, register, target): acts only when all controls are |1>

    Any scratch qubits are uncomputed before returning, so the register is
    left as it was in the computational basis.
    """

    name: str
    forward: Callable[[StatevectorEngine, Sequence[Qubit], Qubit], None]
    inverse: Callable[[StatevectorEngine, Sequence[Qubit], Qubit], None]
    controlled: Callable[[StatevectorEngine, Sequence[Qubit], Sequence[Qubit], Qubit], None]

    def __call__(self, engine: StatevectorEngine, register: Sequence[Qubit], target: Qubit) -> None:
        self.forward(engine, register, target)


@dataclass(frozen=True)
class PhaseOracle:
    """Multiplies the amplitude of every satisfying basis state by -1."""

    name: str
    forward: Callable[[StatevectorEngine, Sequence[Qubit]], None]
    inverse: Callable[[StatevectorEngine, Sequence[Qubit]], None]
    controlled: Callable[[StatevectorEngine, Sequence[Qubit], Sequence[Qubit]], None]

    def __call__(self, engine: StatevectorEngine, register: Sequence[Qubit]) -> None:
        self.forward(engine, register)


def _ctrl_state(n_zero: int, n_one: int) -> int:
    # First `n_zero` controls must read 0, the remaining `n_one` must read 1.
    return ((1 << n_one) - 1) << n_zero


def _self_inverse_marking(name: str, body: MarkingBody) -> MarkingOracle:
    def forward(engine, register, target):
        body(engine, register, target, ())

    def controlled(engine, controls, register, target):
        body(engine, register, target, tuple(controls))

    return MarkingOracle(name=name, forward=forward, inverse=forward, controlled=controlled)


def mark_equal(
    engine: StatevectorEngine,
    c0: Sequence[Qubit],
    c1: Sequence[Qubit],
    target: Qubit,
    controls: Sequence[Qubit] = (),
) -> None:
    """Flip `target` iff c0 and c1 hold the same value. c1 is restored on exit."""
    if len(c0) != len(c1):
        raise ConfigurationError("registers compared for equality must have the same length.")

    def xor_into_c1():
        for a, b in zip(c0, c1):
            engine.cx(a, b)

    with within(xor_into_c1):
        engine.mcx(tuple(c1) + tuple(controls), target, ctrl_state=_ctrl_state(len(c1), len(controls)))


def equality_oracle(width: int) -> MarkingOracle:
    """Marking oracle over a 2*width register laid out as (c0, c1)."""
    if width <= 0:
        raise ConfigurationError("width must be > 0.")

    def body(engine, register, target, controls):
        if len(register) != 2 * width:
            raise ConfigurationError(f"equality oracle expects {2 * width} qubits, got {len(register)}.")
        mark_equal(engine, register[:width], register[width:], target, controls)

    return _self_inverse_marking(f"Equality({width})", body)


def vertex_coloring_oracle(
    n_vertices: int,
    edges: Sequence[Tuple[int, int]],
    color_bits: int = 2,
) -> MarkingOracle:
    """
    Marks colorings in which no edge joins two vertices of the same color.

    The register holds `n_vertices` chunks of `color_bits` qubits. One
    borrowed conflict qubit per edge records whether its endpoints match;
    the target flips when all conflict qubits are zero.
    """
    if n_vertices <= 0 or color_bits <= 0:
        raise ConfigurationError("n_vertices and color_bits must be > 0.")
    edges = tuple((int(a), int(b)) for a, b in edges)
    for a, b in edges:
        if not (0 <= a < n_vertices and 0 <= b < n_vertices) or a == b:
            raise ConfigurationError(f"invalid edge ({a}, {b}) for {n_vertices} vertices.")
    n_qubits = n_vertices * color_bits

    def body(engine, register, target, controls):
        if len(register) != n_qubits:
            raise ConfigurationError(f"coloring register must have {n_qubits} qubits, got {len(register)}.")
        if not edges:
            engine.mcx(controls, target)
            return
        colors = [tuple(register[v * color_bits : (v + 1) * color_bits]) for v in range(n_vertices)]

        with engine.borrow(len(edges)) as conflicts:

            def mark_conflicts():
                for (a, b), conflict in zip(edges, conflicts):
                    mark_equal(engine, colors[a], colors[b], conflict)

            def unmark_conflicts():
                for (a, b), conflict in reversed(list(zip(edges, conflicts))):
                    mark_equal(engine, colors[a], colors[b], conflict)

            with within(mark_conflicts, unmark_conflicts):
                engine.mcx(
                    tuple(conflicts) + tuple(controls),
                    target,
                    ctrl_state=_ctrl_state(len(conflicts), len(controls)),
                )

    return _self_inverse_marking(f"MarkValidVertexColoring({n_vertices}v, {len(edges)}e)", body)


def isbn_oracle(a: int, b: int, modulus: int = 11) -> MarkingOracle:
    """Marks digit values x with (b + a*x) mod modulus == 0."""

    def body(engine, digits, target, controls):
        n = len(digits)
        multiply_add = modular_multiply_add(a, modulus, n, n)

        with engine.borrow(n) as scratch:
            qargs = tuple(digits) + tuple(scratch)

            def compute():
                xor_constant(engine, b, scratch)
                engine.apply(multiply_add, qargs)

            def uncompute():
                engine.apply(multiply_add.adjoint(), qargs)
                xor_constant(engine, b, scratch)

            with within(compute, uncompute):
                engine.mcx(tuple(scratch) + tuple(controls), target, ctrl_state=_ctrl_state(n, len(controls)))

    return _self_inverse_marking(f"Isbn(a={a}, b={b})", body)


def marking_oracle_from_predicate(n_qubits: int, predicate: Callable[[Bits], bool]) -> MarkingOracle:
    """One controlled flip per satisfying basis state. Only for small registers."""
    marked = [v for v in range(2**n_qubits) if predicate(int_to_bits(v, n_qubits))]

    def body(engine, register, target, controls):
        if len(register) != n_qubits:
            raise ConfigurationError(f"oracle expects {n_qubits} qubits, got {len(register)}.")
        for value in marked:
            engine.mcx(
                tuple(register) + tuple(controls),
                target,
                ctrl_state=value | _ctrl_state(n_qubits, len(controls)),
            )

    return _self_inverse_marking(f"Predicate({n_qubits}q, {len(marked)} marked)", body)


def phase_kickback(marking: MarkingOracle) -> PhaseOracle:
    """
    Turn a marking oracle into a phase oracle.

    The auxiliary qubit is held in |-> while the marking oracle runs, so a
    flip of the auxiliary qubit shows up as a -1 phase on the register.
    """

    def body(engine, register, controls):
        with engine.borrow(1) as (aux,):

            def prepare_minus():
                engine.x(aux)
                engine.h(aux)

            def unprepare_minus():
                engine.h(aux)
                engine.x(aux)

            with within(prepare_minus, unprepare_minus):
                if controls:
                    marking.controlled(engine, controls, register, aux)
                else:
                    marking.forward(engine, register, aux)

    def forward(engine, register):
        body(engine, register, ())

    def controlled(engine, controls, register):
        body(engine, register, tuple(controls))

    return PhaseOracle(name=f"PhaseKickback({marking.name})", forward=forward, inverse=forward, controlled=controlled)
