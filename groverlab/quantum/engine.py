from __future__ import annotations

import itertools
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
from qiskit.circuit import Gate
from qiskit.circuit.library import HGate, UnitaryGate, XGate, ZGate
from qiskit.quantum_info import Operator, Statevector

from .errors import AllocationError, ConfigurationError, InvalidOperandError, UseAfterFreeError


Bits = Tuple[bool, ...]
GateLike = Union[Gate, Operator]


@dataclass(frozen=True)
class Qubit:
    uid: int

    def __repr__(self) -> str:
        return f"Qubit({self.uid})"


Register = Tuple[Qubit, ...]


@dataclass(frozen=True)
class EngineConfig:
    max_qubits: int = 24
    seed: Optional[int] = None
    atol: float = 1e-9

    def __post_init__(self):
        if self.max_qubits <= 0:
            raise ConfigurationError("max_qubits must be > 0.")
        if self.atol <= 0:
            raise ConfigurationError("atol must be > 0.")


def bits_to_int(bits: Sequence[bool]) -> int:
    """Little-endian: bits[0] is the least significant bit."""
    return sum(1 << i for i, bit in enumerate(bits) if bit)


def int_to_bits(value: int, width: int) -> Bits:
    return tuple(bool((int(value) >> i) & 1) for i in range(int(width)))


def format_bits(bits: Sequence[bool]) -> str:
    return "".join("1" if bit else "0" for bit in bits)


@contextmanager
def within(compute: Callable[[], None], uncompute: Optional[Callable[[], None]] = None) -> Iterator[None]:
    """
    Scoped reversible transform: run `compute`, hand control to the body, then
    run `uncompute` on every exit path (exceptions included).

    `uncompute` defaults to `compute` itself, which is right for self-inverse
    transforms such as CNOT ladders or X masks.
    """
    compute()
    try:
        yield
    finally:
        (uncompute or compute)()


class StatevectorEngine:
    """
    Qubit-level execution engine over a qiskit `Statevector`.

    Qubits are handed out as opaque `Qubit` handles. Internally the handle at
    position k of `_live` is qubit k of the state vector (little-endian), new
    allocations are appended at the top and released qubits are projected out.
    Released handles are rejected by every operation.
    """

    def __init__(self, config: EngineConfig = EngineConfig()):
        self.config = config
        self._rng = np.random.default_rng(config.seed)
        self._uids = itertools.count()
        self._live: List[Qubit] = []
        self._state: Optional[Statevector] = None

    def __repr__(self) -> str:
        return f"StatevectorEngine(n_allocated={self.n_allocated}, max_qubits={self.config.max_qubits})"

    @property
    def n_allocated(self) -> int:
        return len(self._live)

    # -- allocation -------------------------------------------------------

    def allocate(self, n: int) -> Register:
        n = int(n)
        if n <= 0:
            raise AllocationError("n must be > 0.")
        if self.n_allocated + n > self.config.max_qubits:
            raise AllocationError(
                f"cannot allocate {n} qubits: {self.n_allocated} of {self.config.max_qubits} already in use."
            )
        fresh = Statevector.from_label("0" * n)
        self._state = fresh if self._state is None else self._state.expand(fresh)
        qubits = tuple(Qubit(next(self._uids)) for _ in range(n))
        self._live.extend(qubits)
        return qubits

    def release(self, qubits: Sequence[Qubit]) -> None:
        qubits = tuple(qubits)
        if not qubits:
            return
        positions = self._positions(qubits)
        n = self.n_allocated
        data = self._state.data.reshape([2] * n)
        for q, pos in zip(qubits, positions):
            if not np.allclose(np.take(data, 1, axis=n - 1 - pos), 0.0, atol=self.config.atol):
                raise UseAfterFreeError(f"{q!r} released without being reset to |0>.")

        for pos in sorted(positions, reverse=True):
            data = np.take(data, 0, axis=n - 1 - pos)
            n -= 1
            del self._live[pos]

        if self._live:
            flat = data.reshape(-1)
            self._state = Statevector(flat / np.linalg.norm(flat))
        else:
            self._state = None

    @contextmanager
    def borrow(self, n: int) -> Iterator[Register]:
        """Allocate `n` qubits for the duration of a block, then reset and release them."""
        qubits = self.allocate(n)
        try:
            yield qubits
        finally:
            self.reset_all(qubits)
            self.release(qubits)

    # -- gates ------------------------------------------------------------

    def apply(
        self,
        gate: GateLike,
        targets: Sequence[Qubit],
        controls: Sequence[Qubit] = (),
        ctrl_state: Optional[int] = None,
    ) -> None:
        """
        Apply `gate` to `targets`, optionally controlled by `controls`.

        `ctrl_state` follows qiskit: bit i refers to controls[i]; None means all ones.
        """
        targets = tuple(targets)
        controls = tuple(controls)
        qargs = self._positions(controls + targets)
        if controls:
            if isinstance(gate, Operator):
                gate = UnitaryGate(gate)
            gate = gate.control(len(controls), ctrl_state=ctrl_state)
        self._state = self._state.evolve(gate, qargs=qargs)

    def x(self, qubit: Qubit) -> None:
        self.apply(XGate(), [qubit])

    def h(self, qubit: Qubit) -> None:
        self.apply(HGate(), [qubit])

    def z(self, qubit: Qubit) -> None:
        self.apply(ZGate(), [qubit])

    def cx(self, control: Qubit, target: Qubit) -> None:
        self.apply(XGate(), [target], controls=[control])

    def mcx(self, controls: Sequence[Qubit], target: Qubit, ctrl_state: Optional[int] = None) -> None:
        if not controls:
            self.x(target)
            return
        self.apply(XGate(), [target], controls=controls, ctrl_state=ctrl_state)

    def load_bits(self, qubits: Sequence[Qubit], bits: Sequence[bool]) -> None:
        """Flip the qubits whose classical bit is set (assumes they start in |0>)."""
        if len(qubits) != len(bits):
            raise ConfigurationError("qubits and bits must have the same length.")
        for q, bit in zip(qubits, bits):
            if bit:
                self.x(q)

    # -- measurement ------------------------------------------------------

    def probabilities(self, qubits: Sequence[Qubit]) -> np.ndarray:
        """Marginal outcome distribution of `qubits` (qubits[0] is the least significant bit)."""
        if self._state is None:
            raise InvalidOperandError("no qubits allocated.")
        positions = self._positions(tuple(qubits))
        full = np.abs(self._state.data) ** 2
        indices = np.arange(full.size)
        sub_index = np.zeros(full.size, dtype=int)
        for i, pos in enumerate(positions):
            sub_index |= ((indices >> pos) & 1) << i
        probs = np.zeros((2 ** len(positions),), dtype=float)
        np.add.at(probs, sub_index, full)
        return probs

    def measure(self, qubits: Sequence[Qubit]) -> Bits:
        qubits = tuple(qubits)
        if not qubits:
            return ()
        probs = self.probabilities(qubits)
        outcome = int(self._rng.choice(probs.size, p=probs / probs.sum()))
        self._collapse(self._positions(qubits), outcome)
        return int_to_bits(outcome, len(qubits))

    def reset(self, qubit: Qubit) -> None:
        (bit,) = self.measure([qubit])
        if bit:
            self.x(qubit)

    def reset_all(self, qubits: Sequence[Qubit]) -> None:
        for q in qubits:
            self.reset(q)

    def statevector(self) -> Statevector:
        if self._state is None:
            raise InvalidOperandError("no qubits allocated.")
        return self._state.copy()

    # -- internals --------------------------------------------------------

    def _positions(self, qubits: Sequence[Qubit]) -> List[int]:
        positions: List[int] = []
        for q in qubits:
            try:
                positions.append(self._live.index(q))
            except ValueError:
                raise InvalidOperandError(f"{q!r} is not allocated.") from None
        if len(set(positions)) != len(positions):
            raise InvalidOperandError("the same qubit appears twice in one operation.")
        return positions

    def _collapse(self, positions: Sequence[int], outcome: int) -> None:
        data = self._state.data
        indices = np.arange(data.size)
        keep = np.ones(data.size, dtype=bool)
        for i, pos in enumerate(positions):
            keep &= ((indices >> pos) & 1) == ((outcome >> i) & 1)
        projected = np.where(keep, data, 0.0)
        self._state = Statevector(projected / np.linalg.norm(projected))
