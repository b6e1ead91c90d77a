from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

import numpy as np
from qiskit.quantum_info import Operator

from .engine import Qubit, StatevectorEngine, within
from .errors import ConfigurationError
from .oracle import PhaseOracle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Preparation:
    """State preparation A with A|0...0> = |s>, plus its inverse."""

    name: str
    forward: Callable[[StatevectorEngine, Sequence[Qubit]], None]
    inverse: Callable[[StatevectorEngine, Sequence[Qubit]], None]


def uniform_superposition() -> Preparation:
    def forward(engine, register):
        for q in register:
            engine.h(q)

    return Preparation(name="Uniform", forward=forward, inverse=forward)


def householder_unitary(amplitudes: Sequence[float], n_qubits: int) -> np.ndarray:
    """
    Real reflection mapping |0> onto the normalized `amplitudes` (zero-padded
    to 2^n_qubits). The matrix is its own inverse.
    """
    dim = 2**n_qubits
    psi = np.zeros((dim,), dtype=float)
    psi[: len(amplitudes)] = amplitudes
    psi /= np.linalg.norm(psi)

    w = -psi
    w[0] += 1.0
    norm_sq = float(w @ w)
    if norm_sq < 1e-24:
        return np.eye(dim)
    return np.eye(dim) - 2.0 * np.outer(w, w) / norm_sq


def arbitrary_state(amplitudes: Sequence[float]) -> Preparation:
    """
    Preparation of an arbitrary real amplitude vector, e.g. a uniform
    superposition over a domain that is not a power of two.
    """
    amps = np.asarray(amplitudes)
    if np.iscomplexobj(amps):
        if np.any(np.abs(np.imag(amps)) > 0):
            raise ConfigurationError("only real amplitudes are supported.")
        amps = np.real(amps)
    amps = amps.astype(float)
    if amps.ndim != 1 or amps.size == 0:
        raise ConfigurationError("amplitudes must be a non-empty 1-D sequence.")
    if not np.all(np.isfinite(amps)) or np.linalg.norm(amps) == 0:
        raise ConfigurationError("amplitudes must be finite and not all zero.")

    n_qubits = max(1, int(math.ceil(math.log2(amps.size))))
    unitary = Operator(householder_unitary(amps, n_qubits))

    def forward(engine, register):
        if len(register) != n_qubits:
            raise ConfigurationError(f"state preparation expects {n_qubits} qubits, got {len(register)}.")
        engine.apply(unitary, register)

    return Preparation(name=f"ArbitraryState({amps.size})", forward=forward, inverse=forward)


def _all_ones_phase_flip(engine: StatevectorEngine, register: Sequence[Qubit]) -> None:
    if len(register) == 1:
        engine.z(register[0])
        return
    target = register[-1]
    engine.h(target)
    engine.mcx(register[:-1], target)
    engine.h(target)


def reflect_about_state(engine: StatevectorEngine, register: Sequence[Qubit], preparation: Preparation) -> None:
    """
    Reflection about A|0...0>, implemented as A X^n (MCZ) X^n A^dagger.
    Equal to 2|s><s| - I up to a global phase.
    """
    register = tuple(register)

    def unprepare_and_flip():
        preparation.inverse(engine, register)
        for q in register:
            engine.x(q)

    def unflip_and_prepare():
        for q in register:
            engine.x(q)
        preparation.forward(engine, register)

    with within(unprepare_and_flip, unflip_and_prepare):
        _all_ones_phase_flip(engine, register)


def diffusion(engine: StatevectorEngine, register: Sequence[Qubit]) -> None:
    """Standard Grover diffusion H^n X^n (MCZ) X^n H^n."""
    reflect_about_state(engine, register, uniform_superposition())


class GroverStage(Enum):
    UNINITIALIZED = "uninitialized"
    SUPERPOSED = "superposed"
    ITERATING = "iterating"
    DONE = "done"


class GroverDriver:
    """
    Prepare |s>, then apply (oracle, reflection) a fixed number of times.

    The driver owns no qubits; the caller allocates the register, measures it
    once the driver reports DONE, and releases it.
    """

    def __init__(
        self,
        engine: StatevectorEngine,
        register: Sequence[Qubit],
        phase_oracle: PhaseOracle,
        preparation: Optional[Preparation] = None,
    ):
        self.engine = engine
        self.register = tuple(register)
        self.phase_oracle = phase_oracle
        self.preparation = preparation if preparation is not None else uniform_superposition()
        self.stage = GroverStage.UNINITIALIZED
        self.iteration = 0

    def prepare(self) -> None:
        if self.stage is not GroverStage.UNINITIALIZED:
            raise ConfigurationError(f"cannot prepare from stage {self.stage.value}.")
        self.preparation.forward(self.engine, self.register)
        self.stage = GroverStage.SUPERPOSED

    def iterate(self) -> None:
        if self.stage not in (GroverStage.SUPERPOSED, GroverStage.ITERATING):
            raise ConfigurationError(f"cannot iterate from stage {self.stage.value}.")
        self.phase_oracle(self.engine, self.register)
        reflect_about_state(self.engine, self.register, self.preparation)
        self.iteration += 1
        self.stage = GroverStage.ITERATING

    def run(self, iterations: int) -> GroverStage:
        if iterations < 0:
            raise ConfigurationError("iterations must be >= 0.")
        self.prepare()
        for _ in range(iterations):
            self.iterate()
            logger.debug("%s: iteration %d/%d", self.phase_oracle.name, self.iteration, iterations)
        self.stage = GroverStage.DONE
        return self.stage


def run_grover(
    engine: StatevectorEngine,
    register: Sequence[Qubit],
    phase_oracle: PhaseOracle,
    iterations: int,
    preparation: Optional[Preparation] = None,
) -> GroverStage:
    return GroverDriver(engine, register, phase_oracle, preparation).run(iterations)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _check_counts(domain_size: int, n_solutions: int) -> None:
    if domain_size <= 0:
        raise ConfigurationError("domain size must be > 0.")
    if n_solutions <= 0 or n_solutions > domain_size:
        raise ConfigurationError(f"n_solutions must be in [1, {domain_size}], got {n_solutions}.")


def asymptotic_iterations(search_space_size: int, n_solutions: int) -> int:
    """round(pi/4 * sqrt(S/M)); good when M << S."""
    _check_counts(search_space_size, n_solutions)
    return _round_half_up(math.pi / 4 * math.sqrt(search_space_size / n_solutions))


def exact_iterations(domain_size: int, n_solutions: int = 1) -> int:
    """round(pi / (4 theta) - 0.5) with sin(theta) = sqrt(M/D); accurate for small domains."""
    _check_counts(domain_size, n_solutions)
    theta = math.asin(math.sqrt(n_solutions / domain_size))
    return max(0, _round_half_up(math.pi / (4 * theta) - 0.5))


@dataclass(frozen=True)
class SearchParameters:
    """
    Register size and expected solution count.

    With `domain_size` unset the domain is the full 2^n_qubits space and the
    asymptotic formula is used; a prepared sub-domain uses the exact one.
    """

    n_qubits: int
    n_solutions: int = 1
    domain_size: Optional[int] = None

    def __post_init__(self):
        if self.n_qubits <= 0:
            raise ConfigurationError("n_qubits must be > 0.")
        if self.domain_size is not None and not 0 < self.domain_size <= 2**self.n_qubits:
            raise ConfigurationError(f"domain_size must be in [1, {2 ** self.n_qubits}].")
        _check_counts(self.effective_domain_size, self.n_solutions)

    @property
    def search_space_size(self) -> int:
        return 2**self.n_qubits

    @property
    def effective_domain_size(self) -> int:
        return self.search_space_size if self.domain_size is None else self.domain_size

    @property
    def iterations(self) -> int:
        if self.domain_size is None:
            return asymptotic_iterations(self.search_space_size, self.n_solutions)
        return exact_iterations(self.domain_size, self.n_solutions)
