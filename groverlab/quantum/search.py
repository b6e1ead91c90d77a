from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .engine import Bits, StatevectorEngine, bits_to_int, format_bits
from .errors import ConfigurationError, SearchExhausted, VerificationFailure
from .grover import Preparation, run_grover
from .oracle import PhaseOracle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchConfig:
    max_attempts: int = 100

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ConfigurationError("max_attempts must be >= 1.")


class SearchPhase(Enum):
    SEARCHING = "searching"
    VERIFYING = "verifying"
    ACCEPTED = "accepted"


@dataclass(frozen=True)
class VerifiedSolution:
    bits: Bits
    accepted: bool
    attempts: int
    iterations: int

    @property
    def value(self) -> int:
        return bits_to_int(self.bits)

    def __str__(self) -> str:
        return f"{format_bits(self.bits)} (value={self.value}, attempts={self.attempts})"


def verify(bits: Bits, is_solution: Callable[[Bits], bool]) -> Bits:
    if not is_solution(bits):
        raise VerificationFailure(bits)
    return bits


class GroverSearcher:
    """
    Repeat-until-verified Grover search.

    Each attempt borrows a fresh register, runs the driver, measures, and
    checks the measured value against the classical predicate. Amplitude
    amplification only raises the odds of a good answer, so nothing is
    returned until the predicate accepts it. The register is reset and
    released after every attempt, whatever its outcome.
    """

    def __init__(self, engine: StatevectorEngine, config: SearchConfig = SearchConfig()):
        self.engine = engine
        self.config = config
        self.phase = SearchPhase.SEARCHING

    def search(
        self,
        n_qubits: int,
        phase_oracle: PhaseOracle,
        is_solution: Callable[[Bits], bool],
        iterations: int,
        preparation: Optional[Preparation] = None,
    ) -> VerifiedSolution:
        for attempt in range(1, self.config.max_attempts + 1):
            self.phase = SearchPhase.SEARCHING
            with self.engine.borrow(n_qubits) as register:
                run_grover(self.engine, register, phase_oracle, iterations, preparation)
                bits = self.engine.measure(register)

            self.phase = SearchPhase.VERIFYING
            try:
                verify(bits, is_solution)
            except VerificationFailure as e:
                logger.debug("attempt %d: %s", attempt, e)
                continue

            self.phase = SearchPhase.ACCEPTED
            logger.info("attempt %d: accepted %s", attempt, format_bits(bits))
            return VerifiedSolution(bits=bits, accepted=True, attempts=attempt, iterations=iterations)

        self.phase = SearchPhase.SEARCHING
        logger.warning("%s: no verified solution in %d attempts", phase_oracle.name, self.config.max_attempts)
        raise SearchExhausted(self.config.max_attempts)
