from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from groverlab.quantum.engine import Bits, StatevectorEngine, bits_to_int
from groverlab.quantum.errors import ConfigurationError
from groverlab.quantum.grover import SearchParameters, arbitrary_state, exact_iterations
from groverlab.quantum.oracle import isbn_oracle, phase_kickback
from groverlab.quantum.search import GroverSearcher, SearchConfig, VerifiedSolution

logger = logging.getLogger(__name__)

MISSING = -1
ISBN_LENGTH = 10
ISBN_MODULUS = 11
DIGIT_QUBITS = 4
WEIGHTS: Tuple[int, ...] = tuple(ISBN_LENGTH - j for j in range(ISBN_LENGTH))

DEFAULT_DIGITS: Tuple[int, ...] = (0, 3, 0, 6, MISSING, 0, 6, 1, 5, 2)


def _max_digit(index: int) -> int:
    # the check digit may be X (10)
    return 10 if index == ISBN_LENGTH - 1 else 9


def validate_isbn_digits(digits: Sequence[int]) -> int:
    """Check shape and ranges; return the index of the missing digit."""
    if len(digits) != ISBN_LENGTH:
        raise ConfigurationError(f"expected {ISBN_LENGTH} digits, got {len(digits)}.")
    missing = [i for i, d in enumerate(digits) if d == MISSING]
    if len(missing) != 1:
        raise ConfigurationError(f"exactly one digit must be missing, got {len(missing)}.")
    for i, d in enumerate(digits):
        if i != missing[0] and not 0 <= d <= _max_digit(i):
            raise ConfigurationError(f"digit {d} at position {i} is out of range.")
    return missing[0]


def parse_isbn(text: str) -> Tuple[int, ...]:
    """'0-306-4?615-2' -> (0, 3, 0, 6, 4, -1, 6, 1, 5, 2); '?' or '_' marks the missing digit."""
    digits = []
    for ch in text.replace("-", "").replace(" ", ""):
        if ch in "?_":
            digits.append(MISSING)
        elif ch in "xX":
            digits.append(10)
        elif ch.isdigit():
            digits.append(int(ch))
        else:
            raise ConfigurationError(f"unexpected character {ch!r} in ISBN {text!r}.")
    validate_isbn_digits(digits)
    return tuple(digits)


def format_isbn(digits: Sequence[int]) -> str:
    return "".join("?" if d == MISSING else ("X" if d == 10 else str(d)) for d in digits)


@dataclass(frozen=True)
class IsbnConfig:
    digits: Tuple[int, ...] = DEFAULT_DIGITS

    def __post_init__(self):
        validate_isbn_digits(self.digits)

    @property
    def missing_index(self) -> int:
        return self.digits.index(MISSING)

    @property
    def domain_size(self) -> int:
        return _max_digit(self.missing_index) + 1


@dataclass(frozen=True)
class IsbnResult:
    solution: VerifiedSolution
    digit: int
    digits: Tuple[int, ...]


def isbn_check_constants(digits: Sequence[int]) -> Tuple[int, int]:
    """
    (a, b) such that the missing digit x is valid iff (b + a*x) mod 11 == 0.
    a is the weight of the missing position, b the weighted sum of the known digits.
    """
    missing = validate_isbn_digits(digits)
    a = WEIGHTS[missing]
    b = sum(w * d for j, (w, d) in enumerate(zip(WEIGHTS, digits)) if j != missing) % ISBN_MODULUS
    return a, b


def is_isbn_valid(digits: Sequence[int]) -> bool:
    if len(digits) != ISBN_LENGTH:
        raise ConfigurationError(f"expected {ISBN_LENGTH} digits, got {len(digits)}.")
    if any(not 0 <= d <= _max_digit(i) for i, d in enumerate(digits)):
        return False
    return sum(w * d for w, d in zip(WEIGHTS, digits)) % ISBN_MODULUS == 0


def fill_missing(digits: Sequence[int], value: int) -> Tuple[int, ...]:
    return tuple(value if d == MISSING else d for d in digits)


def isbn_iterations(domain_size: int = 10) -> int:
    return exact_iterations(domain_size, 1)


def recover_missing_digit(
    engine: StatevectorEngine,
    config: IsbnConfig = IsbnConfig(),
    search_config: SearchConfig = SearchConfig(),
    iterations: Optional[int] = None,
) -> IsbnResult:
    a, b = isbn_check_constants(config.digits)
    domain = config.domain_size
    if iterations is None:
        iterations = SearchParameters(DIGIT_QUBITS, 1, domain_size=domain).iterations
    logger.info("isbn search: %s, a=%d, b=%d, %d iterations", format_isbn(config.digits), a, b, iterations)

    oracle = phase_kickback(isbn_oracle(a, b, ISBN_MODULUS))
    preparation = arbitrary_state([1.0] * domain)

    def is_solution(bits: Bits) -> bool:
        return is_isbn_valid(fill_missing(config.digits, bits_to_int(bits)))

    solution = GroverSearcher(engine, search_config).search(
        n_qubits=DIGIT_QUBITS,
        phase_oracle=oracle,
        is_solution=is_solution,
        iterations=iterations,
        preparation=preparation,
    )
    return IsbnResult(solution=solution, digit=solution.value, digits=fill_missing(config.digits, solution.value))
