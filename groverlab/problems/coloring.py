from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from groverlab.quantum.circuits import CircuitSamplerConfig, sample_circuit
from groverlab.quantum.engine import Bits, StatevectorEngine, bits_to_int, int_to_bits
from groverlab.quantum.errors import ConfigurationError, SearchExhausted
from groverlab.quantum.grover import SearchParameters
from groverlab.quantum.oracle import phase_kickback, vertex_coloring_oracle
from groverlab.quantum.search import GroverSearcher, SearchConfig, VerifiedSolution

logger = logging.getLogger(__name__)

Edge = Tuple[int, int]

DEFAULT_EDGES: Tuple[Edge, ...] = ((0, 1), (0, 2), (0, 3), (1, 2), (1, 3), (2, 3), (3, 4))
# red, green, blue, yellow, blue
DEFAULT_EXAMPLE_COLORING: Bits = (False, False, True, False, False, True, True, True, False, True)
COLOR_NAMES: Tuple[str, ...] = ("red", "green", "blue", "yellow")


@dataclass(frozen=True)
class ColoringConfig:
    """
    Graph coloring problem.

    Notes:
    - each vertex gets `color_bits` qubits, little-endian, so 2 bits => 4 colors.
    - `n_solutions` is the expected number of valid colorings; it only feeds
      the iteration estimate (72 for the default graph: K4 plus a pendant vertex).
    - an empty `example_coloring` skips the oracle check of a given coloring.
    """

    n_vertices: int = 5
    edges: Tuple[Edge, ...] = DEFAULT_EDGES
    example_coloring: Bits = DEFAULT_EXAMPLE_COLORING
    color_bits: int = 2
    n_solutions: int = 72
    color_names: Tuple[str, ...] = COLOR_NAMES

    def __post_init__(self):
        if self.n_vertices <= 0 or self.color_bits <= 0:
            raise ConfigurationError("n_vertices and color_bits must be > 0.")
        for a, b in self.edges:
            if not (0 <= a < self.n_vertices and 0 <= b < self.n_vertices) or a == b:
                raise ConfigurationError(f"invalid edge ({a}, {b}) for {self.n_vertices} vertices.")
        if self.example_coloring and len(self.example_coloring) != self.n_qubits:
            raise ConfigurationError(
                f"example coloring has {len(self.example_coloring)} bits, expected {self.n_qubits}."
            )
        if not 0 < self.n_solutions <= 2**self.n_qubits:
            raise ConfigurationError(f"n_solutions must be in [1, {2 ** self.n_qubits}].")

    @property
    def n_qubits(self) -> int:
        return self.n_vertices * self.color_bits

    @property
    def n_colors(self) -> int:
        return 2**self.color_bits


@dataclass(frozen=True)
class ColoringResult:
    solution: VerifiedSolution
    colors: List[int]


def decode_coloring(bits: Sequence[bool], n_vertices: int, color_bits: int = 2) -> List[int]:
    if len(bits) != n_vertices * color_bits:
        raise ConfigurationError(f"expected {n_vertices * color_bits} bits, got {len(bits)}.")
    return [bits_to_int(bits[v * color_bits : (v + 1) * color_bits]) for v in range(n_vertices)]


def encode_coloring(colors: Sequence[int], color_bits: int = 2) -> Bits:
    bits: List[bool] = []
    for color in colors:
        if not 0 <= color < 2**color_bits:
            raise ConfigurationError(f"color {color} does not fit in {color_bits} bits.")
        bits.extend(int_to_bits(color, color_bits))
    return tuple(bits)


def is_valid_coloring(edges: Sequence[Edge], colors: Sequence[int]) -> bool:
    return all(colors[a] != colors[b] for a, b in edges)


def describe_coloring(colors: Sequence[int], color_names: Sequence[str] = COLOR_NAMES) -> List[str]:
    return [
        f"vertex {v}: {color_names[c] if c < len(color_names) else f'color {c}'}"
        for v, c in enumerate(colors)
    ]


def check_coloring_with_oracle(
    engine: StatevectorEngine,
    config: ColoringConfig,
    bits: Optional[Sequence[bool]] = None,
) -> bool:
    """Load a classical coloring into qubits and ask the marking oracle whether it is valid."""
    bits = tuple(config.example_coloring if bits is None else bits)
    if len(bits) != config.n_qubits:
        raise ConfigurationError(f"expected {config.n_qubits} bits, got {len(bits)}.")
    oracle = vertex_coloring_oracle(config.n_vertices, config.edges, config.color_bits)

    with engine.borrow(config.n_qubits) as register, engine.borrow(1) as (target,):
        engine.load_bits(register, bits)
        oracle(engine, register, target)
        (is_valid,) = engine.measure([target])
    return is_valid


def solve_coloring(
    engine: StatevectorEngine,
    config: ColoringConfig = ColoringConfig(),
    search_config: SearchConfig = SearchConfig(),
    iterations: Optional[int] = None,
) -> ColoringResult:
    if iterations is None:
        iterations = SearchParameters(config.n_qubits, config.n_solutions).iterations
    logger.info(
        "coloring search: %d vertices, %d edges, %d qubits, %d iterations",
        config.n_vertices,
        len(config.edges),
        config.n_qubits,
        iterations,
    )

    oracle = phase_kickback(vertex_coloring_oracle(config.n_vertices, config.edges, config.color_bits))

    def is_solution(bits: Bits) -> bool:
        return is_valid_coloring(config.edges, decode_coloring(bits, config.n_vertices, config.color_bits))

    solution = GroverSearcher(engine, search_config).search(
        n_qubits=config.n_qubits,
        phase_oracle=oracle,
        is_solution=is_solution,
        iterations=iterations,
    )
    return ColoringResult(solution=solution, colors=decode_coloring(solution.bits, config.n_vertices, config.color_bits))


def count_valid_colorings(config: ColoringConfig) -> int:
    """Brute-force count of valid colorings; feeds the iteration estimate when no count is given."""
    return sum(
        is_valid_coloring(config.edges, colors)
        for colors in itertools.product(range(config.n_colors), repeat=config.n_vertices)
    )


def sample_coloring_circuit(
    config: ColoringConfig = ColoringConfig(),
    sampler_config: CircuitSamplerConfig = CircuitSamplerConfig(),
    n_samples: int = 16,
    iterations: Optional[int] = None,
) -> ColoringResult:
    """
    Run the coloring search as one static circuit on `sampler_config.backend`
    and return the first sampled coloring that passes the classical check.

    Raises `SearchExhausted` when none of the `n_samples` samples is valid.
    """
    if n_samples < 1:
        raise ConfigurationError("n_samples must be >= 1.")
    if iterations is None:
        iterations = SearchParameters(config.n_qubits, config.n_solutions).iterations

    def is_solution(bits: Bits) -> bool:
        return is_valid_coloring(config.edges, decode_coloring(bits, config.n_vertices, config.color_bits))

    samples = sample_circuit(config.n_qubits, is_solution, iterations, n_samples, sampler_config)
    for attempt, index in enumerate(samples, start=1):
        bits = int_to_bits(index, config.n_qubits)
        if is_solution(bits):
            logger.info("%s sample %d: accepted coloring %d", sampler_config.backend, attempt, index)
            solution = VerifiedSolution(bits=bits, accepted=True, attempts=attempt, iterations=iterations)
            return ColoringResult(solution=solution, colors=decode_coloring(bits, config.n_vertices, config.color_bits))
        logger.debug("%s sample %d: rejected %d", sampler_config.backend, attempt, index)

    logger.warning("no valid coloring among %d circuit samples", n_samples)
    raise SearchExhausted(n_samples)
