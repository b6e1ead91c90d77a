from .engine import EngineConfig, Qubit, StatevectorEngine, bits_to_int, int_to_bits, within
from .errors import (
    AllocationError,
    ConfigurationError,
    GroverError,
    InvalidOperandError,
    SearchExhausted,
    UseAfterFreeError,
    VerificationFailure,
)
from .grover import (
    GroverDriver,
    GroverStage,
    Preparation,
    SearchParameters,
    arbitrary_state,
    asymptotic_iterations,
    diffusion,
    exact_iterations,
    reflect_about_state,
    run_grover,
    uniform_superposition,
)
from .oracle import (
    MarkingOracle,
    PhaseOracle,
    equality_oracle,
    isbn_oracle,
    marking_oracle_from_predicate,
    phase_kickback,
    vertex_coloring_oracle,
)
from .search import GroverSearcher, SearchConfig, SearchPhase, VerifiedSolution

__all__ = [
    "AllocationError",
    "ConfigurationError",
    "EngineConfig",
    "GroverDriver",
    "GroverError",
    "GroverSearcher",
    "GroverStage",
    "InvalidOperandError",
    "MarkingOracle",
    "PhaseOracle",
    "Preparation",
    "Qubit",
    "SearchConfig",
    "SearchExhausted",
    "SearchParameters",
    "SearchPhase",
    "StatevectorEngine",
    "UseAfterFreeError",
    "VerificationFailure",
    "VerifiedSolution",
    "arbitrary_state",
    "asymptotic_iterations",
    "bits_to_int",
    "diffusion",
    "equality_oracle",
    "exact_iterations",
    "int_to_bits",
    "isbn_oracle",
    "marking_oracle_from_predicate",
    "phase_kickback",
    "reflect_about_state",
    "run_grover",
    "uniform_superposition",
    "vertex_coloring_oracle",
    "within",
]
