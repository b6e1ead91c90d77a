from __future__ import annotations

from dataclasses import dataclass

from groverlab.quantum.engine import StatevectorEngine, bits_to_int
from groverlab.quantum.errors import ConfigurationError, SearchExhausted


@dataclass(frozen=True)
class RngConfig:
    minimum: int = 0
    maximum: int = 100
    max_attempts: int = 1000

    def __post_init__(self):
        if self.minimum > self.maximum:
            raise ConfigurationError("minimum must be <= maximum.")
        if self.max_attempts < 1:
            raise ConfigurationError("max_attempts must be >= 1.")


def generate_random_bit(engine: StatevectorEngine) -> bool:
    """Measure a qubit in an equal superposition."""
    with engine.borrow(1) as (q,):
        engine.h(q)
        (bit,) = engine.measure([q])
    return bit


def sample_random_number_in_range(engine: StatevectorEngine, config: RngConfig = RngConfig()) -> int:
    """
    Uniform integer in [minimum, maximum] by rejection sampling over
    bit_length(maximum - minimum) random bits.
    """
    span = config.maximum - config.minimum
    n_bits = span.bit_length()
    for _ in range(config.max_attempts):
        sample = bits_to_int([generate_random_bit(engine) for _ in range(n_bits)])
        if sample <= span:
            return config.minimum + sample
    raise SearchExhausted(config.max_attempts)
