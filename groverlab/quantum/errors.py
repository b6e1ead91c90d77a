from __future__ import annotations


class GroverError(Exception):
    """Base class for errors raised by the search engine."""


class ConfigurationError(GroverError, ValueError):
    """Inconsistent sizes, counts or problem inputs."""


class AllocationError(GroverError, RuntimeError):
    """The engine cannot provide the requested qubits."""


class InvalidOperandError(GroverError, RuntimeError):
    """An operation addressed a released or duplicated qubit."""


class UseAfterFreeError(GroverError, RuntimeError):
    """A qubit was released while still carrying |1> amplitude."""


class VerificationFailure(GroverError):
    """A measured candidate failed the classical predicate."""

    def __init__(self, bits):
        self.bits = tuple(bits)
        super().__init__(f"candidate {''.join('1' if b else '0' for b in self.bits)} rejected")


class SearchExhausted(GroverError):
    """No verified candidate was found within the attempt budget."""

    def __init__(self, attempts: int):
        self.attempts = int(attempts)
        super().__init__(f"no verified solution after {self.attempts} attempts")
