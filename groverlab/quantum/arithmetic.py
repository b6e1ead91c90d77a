from __future__ import annotations

from typing import Sequence

import numpy as np
from qiskit.quantum_info import Operator

from .engine import Qubit, StatevectorEngine
from .errors import ConfigurationError


def xor_constant(engine: StatevectorEngine, value: int, register: Sequence[Qubit]) -> None:
    """XOR a classical constant into a little-endian register. Self-inverse."""
    value = int(value)
    if value < 0 or value >= 2 ** len(register):
        raise ConfigurationError(f"{value} does not fit in {len(register)} qubits.")
    for i, q in enumerate(register):
        if (value >> i) & 1:
            engine.x(q)


def modular_multiply_add(multiplier: int, modulus: int, n_x: int, n_y: int) -> Operator:
    """
    Permutation |x>|y> -> |x>|(y + multiplier * x) mod modulus>.

    Apply it to qargs `x + y` (x in the low qubits, both little-endian).
    Accumulator values y >= modulus are left untouched so the map stays a
    permutation of the full 2^(n_x + n_y) basis. The inverse is `.adjoint()`.
    """
    if n_x <= 0 or n_y <= 0:
        raise ConfigurationError("register sizes must be > 0.")
    if modulus <= 0 or modulus > 2**n_y:
        raise ConfigurationError(f"modulus {modulus} does not fit in {n_y} qubits.")

    dim_x = 2**n_x
    dim = 2 ** (n_x + n_y)
    matrix = np.zeros((dim, dim), dtype=float)
    for index in range(dim):
        x = index % dim_x
        y = index // dim_x
        if y < modulus:
            y = (y + multiplier * x) % modulus
        matrix[x + y * dim_x, index] = 1.0
    return Operator(matrix)
