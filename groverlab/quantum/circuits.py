"""
Static qiskit circuits for the plain (power-of-two domain) Grover search.

The engine in `groverlab.quantum.engine` runs oracles gate by gate; this
module renders the same search as one `QuantumCircuit` with a diagonal phase
oracle computed from the classical predicate, so it can be simulated with
`Statevector` or submitted to IBM hardware.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Literal, Optional

import numpy as np

from .engine import Bits, int_to_bits
from .errors import ConfigurationError
from .qiskit_backend import IBMRuntimeConfig, run_ibm_runtime

BackendKind = Literal["statevector", "ibm_runtime"]


@dataclass(frozen=True)
class CircuitSamplerConfig:
    backend: BackendKind = "statevector"
    seed: Optional[int] = None
    ibm: IBMRuntimeConfig = field(default_factory=IBMRuntimeConfig)


def phase_oracle_diagonal(n_qubits: int, predicate: Callable[[Bits], bool]) -> np.ndarray:
    """diag[i] = -1 if basis state i satisfies `predicate` else +1."""
    if n_qubits <= 0:
        raise ConfigurationError("n_qubits must be > 0.")
    mask = np.array([bool(predicate(int_to_bits(i, n_qubits))) for i in range(2**n_qubits)])
    return np.where(mask, -1.0 + 0.0j, 1.0 + 0.0j)


def diffusion_circuit(n_qubits: int):
    """H^n X^n (MCZ) X^n H^n as a circuit."""
    from qiskit import QuantumCircuit

    if n_qubits <= 0:
        raise ConfigurationError("n_qubits must be > 0.")

    qc = QuantumCircuit(n_qubits, name="Diffusion")
    qc.h(range(n_qubits))
    qc.x(range(n_qubits))

    if n_qubits == 1:
        qc.z(0)
    else:
        target = n_qubits - 1
        controls = list(range(n_qubits - 1))
        qc.h(target)
        qc.mcx(controls, target)
        qc.h(target)

    qc.x(range(n_qubits))
    qc.h(range(n_qubits))
    return qc


def build_grover_circuit(
    n_qubits: int,
    predicate: Callable[[Bits], bool],
    iterations: int,
    with_measurements: bool = False,
):
    from qiskit import QuantumCircuit
    from qiskit.circuit.library import DiagonalGate

    if iterations < 0:
        raise ConfigurationError("iterations must be >= 0.")

    oracle_diag = phase_oracle_diagonal(n_qubits, predicate)
    qc = QuantumCircuit(n_qubits, n_qubits if with_measurements else 0)
    qc.h(range(n_qubits))

    oracle_gate = DiagonalGate(oracle_diag.tolist())
    diffusion_gate = diffusion_circuit(n_qubits).to_gate()

    for _ in range(iterations):
        qc.append(oracle_gate, list(range(n_qubits)))
        qc.append(diffusion_gate, list(range(n_qubits)))

    if with_measurements:
        qc.measure(range(n_qubits), range(n_qubits))
    return qc


def circuit_probabilities(n_qubits: int, predicate: Callable[[Bits], bool], iterations: int) -> np.ndarray:
    from qiskit.quantum_info import Statevector

    qc = build_grover_circuit(n_qubits, predicate, iterations, with_measurements=False)
    probs = np.asarray(Statevector.from_instruction(qc).probabilities(), dtype=float)
    return probs / probs.sum()


def sample_circuit(
    n_qubits: int,
    predicate: Callable[[Bits], bool],
    iterations: int,
    n_samples: int,
    config: CircuitSamplerConfig = CircuitSamplerConfig(),
) -> List[int]:
    """Sample basis indices from the Grover circuit on the configured backend."""
    rng = np.random.default_rng(config.seed)
    n_states = 2**n_qubits

    if config.backend == "statevector":
        probs = circuit_probabilities(n_qubits, predicate, iterations)
    elif config.backend == "ibm_runtime":
        qc = build_grover_circuit(n_qubits, predicate, iterations, with_measurements=True)
        counts = run_ibm_runtime(qc, n_qubits=n_qubits, config=config.ibm)
        probs = np.zeros((n_states,), dtype=float)
        for idx, count in counts.items():
            probs[idx] = float(count)
        total = probs.sum()
        if total > 0:
            probs /= total
        else:
            probs[:] = 1.0 / n_states
    else:
        raise ValueError(f"Unknown backend: {config.backend}")

    return [int(x) for x in rng.choice(n_states, size=n_samples, replace=True, p=probs)]
