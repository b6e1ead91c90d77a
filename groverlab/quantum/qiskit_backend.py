from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class IBMRuntimeConfig:
    backend_name: Optional[str] = None
    least_busy: bool = True
    simulator: bool = False
    shots: int = 1024


def _find_bit_array(data):
    for attr in ["meas", "c"] + [k for k in dir(data) if not k.startswith("_")]:
        candidate = getattr(data, attr, None)
        if candidate is not None and hasattr(candidate, "get_counts"):
            return candidate
    raise RuntimeError(f"Could not find measurement data in result: {dir(data)}")


def run_ibm_runtime(circuit, n_qubits: int, config: IBMRuntimeConfig) -> Dict[int, int]:
    """
    Run a measured circuit on IBM Runtime (SamplerV2) and return counts keyed
    by basis index.

    Requires `qiskit-ibm-runtime` and a saved account.
    """
    try:
        from qiskit_ibm_runtime import QiskitRuntimeService, SamplerV2
    except Exception as e:  # pragma: no cover
        raise RuntimeError("IBM Runtime backend requested but qiskit-ibm-runtime is not available.") from e
    from qiskit.transpiler.preset_passmanagers import generate_preset_pass_manager

    service = QiskitRuntimeService()
    if config.backend_name is not None:
        backend = service.backend(config.backend_name)
    elif config.least_busy:
        backend = service.least_busy(simulator=config.simulator, operational=True, min_num_qubits=n_qubits)
    else:
        raise ValueError("Provide backend_name or set least_busy=True.")

    pm = generate_preset_pass_manager(backend=backend, optimization_level=1)
    isa_circuit = pm.run(circuit)

    job = SamplerV2(mode=backend).run([isa_circuit], shots=config.shots)
    pub_result = job.result()[0]

    counts: Dict[int, int] = {}
    for bitstring, count in _find_bit_array(pub_result.data).get_counts().items():
        # qiskit bitstrings print qubit 0 last, so int(., 2) is the little-endian index
        idx = int(bitstring, 2)
        counts[idx] = counts.get(idx, 0) + int(count)
    return counts
