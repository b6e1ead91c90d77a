from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from typing import Tuple

from groverlab.logging_utils import configure_logging
from groverlab.problems.coloring import (
    DEFAULT_EDGES,
    DEFAULT_EXAMPLE_COLORING,
    ColoringConfig,
    check_coloring_with_oracle,
    count_valid_colorings,
    decode_coloring,
    describe_coloring,
    sample_coloring_circuit,
    solve_coloring,
)
from groverlab.problems.isbn import DEFAULT_DIGITS, IsbnConfig, format_isbn, parse_isbn, recover_missing_digit
from groverlab.problems.rng import RngConfig, sample_random_number_in_range
from groverlab.quantum.circuits import CircuitSamplerConfig
from groverlab.quantum.engine import EngineConfig, StatevectorEngine
from groverlab.quantum.errors import GroverError, SearchExhausted
from groverlab.quantum.qiskit_backend import IBMRuntimeConfig
from groverlab.quantum.search import SearchConfig


def _parse_edge(text: str) -> Tuple[int, int]:
    try:
        a, b = text.split("-")
        return int(a), int(b)
    except ValueError:
        raise argparse.ArgumentTypeError(f"edge must look like 'a-b', got {text!r}") from None


def _parse_bits(text: str) -> Tuple[bool, ...]:
    if set(text) - {"0", "1"}:
        raise argparse.ArgumentTypeError(f"bits must be a string of 0/1, got {text!r}")
    return tuple(ch == "1" for ch in text)


def _run_coloring(args, engine: StatevectorEngine, search_config: SearchConfig) -> int:
    edges = tuple(args.edges) if args.edges else DEFAULT_EDGES
    example = args.coloring
    if example is None:
        example = DEFAULT_EXAMPLE_COLORING if args.vertices == 5 else ()
    config = ColoringConfig(
        n_vertices=args.vertices,
        edges=edges,
        example_coloring=example,
        n_solutions=args.solutions if args.solutions is not None else 1,
    )
    if args.solutions is None:
        config = replace(config, n_solutions=count_valid_colorings(config))

    if config.example_coloring:
        colors = decode_coloring(config.example_coloring, config.n_vertices, config.color_bits)
        is_valid = check_coloring_with_oracle(engine, config)
        print("example coloring:")
        for line in describe_coloring(colors, config.color_names):
            print(f"  {line}")
        print(f"oracle says the example coloring is {'valid' if is_valid else 'invalid'}")

    if args.backend == "engine":
        result = solve_coloring(engine, config, search_config, iterations=args.iterations)
        print(f"found a valid coloring after {result.solution.attempts} attempt(s):")
    else:
        sampler_config = CircuitSamplerConfig(
            backend=args.backend,
            seed=args.seed,
            ibm=IBMRuntimeConfig(
                backend_name=args.ibm_backend_name,
                least_busy=args.ibm_backend_name is None,
                simulator=bool(args.ibm_simulator),
                shots=int(args.ibm_shots),
            ),
        )
        result = sample_coloring_circuit(config, sampler_config, n_samples=args.samples, iterations=args.iterations)
        print(f"found a valid coloring in sample {result.solution.attempts} on backend={args.backend}:")
    for line in describe_coloring(result.colors, config.color_names):
        print(f"  {line}")
    return 0


def _run_isbn(args, engine: StatevectorEngine, search_config: SearchConfig) -> int:
    config = IsbnConfig(digits=args.isbn if args.isbn is not None else DEFAULT_DIGITS)
    result = recover_missing_digit(engine, config, search_config, iterations=args.iterations)
    print(f"ISBN with missing digit: {format_isbn(config.digits)}")
    print(f"missing digit: {result.digit} (found after {result.solution.attempts} attempt(s))")
    print(f"full ISBN: {format_isbn(result.digits)}")
    return 0


def _run_rng(args, engine: StatevectorEngine) -> int:
    config = RngConfig(minimum=args.min, maximum=args.max)
    samples = [sample_random_number_in_range(engine, config) for _ in range(args.count)]
    print(f"random numbers in [{config.minimum}, {config.maximum}]: {samples}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="python -m groverlab",
        description="Run the Grover search demos on the state-vector engine.",
        allow_abbrev=False,
    )
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--max-attempts", type=int, default=100)
    parser.add_argument("--max-qubits", type=int, default=24)
    parser.add_argument("--log-level", type=str, default="INFO")
    sub = parser.add_subparsers(dest="command", required=True)

    coloring = sub.add_parser("coloring", help="find a valid 4-coloring of a graph")
    coloring.add_argument("--vertices", type=int, default=5)
    coloring.add_argument("--edge", dest="edges", type=_parse_edge, action="append", help="'a-b', repeatable")
    coloring.add_argument(
        "--solutions", type=int, default=None, help="expected number of valid colorings (counted when omitted)"
    )
    coloring.add_argument("--coloring", type=_parse_bits, default=None, help="example coloring bits to check")
    coloring.add_argument("--iterations", type=int, default=None)
    coloring.add_argument("--backend", choices=["engine", "statevector", "ibm_runtime"], default="engine")
    coloring.add_argument("--samples", type=int, default=16, help="circuit samples to draw (circuit backends only)")
    coloring.add_argument("--ibm-backend-name", type=str, default=None)
    coloring.add_argument("--ibm-simulator", action="store_true", default=False)
    coloring.add_argument("--ibm-shots", type=int, default=1024)

    isbn = sub.add_parser("isbn", help="recover the missing digit of an ISBN-10")
    isbn.add_argument("--isbn", type=parse_isbn, default=None, help="e.g. 0306?06152")
    isbn.add_argument("--iterations", type=int, default=None)

    rng = sub.add_parser("rng", help="sample random numbers from qubit measurements")
    rng.add_argument("--min", type=int, default=0)
    rng.add_argument("--max", type=int, default=100)
    rng.add_argument("--count", type=int, default=1)

    args = parser.parse_args(argv)
    logger = configure_logging(args.log_level)

    try:
        engine = StatevectorEngine(EngineConfig(max_qubits=args.max_qubits, seed=args.seed))
        search_config = SearchConfig(max_attempts=args.max_attempts)
        if args.command == "coloring":
            return _run_coloring(args, engine, search_config)
        if args.command == "isbn":
            return _run_isbn(args, engine, search_config)
        return _run_rng(args, engine)
    except SearchExhausted as e:
        print(f"search did not converge: {e}", file=sys.stderr)
        return 2
    except GroverError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
