from .coloring import (
    ColoringConfig,
    ColoringResult,
    check_coloring_with_oracle,
    count_valid_colorings,
    decode_coloring,
    describe_coloring,
    encode_coloring,
    is_valid_coloring,
    sample_coloring_circuit,
    solve_coloring,
)
from .isbn import (
    MISSING,
    IsbnConfig,
    IsbnResult,
    fill_missing,
    format_isbn,
    is_isbn_valid,
    isbn_check_constants,
    isbn_iterations,
    parse_isbn,
    recover_missing_digit,
)
from .rng import RngConfig, generate_random_bit, sample_random_number_in_range

__all__ = [
    "MISSING",
    "ColoringConfig",
    "ColoringResult",
    "IsbnConfig",
    "IsbnResult",
    "RngConfig",
    "check_coloring_with_oracle",
    "count_valid_colorings",
    "decode_coloring",
    "describe_coloring",
    "encode_coloring",
    "fill_missing",
    "format_isbn",
    "generate_random_bit",
    "is_isbn_valid",
    "is_valid_coloring",
    "isbn_check_constants",
    "isbn_iterations",
    "parse_isbn",
    "recover_missing_digit",
    "sample_coloring_circuit",
    "sample_random_number_in_range",
    "solve_coloring",
]
