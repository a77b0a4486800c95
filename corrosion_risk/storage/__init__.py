"""
Storage Module — Boundary Between Stored Records and the Rating Core

Public API:
- convert_keys / to_snake_case / to_camel_case: Explicit casing map
- load_norm / dump_norm / load_parameter / load_datapoint: Record mapping
- load_norms_file / load_datapoints_file: JSON file loaders
- NormRegistry / build_registry: In-memory norm reference data
"""

from .casing import PRESERVED_FIELDS, convert_keys, to_camel_case, to_snake_case
from .records import (
    dump_datapoint,
    dump_norm,
    load_datapoint,
    load_datapoints_file,
    load_norm,
    load_norms_file,
    load_parameter,
)
from .registry import NormNotFoundError, NormRegistry, build_registry

__all__ = [
    "PRESERVED_FIELDS",
    "convert_keys",
    "to_camel_case",
    "to_snake_case",
    "dump_datapoint",
    "dump_norm",
    "load_datapoint",
    "load_datapoints_file",
    "load_norm",
    "load_norms_file",
    "load_parameter",
    "NormNotFoundError",
    "NormRegistry",
    "build_registry",
]
