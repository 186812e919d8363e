"""Utility functions for the clustering engine."""

from .convergence import (
    NoPointsMoved,
    ChangeInInertia,
    ConvergenceReport,
    run_until_stable
)

from .diagnostics import (
    DiagnosticSink,
    LoggingSink,
    StreamSink,
    RecordingSink,
    format_payload
)

from .validation import (
    check_dtype,
    check_stride,
    check_n_clusters,
    check_random_state,
    max_representable,
    accumulator_dtype,
    to_tensor,
    validate_flat_values,
    validate_centers
)

from .device import (
    get_default_device,
    parse_device,
    get_worker_count
)

__all__ = [
    # Convergence
    'NoPointsMoved',
    'ChangeInInertia',
    'ConvergenceReport',
    'run_until_stable',

    # Diagnostics
    'DiagnosticSink',
    'LoggingSink',
    'StreamSink',
    'RecordingSink',
    'format_payload',

    # Validation
    'check_dtype',
    'check_stride',
    'check_n_clusters',
    'check_random_state',
    'max_representable',
    'accumulator_dtype',
    'to_tensor',
    'validate_flat_values',
    'validate_centers',

    # Device management
    'get_default_device',
    'parse_device',
    'get_worker_count'
]
