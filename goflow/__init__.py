"""goflow: execution-tracing interpreter for Go programs."""

from .run import run, trace  # noqa: F401
from .api import (  # noqa: F401
    build_trace_response,
    extract_outline,
    trace_source,
)
