"""Calculation-scoped context for log correlation.

Each top-level calculation sets an id in a context variable so that every log
line it produces, including those from worker threads that copy the
context, can be correlated.
"""

import contextvars
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

ctx_calculation_id: contextvars.ContextVar[str] = contextvars.ContextVar(
    "calculation_id", default=""
)
ctx_calculation_name: contextvars.ContextVar[str] = contextvars.ContextVar(
    "calculation_name", default=""
)


@contextmanager
def calculation_context(name: str, calculation_id: str | None = None) -> Iterator[str]:
    """Set the calculation id and name for the duration of the block.

    Yields:
        The calculation id in effect
    """
    calculation_id = calculation_id or uuid.uuid4().hex[:12]
    id_token = ctx_calculation_id.set(calculation_id)
    name_token = ctx_calculation_name.set(name)
    try:
        yield calculation_id
    finally:
        ctx_calculation_name.reset(name_token)
        ctx_calculation_id.reset(id_token)
