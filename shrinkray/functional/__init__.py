"""
Functional Module

Result types used at the validation and execution seams.
"""

from .result_monad import (
    Result,
    Success,
    Failure,
    from_async_callable
)

__all__ = [
    "Result",
    "Success",
    "Failure",
    "from_async_callable"
]
