"""ZosPy handler package – composed via mixin pattern.

Usage::

    from zospy_handler import ZosPyHandler, ZosPyError
"""

from zospy_handler._base import (
    ZosPyHandlerBase,
    ZosPyError,
    OpticStudioNotFoundError,
    OperandConnectionError,
)
from zospy_handler.operand import UserOperandMixin, clamp_operand_arguments


class ZosPyHandler(
    UserOperandMixin,
    ZosPyHandlerBase,
):
    """Composed ZosPy handler for the Seidel user operand."""
    pass


__all__ = [
    "ZosPyHandler",
    "ZosPyError",
    "OpticStudioNotFoundError",
    "OperandConnectionError",
    "clamp_operand_arguments",
]
