"""Request validators for the session API."""
import math

from olympus_slot.errors import ErrorCode, GameError
from olympus_slot.protocol import SpinRequest


def validate_symbol_height(request: SpinRequest) -> None:
    """
    Validate the measured symbol height.

    Raises INVALID_REQUEST unless it is a finite positive number.
    """
    height = request.symbolHeight
    if not math.isfinite(height) or height <= 0:
        raise GameError(
            ErrorCode.INVALID_REQUEST,
            f"symbolHeight must be a positive number, got {height}",
        )


def validate_spin_request(request: SpinRequest) -> None:
    """Run all validations on spin request."""
    validate_symbol_height(request)
