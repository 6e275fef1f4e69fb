from .check_availability import CheckAvailabilityUseCase
from .resolve_stream import ResolveStreamUseCase
from .unrestrict_link import UnrestrictLinkUseCase
from .validate_token import ValidateTokenUseCase

__all__ = [
    "CheckAvailabilityUseCase",
    "ResolveStreamUseCase",
    "UnrestrictLinkUseCase",
    "ValidateTokenUseCase",
]
