"""CodeWhisper: a small try-it client that turns prompts into code."""

from .errors import (
    AuthenticationError,
    CodeGenError,
    ProviderError,
    TransportError,
    UnknownError,
)
from .extractor import extract_code
from .providers import ProviderConfig, get_provider, register_provider
from .service import CodeGenService, GenerationRequest, GenerationResult
from .session import SessionContext, SessionStorage

__version__ = "0.1.0"

__all__ = [
    "AuthenticationError",
    "CodeGenError",
    "CodeGenService",
    "GenerationRequest",
    "GenerationResult",
    "ProviderConfig",
    "ProviderError",
    "SessionContext",
    "SessionStorage",
    "TransportError",
    "UnknownError",
    "extract_code",
    "get_provider",
    "register_provider",
]
