"""Generation service access: configuration, errors, retry, parsing."""

from .config import TrendmeConfig, load_config
from .errors import (
    AuthError,
    ErrorKind,
    GenerationError,
    GenerationTimeoutError,
    NetworkError,
    ParsingError,
    QuotaError,
    classify_error,
)
from .generation import (
    GeminiGenerationService,
    GenerationService,
    ImageRequest,
    ImageResponse,
    InlineImage,
    TextRequest,
    TextResponse,
    get_generation_service,
)
from .parsing import ParseFailure, ParseSuccess, parse_json
from .retry import retry_with_backoff, with_fallback, with_timeout

__all__ = [
    "TrendmeConfig",
    "load_config",
    "AuthError",
    "ErrorKind",
    "GenerationError",
    "GenerationTimeoutError",
    "NetworkError",
    "ParsingError",
    "QuotaError",
    "classify_error",
    "GeminiGenerationService",
    "GenerationService",
    "ImageRequest",
    "ImageResponse",
    "InlineImage",
    "TextRequest",
    "TextResponse",
    "get_generation_service",
    "ParseFailure",
    "ParseSuccess",
    "parse_json",
    "retry_with_backoff",
    "with_fallback",
    "with_timeout",
]
