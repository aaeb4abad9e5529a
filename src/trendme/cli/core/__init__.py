"""Core utilities for CLI - console, result types and service wiring."""

from .console import (
    confirm_resume,
    console,
    print_error,
    print_info,
    print_resume_hint,
    print_success,
    print_warning,
)
from .progress import PipelineProgressDisplay
from .services import Services, build_services
from .types import Failure, Result, Success, failure_from

__all__ = [
    # Types
    "Result",
    "Success",
    "Failure",
    "failure_from",
    # Services
    "Services",
    "build_services",
    "PipelineProgressDisplay",
    # Console
    "confirm_resume",
    "console",
    "print_error",
    "print_info",
    "print_resume_hint",
    "print_success",
    "print_warning",
]
