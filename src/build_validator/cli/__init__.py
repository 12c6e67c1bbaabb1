"""CLI module for the build validator."""

from .main import BuildValidatorCLI

__all__ = ["BuildValidatorCLI"]
