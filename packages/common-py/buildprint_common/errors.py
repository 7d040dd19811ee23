"""
Buildprint Exception Classes

This module defines the exception hierarchy for all buildprint packages.
All custom exceptions inherit from BuildprintError to enable consistent error handling.

Usage:
    from buildprint_common.errors import ParseError, ResolveError

    if not stages:
        raise ParseError("no build stage in current context", line=3)
"""

from typing import Optional


class BuildprintError(Exception):
    """
    Base exception for all buildprint errors.

    Attributes:
        message: Human-readable error message
        code: Error code for programmatic handling
    """

    def __init__(self, message: str, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """
        Serialize error to dictionary for CLI and log output.

        Returns:
            dict with error details including class name, code, and message
        """
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code='{self.code}', message='{self.message}')"


class ValidationError(BuildprintError):
    """
    Raised when configuration validation fails.

    Use this for:
    - Unknown remote treatment values
    - Malformed YAML configuration files
    - Unsupported options such as downloading remote sources
    """

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class DigestError(BuildprintError):
    """
    Base class for failures while computing a recipe digest.

    Every subclass aborts the whole computation. No partial digest is
    ever returned alongside one of these.
    """

    def __init__(self, message: str, code: str = "DIGEST_ERROR"):
        super().__init__(message, code=code)


class ParseError(DigestError):
    """
    Raised when a build recipe is syntactically invalid.

    Example:
        raise ParseError("unknown instruction: COPPY", line=4)
    """

    def __init__(self, message: str, line: Optional[int] = None):
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message, code="PARSE_ERROR")
        self.line = line


class ResolveError(DigestError):
    """
    Raised when a local source reference cannot be walked.

    Covers missing paths, permission problems, references that leave the
    build context and wildcard patterns without matches.
    """

    def __init__(self, message: str, reference: Optional[str] = None):
        super().__init__(message, code="RESOLVE_ERROR")
        self.reference = reference


class HashError(DigestError):
    """
    Raised when file content cannot be read while hashing.
    """

    def __init__(self, message: str, filename: Optional[str] = None):
        super().__init__(message, code="HASH_ERROR")
        self.filename = filename
