"""
Custom exceptions for Data Fusion.

This module defines application-specific exceptions that provide
clear error messages and context for different types of failures.
"""

from typing import Optional, Any


class DataFusionError(Exception):
    """Base exception for all Data Fusion errors."""

    def __init__(self, message: str, context: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (Context: {context_str})"
        return self.message


class ConfigurationError(DataFusionError):
    """Raised when there are issues with configuration loading or validation."""

    def __init__(self, message: str, config_file: Optional[str] = None, field: Optional[str] = None):
        context = {}
        if config_file:
            context['config_file'] = config_file
        if field:
            context['field'] = field
        super().__init__(message, context)


class FileProcessingError(DataFusionError):
    """Raised when there are issues processing file content."""

    def __init__(self, message: str, file_name: Optional[str] = None, operation: Optional[str] = None):
        context = {}
        if file_name:
            context['file_name'] = file_name
        if operation:
            context['operation'] = operation
        super().__init__(message, context)


class CSVDecodeError(FileProcessingError):
    """Raised when CSV text cannot be parsed into rows."""

    def __init__(self, message: str, file_name: Optional[str] = None):
        super().__init__(message, file_name=file_name, operation='decode')


class ValidationError(DataFusionError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None, value: Optional[Any] = None):
        context = {}
        if field:
            context['field'] = field
        if value is not None:
            context['value'] = str(value)
        super().__init__(message, context)


class CollaboratorError(DataFusionError):
    """Raised when an external collaborator (e.g. schema suggestion) fails."""

    def __init__(self, message: str, collaborator: Optional[str] = None, cause: Optional[Exception] = None):
        context = {}
        if collaborator:
            context['collaborator'] = collaborator
        if cause is not None:
            context['cause'] = f"{type(cause).__name__}: {cause}"
        super().__init__(message, context)
        self.cause = cause
