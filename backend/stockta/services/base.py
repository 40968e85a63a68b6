"""
Base Service Interface and error taxonomy.

Errors the engine can raise are structural caller errors only:
- insufficient history is a ``None`` result, not an exception
- a persisted tail that does not match the bars triggers a full recompute
- numeric degeneracy (zero-width band, zero price) is resolved locally
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseService(ABC, Generic[InputT, OutputT]):
    """
    Base class for engine services.

    A service declares its input and output contract, performs no
    process-wide state, and is constructed by its caller (no singletons).
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Service name for logging and error tagging."""
        pass

    @abstractmethod
    async def execute(self, input_data: InputT) -> OutputT:
        """
        Run the service on one request.

        Raises:
            ServiceError: on structurally invalid input
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass

    async def validate_input(self, input_data: InputT) -> InputT:
        """Pydantic already validated field types; override for cross-field rules."""
        return input_data


class ServiceError(Exception):
    """Base exception for service errors."""

    def __init__(self, service_name: str, message: str, details: dict = None):
        self.service_name = service_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{service_name}] {message}")


class ValidationError(ServiceError):
    """Structurally invalid input (caller contract violation)."""
    pass


class BarSequenceError(ValidationError):
    """Bars are not strictly increasing by trade date, or mix symbols."""
    pass


class StorageError(ServiceError):
    """Storage collaborator failed."""
    pass
