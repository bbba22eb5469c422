"""
Shared Domain Components.

Contém componentes compartilhados entre todos os domínios:
- Exceções de domínio
- Interfaces (Ports)
- Base classes para Domain Events
"""

from .exceptions import (
    DomainException,
    ValidationError,
    EntityNotFoundError,
    UnauthorizedError,
    ForbiddenError,
    BusinessRuleViolationError,
    InvalidTransitionError,
    ConflictError,
    ConcurrencyError,
)
from .events import DomainEvent
from .interfaces import UnitOfWork, EventPublisher

__all__ = [
    "DomainException",
    "ValidationError",
    "EntityNotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "BusinessRuleViolationError",
    "InvalidTransitionError",
    "ConflictError",
    "ConcurrencyError",
    "DomainEvent",
    "UnitOfWork",
    "EventPublisher",
]
