"""
Core - Infrastructure & Base Classes

This package contains generic infrastructure shared by domain packages:

- Generic, reusable base classes (no domain-specific logic)
- Clear extension points for domain packages

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes

Decorators (import from core.decorators):
    - returns_service_result: Convert raised application errors to results

Usage:
    from core.services import BaseService, ServiceResult
    from core.exceptions import BaseApplicationError
    from core.decorators import returns_service_result

Note:
    - Business logic should NOT go here. Extend core classes in your domain packages.
    - For the Stripe gateway error family, see stripe_gateway.exceptions
"""

# Services (no Django dependencies)
from .services import BaseService, ServiceResult

# Exceptions (no Django dependencies)
from .exceptions import BaseApplicationError

# Decorators (no Django dependencies)
from .decorators import returns_service_result

__all__ = [
    # Services
    "BaseService",
    "ServiceResult",
    # Exceptions
    "BaseApplicationError",
    # Decorators
    "returns_service_result",
]
