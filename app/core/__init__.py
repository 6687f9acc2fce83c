"""
Core Application - Infrastructure & Base Classes

Generic building blocks shared by the domain apps. Nothing in here knows
about chats or users.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - AuthenticationError: Missing or invalid credentials
    - InfrastructureError: Backing service unavailable
    - GatewayNotInitializedError: Realtime gateway missing
    - api_exception_handler: DRF EXCEPTION_HANDLER

Views (import from core.views):
    - health_check: Liveness/readiness endpoint
"""
