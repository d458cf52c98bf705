"""
API route definitions for the Users REST API.

This module implements the users endpoints (create, list, get-by-id) and the
health check, all backed by the shared ``UserStore``.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status

from users_api.config import Settings
from users_api.core.ids import get_allocator, parse_user_id
from users_api.core.store import JsonFileUserStore, StorageError, UserStore
from users_api.api.errors import (
    CREATE_FAILED_MESSAGE,
    UNKNOWN_ERROR_MESSAGE,
    ErrorPolicy,
    user_not_found_message,
)
from users_api.api.models import (
    ERROR_RESPONSES,
    ErrorResponse,
    HealthStatus,
    RequestedUserResponse,
    User,
)

logger = logging.getLogger(__name__)

# Create router
router = APIRouter()


# ============================================================================
# Dependency Injection
# ============================================================================

class ServiceContainer:
    """Container for shared service instances."""

    def __init__(self):
        self.settings: Settings = None
        self.store: UserStore = None
        self.error_policy: ErrorPolicy = ErrorPolicy()

    def initialize(self, settings: Settings):
        """Initialize the store and error policy from settings."""
        logger.info(f"Initializing services with users file: {settings.users_file}")

        self.settings = settings
        store = JsonFileUserStore(settings.users_file, get_allocator(settings.id_strategy))
        if settings.create_file:
            store.ensure_exists()
        self.store = store
        self.error_policy = ErrorPolicy(write_error_status=settings.write_error_status)

        logger.info("✓ Services initialized successfully")

    def cleanup(self):
        """Cleanup resources."""
        logger.info("Cleaning up services...")
        self.store = None


# Global service container
services = ServiceContainer()


def get_service_container() -> ServiceContainer:
    return services


def get_services() -> ServiceContainer:
    """Dependency injection for services."""
    if services.store is None:
        raise HTTPException(
            status_code=503,
            detail="Services not initialized."
        )
    return services


# ============================================================================
# Health Check Endpoint
# ============================================================================

@router.get(
    "/health",
    response_model=HealthStatus,
    summary="Health Check",
    description="Check that the user collection file can be read",
    tags=["System"]
)
async def health_check(
    container: ServiceContainer = Depends(get_services)
) -> HealthStatus:
    """
    Report whether the backing file is readable.

    A storage failure makes the service "unhealthy" but the endpoint itself
    still answers 200 so monitoring can read the details.
    """
    settings = container.settings
    details: Dict[str, Any] = {}
    if settings is not None:
        details["id_strategy"] = settings.id_strategy

    users_file = str(getattr(container.store, "path", ""))
    try:
        users = await container.store.list()
    except StorageError as e:
        logger.warning(f"Health check failed to read users: {e}")
        details["storage_error"] = str(e)
        return HealthStatus(status="unhealthy", users_file=users_file, details=details)

    return HealthStatus(
        status="healthy",
        users_file=users_file,
        user_count=len(users),
        details=details
    )


# ============================================================================
# Users Endpoints
# ============================================================================

@router.post(
    "/api/users",
    status_code=status.HTTP_201_CREATED,
    response_model=User,
    responses={**ERROR_RESPONSES, 401: {"model": ErrorResponse}},
    summary="Create User",
    description="Append a user to the collection with a server-assigned id",
    tags=["Users"]
)
async def create_user(
    attributes: Optional[Dict[str, Any]] = Body(None, examples=[{"name": "B"}]),
    container: ServiceContainer = Depends(get_services)
) -> Dict[str, Any]:
    """
    Create a user.

    The request body is stored as-is apart from ``id``, which is always
    assigned by the store's id allocator. A missing body creates a user
    with no attributes.

    Args:
        attributes: Arbitrary user attributes

    Returns:
        The created user, including its id
    """
    try:
        return await container.store.create(attributes or {})
    except StorageError as e:
        logger.error(f"Failed to create user: {e}", exc_info=True)
        raise HTTPException(
            status_code=container.error_policy.status_for(e),
            detail=CREATE_FAILED_MESSAGE
        )


@router.get(
    "/api/users",
    response_model=List[Any],
    responses=ERROR_RESPONSES,
    summary="List Users",
    description="Return every stored user in creation order",
    tags=["Users"]
)
async def list_users(
    container: ServiceContainer = Depends(get_services)
) -> List[Any]:
    """Return the full collection exactly as stored."""
    try:
        return await container.store.list()
    except StorageError as e:
        logger.error(f"Failed to list users: {e}", exc_info=True)
        raise HTTPException(
            status_code=container.error_policy.status_for(e),
            detail=UNKNOWN_ERROR_MESSAGE
        )


@router.get(
    "/api/users/{user_id}",
    response_model=RequestedUserResponse,
    responses={**ERROR_RESPONSES, 404: {"model": ErrorResponse}},
    summary="Get User",
    description="Look up a single user by id",
    tags=["Users"]
)
async def get_user(
    user_id: str,
    container: ServiceContainer = Depends(get_services)
) -> RequestedUserResponse:
    """
    Find the first user whose id equals the numeric value of ``user_id``.

    Args:
        user_id: Raw path segment; non-numeric values match nothing

    Returns:
        RequestedUserResponse wrapping the user
    """
    try:
        requested_user = await container.store.get_by_id(parse_user_id(user_id))
    except StorageError as e:
        logger.error(f"Failed to read users: {e}", exc_info=True)
        raise HTTPException(
            status_code=container.error_policy.status_for(e),
            detail=UNKNOWN_ERROR_MESSAGE
        )

    if requested_user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=user_not_found_message(user_id)
        )

    return RequestedUserResponse(requestedUser=requested_user)
