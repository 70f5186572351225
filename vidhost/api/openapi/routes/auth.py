"""Login endpoint."""

from fastapi import APIRouter, status

from vidhost.api.dependencies import LibraryServiceDep
from vidhost.api.middleware.error_handler import APIError
from vidhost.application.dtos.auth import LoginRequest, LoginResponse
from vidhost.domain.exceptions import AuthenticationError

router = APIRouter()


@router.post(
    "/api/login",
    response_model=LoginResponse,
    response_model_by_alias=True,
    summary="Log in",
    description="Check a username and password against the catalog.",
)
async def login(request: LoginRequest, service: LibraryServiceDep) -> LoginResponse:
    """Authenticate a user."""
    try:
        user = await service.login(request.username, request.password)
    except AuthenticationError:
        raise
    except Exception as e:
        raise APIError(
            {"message": "An error occurred during login."},
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            log_message=f"Login lookup failed: {e}",
        ) from e
    return LoginResponse(display_name=user.display_name)
