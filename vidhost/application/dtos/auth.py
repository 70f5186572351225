"""DTOs for the login endpoint."""

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Credentials submitted by the client."""

    username: str = Field(description="Account name")
    password: str = Field(description="Account password", repr=False)


class LoginResponse(BaseModel):
    """Body returned on a successful login."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = "Login successful"
    display_name: str = Field(
        alias="displayName",
        description="Name to greet the user with",
    )
