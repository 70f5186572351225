"""User account domain model."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class UserRecord(BaseModel):
    """An account allowed to log in.

    Accounts are provisioned outside this service. The password is an
    opaque value compared for equality; no hashing scheme is applied.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    username: str = Field(min_length=1)
    password: str = Field(repr=False)
    display_name: str = Field(
        validation_alias=AliasChoices("name", "displayName", "display_name"),
        description="Name shown to the client after login",
    )
