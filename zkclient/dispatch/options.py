"""Per-operation call options.

Each model carries only the options its operation understands; anything else
is rejected.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, field_validator, model_validator

from ..acl import ACL
from ..types import CreateMode

# Names accepted for backwards compatibility with older callers
_MODE_ALIASES = {
    "persistent_sequence": CreateMode.PERSISTENT_SEQUENTIAL,
    "ephemeral_sequence": CreateMode.EPHEMERAL_SEQUENTIAL,
}


class CallOptions(BaseModel):
    """Base class for call options."""

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)


class AsyncCallOptions(CallOptions):
    """Options shared by every operation with a non-blocking form."""

    callback: Any = Field(default=None, description="Completion handler; makes the call non-blocking")
    context: Any = Field(default=None, description="Opaque value echoed back to the handler; ignored by blocking calls")


class CreateOptions(AsyncCallOptions):
    """Options for create."""

    acl: list[ACL] | None = Field(default=None, min_length=1, description="Defaults to the session ACL")
    mode: CreateMode | None = Field(default=None, description="Defaults to the session create mode")
    ephemeral: StrictBool | None = Field(default=None, description="Legacy flag, exclusive with mode")
    sequential: StrictBool | None = Field(default=None, description="Legacy flag, exclusive with mode")

    @field_validator("mode", mode="before")
    @classmethod
    def _mode_alias(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, CreateMode):
            return _MODE_ALIASES.get(value, value)
        return value

    @model_validator(mode="after")
    def _mode_or_flags(self) -> "CreateOptions":
        if self.mode is not None and (self.ephemeral is not None or self.sequential is not None):
            raise ValueError("mode cannot be combined with ephemeral/sequential flags")
        return self


class GetOptions(AsyncCallOptions):
    """Options for get."""

    watch: StrictBool = False


class ExistsOptions(AsyncCallOptions):
    """Options for exists."""

    watch: StrictBool = False


class GetChildrenOptions(AsyncCallOptions):
    """Options for get_children."""

    watch: StrictBool = False


class SetOptions(AsyncCallOptions):
    """Options for set."""

    version: StrictInt = Field(default=-1, ge=-1, description="-1 matches any version")


class DeleteOptions(AsyncCallOptions):
    """Options for delete."""

    version: StrictInt = Field(default=-1, ge=-1, description="-1 matches any version")


class GetAclsOptions(AsyncCallOptions):
    """Options for get_acls."""


class SetAclsOptions(AsyncCallOptions):
    """Options for set_acls."""

    acl: list[ACL] = Field(min_length=1)
    version: StrictInt = Field(default=-1, ge=-1, description="-1 matches any ACL version")


class AddAuthOptions(CallOptions):
    """Options for add_auth."""

    scheme: str = Field(default="digest", min_length=1)
