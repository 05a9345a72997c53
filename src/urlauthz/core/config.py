"""urlauthz configuration.

Defines the validated configuration model consumed by the configurer,
the default expression handler and the decision manager.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ROLE_PREFIX = "ROLE_"


class AuthorizationConfig(BaseModel):
    """Configuration for URL authorization.

    Every field carries a default so ``AuthorizationConfig()`` is a usable
    configuration on its own.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    role_prefix: str = Field(
        default=DEFAULT_ROLE_PREFIX,
        min_length=1,
        description=(
            "Prefix inserted by has_role() and expected on role "
            "authorities."
        ),
    )
    reject_empty_any_authority: bool = Field(
        default=False,
        description=(
            "When True, has_any_authority() with no authorities is a "
            "configuration error instead of an always-deny requirement."
        ),
    )
    allow_if_all_abstain: bool = Field(
        default=False,
        description=(
            "Grant access when every voter abstains (including when no "
            "rule matched the request)."
        ),
    )
    case_sensitive_paths: bool = Field(
        default=True,
        description="Whether ant-style path patterns match case-sensitively.",
    )
