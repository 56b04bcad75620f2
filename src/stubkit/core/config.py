"""
Stub policy configuration.

Configuration is loaded from the ``[tool.stubkit]`` section of pyproject.toml.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .errors import PolicyError

logger = logging.getLogger(__name__)

# Names probed by asyncio, inspect and promise-style libraries when deciding
# whether an object is a deferred value or a coroutine function.
DEFAULT_IDENTITY_SENSITIVE = frozenset(
    {
        "then",
        "_asyncio_future_blocking",
        "_is_coroutine",
        "_is_coroutine_marker",
    }
)


def is_dunder(name: str) -> bool:
    """Check if a name is in the ``__x__`` protocol-hook namespace."""
    return len(name) > 4 and name.startswith("__") and name.endswith("__")


class StubPolicy(BaseModel):
    """Knobs shared by every stub built through a sandbox.

    Attributes:
        nested_depth: Levels of plain-object members ``stub_object`` stubs
            recursively. ``0`` copies every nested object by reference.
        identity_sensitive: Non-dunder member names that are never
            materialized lazily. Dunder names never are.
        include_private: Whether ``stub_object`` spies underscore members.
    """

    model_config = ConfigDict(frozen=True)

    nested_depth: int = Field(default=1, ge=0)
    identity_sensitive: frozenset[str] = Field(
        default_factory=lambda: DEFAULT_IDENTITY_SENSITIVE
    )
    include_private: bool = True

    def is_identity_sensitive(self, name: str) -> bool:
        """Check if reading ``name`` must never fabricate a member."""
        return is_dunder(name) or name in self.identity_sensitive


# =============================================================================
# Process default
# =============================================================================

_policy = StubPolicy()


def get_policy() -> StubPolicy:
    """Get the process-wide default policy."""
    return _policy


def set_policy(policy: StubPolicy | None) -> StubPolicy:
    """
    Replace the process-wide default policy.

    Args:
        policy: New default, or None to reset to the built-in defaults

    Returns:
        The previous default, so callers can put it back
    """
    global _policy
    previous = _policy
    _policy = policy if policy is not None else StubPolicy()
    return previous


# =============================================================================
# Configuration Loading
# =============================================================================


def load_policy(toml_path: Path) -> StubPolicy:
    """
    Load the stub policy from pyproject.toml.

    Args:
        toml_path: Path to a pyproject.toml file

    Returns:
        StubPolicy with values from the file, or defaults when the file or
        the ``[tool.stubkit]`` section is missing

    Raises:
        PolicyError: If the file is not valid TOML or a value is invalid
    """
    if not toml_path.exists():
        return StubPolicy()

    try:
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise PolicyError(str(e), source=str(toml_path)) from e

    section = data.get("tool", {}).get("stubkit", {})
    if not section:
        return StubPolicy()

    policy = _parse_policy(section, source=str(toml_path))
    logger.debug("Loaded stub policy from %s: %s", toml_path, policy)
    return policy


def _parse_policy(data: dict[str, Any], source: str) -> StubPolicy:
    """Parse a config dict into a StubPolicy."""
    config_data: dict[str, Any] = {}

    # TOML keys use dashes, model fields use underscores
    for key, value in data.items():
        config_data[key.replace("-", "_")] = value

    unknown = sorted(set(config_data) - set(StubPolicy.model_fields))
    if unknown:
        raise PolicyError(f"Unknown stub policy keys: {', '.join(unknown)}", source=source)

    try:
        return StubPolicy.model_validate(config_data)
    except PydanticValidationError as e:
        raise PolicyError(str(e), source=source) from e
