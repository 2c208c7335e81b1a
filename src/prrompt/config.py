"""Configuration for prrompt, read from git config."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from prrompt.exceptions import ConfigError

if TYPE_CHECKING:
    from prrompt.git.gateway import GitGateway

logger = structlog.get_logger()

CONFIG_SECTION = "prrompt"

DEFAULT_COMMIT_PREFIX = "prompt"
DEFAULT_BRANCH_PREFIX = "skill-update"
DEFAULT_BASE_BRANCH = "main"
DEFAULT_REMOTE = "origin"
DEFAULT_PROMPT_PATTERNS: tuple[str, ...] = (".claude/skills/", "prompts/")

# Model field -> git config key
CONFIG_KEYS: dict[str, str] = {
    "commit_prefix": f"{CONFIG_SECTION}.commitPrefix",
    "branch_prefix": f"{CONFIG_SECTION}.branchPrefix",
    "base_branch": f"{CONFIG_SECTION}.baseBranch",
    "prompt_patterns": f"{CONFIG_SECTION}.promptPatterns",
    "remote": f"{CONFIG_SECTION}.remote",
    "discard_other_files": f"{CONFIG_SECTION}.discardOtherFiles",
}

_TRUE_VALUES = {"true", "yes", "on", "1"}
_FALSE_VALUES = {"false", "no", "off", "0"}


def parse_patterns(raw: str | None) -> tuple[str, ...]:
    """Parse a comma-separated pattern list.

    Entries are trimmed and empty entries dropped. A value that yields no
    entries falls back to the defaults.

    Args:
        raw: Raw config value, e.g. ``"prompts/, docs/prompts/"``.

    Returns:
        Tuple of path prefixes.
    """
    if raw is None:
        return DEFAULT_PROMPT_PATTERNS
    patterns = tuple(part.strip() for part in raw.split(",") if part.strip())
    return patterns or DEFAULT_PROMPT_PATTERNS


def parse_bool(raw: str, *, key: str = "") -> bool:
    """Parse a git-style boolean value."""
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    msg = f"Invalid boolean for '{key}': {raw!r}"
    raise ConfigError(msg, key=key, value=raw)


def _validate_ref_name(value: str) -> str:
    if not value or any(ch.isspace() for ch in value):
        msg = "must be a non-empty name without whitespace"
        raise ValueError(msg)
    return value


class PrromptConfig(BaseModel):
    """Complete prrompt configuration.

    Built once per invocation and passed down; nothing re-reads git config
    after ``load`` returns.

    Attributes:
        commit_prefix: Bracket-wrapped prefix for extracted commit messages.
        branch_prefix: Prefix for extraction branch names.
        base_branch: Branch extraction branches are created from.
        prompt_patterns: Path prefixes that mark a file as a prompt file.
        remote: Remote extraction branches are pushed to.
        discard_other_files: Also restore non-prompt files in the working
            tree after unstaging them.

    Example:
        >>> config = PrromptConfig(branch_prefix="prompts")
        >>> config.branch_name("0123456789abcdef")
        'prompts/0123456'
    """

    model_config = ConfigDict(frozen=True)

    commit_prefix: str = DEFAULT_COMMIT_PREFIX
    branch_prefix: str = DEFAULT_BRANCH_PREFIX
    base_branch: str = DEFAULT_BASE_BRANCH
    prompt_patterns: tuple[str, ...] = Field(default=DEFAULT_PROMPT_PATTERNS)
    remote: str = DEFAULT_REMOTE
    discard_other_files: bool = False

    @field_validator("branch_prefix")
    @classmethod
    def validate_branch_prefix(cls, v: str) -> str:
        """Strip trailing slashes and reject whitespace."""
        return _validate_ref_name(v.rstrip("/"))

    @field_validator("base_branch", "remote")
    @classmethod
    def validate_ref(cls, v: str) -> str:
        """Reject empty names and names containing whitespace."""
        return _validate_ref_name(v)

    @property
    def branch_namespace(self) -> str:
        """Prefix every extraction branch name starts with."""
        return f"{self.branch_prefix}/"

    def branch_name(self, sha: str) -> str:
        """Extraction branch name for a commit."""
        return f"{self.branch_namespace}{sha[:7]}"

    def is_extraction_branch(self, branch: str) -> bool:
        """Check whether a branch is an extraction branch."""
        return branch.startswith(self.branch_namespace)

    @classmethod
    def load(cls, gateway: GitGateway) -> PrromptConfig:
        """Read every prrompt key from git config.

        Absent or blank values use the defaults.

        Args:
            gateway: Gateway to read configuration through.

        Returns:
            The resolved, immutable configuration.

        Raises:
            ConfigError: If a value is invalid.
            GitError: If git config cannot be read.
        """
        raw: dict[str, str] = {}
        for field, key in CONFIG_KEYS.items():
            value = gateway.config_get(key)
            if value is not None and value.strip():
                raw[field] = value.strip()

        data: dict[str, Any] = dict(raw)
        if "prompt_patterns" in raw:
            data["prompt_patterns"] = parse_patterns(raw["prompt_patterns"])
        if "discard_other_files" in raw:
            data["discard_other_files"] = parse_bool(
                raw["discard_other_files"], key=CONFIG_KEYS["discard_other_files"]
            )

        try:
            config = cls.model_validate(data)
        except ValidationError as e:
            error = e.errors()[0]
            field = str(error["loc"][0]) if error["loc"] else ""
            key = CONFIG_KEYS.get(field, field)
            msg = f"Invalid value for '{key}': {error['msg']}"
            raise ConfigError(msg, key=key, value=raw.get(field)) from e

        logger.debug(
            "Configuration loaded",
            overrides=sorted(CONFIG_KEYS[f] for f in raw),
            branch_prefix=config.branch_prefix,
            base_branch=config.base_branch,
            prompt_patterns=list(config.prompt_patterns),
        )
        return config
