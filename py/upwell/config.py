"""Runtime configuration, overridable from the environment."""

import os
from dataclasses import dataclass


def _getenv_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None or value == "" else value


@dataclass(frozen=True)
class UpwellConfig:
    draft_ext: str = ".draft"  # suffix of draft entries in a bundle archive
    metadata_key: str = "metadata.ledger"  # archive entry holding the ledger
    log_level: str = "WARNING"

    def __post_init__(self):
        if not self.draft_ext.startswith("."):
            raise ValueError(f"draft_ext must start with '.', got {self.draft_ext!r}")
        if self.metadata_key.endswith(self.draft_ext):
            raise ValueError("metadata_key must not look like a draft entry")

    @classmethod
    def from_env(cls) -> "UpwellConfig":
        """Read UPWELL_DRAFT_EXT, UPWELL_METADATA_KEY and UPWELL_LOG_LEVEL."""
        return cls(
            draft_ext=_getenv_str("UPWELL_DRAFT_EXT", cls.draft_ext),
            metadata_key=_getenv_str("UPWELL_METADATA_KEY", cls.metadata_key),
            log_level=_getenv_str("UPWELL_LOG_LEVEL", cls.log_level).upper(),
        )


DEFAULT_CONFIG = UpwellConfig()
