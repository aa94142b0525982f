# ABOUTME: Configuration management for cfn-runner
# ABOUTME: Handles saved deployment profiles and the active profile selection

"""Configuration management for cfn-runner."""

import json
import re
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from cfn_runner.models import DEFAULT_CAPABILITIES


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Profile:
    """Saved settings for deploying one stack."""

    name: str
    stack_name: str
    aws_region: str
    template: str | None = None
    schema_version: str = "1.0"
    parameters: dict[str, str] = field(default_factory=dict)
    tags: dict[str, str] = field(default_factory=dict)
    aws_profile: str | None = None  # Named profile from ~/.aws/credentials
    capabilities: list[str] = field(default_factory=lambda: list(DEFAULT_CAPABILITIES))
    poll_interval: float = 4.0  # Seconds between event polls
    cleanup_buckets: bool = True  # Sweep empty buckets named after the stack after a create
    created_at: str = field(default_factory=_now)
    updated_at: str = field(default_factory=_now)

    def to_dict(self) -> dict[str, Any]:
        """Convert profile to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Profile":
        """Create profile from dictionary, ignoring unknown keys."""
        known = set(cls.__dataclass_fields__)
        return cls(**{k: v for k, v in data.items() if k in known})


class Config:
    """Configuration manager for cfn-runner."""

    CONFIG_DIR = Path.home() / ".cfnrunner"
    CONFIG_FILE = CONFIG_DIR / "config.json"
    PROFILES_DIR = CONFIG_DIR / "profiles"

    def __init__(self, active_profile: str | None = None, schema_version: str = "1.0"):
        """Initialize configuration."""
        self.active_profile = active_profile
        self.schema_version = schema_version
        self._ensure_config_dir()

    def _ensure_config_dir(self) -> None:
        """Ensure configuration directories exist."""
        self.CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        self.PROFILES_DIR.mkdir(parents=True, exist_ok=True)

    @classmethod
    def load(cls) -> "Config":
        """Load global configuration from file."""
        if cls.CONFIG_FILE.exists():
            try:
                with open(cls.CONFIG_FILE) as f:
                    data = json.load(f)

                return cls(
                    active_profile=data.get("active_profile"),
                    schema_version=data.get("schema_version", "1.0"),
                )

            except Exception as e:
                print(f"Warning: Could not load config: {e}")
                return cls()
        else:
            return cls()

    def save(self) -> None:
        """Save global configuration to file."""
        data = {
            "schema_version": self.schema_version,
            "active_profile": self.active_profile,
        }

        with open(self.CONFIG_FILE, "w") as f:
            json.dump(data, f, indent=2)

    def load_profile(self, name: str | None = None) -> Profile:
        """Load a specific profile or the active profile.

        Raises:
            ValueError: If no profile specified and no active profile set.
            FileNotFoundError: If profile file doesn't exist.
        """
        profile_name = name or self.active_profile

        if not profile_name:
            raise ValueError("No profile specified and no active profile set")

        profile_path = self.PROFILES_DIR / f"{profile_name}.json"

        if not profile_path.exists():
            raise FileNotFoundError(f"Profile not found: {profile_name}")

        try:
            with open(profile_path) as f:
                data = json.load(f)

            return Profile.from_dict(data)

        except Exception as e:
            raise ValueError(f"Could not load profile {profile_name}: {e}") from e

    def save_profile(self, profile: Profile) -> None:
        """Save a profile to its own file. The first saved profile becomes active."""
        if not self._is_valid_profile_name(profile.name):
            raise ValueError(
                f"Invalid profile name: {profile.name}. "
                "Name must be alphanumeric with hyphens only, max 64 characters."
            )

        profile.updated_at = _now()

        self.PROFILES_DIR.mkdir(parents=True, exist_ok=True)
        profile_path = self.PROFILES_DIR / f"{profile.name}.json"

        with open(profile_path, "w") as f:
            json.dump(profile.to_dict(), f, indent=2)

        if not self.active_profile:
            self.active_profile = profile.name
            self.save()

    def list_profiles(self) -> list[str]:
        """Sorted list of saved profile names."""
        if not self.PROFILES_DIR.exists():
            return []

        return sorted([p.stem for p in self.PROFILES_DIR.glob("*.json")])

    def set_active_profile(self, name: str) -> bool:
        """Set the active profile. Returns False if it doesn't exist."""
        profile_path = self.PROFILES_DIR / f"{name}.json"

        if not profile_path.exists():
            return False

        self.active_profile = name
        self.save()
        return True

    def get_profile(self, name: str | None = None) -> Profile | None:
        """Get a profile by name or the active profile, or None if not found."""
        try:
            return self.load_profile(name)
        except (ValueError, FileNotFoundError):
            return None

    @staticmethod
    def _is_valid_profile_name(name: str) -> bool:
        if not name or len(name) > 64:
            return False

        return bool(re.match(r"^[a-zA-Z0-9\-]+$", name))
