"""
Configuration settings for the storage audit.

This module defines the AuditConfig dataclass. Values are resolved once, from
the environment (and a .env file) by ``AuditConfig.from_env``, then passed
explicitly to the pipeline; nothing below this layer reads the environment.
"""

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from dotenv import load_dotenv
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from audio_audit.audit.paths import DEFAULT_AUDIO_PREFIXES
from audio_audit.errors import ConfigurationError

CATEGORIES = ("vocab", "activities")


def _optional_str(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _optional_float(name: str, value: Optional[str], errors: List[str]) -> Optional[float]:
    value = _optional_str(value)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        errors.append(f"{name} must be a number, got '{value}'")
        return None


def _optional_int(name: str, value: Optional[str], errors: List[str]) -> Optional[int]:
    value = _optional_str(value)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        errors.append(f"{name} must be an integer, got '{value}'")
        return None


@dataclass
class AuditConfig:
    """Configuration for one audit run"""

    # Content database
    database_url: Optional[str] = None

    # Cloud storage (S3-compatible)
    bucket_name: Optional[str] = None
    bucket_endpoint: Optional[str] = None
    bucket_key_id: Optional[str] = None
    bucket_access_key: Optional[str] = None
    bucket_region: Optional[str] = None

    # Local mirror of the bucket, used instead of cloud storage when set
    local_storage_dir: Optional[str] = None

    # Audit scope
    categories: List[str] = field(default_factory=lambda: list(CATEGORIES))
    course: Optional[str] = None
    vocab_limit: Optional[int] = None
    activities_limit: Optional[int] = None
    audio_prefixes: List[str] = field(default_factory=lambda: list(DEFAULT_AUDIO_PREFIXES))

    # Throughput
    max_rate: Optional[float] = 50.0  # requests per second, None for unlimited
    concurrency: int = 20
    check_timeout: Optional[float] = 30.0

    # Output
    output_dir: str = "reports"

    # Parse errors collected by from_env, reported by validate()
    parse_errors: List[str] = field(default_factory=list, repr=False)

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, dotenv: bool = True
    ) -> "AuditConfig":
        """
        Build a configuration from environment variables.

        Args:
            environ: Mapping to read instead of os.environ
            dotenv: Load a .env file into os.environ first

        Returns:
            AuditConfig (not yet validated)
        """
        if environ is None:
            if dotenv:
                load_dotenv()
            environ = os.environ

        errors: List[str] = []
        config = cls(
            database_url=_optional_str(environ.get("DATABASE_URL")),
            bucket_name=_optional_str(environ.get("BUCKET_NAME")),
            bucket_endpoint=_optional_str(environ.get("BUCKET_ENDPOINT")),
            bucket_key_id=_optional_str(environ.get("BUCKET_KEY_ID")),
            bucket_access_key=_optional_str(environ.get("BUCKET_ACCESS_KEY")),
            bucket_region=_optional_str(environ.get("BUCKET_REGION")),
            local_storage_dir=_optional_str(environ.get("LOCAL_STORAGE_DIR")),
            course=_optional_str(environ.get("AUDIT_COURSE")),
            vocab_limit=_optional_int(
                "AUDIT_VOCAB_LIMIT", environ.get("AUDIT_VOCAB_LIMIT"), errors
            ),
            activities_limit=_optional_int(
                "AUDIT_ACTIVITIES_LIMIT", environ.get("AUDIT_ACTIVITIES_LIMIT"), errors
            ),
            output_dir=_optional_str(environ.get("AUDIT_OUTPUT_DIR")) or "reports",
        )

        prefixes = _optional_str(environ.get("AUDIO_PREFIXES"))
        if prefixes:
            config.audio_prefixes = [p.strip() for p in prefixes.split(",") if p.strip()]

        if "AUDIT_MAX_RATE" in environ:
            rate = _optional_float("AUDIT_MAX_RATE", environ["AUDIT_MAX_RATE"], errors)
            config.max_rate = rate if rate and rate > 0 else None

        concurrency = _optional_int(
            "AUDIT_CONCURRENCY", environ.get("AUDIT_CONCURRENCY"), errors
        )
        if concurrency is not None:
            config.concurrency = concurrency

        if "AUDIT_CHECK_TIMEOUT" in environ:
            timeout = _optional_float(
                "AUDIT_CHECK_TIMEOUT", environ["AUDIT_CHECK_TIMEOUT"], errors
            )
            config.check_timeout = timeout if timeout and timeout > 0 else None

        config.parse_errors = errors
        return config

    @property
    def use_local_storage(self) -> bool:
        return self.local_storage_dir is not None

    def limit_for(self, category: str) -> Optional[int]:
        return {"vocab": self.vocab_limit, "activities": self.activities_limit}.get(
            category
        )

    def validate(self) -> List[str]:
        """
        Validate configuration and return any error messages.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = list(self.parse_errors)

        if not self.database_url:
            errors.append("DATABASE_URL is required")
        else:
            try:
                make_url(self.database_url)
            except ArgumentError:
                errors.append("DATABASE_URL is not a valid SQLAlchemy database URL")

        if not self.use_local_storage:
            if not self.bucket_name:
                errors.append("BUCKET_NAME is required for cloud storage")
            if not self.bucket_key_id or not self.bucket_access_key:
                errors.append(
                    "BUCKET_KEY_ID and BUCKET_ACCESS_KEY are required for cloud storage"
                )

        if self.concurrency < 1:
            errors.append("concurrency must be at least 1")

        if self.max_rate is not None and self.max_rate <= 0:
            errors.append("max_rate must be positive (or unset for no limit)")

        if not self.audio_prefixes:
            errors.append("AUDIO_PREFIXES must name at least one directory")

        unknown = set(self.categories) - set(CATEGORIES)
        if unknown:
            errors.append(f"Unknown categories: {sorted(unknown)}")

        for name in ("vocab_limit", "activities_limit"):
            value = getattr(self, name)
            if value is not None and value < 1:
                errors.append(f"{name} must be at least 1")

        return errors

    def require_valid(self) -> "AuditConfig":
        """Raise ConfigurationError unless the configuration is valid."""
        errors = self.validate()
        if errors:
            raise ConfigurationError(errors)
        return self
