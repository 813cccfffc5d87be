"""
Audio storage audit pipeline.

This module wires the audit together:
    1. Resolve configuration (config.AuditConfig)
    2. Build record sources per category (audio_audit.db.sources)
    3. Check records against storage (audio_audit.audit)
    4. Write CSV reports (audio_audit.report)

Usage:
    # CLI interface
    uv run -m audio_audit.pipeline
    uv run -m audio_audit.pipeline --categories vocab --course jp-101

    # Programmatic interface
    from audio_audit.pipeline import AuditConfig, build_categories, build_storage, run_audit
    outcomes = asyncio.run(run_audit(config, build_categories(config, engine), build_storage(config)))
"""

from .config import CATEGORIES, AuditConfig
from .orchestrator import (
    CategoryOutcome,
    CategorySpec,
    audit_category,
    build_categories,
    build_storage,
    run_audit,
)

__all__ = [
    "CATEGORIES",
    "AuditConfig",
    "CategoryOutcome",
    "CategorySpec",
    "audit_category",
    "build_categories",
    "build_storage",
    "run_audit",
]
