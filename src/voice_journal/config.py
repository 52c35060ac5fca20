"""
Configuration management

Related:
  - insights.lexicon.Lexicon: loaded from ``insights.lexicon_file`` when set
  - entries.repository.EntryRepository: uses ``database.path``
  - audit.differ.ChangeDiffer: uses ``audit.ignored_fields``
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

DEFAULT_IGNORED_FIELDS: Tuple[str, ...] = ("updated_at",)


@dataclass
class DatabaseConfig:
    """SQLite settings"""

    path: Optional[str] = None  # None -> data/voice_journal.db


@dataclass
class InsightConfig:
    """Insight extraction settings"""

    lexicon_file: Optional[str] = None  # None -> built-in bilingual tables


@dataclass
class AuditConfig:
    """Audit trail settings"""

    enabled: bool = True
    ignored_fields: Tuple[str, ...] = DEFAULT_IGNORED_FIELDS


@dataclass
class Config:
    """Application settings"""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    insights: InsightConfig = field(default_factory=InsightConfig)
    audit: AuditConfig = field(default_factory=AuditConfig)

    log_level: str = "INFO"
    log_file: str = "logs/voice_journal.log"

    @classmethod
    def from_yaml(cls, config_path: Optional[Path] = None) -> "Config":
        """Load settings from a YAML file

        Args:
            config_path: Path to the file (defaults to config/app_config.yaml)

        Returns:
            Config: loaded settings
        """
        if config_path is None:
            project_root = Path(__file__).parent.parent.parent
            config_path = project_root / "config" / "app_config.yaml"
        config_path = Path(config_path)

        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data: Dict[str, Any] = yaml.safe_load(f) or {}

        database_data = yaml_data.get("database", {}) or {}
        insight_data = yaml_data.get("insights", {}) or {}
        audit_data = yaml_data.get("audit", {}) or {}
        log_data = yaml_data.get("log", {}) or {}

        # Relative lexicon paths resolve against the project root
        lexicon_file = insight_data.get("lexicon_file")
        if lexicon_file and not Path(lexicon_file).is_absolute():
            lexicon_file = str(config_path.parent.parent / lexicon_file)

        return cls(
            database=DatabaseConfig(path=database_data.get("path")),
            insights=InsightConfig(lexicon_file=lexicon_file),
            audit=AuditConfig(
                enabled=audit_data.get("enabled", True),
                ignored_fields=tuple(
                    audit_data.get("ignored_fields", DEFAULT_IGNORED_FIELDS)
                ),
            ),
            log_level=log_data.get("level", "INFO"),
            log_file=log_data.get("file", "logs/voice_journal.log"),
        )

    @classmethod
    def from_env(cls) -> "Config":
        """Load settings from environment variables"""
        ignored = os.getenv("VOICE_JOURNAL_AUDIT_IGNORED_FIELDS")
        return cls(
            database=DatabaseConfig(path=os.getenv("VOICE_JOURNAL_DB_PATH")),
            insights=InsightConfig(lexicon_file=os.getenv("VOICE_JOURNAL_LEXICON_FILE")),
            audit=AuditConfig(
                enabled=os.getenv("VOICE_JOURNAL_AUDIT_ENABLED", "true").lower()
                not in ("0", "false", "no"),
                ignored_fields=tuple(
                    name.strip() for name in ignored.split(",") if name.strip()
                )
                if ignored
                else DEFAULT_IGNORED_FIELDS,
            ),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE", "logs/voice_journal.log"),
        )


def resolve_db_path(db_path: Optional[Path] = None) -> Path:
    """Explicit path, then VOICE_JOURNAL_DB_PATH, then data/voice_journal.db."""
    root = Path(__file__).resolve().parents[2]
    env_path = os.getenv("VOICE_JOURNAL_DB_PATH")
    if db_path:
        path = Path(db_path)
    elif env_path:
        path = Path(env_path)
    else:
        path = root / "data" / "voice_journal.db"
    path.parent.mkdir(parents=True, exist_ok=True)
    return path
