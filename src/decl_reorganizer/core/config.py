"""
Configuration system for the declaration reorganizer
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from decl_reorganizer.core.code_items import KindCodeItem

logger = logging.getLogger(__name__)

PROJECT_CONFIG_NAME = ".decl-reorganizer.yaml"
GLOBAL_CONFIG_PATH = Path.home() / ".decl-reorganizer" / "config.yaml"
ENV_PREFIX = "DECL_REORGANIZER_"


@dataclass
class ReorganizeConfig:
    """Configuration for the reorganization pass"""

    secondary_order_by_name: bool = False
    remove_existing_regions: bool = True
    # Python module statements execute in order, so only class bodies move
    reorganize_module_level: bool = False
    # Containers carrying one of these keep their member order
    order_significant_attributes: list[str] = field(
        default_factory=lambda: [
            "System.Runtime.InteropServices.ComImportAttribute",
            "System.Runtime.InteropServices.StructLayoutAttribute",
            "dataclass",
            "attr.s",
            "attrs.define",
            "attrs.frozen",
            "NamedTuple",
            "TypedDict",
        ]
    )
    apply_black: bool = False
    black_line_length: int = 88


@dataclass
class PaddingConfig:
    """Configuration for blank lines between declarations"""

    enabled: bool = True
    padded_kinds: list[str] = field(
        default_factory=lambda: [
            "constructor",
            "method",
            "test_method",
            "property",
            "destructor",
            "class",
            "struct",
            "interface",
            "enum",
            "namespace",
        ]
    )
    blank_lines: int = 1
    python_top_level_blank_lines: int = 2

    def get_padded_kinds(self) -> list[KindCodeItem]:
        return [KindCodeItem(kind) for kind in self.padded_kinds]


@dataclass
class BackupConfig:
    """Configuration for backup operations"""

    enabled: bool = True
    directory: str = ".backups"
    compression: bool = True
    keep_sessions: int = 10


@dataclass
class Config:
    """Main configuration class"""

    # General settings
    dry_run: bool = False
    verbose: bool = False
    quiet: bool = False

    file_extensions: list[str] = field(default_factory=lambda: [".py", ".pyi"])

    # Sub-configurations
    reorganize: ReorganizeConfig = field(default_factory=ReorganizeConfig)
    padding: PaddingConfig = field(default_factory=PaddingConfig)
    backup: BackupConfig = field(default_factory=BackupConfig)

    config_file: str | None = None

    @classmethod
    def from_file(cls, filepath: Path) -> "Config":
        """Load configuration from YAML or JSON file"""
        if not filepath.exists():
            logger.warning(f"Config file not found: {filepath}")
            return cls()

        try:
            with open(filepath, "r") as f:
                if filepath.suffix in [".yaml", ".yml"]:
                    data = yaml.safe_load(f) or {}
                elif filepath.suffix == ".json":
                    data = json.load(f)
                else:
                    logger.error(f"Unsupported config file format: {filepath.suffix}")
                    return cls()

            config = cls._from_dict(data)
            config.config_file = str(filepath)
            return config
        except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
            logger.error(f"Error loading config file {filepath}: {e}")
            return cls()

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create Config instance from dictionary"""
        config = cls()

        for key in ["dry_run", "verbose", "quiet", "file_extensions"]:
            if key in data:
                setattr(config, key, data[key])

        if "reorganize" in data:
            config.reorganize = ReorganizeConfig(**data["reorganize"])
        if "padding" in data:
            config.padding = PaddingConfig(**data["padding"])
        if "backup" in data:
            config.backup = BackupConfig(**data["backup"])

        return config

    @classmethod
    def load_hierarchy(cls, project_dir: Path | None = None) -> "Config":
        """Load configuration from hierarchy: global -> project -> env vars"""
        config = cls()

        if GLOBAL_CONFIG_PATH.exists():
            config = cls.from_file(GLOBAL_CONFIG_PATH)
            logger.debug(f"Loaded global config from {GLOBAL_CONFIG_PATH}")

        if project_dir:
            project_config = project_dir / PROJECT_CONFIG_NAME
            if project_config.exists():
                config.merge(cls.from_file(project_config))
                logger.debug(f"Loaded project config from {project_config}")

        config.apply_env_vars()

        return config

    def merge(self, other: "Config") -> None:
        """Merge another config into this one (other takes precedence)"""
        if other.config_file:
            self.config_file = other.config_file
        if other.file_extensions != Config().file_extensions:
            self.file_extensions = other.file_extensions

        # Boolean flags only merge when explicitly set to True
        for flag in ["dry_run", "verbose", "quiet"]:
            if getattr(other, flag):
                setattr(self, flag, True)

        self._merge_dataclass(self.reorganize, other.reorganize)
        self._merge_dataclass(self.padding, other.padding)
        self._merge_dataclass(self.backup, other.backup)

    def _merge_dataclass(self, target: Any, source: Any) -> None:
        """Merge source dataclass into target"""
        defaults = target.__class__()
        for field_name in source.__dataclass_fields__:
            source_value = getattr(source, field_name)
            if source_value != getattr(defaults, field_name):
                setattr(target, field_name, source_value)

    def apply_env_vars(self) -> None:
        """Apply DECL_REORGANIZER_* environment variables"""
        truthy = ["true", "1", "yes"]

        if os.environ.get(f"{ENV_PREFIX}DRY_RUN", "").lower() in truthy:
            self.dry_run = True

        if os.environ.get(f"{ENV_PREFIX}VERBOSE", "").lower() in truthy:
            self.verbose = True

        if os.environ.get(f"{ENV_PREFIX}APPLY_BLACK", "").lower() in truthy:
            self.reorganize.apply_black = True

        if os.environ.get(f"{ENV_PREFIX}NO_BACKUP", "").lower() in truthy:
            self.backup.enabled = False

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors"""
        errors = []

        valid_kinds = {kind.value for kind in KindCodeItem}
        for kind in self.padding.padded_kinds:
            if kind not in valid_kinds:
                errors.append(f"Invalid padded kind: {kind}")

        if self.padding.blank_lines < 0:
            errors.append("Blank lines must not be negative")
        if self.padding.python_top_level_blank_lines < 0:
            errors.append("Python top level blank lines must not be negative")

        if self.reorganize.black_line_length <= 0:
            errors.append("Black line length must be positive")

        for extension in self.file_extensions:
            if not extension.startswith("."):
                errors.append(f"File extension must start with a dot: {extension}")

        if self.backup.keep_sessions < 1:
            errors.append("At least one backup session must be kept")

        return errors

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary"""
        return {
            "dry_run": self.dry_run,
            "verbose": self.verbose,
            "quiet": self.quiet,
            "file_extensions": self.file_extensions,
            "reorganize": asdict(self.reorganize),
            "padding": asdict(self.padding),
            "backup": asdict(self.backup),
        }

    def save(self, filepath: Path) -> None:
        """Save configuration to file"""
        data = self.to_dict()

        with open(filepath, "w") as f:
            if filepath.suffix in [".yaml", ".yml"]:
                yaml.safe_dump(data, f, default_flow_style=False)
            elif filepath.suffix == ".json":
                json.dump(data, f, indent=2)
            else:
                raise ValueError(f"Unsupported config file format: {filepath.suffix}")
