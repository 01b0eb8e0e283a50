"""
Configuration management for the Vue i18n extraction tools.

The table here is the caller-supplied configuration of the extractor: which
hook module/member provides the translation function and which local name the
rewritten code calls.
"""

from __future__ import annotations

import json
import logging
import re
import threading
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "vue-i18n-tools.json"

_JS_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][\w$]*$")


@dataclass
class ExtractorConfig:
    """Extraction configuration settings."""

    # Translation hook
    hook_module: str = "vue-i18n"
    hook_member: str = "useI18n"
    hook_result_member: str = "t"
    translate_fn: str = "$t"

    # Script block synthesized when a component has none
    script_tag_attrs: str = 'setup lang="ts"'

    # Processing settings
    normalize_interpolation: bool = False
    ensure_import: bool = True

    # File selection
    extensions: list[str] = field(
        default_factory=lambda: [".vue", ".js", ".ts", ".jsx", ".tsx"]
    )
    exclude_dirs: list[str] = field(
        default_factory=lambda: ["node_modules", "dist", "build", ".git", "coverage", ".nuxt", ".output"]
    )

    # Output
    output_file: Optional[str] = None
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate field values after initialization."""
        for key in ("translate_fn", "hook_member", "hook_result_member"):
            value = getattr(self, key)
            if not isinstance(value, str) or not _JS_IDENTIFIER_RE.match(value):
                default = getattr(ExtractorConfig, key)
                logger.warning(f"{key} must be a JS identifier, got {value!r}, using {default!r}")
                setattr(self, key, default)
        if not self.hook_module:
            logger.warning("hook_module must not be empty, using 'vue-i18n'")
            self.hook_module = "vue-i18n"
        self.extensions = [
            ext.lower() if ext.startswith(".") else f".{ext.lower()}"
            for ext in self.extensions if ext
        ]
        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            logger.warning(f"Unknown log_level {self.log_level!r}, using INFO")
            self.log_level = "INFO"
        self.log_level = self.log_level.upper()

    @property
    def import_statement(self) -> str:
        return f"import {{ {self.hook_member} }} from '{self.hook_module}'"

    @property
    def initializer_statement(self) -> str:
        if self.translate_fn == self.hook_result_member:
            binding = self.translate_fn
        else:
            binding = f"{self.hook_result_member}: {self.translate_fn}"
        return f"const {{ {binding} }} = {self.hook_member}();"

    @property
    def call_marker(self) -> str:
        """Text that marks an already translated span."""
        return f"{self.translate_fn}("


class ConfigManager:
    """Manage extractor configuration with automatic save/load."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config manager.

        Args:
            config_path: Path to config file. Defaults to ./vue-i18n-tools.json
        """
        self.config_path = Path(config_path) if config_path else Path.cwd() / DEFAULT_CONFIG_FILE
        self._lock = threading.Lock()
        self.config = self.load()

    def load(self) -> ExtractorConfig:
        """Load configuration from file."""
        if not self.config_path.exists():
            return ExtractorConfig()

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)

            # Filter out unknown keys to avoid TypeError
            valid_fields = {f.name for f in ExtractorConfig.__dataclass_fields__.values()}
            filtered_data = {k: v for k, v in data.items() if k in valid_fields}

            return ExtractorConfig(**filtered_data)
        except (json.JSONDecodeError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load config: {e}, using defaults")
            return ExtractorConfig()
        except OSError as e:
            logger.warning(f"Config file I/O error: {e}, using defaults")
            return ExtractorConfig()

    def save(self) -> bool:
        """Save configuration to file."""
        try:
            with self._lock:
                data = asdict(self.config)
                self.config_path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.config_path, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
            return True
        except OSError as e:
            logger.error(f"Failed to save config: {e}")
            return False
        except (TypeError, ValueError) as e:
            logger.error(f"Config serialization error: {e}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return getattr(self.config, key, default)

    def set(self, key: str, value: Any, auto_save: bool = True) -> bool:
        """Set configuration value."""
        if not hasattr(self.config, key):
            logger.warning(f"Unknown config key: {key}")
            return False

        with self._lock:
            setattr(self.config, key, value)

        if auto_save:
            return self.save()
        return True

    def reset_to_defaults(self) -> bool:
        """Reset configuration to default values."""
        with self._lock:
            self.config = ExtractorConfig()
        return self.save()

