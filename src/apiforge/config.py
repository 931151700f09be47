"""Design evaluation configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml


class SchemeMode(str, Enum):
    """How HTTPServiceExpr.schemes() reads server URLs.

    PARSED: collect the scheme of every URL that parses (default)
    ON_PARSE_ERROR: collect only URLs that fail to parse, which is the
        behaviour observed in earlier releases; kept until product owners
        confirm which reading is intended
    """

    PARSED = "parsed"
    ON_PARSE_ERROR = "onParseError"


@dataclass
class DesignConfig:
    """Settings shared by every expression of one evaluation.

    Attributes:
        root_path: API root path used when the design does not set one
        default_canonical_endpoint: Endpoint name used when a service does
            not declare a canonical method
        scheme_mode: Server URL scheme collection mode
    """

    root_path: str = "/"
    default_canonical_endpoint: str = "show"
    scheme_mode: SchemeMode = SchemeMode.PARSED

    @classmethod
    def from_env(cls) -> DesignConfig:
        """Create config from environment variables.

        Reads APIFORGE_ROOT_PATH, APIFORGE_CANONICAL_ENDPOINT and
        APIFORGE_SCHEME_MODE; unset variables keep their defaults.
        """
        return cls._from_values(
            {
                "rootPath": os.environ.get("APIFORGE_ROOT_PATH"),
                "canonicalEndpoint": os.environ.get("APIFORGE_CANONICAL_ENDPOINT"),
                "schemeMode": os.environ.get("APIFORGE_SCHEME_MODE"),
            }
        )

    @classmethod
    def from_file(cls, path: Path) -> DesignConfig:
        """Create config from the ``apiforge:`` section of a YAML file.

        Raises:
            ValueError: If the file is not a mapping or holds invalid values
        """
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        section = data.get("apiforge", {}) or {}
        if not isinstance(section, dict):
            raise ValueError(f"'apiforge' section of {path} must be a mapping")
        return cls._from_values(section)

    @classmethod
    def load(cls, path: Path | None = None) -> DesignConfig:
        """Load from file when a path is given, otherwise from the environment."""
        if path is not None:
            return cls.from_file(path)
        return cls.from_env()

    @classmethod
    def _from_values(cls, values: dict[str, Any]) -> DesignConfig:
        config = cls()
        root_path = values.get("rootPath")
        if root_path:
            if not str(root_path).startswith("/"):
                raise ValueError(f"Root path must start with '/': {root_path}")
            config.root_path = str(root_path)
        canonical = values.get("canonicalEndpoint")
        if canonical:
            config.default_canonical_endpoint = str(canonical)
        mode = values.get("schemeMode")
        if mode:
            try:
                config.scheme_mode = SchemeMode(mode)
            except ValueError:
                valid = ", ".join(m.value for m in SchemeMode)
                raise ValueError(f"Unknown scheme mode '{mode}' (expected one of: {valid})")
        return config
