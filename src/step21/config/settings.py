# Copyright 2026 step21 Contributors
# SPDX-License-Identifier: Apache-2.0

"""Reader and writer settings loaded from a YAML file."""

from __future__ import annotations

import codecs
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from step21.registry.known_types import DEFAULT_REGISTRY, TypeRegistry

# ###############
# Public Interface
# ###############

SETTINGS_FILE_NAME = ".step21.yaml"

LINE_ENDINGS: dict[str, str] = {"lf": "\n", "crlf": "\r\n"}


class SettingsError(Exception):
    """Raised when a settings file cannot be read or is invalid."""


class ReaderSettings(BaseModel):
    """How input files are decoded and parsed."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    require_wrapper: bool = Field(alias="require-wrapper", default=False)
    encoding: str = "utf-8"

    @field_validator("encoding")
    @classmethod
    def known_encoding(cls, value: str) -> str:
        return _check_encoding(value)


class WriterSettings(BaseModel):
    """How output files are laid out and encoded."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    line_ending: Literal["lf", "crlf"] = Field(alias="line-ending", default="lf")
    encoding: str = "utf-8"

    @field_validator("encoding")
    @classmethod
    def known_encoding(cls, value: str) -> str:
        return _check_encoding(value)

    @property
    def newline(self) -> str:
        return LINE_ENDINGS[self.line_ending]


class RegistrySettings(BaseModel):
    """Which entity type names the writer treats as known."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    enabled: bool = True
    extra_entities: tuple[str, ...] = Field(alias="extra-entities", default=())


class Settings(BaseModel):
    """Top-level settings model."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    reader: ReaderSettings = Field(default_factory=ReaderSettings)
    writer: WriterSettings = Field(default_factory=WriterSettings)
    registry: RegistrySettings = Field(default_factory=RegistrySettings)

    def type_registry(self) -> TypeRegistry | None:
        """Return the registry to write with, or None when it is disabled."""
        if not self.registry.enabled:
            return None
        if not self.registry.extra_entities:
            return DEFAULT_REGISTRY
        return DEFAULT_REGISTRY.with_names(self.registry.extra_entities)


DEFAULT_SETTINGS = Settings()


def load_settings(path: Path) -> Settings:
    """Load and validate a settings file.

    An empty file yields the default settings.

    Args:
        path: Path to the YAML settings file.

    Returns:
        A validated Settings instance.

    Raises:
        SettingsError: If the file cannot be read, contains invalid YAML,
            or does not conform to the expected schema.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise SettingsError(f"Settings file not found: {path}") from None
    except OSError as exc:
        raise SettingsError(f"Cannot read settings file '{path}': {exc}") from exc

    return parse_settings(text, source_label=str(path))


def parse_settings(text: str, source_label: str = "<string>") -> Settings:
    """Parse settings YAML text.

    Raises:
        SettingsError: If the YAML is invalid or does not match the schema.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise SettingsError(f"Invalid YAML in {source_label}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SettingsError(f"{source_label}: settings must be a YAML mapping")

    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise SettingsError(f"Invalid settings in {source_label}: {exc}") from exc


# ################
# Implementation
# ################


def _check_encoding(value: str) -> str:
    try:
        codecs.lookup(value)
    except LookupError:
        raise ValueError(f"unknown encoding {value!r}") from None
    return value
