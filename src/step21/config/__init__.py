# Copyright 2026 step21 Contributors
# SPDX-License-Identifier: Apache-2.0

"""YAML settings for reading and writing Part 21 files."""

from step21.config.settings import (
    DEFAULT_SETTINGS,
    SETTINGS_FILE_NAME,
    ReaderSettings,
    RegistrySettings,
    Settings,
    SettingsError,
    WriterSettings,
    load_settings,
    parse_settings,
)

__all__ = [
    "Settings",
    "ReaderSettings",
    "WriterSettings",
    "RegistrySettings",
    "SettingsError",
    "load_settings",
    "parse_settings",
    "DEFAULT_SETTINGS",
    "SETTINGS_FILE_NAME",
]
