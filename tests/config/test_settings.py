# Copyright 2026 step21 Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for settings loading."""

from pathlib import Path

import pytest

from step21.config.settings import (
    DEFAULT_SETTINGS,
    Settings,
    SettingsError,
    load_settings,
    parse_settings,
)
from step21.registry.known_types import DEFAULT_REGISTRY

# ###############
# Parsing
# ###############


class TestParseSettings:
    def test_empty_text_gives_defaults(self) -> None:
        assert parse_settings("") == DEFAULT_SETTINGS

    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.reader.require_wrapper is False
        assert settings.reader.encoding == "utf-8"
        assert settings.writer.newline == "\n"
        assert settings.registry.enabled is True

    def test_full_settings(self) -> None:
        text = (
            "reader:\n"
            "  require-wrapper: true\n"
            "  encoding: latin-1\n"
            "writer:\n"
            "  line-ending: crlf\n"
            "registry:\n"
            "  extra-entities: [VENDOR_PART]\n"
        )
        settings = parse_settings(text)
        assert settings.reader.require_wrapper is True
        assert settings.reader.encoding == "latin-1"
        assert settings.writer.line_ending == "crlf"
        assert settings.writer.newline == "\r\n"
        assert settings.registry.extra_entities == ("VENDOR_PART",)

    def test_unknown_key_is_rejected(self) -> None:
        with pytest.raises(SettingsError, match="Invalid settings"):
            parse_settings("writer:\n  indent: 2\n")

    def test_invalid_line_ending(self) -> None:
        with pytest.raises(SettingsError):
            parse_settings("writer:\n  line-ending: cr\n")

    def test_unknown_encoding(self) -> None:
        with pytest.raises(SettingsError, match="unknown encoding"):
            parse_settings("reader:\n  encoding: no-such-codec\n")

    def test_non_mapping_document(self) -> None:
        with pytest.raises(SettingsError, match="mapping"):
            parse_settings("- reader\n- writer\n", source_label="list.yaml")

    def test_invalid_yaml(self) -> None:
        with pytest.raises(SettingsError, match="Invalid YAML"):
            parse_settings("reader: [unclosed\n")


class TestTypeRegistrySelection:
    def test_default_registry(self) -> None:
        assert DEFAULT_SETTINGS.type_registry() is DEFAULT_REGISTRY

    def test_disabled_registry(self) -> None:
        assert parse_settings("registry:\n  enabled: false\n").type_registry() is None

    def test_extra_entities_extend_registry(self) -> None:
        registry = parse_settings("registry:\n  extra-entities: [vendor_part]\n").type_registry()
        assert registry is not None
        assert registry.is_known("VENDOR_PART")
        assert registry.is_known("CARTESIAN_POINT")


# ###############
# Files
# ###############


class TestLoadSettings:
    def test_load_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / ".step21.yaml"
        path.write_text("writer:\n  line-ending: crlf\n", encoding="utf-8")
        assert load_settings(path).writer.line_ending == "crlf"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SettingsError, match="not found"):
            load_settings(tmp_path / "absent.yaml")

    def test_error_names_the_file(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("reader: 3\n", encoding="utf-8")
        with pytest.raises(SettingsError, match="bad.yaml"):
            load_settings(path)
