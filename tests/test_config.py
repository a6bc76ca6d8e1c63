"""Tests for waypost.config — DispatcherConfig frozen dataclass."""

import pytest

from waypost.config import DispatcherConfig
from waypost.errors import ConfigurationError


class TestDispatcherConfig:
    def test_defaults(self) -> None:
        cfg = DispatcherConfig()
        assert cfg.path_property is None
        assert cfg.original_path_property is None

    def test_override(self) -> None:
        cfg = DispatcherConfig(path_property="url")
        assert cfg.path_property == "url"

    def test_frozen(self) -> None:
        cfg = DispatcherConfig()
        with pytest.raises(AttributeError):
            cfg.path_property = "path"  # type: ignore[misc]

    def test_original_property_name(self) -> None:
        assert DispatcherConfig(path_property="path").original_path_property == "originalPath"
        assert DispatcherConfig(path_property="url").original_path_property == "originalUrl"

    def test_original_property_single_char(self) -> None:
        assert DispatcherConfig(path_property="p").original_path_property == "originalP"


class TestDispatcherConfigValidation:
    def test_non_string_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="string but was: bool"):
            DispatcherConfig(path_property=True)  # type: ignore[arg-type]

    def test_empty_string_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="not be empty"):
            DispatcherConfig(path_property="")
