"""Tests for configuration loading and inheritance resolution."""

from __future__ import annotations

import sys
import textwrap

import pytest

from hold.core.utils.config import (
    ConfigError,
    load_and_resolve_config,
    load_config_from_module,
    resolve_config_inheritance,
)


class TestConfigInheritance:
    """Test suite for configuration inheritance resolution."""

    def test_resolve_inheritance_basic(self):
        config = {
            "s3": {"type": "s3", "bucket": "blobs", "region": "us-east-1"},
            "s3-eu": {"__inherits__": "s3", "region": "eu-west-1"},
        }

        resolved = resolve_config_inheritance(config)

        assert resolved["s3"] == {"type": "s3", "bucket": "blobs", "region": "us-east-1"}
        assert resolved["s3-eu"] == {"type": "s3", "bucket": "blobs", "region": "eu-west-1"}

    def test_resolve_inheritance_multi_level(self):
        config = {
            "grandchild": {"__inherits__": "child", "option3": "grandchild_value"},
            "child": {"__inherits__": "parent", "option2": "child_value"},
            "parent": {"type": "memory", "option1": "p", "option2": "p", "option3": "p"},
        }

        resolved = resolve_config_inheritance(config)

        assert resolved["grandchild"] == {
            "type": "memory",
            "option1": "p",
            "option2": "child_value",
            "option3": "grandchild_value",
        }

    def test_resolve_inheritance_does_not_mutate_input(self):
        config = {"a": {"type": "memory"}, "b": {"__inherits__": "a", "x": 1}}

        resolve_config_inheritance(config)

        assert config == {"a": {"type": "memory"}, "b": {"__inherits__": "a", "x": 1}}

    def test_resolve_inheritance_circular_detection(self):
        config = {
            "a": {"__inherits__": "b"},
            "b": {"__inherits__": "a"},
        }

        with pytest.raises(ConfigError, match="Circular inheritance detected"):
            resolve_config_inheritance(config)

    def test_resolve_inheritance_missing_parent(self):
        with pytest.raises(ConfigError, match="'ghost' not found"):
            resolve_config_inheritance({"a": {"__inherits__": "ghost"}})


class TestConfigLoading:
    """Test loading configuration modules."""

    @pytest.fixture
    def config_module(self, tmp_path, monkeypatch):
        module_file = tmp_path / "hold_test_config.py"
        module_file.write_text(
            textwrap.dedent(
                """
                CONFIGURATION = {
                    "base": {"type": "memory"},
                    "child": {"__inherits__": "base", "note": "inherited"},
                }
                OTHER = {"only": {"type": "memory"}}
                """
            )
        )
        monkeypatch.syspath_prepend(str(tmp_path))
        yield "hold_test_config"
        sys.modules.pop("hold_test_config", None)

    def test_load_config_from_module(self, config_module):
        config = load_config_from_module(config_module)

        assert set(config) == {"base", "child"}

    def test_load_named_attribute(self, config_module):
        assert load_config_from_module(config_module, "OTHER") == {"only": {"type": "memory"}}

    def test_missing_attribute_returns_default(self, config_module):
        assert load_config_from_module(config_module, "NOPE", default={}) == {}

    def test_missing_module_returns_default(self):
        assert load_config_from_module("no_such_module_anywhere", default="fallback") == "fallback"

    def test_load_and_resolve(self, config_module):
        resolved = load_and_resolve_config(config_module)

        assert resolved["child"] == {"type": "memory", "note": "inherited"}

    def test_load_and_resolve_invalid_config_uses_default(self):
        resolved = load_and_resolve_config("no_such_module_anywhere", default={"d": {}})

        assert resolved == {"d": {}}

    def test_shipped_configuration_resolves(self, monkeypatch):
        monkeypatch.setenv("HOLD_DEFAULT_PROVIDER", "memory")
        sys.modules.pop("configs.providers", None)

        resolved = load_and_resolve_config("configs.providers")

        assert resolved["default"] == {"type": "memory"}
        assert resolved["minio-local"]["type"] == "s3"
        assert resolved["minio-local"]["create_bucket"] is True
        sys.modules.pop("configs.providers", None)
