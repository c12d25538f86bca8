"""Tests for loading the program configuration."""

import runpy
from pathlib import Path

import pytest

from config import Config

ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture(scope="module")
def program():
    # __main__.py is the Pulumi entrypoint, load it without running main()
    return runpy.run_path(str(ROOT / "__main__.py"), run_name="program")


class TestLoadConfig:
    def test_load_example_config(self, program):
        data = program["load_config"](str(ROOT / "config.yaml"))
        config = Config.from_dict(data)
        assert config.team == "platform"
        assert config.tags["costCenter"] == "1234"
        assert [s.name for s in config.scale_sets] == ["frontend"]
        assert config.scale_sets[0].settings["os_disk"][0]["disk_size_gb"] == 64

    def test_example_config_expands(self, program):
        config = Config.from_dict(program["load_config"](str(ROOT / "config.yaml")))
        builder = program["ScaleSetBuilder"](config)
        request = builder.expand(config.scale_sets[0])
        assert request.location == "westeurope"
        assert request.os_disk.disk_size_gb == 64
        assert request.upgrade_policy.rolling_upgrade_policy.pause_time_between_batches == "PT0S"
        assert request.image_reference.offer == "0001-com-ubuntu-server-jammy"

    def test_missing_required_key(self, program, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("team: platform\nservice: web\nenvironment: dev\n")
        with pytest.raises(ValueError, match="Missing required configuration key: location"):
            program["load_config"](str(path))

    def test_empty_file(self, program, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        with pytest.raises(ValueError, match="team"):
            program["load_config"](str(path))


class TestConfigFromDict:
    def test_defaults(self):
        config = Config.from_dict({"team": "t", "service": "s", "environment": "e", "location": "eastus"})
        assert config.tags == {}
        assert config.scale_sets == []

    def test_scale_set_without_name(self):
        with pytest.raises(ValueError, match="needs a 'name'"):
            Config.from_dict(
                {"team": "t", "service": "s", "environment": "e", "location": "eastus", "scale_sets": [{}]}
            )

    def test_settings_are_copied(self):
        entry = {"name": "web", "sku": "Standard_B1s"}
        config = Config.from_dict(
            {"team": "t", "service": "s", "environment": "e", "location": "eastus", "scale_sets": [entry]}
        )
        config.scale_sets[0].settings["sku"] = "Standard_B2s"
        assert entry["sku"] == "Standard_B1s"
