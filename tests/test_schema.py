"""Tests for configuration block validation."""

from typing import Dict, List

import pytest
from pydantic import Field

from errors import ValidationError
from schema import Block, normalize_block
from scaleset import OSDiskBlock, ScaleSetBlock


def os_disk(**overrides):
    block = {"caching": "ReadWrite", "storage_account_type": "Standard_LRS"}
    block.update(overrides)
    return block


def scale_set(**overrides):
    node = {
        "name": "web",
        "resource_group_name": "group1",
        "sku": "Standard_D2s_v3",
        "os_disk": [os_disk()],
        "upgrade_policy": [{"mode": "Manual"}],
    }
    node.update(overrides)
    return node


class Settings(Block):
    enabled: bool = False
    size: int = 0
    label: str = ""
    mode: str = "Manual"
    blocks: List[Dict[str, str]] = Field(default_factory=list)
    tags: Dict[str, str] = Field(default_factory=dict)


class TestNormalizeBlock:
    """Tests for defaults and basic type checks."""

    def test_defaults_are_filled_in(self):
        assert normalize_block(Settings, {}) == {
            "enabled": False,
            "size": 0,
            "label": "",
            "mode": "Manual",
            "blocks": [],
            "tags": {},
        }

    def test_none_means_unset(self):
        assert normalize_block(Settings, None)["mode"] == "Manual"
        assert normalize_block(Settings, {"mode": None})["mode"] == "Manual"

    def test_input_is_not_mutated(self):
        raw = os_disk()
        normalize_block(OSDiskBlock, raw)
        assert raw == os_disk()

    def test_unknown_option(self):
        with pytest.raises(ValidationError, match="Unsupported argument `create_option`"):
            normalize_block(OSDiskBlock, os_disk(create_option="Empty"))

    def test_missing_required_option(self):
        with pytest.raises(ValidationError, match="`caching` is required") as exc_info:
            normalize_block(OSDiskBlock, {"storage_account_type": "Standard_LRS"})
        assert exc_info.value.field == "caching"

    def test_bool_is_not_an_int(self):
        with pytest.raises(ValidationError, match="valid integer"):
            normalize_block(OSDiskBlock, os_disk(disk_size_gb=True))

    def test_wrong_bool_type(self):
        with pytest.raises(ValidationError, match="valid boolean"):
            normalize_block(OSDiskBlock, os_disk(write_accelerator_enabled="yes"))

    def test_not_a_mapping(self):
        with pytest.raises(ValidationError, match="must be a mapping"):
            normalize_block(OSDiskBlock, ["caching"])

    def test_path_prefixes_option_names(self):
        with pytest.raises(ValidationError, match="`scale_sets.web.os_disk` is required") as exc_info:
            normalize_block(ScaleSetBlock, scale_set(os_disk=[]), path="scale_sets.web")
        assert exc_info.value.field == "scale_sets.web.os_disk"


class TestOSDiskOptions:
    """Tests for the OS disk block."""

    def test_disk_size_upper_bound_accepted(self):
        assert normalize_block(OSDiskBlock, os_disk(disk_size_gb=1023))["disk_size_gb"] == 1023

    def test_disk_size_above_upper_bound_rejected(self):
        with pytest.raises(ValidationError, match="less than or equal to 1023"):
            normalize_block(OSDiskBlock, os_disk(disk_size_gb=1024))

    def test_negative_disk_size_rejected(self):
        with pytest.raises(ValidationError, match="greater than or equal to 0"):
            normalize_block(OSDiskBlock, os_disk(disk_size_gb=-1))

    def test_ultra_ssd_not_allowed(self):
        with pytest.raises(ValidationError, match="storage_account_type"):
            normalize_block(OSDiskBlock, os_disk(storage_account_type="UltraSSD_LRS"))

    def test_allowed_values_are_case_sensitive(self):
        with pytest.raises(ValidationError, match="caching"):
            normalize_block(OSDiskBlock, os_disk(caching="readwrite"))

    def test_diff_disk_option_must_be_local(self):
        with pytest.raises(ValidationError, match="diff_disk_settings.0.option"):
            normalize_block(OSDiskBlock, os_disk(diff_disk_settings=[{"option": "Remote"}]))

    def test_diff_disk_settings_max_items(self):
        with pytest.raises(ValidationError, match="at most 1 item"):
            normalize_block(OSDiskBlock, os_disk(diff_disk_settings=[{"option": "Local"}, {"option": "Local"}]))

    def test_write_accelerator_defaults_to_false(self):
        assert normalize_block(OSDiskBlock, os_disk())["write_accelerator_enabled"] is False


class TestScaleSetOptions:
    """Tests for the whole scale set block."""

    def test_minimal_scale_set(self):
        raw = normalize_block(ScaleSetBlock, scale_set())
        assert raw["os_type"] == "Linux"
        assert raw["instances"] == 0
        assert raw["source_image_reference"] == []
        assert raw["os_disk"][0]["disk_size_gb"] == 0
        assert raw["upgrade_policy"][0]["rolling_upgrade_policy"] == []

    def test_os_disk_is_required(self):
        node = scale_set()
        del node["os_disk"]
        with pytest.raises(ValidationError, match="`os_disk` is required"):
            normalize_block(ScaleSetBlock, node)

    def test_empty_upgrade_policy_list_is_missing(self):
        with pytest.raises(ValidationError, match="`upgrade_policy` is required"):
            normalize_block(ScaleSetBlock, scale_set(upgrade_policy=[]))

    def test_os_disk_must_be_a_list(self):
        with pytest.raises(ValidationError, match="`os_disk`: .*valid list") as exc_info:
            normalize_block(ScaleSetBlock, scale_set(os_disk=5))
        assert exc_info.value.field == "os_disk"

    def test_tags_must_be_a_mapping(self):
        with pytest.raises(ValidationError, match="`tags`: .*valid dictionary") as exc_info:
            normalize_block(ScaleSetBlock, scale_set(tags=True))
        assert exc_info.value.field == "tags"

    def test_source_image_id_conflicts_with_reference(self):
        node = scale_set(
            source_image_id="/subscriptions/sub/resourceGroups/group1/providers/Microsoft.Compute/images/image1",
            source_image_reference=[
                {"publisher": "Canonical", "offer": "UbuntuServer", "sku": "18.04-LTS", "version": "latest"}
            ],
        )
        with pytest.raises(ValidationError, match="`source_image_id`: conflicts with `source_image_reference`"):
            normalize_block(ScaleSetBlock, node)

    def test_source_image_reference_fields_required(self):
        node = scale_set(source_image_reference=[{"publisher": "Canonical", "offer": "UbuntuServer"}])
        with pytest.raises(ValidationError, match="source_image_reference.0.sku"):
            normalize_block(ScaleSetBlock, node)

    def test_rolling_policy_fields_required(self):
        node = scale_set(upgrade_policy=[{"mode": "Rolling", "rolling_upgrade_policy": [{}]}])
        with pytest.raises(ValidationError, match="max_batch_instance_percent"):
            normalize_block(ScaleSetBlock, node)

    def test_invalid_os_type(self):
        with pytest.raises(ValidationError, match="os_type"):
            normalize_block(ScaleSetBlock, scale_set(os_type="Darwin"))
