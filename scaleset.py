# scaleset.py
"""
Field mapping for Virtual Machine Scale Sets.

``expand_*`` functions turn validated configuration blocks (lists holding at
most one mapping) into compute request objects. ``flatten_*`` functions turn
compute response objects back into configuration blocks for storing as state.
The block model for every option lives next to the functions that read it.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from azure_ids import ResourceID, parse_azure_resource_id
from compute import (
    AdditionalCapabilities,
    AutomaticOSUpgradePolicy,
    CachingTypes,
    DiffDiskOptions,
    DiffDiskSettings,
    DiskCreateOptionTypes,
    ImageReference,
    OperatingSystemTypes,
    RollingUpgradePolicy,
    Sku,
    StorageAccountTypes,
    UpgradeMode,
    UpgradePolicy,
    VirtualMachineScaleSetManagedDiskParameters,
    VirtualMachineScaleSetOSDisk,
    literal,
)
from errors import ParseError, ValidationError
from schema import Block

SCALE_SET_SEGMENT = "virtualMachineScaleSets"


@dataclass
class ScaleSetResourceID:
    base: ResourceID
    name: str

    @property
    def id(self) -> str:
        provider = self.base.provider or "Microsoft.Compute"
        return (
            f"/subscriptions/{self.base.subscription_id}/resourceGroups/{self.base.resource_group}"
            f"/providers/{provider}/{SCALE_SET_SEGMENT}/{self.name}"
        )


def parse_virtual_machine_scale_set_id(resource_id: str) -> ScaleSetResourceID:
    try:
        base = parse_azure_resource_id(resource_id)
    except ParseError as e:
        raise ParseError(
            f"Unable to parse Virtual Machine Scale Set ID {resource_id!r}: {e}",
            resource_id=resource_id,
            segment=e.segment,
        ) from e

    name = base.path.get(SCALE_SET_SEGMENT, "")
    if not name:
        raise ParseError(
            f"ID was missing the `{SCALE_SET_SEGMENT}` element", resource_id=resource_id, segment=SCALE_SET_SEGMENT
        )

    return ScaleSetResourceID(base=base, name=name)


# Additional capabilities

class AdditionalCapabilitiesBlock(Block):
    ultra_ssd_enabled: bool = Field(False, strict=True)


def expand_additional_capabilities(blocks: List[Dict[str, Any]]) -> AdditionalCapabilities:
    capabilities = AdditionalCapabilities()

    if blocks:
        raw = blocks[0]
        capabilities.ultra_ssd_enabled = bool(raw.get("ultra_ssd_enabled", False))

    return capabilities


def flatten_additional_capabilities(capabilities: Optional[AdditionalCapabilities]) -> List[Dict[str, Any]]:
    if capabilities is None:
        return []

    ultra_ssd_enabled = False
    if capabilities.ultra_ssd_enabled is not None:
        ultra_ssd_enabled = capabilities.ultra_ssd_enabled

    return [{"ultra_ssd_enabled": ultra_ssd_enabled}]


# OS disk

class DiffDiskSettingsBlock(Block):
    option: Literal["Local"]


class OSDiskBlock(Block):
    caching: Literal["None", "ReadOnly", "ReadWrite"]
    # OS disks can't be Ultra SSDs
    storage_account_type: Literal["Premium_LRS", "Standard_LRS", "StandardSSD_LRS"]
    diff_disk_settings: List[DiffDiskSettingsBlock] = Field(default_factory=list, max_length=1)
    disk_size_gb: int = Field(0, ge=0, le=1023, strict=True)
    write_accelerator_enabled: bool = Field(False, strict=True)


def expand_os_disk(blocks: List[Dict[str, Any]], os_type: OperatingSystemTypes) -> VirtualMachineScaleSetOSDisk:
    raw = blocks[0]
    disk = VirtualMachineScaleSetOSDisk(
        caching=CachingTypes(raw["caching"]),
        managed_disk=VirtualMachineScaleSetManagedDiskParameters(
            storage_account_type=StorageAccountTypes(raw["storage_account_type"]),
        ),
        write_accelerator_enabled=bool(raw.get("write_accelerator_enabled", False)),
        # not user configurable
        create_option=DiskCreateOptionTypes.FROM_IMAGE,
        os_type=OperatingSystemTypes(os_type),
    )

    disk_size_gb = raw.get("disk_size_gb") or 0
    if disk_size_gb > 0:
        disk.disk_size_gb = disk_size_gb

    diff_disk_settings = raw.get("diff_disk_settings") or []
    if diff_disk_settings:
        disk.diff_disk_settings = DiffDiskSettings(option=DiffDiskOptions(diff_disk_settings[0]["option"]))

    return disk


def flatten_os_disk(disk: Optional[VirtualMachineScaleSetOSDisk]) -> List[Dict[str, Any]]:
    if disk is None:
        return []

    diff_disk_settings = []
    if disk.diff_disk_settings is not None:
        diff_disk_settings.append({"option": literal(disk.diff_disk_settings.option)})

    disk_size_gb = 0
    if disk.disk_size_gb:
        disk_size_gb = disk.disk_size_gb

    storage_account_type = ""
    if disk.managed_disk is not None:
        storage_account_type = literal(disk.managed_disk.storage_account_type)

    write_accelerator_enabled = False
    if disk.write_accelerator_enabled is not None:
        write_accelerator_enabled = disk.write_accelerator_enabled

    return [
        {
            "caching": literal(disk.caching),
            "disk_size_gb": disk_size_gb,
            "diff_disk_settings": diff_disk_settings,
            "storage_account_type": storage_account_type,
            "write_accelerator_enabled": write_accelerator_enabled,
        }
    ]


# Source image
#
# An image is chosen either by `source_image_id` or by a
# `source_image_reference` block, Azure rejects platform image IDs in the
# `id` field so the two are kept as separate options.

class SourceImageReferenceBlock(Block):
    publisher: str = Field(min_length=1, strict=True)
    offer: str = Field(min_length=1, strict=True)
    sku: str = Field(min_length=1, strict=True)
    version: str = Field(min_length=1, strict=True)


def expand_source_image_reference(blocks: List[Dict[str, Any]]) -> Optional[ImageReference]:
    if not blocks:
        return None

    raw = blocks[0]
    return ImageReference(
        publisher=raw["publisher"],
        offer=raw["offer"],
        sku=raw["sku"],
        version=raw["version"],
    )


def flatten_source_image_reference(reference: Optional[ImageReference]) -> List[Dict[str, Any]]:
    # an image referenced by ID is flattened into `source_image_id` instead
    if reference is None or reference.id is not None:
        return []

    return [
        {
            "publisher": reference.publisher or "",
            "offer": reference.offer or "",
            "sku": reference.sku or "",
            "version": reference.version or "",
        }
    ]


def expand_source_image_id(image_id: str) -> Optional[ImageReference]:
    if not image_id:
        return None
    return ImageReference(id=image_id)


def flatten_source_image_id(reference: Optional[ImageReference]) -> str:
    if reference is None or reference.id is None:
        return ""
    return reference.id


# Upgrade policy

class AutomaticOSUpgradePolicyBlock(Block):
    disable_automatic_rollback: bool = Field(strict=True)
    enable_automatic_os_upgrade: bool = Field(strict=True)


class RollingUpgradePolicyBlock(Block):
    max_batch_instance_percent: int = Field(strict=True)
    max_unhealthy_instance_percent: int = Field(strict=True)
    max_unhealthy_upgraded_instance_percent: int = Field(strict=True)
    pause_time_between_batches: str = Field(min_length=1, strict=True)


class UpgradePolicyBlock(Block):
    mode: Literal["Automatic", "Manual", "Rolling"]
    automatic_os_upgrade_policy: List[AutomaticOSUpgradePolicyBlock] = Field(default_factory=list, max_length=1)
    rolling_upgrade_policy: List[RollingUpgradePolicyBlock] = Field(default_factory=list, max_length=1)


def expand_upgrade_policy(blocks: List[Dict[str, Any]]) -> UpgradePolicy:
    raw = blocks[0]
    automatic_policies = raw.get("automatic_os_upgrade_policy") or []
    rolling_policies = raw.get("rolling_upgrade_policy") or []

    try:
        mode = UpgradeMode(raw["mode"])
    except ValueError:
        allowed = [m.value for m in UpgradeMode]
        raise ValidationError(f"expected `mode` to be one of {allowed}, got {raw['mode']}", field="mode") from None

    policy = UpgradePolicy(mode=mode)

    if automatic_policies:
        if policy.mode != UpgradeMode.AUTOMATIC:
            raise ValidationError(
                "A `automatic_os_upgrade_policy` block cannot be specified when `mode` is not set to `Automatic`",
                field="automatic_os_upgrade_policy",
            )

        automatic = automatic_policies[0]
        policy.automatic_os_upgrade_policy = AutomaticOSUpgradePolicy(
            disable_automatic_rollback=automatic["disable_automatic_rollback"],
            enable_automatic_os_upgrade=automatic["enable_automatic_os_upgrade"],
        )

    if rolling_policies:
        if policy.mode != UpgradeMode.ROLLING:
            raise ValidationError(
                "A `rolling_upgrade_policy` block cannot be specified when `mode` is not set to `Rolling`",
                field="rolling_upgrade_policy",
            )

        rolling = rolling_policies[0]
        policy.rolling_upgrade_policy = RollingUpgradePolicy(
            max_batch_instance_percent=rolling["max_batch_instance_percent"],
            max_unhealthy_instance_percent=rolling["max_unhealthy_instance_percent"],
            max_unhealthy_upgraded_instance_percent=rolling["max_unhealthy_upgraded_instance_percent"],
            pause_time_between_batches=rolling["pause_time_between_batches"],
        )

    if policy.mode == UpgradeMode.AUTOMATIC and policy.automatic_os_upgrade_policy is None:
        raise ValidationError(
            "A `automatic_os_upgrade_policy` block must be specified when `mode` is set to `Automatic`",
            field="automatic_os_upgrade_policy",
        )

    if policy.mode == UpgradeMode.ROLLING and policy.rolling_upgrade_policy is None:
        raise ValidationError(
            "A `rolling_upgrade_policy` block must be specified when `mode` is set to `Rolling`",
            field="rolling_upgrade_policy",
        )

    return policy


def flatten_upgrade_policy(policy: Optional[UpgradePolicy]) -> List[Dict[str, Any]]:
    if policy is None:
        return []

    automatic_output = []
    automatic = policy.automatic_os_upgrade_policy
    if automatic is not None:
        automatic_output.append(
            {
                "disable_automatic_rollback": bool(automatic.disable_automatic_rollback),
                "enable_automatic_os_upgrade": bool(automatic.enable_automatic_os_upgrade),
            }
        )

    # a sub-policy the API didn't return stays an empty list
    rolling_output = []
    rolling = policy.rolling_upgrade_policy
    if rolling is not None:
        rolling_output.append(
            {
                "max_batch_instance_percent": rolling.max_batch_instance_percent or 0,
                "max_unhealthy_instance_percent": rolling.max_unhealthy_instance_percent or 0,
                "max_unhealthy_upgraded_instance_percent": rolling.max_unhealthy_upgraded_instance_percent or 0,
                "pause_time_between_batches": rolling.pause_time_between_batches or "",
            }
        )

    return [
        {
            "mode": literal(policy.mode),
            "automatic_os_upgrade_policy": automatic_output,
            "rolling_upgrade_policy": rolling_output,
        }
    ]


# Whole resource

class ScaleSetBlock(Block):
    name: str = Field(min_length=1, strict=True)
    resource_group_name: str = Field(min_length=1, strict=True)
    location: str = Field("", strict=True)
    sku: str = Field(min_length=1, strict=True)
    instances: int = Field(0, ge=0, le=1000, strict=True)
    os_type: Literal["Linux", "Windows"] = "Linux"
    source_image_id: str = Field("", strict=True)
    source_image_reference: List[SourceImageReferenceBlock] = Field(default_factory=list, max_length=1)
    os_disk: List[OSDiskBlock] = Field(min_length=1, max_length=1)
    upgrade_policy: List[UpgradePolicyBlock] = Field(min_length=1, max_length=1)
    additional_capabilities: List[AdditionalCapabilitiesBlock] = Field(default_factory=list, max_length=1)
    tags: Dict[str, str] = Field(default_factory=dict)
    # passed through to the Pulumi resource
    args: Dict[str, Any] = Field(default_factory=dict)
    existing_id: str = Field("", strict=True)

    @model_validator(mode="after")
    def _one_image_source(self) -> "ScaleSetBlock":
        if self.source_image_id and self.source_image_reference:
            raise ValueError("`source_image_id`: conflicts with `source_image_reference`")
        return self


class ScaleSetRequest(BaseModel):
    """Desired state of one scale set, ready to be handed to the provider."""

    name: str
    resource_group_name: str
    location: Optional[str] = None
    sku: Sku
    os_disk: VirtualMachineScaleSetOSDisk
    upgrade_policy: UpgradePolicy
    additional_capabilities: AdditionalCapabilities
    image_reference: Optional[ImageReference] = None
    tags: Dict[str, str] = Field(default_factory=dict)

    def to_args(self) -> Dict[str, Any]:
        storage_profile = {"os_disk": self.os_disk.to_args()}
        if self.image_reference is not None:
            storage_profile["image_reference"] = self.image_reference.to_args()

        args = {
            "resource_group_name": self.resource_group_name,
            "vm_scale_set_name": self.name,
            "sku": self.sku.to_args(),
            "upgrade_policy": self.upgrade_policy.to_args(),
            "additional_capabilities": self.additional_capabilities.to_args(),
            "virtual_machine_profile": {"storage_profile": storage_profile},
        }
        if self.location:
            args["location"] = self.location
        if self.tags:
            args["tags"] = dict(self.tags)
        return args


def expand_virtual_machine_scale_set(raw: Dict[str, Any]) -> ScaleSetRequest:
    """Expand a normalised scale set node (see ``ScaleSetBlock``)."""
    image_reference = expand_source_image_reference(raw.get("source_image_reference") or [])
    if image_reference is None:
        image_reference = expand_source_image_id(raw.get("source_image_id") or "")

    return ScaleSetRequest(
        name=raw["name"],
        resource_group_name=raw["resource_group_name"],
        location=raw.get("location") or None,
        sku=Sku(name=raw["sku"], capacity=raw.get("instances") or 0),
        os_disk=expand_os_disk(raw["os_disk"], OperatingSystemTypes(raw.get("os_type") or "Linux")),
        upgrade_policy=expand_upgrade_policy(raw["upgrade_policy"]),
        additional_capabilities=expand_additional_capabilities(raw.get("additional_capabilities") or []),
        image_reference=image_reference,
        tags=dict(raw.get("tags") or {}),
    )


def flatten_virtual_machine_scale_set(response: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten an ARM JSON scale set (e.g. ``az vmss show`` output) into configuration."""
    scale_set_id = parse_virtual_machine_scale_set_id(response["id"])
    properties = response.get("properties") or {}
    storage_profile = (properties.get("virtualMachineProfile") or {}).get("storageProfile") or {}

    sku = Sku.from_wire(response.get("sku")) or Sku()
    os_disk = VirtualMachineScaleSetOSDisk.from_wire(storage_profile.get("osDisk"))
    image_reference = ImageReference.from_wire(storage_profile.get("imageReference"))

    return {
        "name": scale_set_id.name,
        "resource_group_name": scale_set_id.base.resource_group,
        "location": response.get("location") or "",
        "sku": sku.name or "",
        "instances": sku.capacity or 0,
        "os_type": literal(os_disk.os_type) if os_disk is not None else "",
        "source_image_id": flatten_source_image_id(image_reference),
        "source_image_reference": flatten_source_image_reference(image_reference),
        "os_disk": flatten_os_disk(os_disk),
        "upgrade_policy": flatten_upgrade_policy(UpgradePolicy.from_wire(properties.get("upgradePolicy"))),
        "additional_capabilities": flatten_additional_capabilities(
            AdditionalCapabilities.from_wire(properties.get("additionalCapabilities"))
        ),
        "tags": dict(response.get("tags") or {}),
    }
