# compute.py
"""
Request and response objects of the Azure compute API used by scale sets.

Every scalar is ``Optional`` and defaults to ``None`` so that "not set" stays
distinguishable from ``0``/``False``/``""`` until a value is flattened back
into configuration. Field aliases are the ARM JSON property names; the field
names double as the ``pulumi_azure_native`` argument names.

Enum fields accept literals outside the members below as plain strings, the
API adds values (``Premium_ZRS``, ``Copy``, ...) faster than we track them.
"""

from enum import Enum
from typing import Annotated, Any, Dict, Optional, Type, TypeVar, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

M = TypeVar("M", bound="AzureModel")


class _CaseInsensitiveEnum(str, Enum):
    """Azure is not consistent about casing enum values in responses."""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.lower():
                    return member
        return None


class CachingTypes(_CaseInsensitiveEnum):
    NONE = "None"
    READ_ONLY = "ReadOnly"
    READ_WRITE = "ReadWrite"


class StorageAccountTypes(_CaseInsensitiveEnum):
    PREMIUM_LRS = "Premium_LRS"
    STANDARD_LRS = "Standard_LRS"
    STANDARD_SSD_LRS = "StandardSSD_LRS"
    ULTRA_SSD_LRS = "UltraSSD_LRS"


class DiffDiskOptions(_CaseInsensitiveEnum):
    LOCAL = "Local"


class DiskCreateOptionTypes(_CaseInsensitiveEnum):
    FROM_IMAGE = "FromImage"
    EMPTY = "Empty"
    ATTACH = "Attach"


class OperatingSystemTypes(_CaseInsensitiveEnum):
    LINUX = "Linux"
    WINDOWS = "Windows"


class UpgradeMode(_CaseInsensitiveEnum):
    AUTOMATIC = "Automatic"
    MANUAL = "Manual"
    ROLLING = "Rolling"


def _known_member(enum: Type[Enum]):
    def coerce(value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, Enum):
            try:
                return enum(value)
            except ValueError:
                return value
        return value

    return coerce


def wire_enum(enum: Type[Enum]) -> Any:
    """A field type holding a member of ``enum``, or the raw literal when it isn't one."""
    return Annotated[Union[enum, str], BeforeValidator(_known_member(enum))]


CachingValue = wire_enum(CachingTypes)
StorageAccountValue = wire_enum(StorageAccountTypes)
DiffDiskOptionValue = wire_enum(DiffDiskOptions)
DiskCreateOptionValue = wire_enum(DiskCreateOptionTypes)
OperatingSystemValue = wire_enum(OperatingSystemTypes)
UpgradeModeValue = wire_enum(UpgradeMode)


def literal(value: Any) -> str:
    """The wire literal of an enum field, ``""`` when unset."""
    if value is None:
        return ""
    return getattr(value, "value", value)


class AzureModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_wire(cls: Type[M], data: Optional[Dict[str, Any]]) -> Optional[M]:
        """Build from an ARM JSON object. ``None`` stays ``None``."""
        if data is None:
            return None
        return cls.model_validate(data)

    def to_wire(self) -> Dict[str, Any]:
        """Serialize to ARM JSON, dropping unset properties."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_args(self) -> Dict[str, Any]:
        """Serialize to the snake_case dictionaries pulumi_azure_native accepts as input types."""
        return self.model_dump(mode="json", exclude_none=True)


class AdditionalCapabilities(AzureModel):
    ultra_ssd_enabled: Optional[bool] = Field(None, alias="ultraSSDEnabled")


class DiffDiskSettings(AzureModel):
    option: Optional[DiffDiskOptionValue] = Field(None, alias="option")


class VirtualMachineScaleSetManagedDiskParameters(AzureModel):
    storage_account_type: Optional[StorageAccountValue] = Field(None, alias="storageAccountType")


class VirtualMachineScaleSetOSDisk(AzureModel):
    caching: Optional[CachingValue] = Field(None, alias="caching")
    create_option: Optional[DiskCreateOptionValue] = Field(None, alias="createOption")
    diff_disk_settings: Optional[DiffDiskSettings] = Field(None, alias="diffDiskSettings")
    disk_size_gb: Optional[int] = Field(None, alias="diskSizeGB")
    managed_disk: Optional[VirtualMachineScaleSetManagedDiskParameters] = Field(None, alias="managedDisk")
    os_type: Optional[OperatingSystemValue] = Field(None, alias="osType")
    write_accelerator_enabled: Optional[bool] = Field(None, alias="writeAcceleratorEnabled")


class ImageReference(AzureModel):
    id: Optional[str] = Field(None, alias="id")
    publisher: Optional[str] = Field(None, alias="publisher")
    offer: Optional[str] = Field(None, alias="offer")
    sku: Optional[str] = Field(None, alias="sku")
    version: Optional[str] = Field(None, alias="version")


class AutomaticOSUpgradePolicy(AzureModel):
    disable_automatic_rollback: Optional[bool] = Field(None, alias="disableAutomaticRollback")
    enable_automatic_os_upgrade: Optional[bool] = Field(None, alias="enableAutomaticOSUpgrade")


class RollingUpgradePolicy(AzureModel):
    max_batch_instance_percent: Optional[int] = Field(None, alias="maxBatchInstancePercent")
    max_unhealthy_instance_percent: Optional[int] = Field(None, alias="maxUnhealthyInstancePercent")
    max_unhealthy_upgraded_instance_percent: Optional[int] = Field(
        None, alias="maxUnhealthyUpgradedInstancePercent"
    )
    pause_time_between_batches: Optional[str] = Field(None, alias="pauseTimeBetweenBatches")


class UpgradePolicy(AzureModel):
    mode: Optional[UpgradeModeValue] = Field(None, alias="mode")
    automatic_os_upgrade_policy: Optional[AutomaticOSUpgradePolicy] = Field(None, alias="automaticOSUpgradePolicy")
    rolling_upgrade_policy: Optional[RollingUpgradePolicy] = Field(None, alias="rollingUpgradePolicy")


class Sku(AzureModel):
    name: Optional[str] = Field(None, alias="name")
    capacity: Optional[int] = Field(None, alias="capacity")
