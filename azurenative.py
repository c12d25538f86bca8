import copy
from typing import Any, Dict

import pulumi
import pulumi_azure_native as azure_native

from config import Config, ScaleSetConfig
from schema import normalize_block
from scaleset import (
    ScaleSetBlock,
    ScaleSetRequest,
    expand_virtual_machine_scale_set,
    parse_virtual_machine_scale_set_id,
)

AZURE_LOCATION_ABBREVIATIONS = {
    "eastus": "eus",
    "eastus2": "eus2",
    "westus": "wus",
    "westus2": "wus2",
    "westus3": "wus3",
    "centralus": "cus",
    "northeurope": "ne",
    "westeurope": "we",
    "uksouth": "uks",
    "ukwest": "ukw",
    "germanywestcentral": "gwc",
    "swedencentral": "swc",
    "australiaeast": "aue",
    "japaneast": "jpe",
    "southeastasia": "sea",
}


def merge_args(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``overrides`` into a copy of ``base``; overrides win."""
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_args(merged[key], value)
        else:
            merged[key] = value
    return merged


class ScaleSetBuilder:
    def __init__(self, config: Config):
        self.config = config
        self.resources = {}

    def get_abbreviation(self, location: str) -> str:
        # If the location is recognized, use abbreviation; else fallback to first 3 letters
        return AZURE_LOCATION_ABBREVIATIONS.get(location.lower(), location[:3].lower())

    def generate_resource_name(self, base_name: str, location: str) -> str:
        team = self.config.team.lower()
        service = self.config.service.lower()
        env = self.config.environment.lower()
        loc_abbr = self.get_abbreviation(location)
        return f"{team}-{service}-{env}-{loc_abbr}-{base_name}".lower()

    def expand(self, scale_set: ScaleSetConfig) -> ScaleSetRequest:
        """Validate one scale set entry and expand it, filling in program-wide defaults."""
        raw = normalize_block(ScaleSetBlock, scale_set.settings, path=f"scale_sets.{scale_set.name}")
        if not raw["location"]:
            raw["location"] = self.config.location
        if not raw["tags"]:
            raw["tags"] = dict(self.config.tags)
        return expand_virtual_machine_scale_set(raw)

    def resource_args(self, scale_set: ScaleSetConfig, request: ScaleSetRequest) -> Dict[str, Any]:
        extra_args = scale_set.settings.get("args") or {}
        args = merge_args(extra_args, request.to_args())
        args["vm_scale_set_name"] = self.generate_resource_name(request.name, request.location or self.config.location)
        return args

    def lookup_existing(self, scale_set: ScaleSetConfig, existing_id: str) -> bool:
        scale_set_id = parse_virtual_machine_scale_set_id(existing_id)
        try:
            existing = azure_native.compute.get_virtual_machine_scale_set(
                resource_group_name=scale_set_id.base.resource_group,
                vm_scale_set_name=scale_set_id.name,
            )
        except Exception as e:
            pulumi.log.warn(
                f"Failed to retrieve existing scale set '{scale_set.name}': {e}. Proceeding with creation."
            )
            return False

        self.resources[scale_set.name] = existing
        pulumi.log.info(f"Fetched existing scale set '{scale_set.name}' ({scale_set_id.id})")
        return True

    def build(self):
        # validate everything before registering anything with the engine
        requests = [(scale_set, self.expand(scale_set)) for scale_set in self.config.scale_sets]

        for scale_set, request in requests:
            existing_id = scale_set.settings.get("existing_id")
            if existing_id and self.lookup_existing(scale_set, existing_id):
                continue

            args = self.resource_args(scale_set, request)
            pulumi_name = args["vm_scale_set_name"]

            pulumi.log.info(f"DEBUG for '{scale_set.name}': final resolved_args => {args}")

            resource_instance = azure_native.compute.VirtualMachineScaleSet(pulumi_name, **args)
            self.resources[scale_set.name] = resource_instance
            pulumi.log.info(f"Created scale set: {pulumi_name}")
