# azure_ids.py
"""
Parsing for Azure Resource Manager IDs of the form

    /subscriptions/{id}/resourceGroups/{name}/providers/{namespace}/{type}/{name}/...

Every key/value pair after the resource group and provider namespace ends up
in ``ResourceID.path`` so callers can pick out the segment they care about.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional
from urllib.parse import urlparse

from errors import ParseError


@dataclass
class ResourceID:
    subscription_id: str
    resource_group: str
    provider: Optional[str] = None
    path: Dict[str, str] = field(default_factory=dict)


def parse_azure_resource_id(resource_id: str) -> ResourceID:
    parsed = urlparse(resource_id)
    if parsed.scheme or parsed.netloc or not parsed.path.startswith("/"):
        raise ParseError(f"Cannot parse Azure ID: {resource_id!r} is not an absolute path", resource_id=resource_id)

    path = parsed.path.strip("/")
    components = path.split("/")

    if len(components) % 2 != 0:
        raise ParseError(f"The number of path segments is not divisible by 2 in {path!r}", resource_id=resource_id)

    subscription_id = ""
    provider = ""
    segments: Dict[str, str] = {}
    for key, value in zip(components[::2], components[1::2]):
        if not key or not value:
            raise ParseError(
                f"Key/Value cannot be empty strings. Key: {key!r}, Value: {value!r}", resource_id=resource_id
            )

        # the first occurrence wins, nested resources (e.g. Service Bus
        # subscriptions) may repeat these keys further down the path
        if key == "subscriptions" and not subscription_id:
            subscription_id = value
        elif key == "providers" and not provider:
            provider = value
        else:
            segments[key] = value

    if not subscription_id:
        raise ParseError(f"No subscription ID found in: {path!r}", resource_id=resource_id, segment="subscriptions")

    # some Azure APIs return the resource group key in lower case
    resource_group = segments.pop("resourceGroups", None) or segments.pop("resourcegroups", None)
    if resource_group is None:
        raise ParseError(f"No resource group name found in: {path!r}", resource_id=resource_id, segment="resourceGroups")

    return ResourceID(
        subscription_id=subscription_id,
        resource_group=resource_group,
        provider=provider or None,
        path=segments,
    )
