"""
Destination selector parsing.

A destination has the form ``[@organization/]name@version``.
"""

import re
from typing import Optional, Tuple

from .exceptions import InvalidDestination
from .models import DEFAULT_VERSION, Destination


DESTINATION_REGEX = re.compile(
    r"(@(?P<organization_id>[\w\-\s]+)/)?(?P<name>[^@]*)@(?P<version>[\w.\-]+)"
)


def parse_destination(destination: str) -> Destination:
    """Parse a destination string, raising InvalidDestination when it does not match"""
    match = DESTINATION_REGEX.fullmatch(destination or "")
    if not match or not match.group("name"):
        raise InvalidDestination(destination)

    return Destination(
        name=match.group("name"),
        version=match.group("version"),
        organization_id=match.group("organization_id"),
    )


def split_api_key(api_key: str) -> Tuple[str, str]:
    """Split a ``name@version`` map key; the version defaults to ``latest``"""
    name, _, version = api_key.partition("@")
    return name, version or DEFAULT_VERSION


def get_destination_props(destination: Optional[str], organization: Optional[str]) -> Destination:
    """Destination with the organization falling back to the configured one.

    Without a destination only the organization is known; name and version
    are left empty.
    """
    if not destination:
        return Destination(name="", version="", organization_id=organization)

    parsed = parse_destination(destination)
    if not parsed.organization_id:
        parsed.organization_id = organization
    return parsed
