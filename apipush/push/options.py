"""
Push options and API map resolution.

Turns the parsed arguments and the loaded configuration into the API map
and invocation flags a batch run works with. Every check here runs before
any network activity and raises on the first problem found.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from apipush.core.config_manager import RegistryConfig

from .destination import get_destination_props, split_api_key
from .exceptions import (
    ApiNotFound,
    EmptyApiSet,
    MissingDestinationForExplicitApi,
    MissingOrganization
)
from .models import DEFAULT_VERSION, BatchJob, UploadOptions


@dataclass
class PushOptions:
    """Arguments of one push invocation"""
    destination: Optional[str] = None
    branch_name: Optional[str] = None
    upsert: bool = False
    organization: Optional[str] = None
    api: Optional[str] = None
    job_id: Optional[str] = None
    batch_size: Optional[int] = None
    skip_decorator: List[str] = field(default_factory=list)
    public: bool = False

    @classmethod
    def from_argv(cls, argv: Optional[dict]) -> "PushOptions":
        """Build options from an action argv payload (kebab-case keys)"""
        argv = argv or {}
        skip_decorator = argv.get("skip-decorator") or []
        if isinstance(skip_decorator, str):
            skip_decorator = [skip_decorator]

        batch_size = argv.get("batch-size")
        if isinstance(batch_size, str) and batch_size.strip().isdigit():
            batch_size = int(batch_size)

        return cls(
            destination=argv.get("destination"),
            branch_name=argv.get("branchName") or argv.get("branch"),
            upsert=bool(argv.get("upsert", False)),
            organization=argv.get("organization"),
            api=argv.get("api"),
            job_id=argv.get("job-id"),
            batch_size=batch_size,
            skip_decorator=list(skip_decorator),
            public=bool(argv.get("public", False)),
        )


@dataclass
class PushPlan:
    """Validated input for a batch run"""
    organization_id: str
    apis: Dict[str, Dict]
    options: UploadOptions
    api: Optional[str] = None


def get_api_root(name: str, version: str, config: RegistryConfig) -> Optional[str]:
    """Root document of name@version; bare name entries match ``latest``"""
    api = config.apis.get(f"{name}@{version}")
    if not api and version == DEFAULT_VERSION:
        api = config.apis.get(name)
    return (api or {}).get("root")


def resolve_push_plan(options: PushOptions, config: RegistryConfig) -> PushPlan:
    """Validate options against the configuration and build the API map"""
    destination = get_destination_props(options.destination, config.organization)

    organization_id = options.organization or destination.organization_id
    if not organization_id:
        raise MissingOrganization()

    name, version = destination.name, destination.version
    api = options.api or (name and version and get_api_root(name, version, config)) or None

    if name and version and not api:
        raise ApiNotFound(name, version)

    if not name and api:
        raise MissingDestinationForExplicitApi()

    batch_job = BatchJob(job_id=options.job_id, batch_size=options.batch_size)
    batch_job.validate()

    if options.api:
        # Paths given on the command line are relative to the working directory
        apis = {f"{name}@{version}": {"root": os.path.abspath(options.api)}}
    elif api:
        apis = {f"{name}@{version}": {"root": api}}
    else:
        apis = dict(config.apis)

    if not apis:
        raise EmptyApiSet()

    for api_key, entry in apis.items():
        if not isinstance(entry, dict) or not entry.get("root"):
            raise ApiNotFound(*split_api_key(api_key))

    return PushPlan(
        organization_id=organization_id,
        apis=apis,
        options=UploadOptions(
            organization_id=organization_id,
            branch=options.branch_name,
            upsert=options.upsert,
            public=options.public,
            batch_job=batch_job,
        ),
        api=api,
    )
