"""
Service credential resolution.

Finds the credentials for a service in the service catalog (VCAP_SERVICES),
individual environment entries, local starter config files and request
bind parameters, matching names loosely across naming conventions.
"""

from vcap_services.bind import get_credentials_from_service_bind as extract_from_bind
from vcap_services.catalog import find_in_catalog, instance_matches, resolve_from_catalog
from vcap_services.local_config import load_local_config
from vcap_services.matcher import is_environment_style, resolve_from_flat_source, select_key
from vcap_services.models import (
    CredentialFilter,
    ExactName,
    Instance,
    NamePattern,
    PatternName,
    Resolution,
    ServiceCatalog,
    as_name_pattern,
    is_absent_name,
    with_iam_apikey,
)
from vcap_services.normalizer import normalize_name, normalize_with_steps
from vcap_services.resolver import (
    CredentialResolver,
    find_credentials,
    get_credentials,
    get_credentials_for_starter,
    get_credentials_from_local_config,
    get_credentials_from_service_bind,
)
from vcap_services.sources import EnvironmentSnapshot, parse_catalog, parse_json_object

__all__ = [
    # Public API
    "get_credentials",
    "find_credentials",
    "get_credentials_for_starter",
    "get_credentials_from_local_config",
    "get_credentials_from_service_bind",
    "CredentialResolver",
    # Models
    "Instance",
    "ServiceCatalog",
    "ExactName",
    "PatternName",
    "NamePattern",
    "CredentialFilter",
    "Resolution",
    "as_name_pattern",
    "is_absent_name",
    "with_iam_apikey",
    # Normalizer
    "normalize_name",
    "normalize_with_steps",
    # Resolvers
    "resolve_from_catalog",
    "find_in_catalog",
    "instance_matches",
    "resolve_from_flat_source",
    "select_key",
    "is_environment_style",
    "extract_from_bind",
    # Sources
    "EnvironmentSnapshot",
    "parse_catalog",
    "parse_json_object",
    "load_local_config",
]
