# environments.py
"""
SKU selections per environment class.

The table is keyed by environment class ("Production", "Test") while the
``environment`` parameter holds an environment name ("wip", "test", "qa",
"prod"). The two are joined only through an explicit class mapping: names
without a mapping fail the render instead of being guessed.
"""

import copy
from typing import Any, Dict, Optional

import pulumi

from errors import EnvironmentLookupError

ENVIRONMENT_CONFIGURATION_MAP: Dict[str, Dict[str, Any]] = {
    "Production": {
        "appServicePlan": {"sku": {"name": "S1", "capacity": 1}},
        "storageAccount": {"sku": {"name": "Standard_ZRS"}},
        "sqlDatabase": {"sku": {"name": "S1", "tier": "Standard"}},
    },
    "Test": {
        "appServicePlan": {"sku": {"name": "F1", "capacity": 1}},
        "storageAccount": {"sku": {"name": "Standard_GRS"}},
        "sqlDatabase": {"sku": {"name": "Basic"}},
    },
}

DEFAULT_ENVIRONMENT_CLASSES = {
    "prod": "Production",
    "test": "Test",
}


def environment_class(environment: str, classes: Optional[Dict[str, str]] = None) -> str:
    mapping = dict(DEFAULT_ENVIRONMENT_CLASSES)
    if classes:
        mapping.update(classes)

    if environment not in mapping:
        raise EnvironmentLookupError(
            environment,
            f"No SKU class is mapped for environment '{environment}'. "
            f"Known mappings: {mapping}. Add it under 'environmentClasses' "
            f"with one of {sorted(ENVIRONMENT_CONFIGURATION_MAP)}.",
        )
    return mapping[environment]


def resolve_skus(environment: str, classes: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Return the SKU selections (plan, storage, database) for ``environment``."""
    env_class = environment_class(environment, classes)
    if env_class not in ENVIRONMENT_CONFIGURATION_MAP:
        raise EnvironmentLookupError(
            environment,
            f"Environment '{environment}' maps to '{env_class}', which is not in the SKU table "
            f"({', '.join(sorted(ENVIRONMENT_CONFIGURATION_MAP))}).",
        )
    pulumi.log.debug(f"Environment '{environment}' resolved to SKU class '{env_class}'")
    return copy.deepcopy(ENVIRONMENT_CONFIGURATION_MAP[env_class])
