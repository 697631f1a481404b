# naming.py
from typing import Dict

from config import Parameters

# Storage account names only allow lowercase letters and digits, so "st" has no hyphen.
RESOURCE_NAME_PREFIXES = {
    "appServiceAppName": "app-",
    "appServicePlanName": "asp-",
    "applicationInsightsName": "appi-",
    "storageAccountName": "st",
    "sqlServerName": "sql-",
    "sqlDatabaseName": "db-",
}

IMAGES_BLOB_CONTAINER_NAME = "toyimages"
FIREWALL_RULE_NAME = "AllowAllWindowsAzureIps"


def name_suffix(params: Parameters) -> str:
    suffix = f"{params.customer_prefix}{params.workload}{params.environment}{params.instance}"
    if params.component_function:
        suffix += params.component_function
    return suffix


def derive_names(params: Parameters) -> Dict[str, str]:
    """Return the Azure resource names for every named resource in the template.

    Names are concatenations of a fixed per-type prefix, the customer prefix,
    workload, environment and instance, with the component function appended
    only when it is non-empty. Callers must validate ``params`` first.
    """
    suffix = name_suffix(params)
    names = {key: f"{prefix}{suffix}" for key, prefix in RESOURCE_NAME_PREFIXES.items()}
    names["storageAccountName"] = names["storageAccountName"].lower()
    names["storageAccountImagesBlobContainerName"] = IMAGES_BLOB_CONTAINER_NAME
    names["sqlServerFirewallRuleName"] = FIREWALL_RULE_NAME
    return names


def generate_resource_name(params: Parameters, base_name: str) -> str:
    """Pulumi logical name for a graph node, unique per stack."""
    return f"{params.customer_prefix}{params.workload}-{params.environment}{params.instance}-{base_name}".lower()
