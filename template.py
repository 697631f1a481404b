# template.py
"""
Template renderer for the toy website topology.

``render`` turns a validated parameter set into a declarative resource graph:
a list of AzureResource definitions whose args reference each other with
``ref:<node>.<attribute>`` strings and reference stack secrets with
``secret:<parameter>`` strings. Nothing here talks to Azure or to the Pulumi
engine; AzureResourceBuilder applies the graph.
"""

from dataclasses import dataclass
from typing import Any, Dict, List

import pulumi

from config import AzureResource, Concat, Parameters
from environments import resolve_skus
from errors import GraphError
from naming import derive_names


@dataclass
class RenderedTemplate:
    names: Dict[str, str]
    skus: Dict[str, Any]
    connection_string: Concat
    resources: List[AzureResource]
    outputs: Dict[str, Any]

    def to_document(self) -> Dict[str, Any]:
        """Plain-data view of the render, safe to print: secrets stay as markers."""
        return {
            "names": dict(self.names),
            "skus": self.skus,
            "resources": [_plain(resource) for resource in self.resources],
            "outputs": _plain(self.outputs),
        }


def _plain(value: Any) -> Any:
    if isinstance(value, Concat):
        return {"concat": _plain(value.parts), "secret": value.secret}
    if isinstance(value, AzureResource):
        return {"name": value.name, "type": value.type, "args": _plain(value.args)}
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def sql_connection_string(params: Parameters, sql_database_name: str) -> Concat:
    return Concat(
        parts=[
            "Data Source=",
            "ref:sqlServer.fully_qualified_domain_name",
            f"; Initial Catalog={sql_database_name}; User Id={params.sql_server_administrator_login}; Password=",
            "secret:sqlServerAdministratorLoginPassword",
            ";",
        ],
        secret=True,
    )


def app_setting(name: str, value: Any) -> Dict[str, Any]:
    return {"name": name, "value": value}


def build_resources(params: Parameters, names: Dict[str, str], skus: Dict[str, Any],
                    connection_string: Concat) -> List[AzureResource]:
    return [
        AzureResource(
            name="resourceGroup",
            type="resources.ResourceGroup",
            args={
                "existing": True,
                "resource_group_name": params.resource_group_name,
            },
        ),
        AzureResource(
            name="appServicePlan",
            type="web.AppServicePlan",
            args={
                "resource_group_name": "ref:resourceGroup.name",
                "name": names["appServicePlanName"],
                "sku": skus["appServicePlan"]["sku"],
            },
        ),
        AzureResource(
            name="appServiceApp",
            type="web.WebApp",
            args={
                "resource_group_name": "ref:resourceGroup.name",
                "name": names["appServiceAppName"],
                "server_farm_id": "ref:appServicePlan.id",
                "https_only": True,
                "identity": {"type": "SystemAssigned"},
                "site_config": {
                    "app_settings": [
                        app_setting("APPINSIGHTS_INSTRUMENTATIONKEY", "ref:applicationInsights.instrumentation_key"),
                        app_setting("APPLICATIONINSIGHTS_CONNECTION_STRING", "ref:applicationInsights.connection_string"),
                        app_setting("ReviewApiUrl", params.review_api_url),
                        app_setting("ReviewApiKey", "secret:reviewApiKey"),
                        app_setting("StorageAccountName", "ref:storageAccount.name"),
                        app_setting("StorageAccountBlobEndpoint", "ref:storageAccount.primary_endpoints.blob"),
                        app_setting("StorageAccountImagesContainerName", names["storageAccountImagesBlobContainerName"]),
                        app_setting("SqlServerConnectionString", connection_string),
                    ],
                },
            },
        ),
        AzureResource(
            name="applicationInsights",
            type="applicationinsights.Component",
            args={
                "resource_group_name": "ref:resourceGroup.name",
                "resource_name_": names["applicationInsightsName"],
                "kind": "web",
                "application_type": "web",
                "request_source": "rest",
            },
        ),
        AzureResource(
            name="storageAccount",
            type="storage.StorageAccount",
            args={
                "resource_group_name": "ref:resourceGroup.name",
                "account_name": names["storageAccountName"],
                "kind": "StorageV2",
                "sku": skus["storageAccount"]["sku"],
                "access_tier": "Hot",
                "minimum_tls_version": "TLS1_2",
                "enable_https_traffic_only": True,
            },
        ),
        AzureResource(
            name="storageAccountImagesBlobContainer",
            type="storage.BlobContainer",
            args={
                "resource_group_name": "ref:resourceGroup.name",
                "account_name": "ref:storageAccount.name",
                "container_name": names["storageAccountImagesBlobContainerName"],
                "public_access": "None",
            },
        ),
        AzureResource(
            name="sqlServer",
            type="sql.Server",
            args={
                "resource_group_name": "ref:resourceGroup.name",
                "server_name": names["sqlServerName"],
                "administrator_login": params.sql_server_administrator_login,
                "administrator_login_password": "secret:sqlServerAdministratorLoginPassword",
                "version": "12.0",
                "minimal_tls_version": "1.2",
            },
        ),
        AzureResource(
            name="sqlServerFirewallRuleAllowAzureIps",
            type="sql.FirewallRule",
            args={
                "resource_group_name": "ref:resourceGroup.name",
                "server_name": "ref:sqlServer.name",
                "firewall_rule_name": names["sqlServerFirewallRuleName"],
                "start_ip_address": "0.0.0.0",
                "end_ip_address": "0.0.0.0",
            },
        ),
        AzureResource(
            name="sqlDatabase",
            type="sql.Database",
            args={
                "resource_group_name": "ref:resourceGroup.name",
                "server_name": "ref:sqlServer.name",
                "database_name": names["sqlDatabaseName"],
                "sku": skus["sqlDatabase"]["sku"],
            },
        ),
    ]


def order_resources(resources: List[AzureResource]) -> List[AzureResource]:
    """Order definitions so each one follows everything it references.

    Among definitions that are ready at the same time, declaration order is
    kept, so the result is deterministic.
    """
    by_name = {}
    for resource in resources:
        if resource.name in by_name:
            raise GraphError(f"Duplicate resource name '{resource.name}'")
        by_name[resource.name] = resource

    pending = {}
    for resource in resources:
        refs = resource.references()
        for ref in refs:
            if ref not in by_name:
                raise GraphError(f"Resource '{resource.name}' references unknown resource '{ref}'")
        pending[resource.name] = set(refs)

    ordered: List[AzureResource] = []
    done = set()
    while pending:
        ready = next((name for name, deps in pending.items() if deps <= done), None)
        if ready is None:
            raise GraphError(f"Dependency cycle between resources: {', '.join(sorted(pending))}")
        ordered.append(by_name[ready])
        done.add(ready)
        del pending[ready]
    return ordered


def render(params: Parameters) -> RenderedTemplate:
    """Render the parameter set into names, SKUs, an ordered graph and outputs.

    Raises ParameterValidationError or EnvironmentLookupError before any
    resource definition is produced.
    """
    params.validate()
    skus = resolve_skus(params.environment, params.environment_classes)
    names = derive_names(params)
    connection_string = sql_connection_string(params, names["sqlDatabaseName"])

    resources = order_resources(build_resources(params, names, skus, connection_string))

    outputs = {
        "appServiceAppName": names["appServiceAppName"],
        "appServiceAppHostName": "ref:appServiceApp.default_host_name",
        "storageAccountName": names["storageAccountName"],
        "storageAccountImagesBlobContainerName": names["storageAccountImagesBlobContainerName"],
        "sqlServerFullyQualifiedDomainName": "ref:sqlServer.fully_qualified_domain_name",
        "sqlDatabaseName": names["sqlDatabaseName"],
    }

    pulumi.log.info(
        f"Rendered {len(resources)} resources for '{names['appServiceAppName']}' ({params.environment})"
    )
    return RenderedTemplate(
        names=names,
        skus=skus,
        connection_string=connection_string,
        resources=resources,
        outputs=outputs,
    )
