"""Builder tests against the Pulumi mock engine installed in conftest.py."""

import pulumi
import pytest

import pulumi_azure_native as azure_native

from azurenative import AzureResourceBuilder, constructor_parameters, to_snake_case
from config import AzureResource
from errors import GraphError
from template import render


def build(params):
    rendered = render(params)
    builder = AzureResourceBuilder(params, rendered.resources)
    builder.build()
    return builder, rendered


def test_to_snake_case():
    assert to_snake_case("AppServicePlan") == "app_service_plan"
    assert to_snake_case("ResourceGroup") == "resource_group"


def test_constructor_parameters_reads_generated_signature():
    accepted = constructor_parameters(azure_native.storage.StorageAccount)
    assert "location" in accepted
    assert "tags" in accepted
    assert "location" not in constructor_parameters(azure_native.storage.BlobContainer)


def test_application_insights_class_exists():
    accepted = constructor_parameters(azure_native.applicationinsights.Component)
    assert "resource_name_" in accepted
    assert "application_type" in accepted


@pulumi.runtime.test
def test_builds_every_node(params):
    builder, rendered = build(params)
    assert set(builder.resources) == {resource.name for resource in rendered.resources}
    assert isinstance(builder.resources["applicationInsights"], azure_native.applicationinsights.Component)
    assert isinstance(builder.resources["sqlDatabase"], azure_native.sql.Database)


@pulumi.runtime.test
def test_resource_group_is_looked_up_not_created(params):
    builder, _ = build(params)
    group = builder.resources["resourceGroup"]
    assert not isinstance(group, pulumi.CustomResource)
    assert group.name == "rg-toy-website"
    assert builder.resolve_value("ref:resourceGroup.name") == "rg-toy-website"


@pulumi.runtime.test
def test_outputs_resolve_against_built_resources(params):
    builder, rendered = build(params)
    outputs = builder.resolve_outputs(rendered.outputs)

    def check(values):
        host_name, fqdn, app_name = values
        assert host_name == "app-acmetoyprod01.azurewebsites.net"
        assert fqdn == "sql-acmetoyprod01.database.windows.net"
        assert app_name == "app-acmetoyprod01"

    return pulumi.Output.all(
        outputs["appServiceAppHostName"],
        outputs["sqlServerFullyQualifiedDomainName"],
        outputs["appServiceAppName"],
    ).apply(check)


@pulumi.runtime.test
def test_connection_string_is_assembled_at_deploy_time(params):
    builder, rendered = build(params)
    connection_string = builder.resolve_value(rendered.connection_string)

    def check(value):
        assert value == (
            "Data Source=sql-acmetoyprod01.database.windows.net; Initial Catalog=db-acmetoyprod01; "
            "User Id=toyadmin; Password=P@ssw0rd!;"
        )

    return connection_string.apply(check)


@pulumi.runtime.test
def test_location_and_tags_injected(params):
    builder, _ = build(params)
    account = builder.resources["storageAccount"]

    def check(values):
        location, tags = values
        assert location == "westus3"
        assert tags == {"workload": "toy"}

    return pulumi.Output.all(account.location, account.tags).apply(check)


@pulumi.runtime.test
def test_blob_endpoint_reference_walks_nested_attributes(params):
    builder, _ = build(params)
    endpoint = builder.resolve_value("ref:storageAccount.primary_endpoints.blob")

    def check(value):
        assert value == "https://stacmetoyprod01.blob.core.windows.net/"

    return endpoint.apply(check)


def test_unknown_reference(params):
    builder = AzureResourceBuilder(params, [])
    with pytest.raises(ValueError, match="Referenced resource 'sqlServer' not found"):
        builder.resolve_value("ref:sqlServer.fully_qualified_domain_name")


def test_missing_secret(params):
    builder = AzureResourceBuilder(params, [], secrets={})
    with pytest.raises(ValueError, match="Secret 'reviewApiKey' was not supplied"):
        builder.resolve_value("secret:reviewApiKey")


def test_unknown_module_fails_the_build(params):
    builder = AzureResourceBuilder(
        params, [AzureResource(name="thing", type="nosuchmodule.Thing", args={})]
    )
    with pytest.raises(GraphError, match="Azure module 'nosuchmodule' not found"):
        builder.build()
    assert builder.resources == {}


def test_unknown_class_fails_the_build(params):
    builder = AzureResourceBuilder(
        params, [AzureResource(name="thing", type="sql.NoSuchThing", args={})]
    )
    with pytest.raises(GraphError, match="'NoSuchThing' not found in module 'sql'"):
        builder.build()


def test_get_existing_uses_lookup_function(params):
    calls = []

    class FakeModule:
        @staticmethod
        def get_web_app(name, resource_group_name, opts=None):
            calls.append((name, resource_group_name))
            return {"name": name}

    builder = AzureResourceBuilder(params, [])
    found = builder.get_existing(
        FakeModule, "WebApp", "appServiceApp",
        {"name": "app-acmetoyprod01", "resource_group_name": "rg-toy-website", "https_only": True},
    )
    assert found == {"name": "app-acmetoyprod01"}
    assert calls == [("app-acmetoyprod01", "rg-toy-website")]


def test_get_existing_with_missing_params(params):
    class FakeModule:
        @staticmethod
        def get_web_app(name, resource_group_name, opts=None):
            raise AssertionError("should not be called")

    builder = AzureResourceBuilder(params, [])
    with pytest.raises(GraphError, match="resource_group_name"):
        builder.get_existing(FakeModule, "WebApp", "appServiceApp", {"name": "x"})


def test_get_existing_without_lookup_function(params):
    class FakeModule:
        pass

    builder = AzureResourceBuilder(params, [])
    with pytest.raises(GraphError, match="get_web_app"):
        builder.get_existing(FakeModule, "WebApp", "appServiceApp", {"name": "x"})
