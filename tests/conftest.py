"""Pytest configuration and fixtures for the template tests.

The program is a flat set of top-level modules, so the project root is put on
the path for runs that do not use an editable install. Pulumi mocks are
installed here, before any test module declares resources.
"""
import sys
from pathlib import Path

import pulumi
import pytest

PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


class AzureMocks(pulumi.runtime.Mocks):
    """Echo inputs back as outputs and fill in the computed properties the template references."""

    def new_resource(self, args: pulumi.runtime.MockResourceArgs):
        outputs = dict(args.inputs)
        if args.typ == "azure-native:sql:Server":
            outputs["name"] = args.inputs.get("serverName")
            outputs["fullyQualifiedDomainName"] = f"{args.inputs.get('serverName')}.database.windows.net"
        elif args.typ == "azure-native:web:WebApp":
            outputs["defaultHostName"] = f"{args.inputs.get('name')}.azurewebsites.net"
        elif args.typ == "azure-native:applicationinsights:Component":
            outputs["instrumentationKey"] = "00000000-0000-0000-0000-000000000000"
            outputs["connectionString"] = "InstrumentationKey=00000000-0000-0000-0000-000000000000"
        elif args.typ == "azure-native:storage:StorageAccount":
            account = args.inputs.get("accountName")
            outputs["name"] = account
            outputs["primaryEndpoints"] = {"blob": f"https://{account}.blob.core.windows.net/"}
        return [args.name + "_id", outputs]

    def call(self, args: pulumi.runtime.MockCallArgs):
        # The resource group already exists.
        if args.token == "azure-native:resources:getResourceGroup":
            name = args.args.get("resourceGroupName")
            return {
                "id": f"/subscriptions/00000000/resourceGroups/{name}",
                "name": name,
                "location": "westus3",
                "type": "Microsoft.Resources/resourceGroups",
            }
        return {}


pulumi.runtime.set_mocks(AzureMocks(), preview=False)

from config import Parameters  # noqa: E402


@pytest.fixture
def config_data():
    """Parameter file contents for a production deployment."""
    return {
        "location": "westus3",
        "resourceGroupName": "rg-toy-website",
        "environment": "prod",
        "customerPrefix": "acme",
        "workload": "toy",
        "instance": "01",
        "componentFunction": "",
        "reviewApiUrl": "https://sandbox.contoso.com/reviews",
        "sqlServerAdministratorLogin": "toyadmin",
        "tags": {"workload": "toy"},
    }


@pytest.fixture
def secrets():
    return {
        "reviewApiKey": "review-key",
        "sqlServerAdministratorLoginPassword": "P@ssw0rd!",
    }


@pytest.fixture
def params(config_data, secrets):
    return Parameters.from_dict(config_data, secrets=secrets)
