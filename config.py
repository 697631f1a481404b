# config.py
"""
This module defines the data structures for our configuration: the parameter
set the template is rendered from, and the declarative resource definitions
the renderer emits for the builder.
"""

import yaml
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from environments import ENVIRONMENT_CONFIGURATION_MAP
from errors import ParameterValidationError

ALLOWED_ENVIRONMENTS = ("wip", "test", "qa", "prod")

MAX_LENGTHS = {
    "customer_prefix": 5,
    "workload": 5,
    "instance": 2,
}

# Parameters that never appear in config.yaml; they are read from stack secrets.
SECRET_PARAMETERS = {
    "reviewApiKey": "review_api_key",
    "sqlServerAdministratorLoginPassword": "sql_server_administrator_login_password",
}

PARAMETER_KEYS = {
    "location": "location",
    "resourceGroupName": "resource_group_name",
    "environment": "environment",
    "customerPrefix": "customer_prefix",
    "workload": "workload",
    "instance": "instance",
    "componentFunction": "component_function",
    "reviewApiUrl": "review_api_url",
    "sqlServerAdministratorLogin": "sql_server_administrator_login",
    "tags": "tags",
    "environmentClasses": "environment_classes",
}

REQUIRED_KEYS = [
    "location",
    "resourceGroupName",
    "environment",
    "customerPrefix",
    "workload",
    "reviewApiUrl",
    "sqlServerAdministratorLogin",
]


@dataclass
class AzureResource:
    name: str
    type: str
    args: Dict

    def references(self) -> List[str]:
        """Names of the resources this definition points at through ``ref:`` values."""
        found: List[str] = []
        _collect_references(self.args, found)
        return list(dict.fromkeys(found))


@dataclass
class Concat:
    """String assembled at deploy time from literals, ``ref:`` and ``secret:`` parts."""
    parts: List[Any]
    secret: bool = False


def _collect_references(value: Any, found: List[str]) -> None:
    if isinstance(value, dict):
        for item in value.values():
            _collect_references(item, found)
    elif isinstance(value, list):
        for item in value:
            _collect_references(item, found)
    elif isinstance(value, Concat):
        _collect_references(value.parts, found)
    elif isinstance(value, str) and value.startswith("ref:"):
        found.append(value[4:].split(".", 1)[0])


@dataclass
class Parameters:
    location: str
    resource_group_name: str
    environment: str
    customer_prefix: str
    workload: str
    review_api_url: str
    sql_server_administrator_login: str
    instance: str = "01"
    component_function: str = ""
    tags: Dict[str, str] = field(default_factory=dict)
    environment_classes: Optional[Dict[str, str]] = None
    review_api_key: Any = field(default=None, repr=False)
    sql_server_administrator_login_password: Any = field(default=None, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], secrets: Optional[Dict[str, Any]] = None) -> "Parameters":
        """Build a validated parameter set from camelCase config keys.

        ``secrets`` maps the secret parameter names to their values (plain
        strings or Pulumi secret outputs). Raises ParameterValidationError
        listing every problem found.
        """
        problems = []
        for key in REQUIRED_KEYS:
            if data.get(key) in (None, ""):
                problems.append(f"Missing required parameter: {key}")

        unknown = sorted(set(data) - set(PARAMETER_KEYS) - set(SECRET_PARAMETERS), key=str)
        for key in unknown:
            problems.append(f"Unknown parameter: {key}")
        for key in SECRET_PARAMETERS:
            if key in data:
                problems.append(f"Secret parameter '{key}' must be supplied as a stack secret, not in plain config")
        if problems:
            raise ParameterValidationError(problems)

        kwargs = {attr: data[key] for key, attr in PARAMETER_KEYS.items() if data.get(key) is not None}
        for key, attr in SECRET_PARAMETERS.items():
            kwargs[attr] = (secrets or {}).get(key)

        params = cls(**kwargs)
        params.validate()
        return params

    def validate(self) -> None:
        problems = []

        for attr in ("location", "resource_group_name", "environment", "customer_prefix",
                     "workload", "instance", "review_api_url", "sql_server_administrator_login"):
            value = getattr(self, attr)
            if not isinstance(value, str) or not value:
                problems.append(f"'{attr}' must be a non-empty string")

        if not isinstance(self.component_function, str):
            problems.append("'component_function' must be a string")

        if self.environment not in ALLOWED_ENVIRONMENTS:
            problems.append(
                f"'environment' must be one of {', '.join(ALLOWED_ENVIRONMENTS)}; got '{self.environment}'"
            )

        for attr, limit in MAX_LENGTHS.items():
            value = getattr(self, attr)
            if isinstance(value, str) and len(value) > limit:
                problems.append(f"'{attr}' must be at most {limit} characters; got '{value}' ({len(value)})")

        for key, attr in SECRET_PARAMETERS.items():
            if getattr(self, attr) is None:
                problems.append(f"Missing secret parameter: {key}")

        if not isinstance(self.tags, dict):
            problems.append("'tags' must be a mapping")
        if self.environment_classes is not None:
            if not isinstance(self.environment_classes, dict):
                problems.append("'environment_classes' must be a mapping")
            else:
                for env, env_class in self.environment_classes.items():
                    if env not in ALLOWED_ENVIRONMENTS:
                        problems.append(
                            f"'environment_classes' key '{env}' must be one of {', '.join(ALLOWED_ENVIRONMENTS)}"
                        )
                    if not isinstance(env_class, str) or env_class not in ENVIRONMENT_CONFIGURATION_MAP:
                        problems.append(
                            f"'environment_classes' maps '{env}' to unknown class '{env_class}'; "
                            f"expected one of {', '.join(sorted(ENVIRONMENT_CONFIGURATION_MAP))}"
                        )

        if problems:
            raise ParameterValidationError(problems)

    def secret_values(self) -> Dict[str, Any]:
        return {key: getattr(self, attr) for key, attr in SECRET_PARAMETERS.items()}


def load_config(file_path: str) -> Dict[str, Any]:
    """Load YAML configuration from the given file path."""
    with open(file_path, "r") as file:
        config_data = yaml.safe_load(file) or {}

    if not isinstance(config_data, dict):
        raise ParameterValidationError([f"Configuration file '{file_path}' must contain a mapping"])

    return config_data
