import pulumi
import pulumi_azure_native as azure_native
import inspect
import re
from typing import Any, Dict, List, Optional

from config import AzureResource, Concat, Parameters
from errors import GraphError
from naming import generate_resource_name


def to_snake_case(name: str) -> str:
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


def constructor_parameters(resource_class) -> set:
    # Generated classes declare their arguments on _internal_init; __init__ is *args/**kwargs.
    init_fn = getattr(resource_class, "_internal_init", resource_class.__init__)
    return set(inspect.signature(init_fn).parameters.keys())


class AzureResourceBuilder:
    def __init__(self, params: Parameters, resources: List[AzureResource],
                 secrets: Optional[Dict[str, Any]] = None):
        self.params = params
        self.definitions = resources
        self.secrets = secrets if secrets is not None else params.secret_values()
        self.resources = {}

    def resolve_reference(self, ref_text: str) -> Any:
        # handle "ref:resourceName.attribute[.nested]"
        if "." in ref_text:
            ref_res, ref_attr = ref_text.split(".", 1)
        else:
            ref_res, ref_attr = (ref_text, "id")

        if ref_res not in self.resources:
            raise ValueError(f"Referenced resource '{ref_res}' not found.")

        value = self.resources[ref_res]
        for attr in ref_attr.split("."):
            value = getattr(value, attr, None)
            if value is None:
                raise ValueError(f"Attribute '{ref_attr}' not found on resource '{ref_res}'")
        return value

    def resolve_secret(self, secret_name: str) -> pulumi.Output:
        if self.secrets.get(secret_name) is None:
            raise ValueError(f"Secret '{secret_name}' was not supplied.")
        return pulumi.Output.secret(self.secrets[secret_name])

    def resolve_value(self, value: Any) -> Any:
        if isinstance(value, dict):
            return self.resolve_args(value)
        if isinstance(value, list):
            return [self.resolve_value(item) for item in value]
        if isinstance(value, Concat):
            joined = pulumi.Output.concat(*[self.resolve_value(part) for part in value.parts])
            return pulumi.Output.secret(joined) if value.secret else joined
        if isinstance(value, str) and value.startswith("ref:"):
            return self.resolve_reference(value[4:])
        if isinstance(value, str) and value.startswith("secret:"):
            return self.resolve_secret(value[7:])
        return value

    def resolve_args(self, args: dict) -> dict:
        return {key: self.resolve_value(value) for key, value in args.items()}

    def get_existing(self, module, class_name: str, name: str, resolved_args: dict) -> Any:
        """Look up a resource that must already exist through the module's get_* function."""
        get_func_name = f"get_{to_snake_case(class_name)}"
        get_func = getattr(module, get_func_name, None)
        if get_func is None:
            raise GraphError(f"Function '{get_func_name}' not found for existing resource '{name}'.")

        valid_params = set(inspect.signature(get_func).parameters.keys())
        required_params = valid_params - {"opts"}

        # Filter resolved_args for what the get_* function actually needs
        get_params = {k: v for k, v in resolved_args.items() if k in required_params}

        missing = required_params - set(get_params.keys())
        if missing:
            raise GraphError(f"Missing required params {sorted(missing)} for existing resource '{name}'.")

        existing_resource = get_func(**get_params)
        pulumi.log.info(f"Fetched existing resource '{name}' via '{get_func_name}' with {sorted(get_params)}")
        return existing_resource

    def build_resource(self, resource_cfg: AzureResource) -> None:
        name = resource_cfg.name
        args = dict(resource_cfg.args)

        is_existing = args.pop("existing", False)
        resolved_args = self.resolve_args(args)

        module_name, class_name = resource_cfg.type.rsplit(".", 1)
        module = getattr(azure_native, module_name, None)
        if not module:
            raise GraphError(f"Azure module '{module_name}' not found for resource '{name}'.")

        ResourceClass = getattr(module, class_name, None)
        if ResourceClass is None:
            raise GraphError(f"Resource class '{class_name}' not found in module '{module_name}' for resource '{name}'.")

        if is_existing:
            self.resources[name] = self.get_existing(module, class_name, name, resolved_args)
            return

        accepted = constructor_parameters(ResourceClass)

        # Check if resource supports 'tags'
        if "tags" in accepted:
            if self.params.tags:
                resolved_args.setdefault("tags", dict(self.params.tags))
        else:
            resolved_args.pop("tags", None)

        # If resource constructor expects location, ensure it's present
        if "location" in accepted:
            resolved_args.setdefault("location", self.params.location)
        else:
            resolved_args.pop("location", None)

        pulumi_name = generate_resource_name(self.params, name)

        # Values may hold secrets; only argument names are logged.
        pulumi.log.debug(f"Arguments for '{name}': {sorted(resolved_args)}")

        self.resources[name] = ResourceClass(pulumi_name, **resolved_args)
        pulumi.log.info(f"Declared resource: {pulumi_name} ({resource_cfg.type})")

    def build(self):
        for resource_cfg in self.definitions:
            self.build_resource(resource_cfg)

    def resolve_outputs(self, outputs: Dict[str, Any]) -> Dict[str, Any]:
        return {name: self.resolve_value(value) for name, value in outputs.items()}
