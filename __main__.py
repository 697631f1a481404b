# main.py
import pulumi

from azurenative import AzureResourceBuilder
from config import SECRET_PARAMETERS, Parameters, load_config
from template import render


def load_secrets() -> dict:
    """Read the secret parameters from the stack's encrypted configuration."""
    stack_config = pulumi.Config()
    return {key: stack_config.require_secret(key) for key in SECRET_PARAMETERS}


def main(config_path: str = "config.yaml"):
    # Non-secret parameters come from YAML; secrets only from stack config
    config_data = load_config(config_path)

    try:
        params = Parameters.from_dict(config_data, secrets=load_secrets())
        rendered = render(params)
    except Exception as e:
        pulumi.log.error(f"Failed to render template: {e}")
        raise

    try:
        builder = AzureResourceBuilder(params, rendered.resources)
        builder.build()
    except Exception as e:
        pulumi.log.error(f"Failed during resource build: {e}")
        raise

    for name, value in builder.resolve_outputs(rendered.outputs).items():
        pulumi.export(name, value)


if __name__ == "__main__":
    main()
