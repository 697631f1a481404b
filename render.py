#!/usr/bin/env python3
"""
Render the toy website template without deploying it.

Validates the parameters in a config file, resolves names and SKUs, and
prints the dependency-ordered resource graph and stack outputs as YAML.
Secret parameters are never read; they appear as ``secret:<name>`` markers.

Usage:
  python3 render.py config.yaml
  python3 render.py config.yaml --environment test --output rendered.yaml
"""

import argparse
import sys

import yaml

from config import SECRET_PARAMETERS, Parameters, load_config
from errors import TemplateError
from template import render

REDACTED = "<redacted>"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render the toy website resource graph as YAML.")
    parser.add_argument("config", help="Path to the YAML parameter file")
    parser.add_argument("--environment", help="Override the 'environment' parameter")
    parser.add_argument("--component-function", help="Override the 'componentFunction' parameter")
    parser.add_argument("--output", "-o", help="Write the document here instead of stdout")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config_data = load_config(args.config)
        if args.environment is not None:
            config_data["environment"] = args.environment
        if args.component_function is not None:
            config_data["componentFunction"] = args.component_function

        params = Parameters.from_dict(config_data, secrets={key: REDACTED for key in SECRET_PARAMETERS})
        document = render(params).to_document()
    except TemplateError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    text = yaml.safe_dump(document, sort_keys=False)
    if args.output:
        with open(args.output, "w") as file:
            file.write(text)
    else:
        sys.stdout.write(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
