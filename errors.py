# errors.py
"""Exceptions raised while validating parameters and rendering the template."""

from typing import List


class TemplateError(ValueError):
    """Base class for every error raised before the graph reaches Pulumi."""


class ParameterValidationError(TemplateError):
    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("Invalid parameters: " + "; ".join(self.problems))


class EnvironmentLookupError(TemplateError):
    def __init__(self, environment: str, message: str):
        self.environment = environment
        super().__init__(message)


class GraphError(TemplateError):
    pass
