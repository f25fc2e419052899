"""Open Application Model parameters, variables, traits and scopes for Kubernetes."""

__version__ = "0.1.0"