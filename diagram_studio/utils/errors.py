"""Exception types shared across coordinators and collaborators."""
from __future__ import annotations


class ConfigurationError(ValueError):
    """A required setting (usually a credential) is missing or invalid."""


class AssistantError(RuntimeError):
    """The generative assistant call failed or returned nothing usable."""


class DiagramSyntaxError(ValueError):
    """The rendering engine rejected the diagram text."""


class RendererUnavailableError(RuntimeError):
    """The rendering engine could not be started."""
