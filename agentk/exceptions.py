"""Exceptions raised by the Agent K core."""


class AgentKError(Exception):
    """Base class for errors raised by the service."""


class InvalidQueryError(AgentKError, ValueError):
    """The caller sent an empty or missing query."""


class GenerationError(AgentKError):
    """The generation service could not be reached."""
