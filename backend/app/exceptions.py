"""
Error taxonomy for the query pipeline.

ValidationError is a client error (HTTP 400). Pipeline errors are caught by the
query orchestrator and reported inside a success=false QueryResponse.
"""


class SalesQLError(Exception):
    """Base class for application errors."""


class ValidationError(SalesQLError):
    """Bad request shape, e.g. a missing or blank question."""


class QueryPipelineError(SalesQLError):
    """A stage of the question -> SQL -> rows -> answer pipeline failed."""


class TranslationError(QueryPipelineError):
    """The language model could not turn the question into SQL."""


class ExecutionError(QueryPipelineError):
    """The in-memory query engine could not run the sanitized SQL."""


class SummarizationError(QueryPipelineError):
    """The language model could not produce an answer or insights."""
