"""Exception hierarchy for Promptframe.

Every message is intended to be shown to the user as-is: the orchestrator
stores it on the failed generation record and the API returns it as the
error detail.
"""


class PromptframeError(Exception):
    """Base class for all Promptframe errors."""

    pass


class ConfigurationError(PromptframeError):
    """A required setting, typically a provider credential, is missing."""

    pass


class ProviderError(PromptframeError):
    """An external image provider failed or returned an unusable payload."""

    pass


class EmptyResultError(ProviderError):
    """A provider call succeeded but yielded no usable image URLs."""

    pass


class RecordNotFoundError(PromptframeError):
    """No generation record exists with the requested id."""

    def __init__(self, record_id: str):
        super().__init__(f"Generation record not found: {record_id}")
        self.record_id = record_id


class RecordStateError(PromptframeError):
    """A terminal update was applied to a record that is no longer queued."""

    def __init__(self, record_id: str, status: str):
        super().__init__(f"Generation record {record_id} is already {status}")
        self.record_id = record_id
        self.status = status


class GenerationFailed(PromptframeError):
    """A generation ended in the ``failed`` state.

    Raised by the orchestrator after the failed record has been persisted.
    The original exception is available as ``cause`` (and ``__cause__``);
    the message is the one stored on the record.
    """

    def __init__(self, record_id: str, cause: BaseException, message: str):
        super().__init__(message)
        self.record_id = record_id
        self.cause = cause
