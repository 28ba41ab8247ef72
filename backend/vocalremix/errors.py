class RemixError(Exception):
    """Base class for every failure raised by the remix service."""


class ConfigurationError(RemixError):
    """A live provider was requested but no credential is configured."""


class UploadRejected(RemixError):
    """The uploaded audio failed size or type validation."""


class UnreachableInputError(RemixError):
    """The input audio URL could not be fetched before submission."""


class ProbeTimeoutError(UnreachableInputError):
    pass


class ProviderSubmissionError(RemixError):
    """The provider rejected the submission or answered with a malformed payload."""


class ProviderTimeoutError(ProviderSubmissionError):
    pass


class ProviderStatusError(RemixError):
    """A single status query failed or returned inconsistent data."""


class PollingTimeoutError(RemixError):
    def __init__(self, task_id: str, attempts: int, interval: float) -> None:
        self.task_id = task_id
        self.attempts = attempts
        super().__init__(
            f"Generation timeout after {attempts} attempts "
            f"({attempts * interval:.0f}s). The task may still be processing."
        )


class GenerationFailedError(RemixError):
    """The provider reported the generation as failed."""


class LyricsUnavailable(RemixError):
    pass
