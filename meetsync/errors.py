class MeetSyncError(Exception):
    """Base class for every error raised by meetsync."""


class ValidationError(MeetSyncError, ValueError):
    """Malformed record or missing id. Raised before any store mutation."""


class TransientNetworkFailure(MeetSyncError):
    """A poll, heartbeat or report did not complete. Retried on the next tick."""


class ClassifierUnavailable(MeetSyncError):
    """The attentiveness classifier failed to initialize."""


class MediaUnavailable(MeetSyncError):
    """Camera or microphone acquisition failed."""
