class ZenithError(Exception):
    """Root of every error the sync pipeline raises on purpose."""


class ConfigurationError(ZenithError):
    """Credentials for the video source or the mail transport are missing."""


class SourceUnavailable(ZenithError):
    """The YouTube API could not be reached or refused the request."""


class PartialInsertFailure(ZenithError):
    def __init__(self, youtube_id: str, cause: Exception):
        super().__init__(f"could not store video {youtube_id}: {cause}")
        self.youtube_id = youtube_id
        self.cause = cause


class NotificationDeliveryFailure(ZenithError):
    def __init__(self, recipient: str, cause: Exception):
        super().__init__(f"delivery to {recipient} failed: {cause}")
        self.recipient = recipient
        self.cause = cause
