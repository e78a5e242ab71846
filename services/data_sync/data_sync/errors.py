EXIT_OK = 0
EXIT_CONFIG_ERROR = 2
EXIT_MESSAGE_ERROR = 3
EXIT_BROKER_ERROR = 4
EXIT_PARTIAL_DELIVERY = 5
EXIT_SETTINGS_ERROR = 6


class DataSyncError(Exception):
    """Base for every failure the publisher reports; carries the process exit code."""
    exit_code = 1


class SettingsError(DataSyncError):
    """Bad runtime setting (env var or CLI flag)."""
    exit_code = EXIT_SETTINGS_ERROR


class ConfigNotFound(DataSyncError):
    exit_code = EXIT_CONFIG_ERROR


class ConfigParseError(DataSyncError):
    exit_code = EXIT_CONFIG_ERROR


class ConfigIncomplete(DataSyncError):
    exit_code = EXIT_CONFIG_ERROR


class MessageNotFound(DataSyncError):
    exit_code = EXIT_MESSAGE_ERROR


class MessageEmpty(DataSyncError):
    exit_code = EXIT_MESSAGE_ERROR


class BrokerConnectionError(DataSyncError):
    exit_code = EXIT_BROKER_ERROR


class ChannelOpenError(DataSyncError):
    exit_code = EXIT_BROKER_ERROR


class QueuePublishError(DataSyncError):
    """A single queue rejected the publish; the remaining queues are still tried."""
    exit_code = EXIT_PARTIAL_DELIVERY

    def __init__(self, queue: str, cause: Exception):
        super().__init__(f"publish to {queue!r} failed: {cause}")
        self.queue = queue
        self.cause = cause
