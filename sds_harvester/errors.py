"""Exception types raised by the harvester."""


class HarvesterError(Exception):
    """Base class for all harvester errors."""


class ConfigError(HarvesterError):
    """Invalid run configuration."""


class StoreError(HarvesterError):
    """A filesystem operation on the resource store failed."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class NotFoundError(StoreError):
    """The requested store entry does not exist."""


class AlreadyExistsError(StoreError):
    """An exclusive create found the entry already present."""


class TransportError(HarvesterError):
    """Connection failure, timeout, or body read failure on an HTTP call."""

    def __init__(self, message: str, url: str = ""):
        super().__init__(message)
        self.url = url
