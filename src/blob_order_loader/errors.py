class ConfigurationError(RuntimeError):
    """A required setting is missing, empty or invalid."""
    pass

class StoreConnectionError(RuntimeError):
    """The order store could not be reached."""
    pass

class StreamUnavailableError(RuntimeError):
    """The blob could not be opened or read as a byte stream."""
    pass

class OrdersParseError(RuntimeError):
    """The byte stream is not a well-formed top-level JSON array."""
    pass

class BatchInsertError(RuntimeError):
    """A single batch was rejected by the store."""
    pass

class StoreOperationError(RuntimeError):
    """A store call other than a batch insert failed."""
    pass
