"""Error taxonomy shared by services and adapters."""


class JesterError(Exception):
    """Base class for all bot errors."""


class RemoteFetchError(JesterError):
    """Network failure, timeout or non-success status from a content source."""


class ParseError(RemoteFetchError):
    """Malformed payload from a content source. Recovered like a fetch failure."""


class AIGatewayError(JesterError):
    """The AI completion call failed or returned an unusable payload."""


class InvalidKeyError(JesterError):
    """Lookup key outside a service's fixed key set."""

    def __init__(self, key: str, valid_keys):
        self.key = key
        self.valid_keys = list(valid_keys)
        super().__init__(f"Unknown key '{key}'. Valid keys: {', '.join(self.valid_keys)}")
