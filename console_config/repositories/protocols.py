"""Protocol definitions for persistence interfaces.

These protocols enable type-safe fakes in tests and decouple the
configuration store from a concrete key-value backend.
"""

from typing import Protocol


class KeyValueStoreProtocol(Protocol):
    """Interface for the string key-value persistence substrate.

    Implementations raise :class:`~console_config.exceptions.PersistenceError`
    when the backend fails; callers in the configuration engine turn it into
    a logged failure result.
    """

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> bool: ...

    def delete(self, key: str) -> bool: ...

    def keys(self, prefix: str = "") -> list[str]: ...
