"""Per-conversation state, kept in memory for the life of the process.

A ContextStore maps a user's phone number to an open key/value bag.
UserContext is a thin handle over one user's bag. Handles for the same
user share the bag by reference until clear() is called: clear() drops
the store's bag and rebinds only the handle it was called on. Handles
created earlier keep the orphaned bag; fetch a new UserContext to see
the fresh one.
"""

from __future__ import annotations

from typing import Any


class ContextStore:
    """In-memory mapping of phone number to context bag."""

    def __init__(self) -> None:
        self._users: dict[str, dict[str, Any]] = {}

    def add_user(self, phone_number: str) -> None:
        self._users.setdefault(phone_number, {})

    def user_exists(self, phone_number: str) -> bool:
        return phone_number in self._users

    def get_user_data(self, phone_number: str) -> dict[str, Any]:
        """Return the user's bag, creating an empty one on first access."""
        return self._users.setdefault(phone_number, {})

    def clear_user(self, phone_number: str) -> None:
        self._users.pop(phone_number, None)

    def clear_all(self) -> None:
        self._users.clear()

    def get_all_users(self) -> list[str]:
        return list(self._users)


class UserContext:
    """Key/value access to one user's conversation state.

    Example:
        context = UserContext("15551234567", store)
        context.set("step", 1)
        context.get("name", "stranger")
    """

    def __init__(self, phone_number: str, store: ContextStore) -> None:
        self.phone_number = phone_number
        self._store = store
        self.user_data = store.get_user_data(phone_number)

    def set(self, key: str, value: Any) -> None:
        self.user_data[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value, or default when absent or stored as None."""
        value = self.user_data.get(key)
        return default if value is None else value

    def has(self, key: str) -> bool:
        return key in self.user_data

    def delete(self, key: str) -> None:
        self.user_data.pop(key, None)

    def clear(self) -> None:
        self._store.clear_user(self.phone_number)
        self.user_data = self._store.get_user_data(self.phone_number)

    def keys(self) -> list[str]:
        return list(self.user_data)

    def size(self) -> int:
        return len(self.user_data)

    def __len__(self) -> int:
        return len(self.user_data)

    def __contains__(self, key: object) -> bool:
        return key in self.user_data

    def __repr__(self) -> str:
        return f"UserContext(phone_number={self.phone_number!r}, keys={self.keys()!r})"
