"""Interactive message markup: buttons, lists and location requests.

Every builder validates WhatsApp's size limits at construction time and
raises MarkupValidationError naming the violated limit.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from wabot.models import ReplyMarkupType

MAX_BUTTONS = 3
MAX_BUTTON_TEXT = 20
MAX_LIST_ROWS = 10
MAX_ROW_TITLE = 24
MAX_ROW_DESCRIPTION = 72
MAX_SECTION_TITLE = 24
MAX_LIST_BUTTON_TEXT = 20


class MarkupValidationError(ValueError):
    """Raised when a markup violates a WhatsApp interactive message limit."""


class ReplyMarkup:
    """Base for the opaque {type, markup} value consumed by the send layer."""

    def __init__(self, markup_type: ReplyMarkupType, markup: dict[str, Any]) -> None:
        self.type = markup_type
        self.markup = markup

    def __repr__(self) -> str:
        return f"{type(self).__name__}(type={self.type.value!r}, markup={self.markup!r})"


class InlineButton:
    """A single reply button. The id defaults to the button text."""

    def __init__(self, text: str, button_id: str | None = None) -> None:
        if len(text) > MAX_BUTTON_TEXT:
            raise MarkupValidationError(
                f"Button text must be {MAX_BUTTON_TEXT} characters or less",
            )
        self.button: dict[str, Any] = {
            "type": "reply",
            "reply": {"id": button_id or text, "title": text},
        }

    @property
    def id(self) -> str:
        return self.button["reply"]["id"]

    @property
    def title(self) -> str:
        return self.button["reply"]["title"]


class InlineKeyboard(ReplyMarkup):
    """Up to three reply buttons under a message.

    Plain strings are promoted to InlineButton instances.
    """

    def __init__(self, buttons: Sequence[str | InlineButton]) -> None:
        inline_buttons = self._to_buttons(buttons)
        self._validate(inline_buttons)
        super().__init__(
            ReplyMarkupType.BUTTON,
            {"buttons": [b.button for b in inline_buttons]},
        )

    @staticmethod
    def _to_buttons(buttons: Sequence[str | InlineButton]) -> list[InlineButton]:
        if isinstance(buttons, str) or not isinstance(buttons, Sequence):
            raise MarkupValidationError("Buttons must be a list")
        result: list[InlineButton] = []
        for button in buttons:
            if isinstance(button, str):
                result.append(InlineButton(button))
            elif isinstance(button, InlineButton):
                result.append(button)
            else:
                raise MarkupValidationError(
                    "Button elements must be strings or InlineButton instances",
                )
        return result

    @staticmethod
    def _validate(buttons: list[InlineButton]) -> None:
        if not 1 <= len(buttons) <= MAX_BUTTONS:
            raise MarkupValidationError(
                f"InlineKeyboard must have 1-{MAX_BUTTONS} buttons, got {len(buttons)}",
            )
        ids: set[str] = set()
        titles: set[str] = set()
        for button in buttons:
            if button.id in ids or button.title in titles:
                raise MarkupValidationError("Button IDs and titles must be unique")
            ids.add(button.id)
            titles.add(button.title)


class ListItem:
    """A single row of a list menu. The id defaults to the title."""

    def __init__(
        self,
        title: str,
        item_id: str | None = None,
        description: str | None = None,
    ) -> None:
        if len(title) > MAX_ROW_TITLE:
            raise MarkupValidationError(
                f"List item title must be {MAX_ROW_TITLE} characters or less",
            )
        if description and len(description) > MAX_ROW_DESCRIPTION:
            raise MarkupValidationError(
                f"List item description must be {MAX_ROW_DESCRIPTION} characters or less",
            )
        self.item: dict[str, str] = {"id": item_id or title, "title": title}
        if description:
            self.item["description"] = description


class ListSection:
    """Groups list rows under a section title."""

    def __init__(self, title: str, items: Sequence[str | ListItem]) -> None:
        if len(title) > MAX_SECTION_TITLE:
            raise MarkupValidationError(
                f"Section title must be {MAX_SECTION_TITLE} characters or less",
            )
        list_items = self._to_items(items)
        if not 1 <= len(list_items) <= MAX_LIST_ROWS:
            raise MarkupValidationError(
                f"Section must have 1-{MAX_LIST_ROWS} items, got {len(list_items)}",
            )
        self.section: dict[str, Any] = {
            "title": title,
            "rows": [item.item for item in list_items],
        }

    @property
    def rows(self) -> list[dict[str, str]]:
        return self.section["rows"]

    @staticmethod
    def _to_items(items: Sequence[str | ListItem]) -> list[ListItem]:
        if isinstance(items, str) or not isinstance(items, Sequence):
            raise MarkupValidationError("Items must be a list")
        result: list[ListItem] = []
        for item in items:
            if isinstance(item, str):
                result.append(ListItem(item))
            elif isinstance(item, ListItem):
                result.append(item)
            else:
                raise MarkupValidationError("Items must be strings or ListItem instances")
        return result


class InlineList(ReplyMarkup):
    """A list menu opened by a button.

    Takes either plain ListItem rows (placed in one untitled section) or
    ListSection groups, never a mix. At most ten rows in total.
    """

    def __init__(
        self,
        button_text: str,
        items: Sequence[ListItem] | Sequence[ListSection],
    ) -> None:
        if len(button_text) > MAX_LIST_BUTTON_TEXT:
            raise MarkupValidationError(
                f"List button text must be {MAX_LIST_BUTTON_TEXT} characters or less",
            )
        sections = self._build_sections(items)
        super().__init__(
            ReplyMarkupType.LIST,
            {"button": button_text, "sections": sections},
        )

    @staticmethod
    def _build_sections(
        items: Sequence[ListItem] | Sequence[ListSection],
    ) -> list[dict[str, Any]]:
        if isinstance(items, str) or not isinstance(items, Sequence):
            raise MarkupValidationError("List items must be a list")
        if not items:
            raise MarkupValidationError("List must have at least one item or section")

        if all(isinstance(i, ListSection) for i in items):
            sections = [s.section for s in items]  # type: ignore[union-attr]
            total = sum(len(s["rows"]) for s in sections)
        elif all(isinstance(i, ListItem) for i in items):
            sections = [{"rows": [i.item for i in items]}]  # type: ignore[union-attr]
            total = len(items)
        else:
            raise MarkupValidationError(
                "List items must be all ListItem or all ListSection instances",
            )

        if total > MAX_LIST_ROWS:
            raise MarkupValidationError(
                f"List can have maximum {MAX_LIST_ROWS} items, got {total}",
            )
        return sections


class InlineLocationRequest(ReplyMarkup):
    """Asks the user to share their location."""

    def __init__(self) -> None:
        super().__init__(ReplyMarkupType.LOCATION_REQUEST, {"name": "send_location"})
