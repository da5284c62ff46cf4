"""Feed items for the three supported dialects.

Every item exposes the same setters. A dialect that lacks a capability
raises UnsupportedCapabilityError from it instead of writing anything, and
values that fail validation raise MalformedInputError. Either way the item
is left untouched.
"""

import math
import re
import warnings
from datetime import datetime
from typing import Any, NoReturn, Self

from .dates import (
    NUMERIC_RE,
    DateInput,
    format_atom,
    format_rss,
    format_w3c_date,
    parse_date,
    to_datetime,
)
from .exceptions import FeedWriterError, MalformedInputError, UnsupportedCapabilityError
from .identifiers import URN_UUID_PREFIX, make_uuid
from .logging_config import create_build_logger
from .models import Capability, Dialect, Element, ElementMap

# Loose checks from RFC 4287, page 41
MIME_TYPE_RE = re.compile(r".+/.+")
EMAIL_RE = re.compile(r".+@.+")

_UNSUPPORTED_MESSAGES = {
    Capability.DESCRIPTION: "The description element is not supported in {dialect} feeds.",
    Capability.CONTENT: "The content element is supported in ATOM feeds only.",
    Capability.TITLE: "The title element is not supported in {dialect} feeds.",
    Capability.DATE: "The date element is not supported in {dialect} feeds.",
    Capability.LINK: "The link element is not supported in {dialect} feeds.",
    Capability.ENCLOSURE: "Media attachment is not supported in {dialect} feeds.",
    Capability.AUTHOR: "The author element is not supported in {dialect} feeds.",
    Capability.ID: "A unique ID is not supported in {dialect} feeds.",
}


class Item:
    """A single feed item.

    Items are created by ``Feed.create_item()``, which picks the subclass
    for the feed's dialect. Elements live in an ordered ElementMap and are
    written by the setters through ``add_element``.
    """

    dialect: Dialect
    CAPABILITIES: frozenset[Capability] = frozenset()

    def __init__(self, build_id: str | None = None):
        """Initialize an empty item.

        Args:
            build_id: Build ID of the owning feed, for logging context
        """
        self.elements = ElementMap()
        self.logger = create_build_logger("item", build_id)

    def supports(self, capability: Capability) -> bool:
        """Tell whether this item's dialect supports a capability."""
        return capability in self.CAPABILITIES

    def add_element(
        self,
        name: str,
        content: str | dict[str, str] = "",
        attributes: dict[str, Any] | None = None,
        overwrite: bool = False,
        multiple: bool = False,
    ) -> Self:
        """Add an element to the item.

        Args:
            name: Element name
            content: Text content or sub-element texts
            attributes: Element attributes
            overwrite: Replace any existing element(s) with this name
            multiple: Keep existing elements with this name and append

        Returns:
            The item itself
        """
        self.elements.add(name, content, attributes, overwrite=overwrite, multiple=multiple)
        self.logger.debug(
            "Element added",
            dialect=self.dialect.label,
            element=name,
        )
        return self

    def get_element(self, name: str) -> Element | None:
        return self.elements.get(name)

    def set_description(self, description: str) -> Self:
        return self._unsupported(Capability.DESCRIPTION)

    def set_content(self, content: str) -> Self:
        return self._unsupported(Capability.CONTENT)

    def set_title(self, title: str) -> Self:
        return self._unsupported(Capability.TITLE)

    def set_date(self, date: DateInput) -> Self:
        """Set the item date.

        Args:
            date: A datetime, a non-negative Unix timestamp or a string
                parseable by dateutil
        """
        return self._unsupported(Capability.DATE)

    def set_link(self, link: str) -> Self:
        return self._unsupported(Capability.LINK)

    def add_enclosure(
        self, url: str, length: int | float | str, type: str, multiple: bool = True
    ) -> Self:
        """Attach external media to the item.

        Args:
            url: URL of the media
            length: Size in bytes; 0 when it cannot be determined
            type: MIME type of the media (see RFC 4288)
            multiple: Allow more than one enclosure. Some aggregators only
                read the first one.
        """
        return self._unsupported(Capability.ENCLOSURE)

    def set_enclosure(self, url: str, length: int | float | str, type: str) -> Self:
        """Single-enclosure alias of add_enclosure, kept for compatibility."""
        warnings.warn(
            "set_enclosure is deprecated, use add_enclosure instead",
            DeprecationWarning,
            stacklevel=2,
        )
        return self.add_enclosure(url, length, type, multiple=False)

    def set_author(self, author: str, email: str | None = None, uri: str | None = None) -> Self:
        return self._unsupported(Capability.AUTHOR)

    def set_id(self, id: str, perma_link: bool = False) -> Self:
        """Set the unique identifier of the item.

        Args:
            id: The unique identifier
            perma_link: Value of the RSS 2.0 isPermaLink attribute
        """
        return self._unsupported(Capability.ID)

    def _unsupported(self, capability: Capability) -> NoReturn:
        message = _UNSUPPORTED_MESSAGES[capability].format(dialect=self.dialect.label)
        self._raise(
            UnsupportedCapabilityError(message, capability=capability, dialect=self.dialect)
        )

    def _reject(self, message: str, parameter: str) -> NoReturn:
        self._raise(MalformedInputError(message, parameter=parameter, dialect=self.dialect))

    def _raise(self, error: FeedWriterError) -> NoReturn:
        self.logger.log_rejection(
            error,
            dialect=self.dialect.label,
            parameter=error.parameter,
        )
        raise error

    def _coerce_date(self, value: DateInput) -> datetime:
        try:
            return to_datetime(value)
        except MalformedInputError as e:
            e.dialect = self.dialect
            self._raise(e)

    def _check_length(self, length: Any) -> str:
        message = "The length parameter must be an integer and greater or equals to zero."

        if isinstance(length, bool):
            self._reject(message, "length")
        if isinstance(length, str) and NUMERIC_RE.match(length):
            length = float(length)
        if not isinstance(length, int | float) or not math.isfinite(length) or length < 0:
            self._reject(message, "length")

        return str(int(length)) if float(length).is_integer() else str(length)

    def _check_mime_type(self, type: Any) -> None:
        if not isinstance(type, str) or not MIME_TYPE_RE.search(type):
            self._reject("type parameter must be a string and a MIME type.", "type")

    def _check_email(self, email: str) -> None:
        # Stricter than the historical behaviour, which dropped bad addresses
        if not isinstance(email, str) or not EMAIL_RE.search(email):
            self._reject("The email parameter must be a valid email address.", "email")


class AtomItem(Item):
    """Item of an ATOM feed (an <entry>)."""

    dialect = Dialect.ATOM
    CAPABILITIES = frozenset(Capability)

    def __init__(self, build_id: str | None = None):
        super().__init__(build_id)
        self._id_pinned = False

    def set_description(self, description: str) -> Self:
        return self.add_element("summary", description)

    def set_content(self, content: str) -> Self:
        return self.add_element("content", content, {"type": "html"})

    def set_title(self, title: str) -> Self:
        return self.add_element("title", title)

    def set_date(self, date: DateInput) -> Self:
        return self.add_element("updated", format_atom(self._coerce_date(date)))

    def set_link(self, link: str) -> Self:
        """Set the link and derive the entry id from it.

        An id given explicitly through set_id is never replaced.
        """
        self.add_element("link", "", {"href": link})
        if not self._id_pinned:
            self.add_element("id", make_uuid(link, URN_UUID_PREFIX))
        return self

    def add_enclosure(
        self, url: str, length: int | float | str, type: str, multiple: bool = True
    ) -> Self:
        length = self._check_length(length)
        self._check_mime_type(type)

        attributes = {"length": length, "type": type, "href": url, "rel": "enclosure"}
        return self.add_element("atom:link", "", attributes, multiple=multiple)

    def set_author(self, author: str, email: str | None = None, uri: str | None = None) -> Self:
        fields = {"name": author}

        if email:
            self._check_email(email)
            fields["email"] = email

        if uri:
            fields["uri"] = uri

        return self.add_element("author", fields)

    def set_id(self, id: str, perma_link: bool = False) -> Self:
        self.add_element("id", make_uuid(id, URN_UUID_PREFIX), overwrite=True)
        self._id_pinned = True
        return self


class RSS1Item(Item):
    """Item of an RSS 1.0 (RDF) feed."""

    dialect = Dialect.RSS1
    CAPABILITIES = frozenset(
        {Capability.DESCRIPTION, Capability.TITLE, Capability.DATE, Capability.LINK}
    )

    def set_description(self, description: str) -> Self:
        return self.add_element("description", description)

    def set_title(self, title: str) -> Self:
        return self.add_element("title", title)

    def set_date(self, date: DateInput) -> Self:
        return self.add_element("dc:date", format_w3c_date(self._coerce_date(date)))

    def set_link(self, link: str) -> Self:
        return self.add_element("link", link)


class RSS2Item(Item):
    """Item of an RSS 2.0 feed, with getters for the values it holds."""

    dialect = Dialect.RSS2
    CAPABILITIES = frozenset(Capability) - {Capability.CONTENT}

    def set_description(self, description: str) -> Self:
        return self.add_element("description", description)

    def get_description(self) -> str:
        return self.elements.content("description")

    def set_title(self, title: str) -> Self:
        return self.add_element("title", title)

    def get_title(self) -> str:
        return self.elements.content("title")

    def set_date(self, date: DateInput) -> Self:
        return self.add_element("pubDate", format_rss(self._coerce_date(date)))

    def get_date(self) -> datetime | None:
        """Return pubDate parsed back into a datetime, or None if unset."""
        return parse_date(self.elements.content("pubDate"))

    def set_link(self, link: str) -> Self:
        return self.add_element("link", link)

    def get_link(self) -> str:
        return self.elements.content("link")

    def add_enclosure(
        self, url: str, length: int | float | str, type: str, multiple: bool = True
    ) -> Self:
        length = self._check_length(length)
        self._check_mime_type(type)

        attributes = {"length": length, "type": type, "url": url}
        return self.add_element("enclosure", "", attributes, multiple=multiple)

    def get_enclosure(self) -> dict[str, str] | None:
        """Return the attributes of the first enclosure, or None."""
        element = self.elements.get("enclosure")
        return dict(element.attributes) if element is not None else None

    def get_enclosures(self) -> list[dict[str, str]]:
        return [dict(element.attributes) for element in self.elements.get_all("enclosure")]

    def set_author(self, author: str, email: str | None = None, uri: str | None = None) -> Self:
        if email:
            self._check_email(email)
            author = f"{email} ({author})"

        return self.add_element("author", author)

    def get_author(self) -> str:
        return self.elements.content("author")

    def set_id(self, id: str, perma_link: bool = False) -> Self:
        if not isinstance(perma_link, bool):
            self._reject("The permaLink parameter must be boolean.", "perma_link")

        return self.add_element("guid", id, {"isPermaLink": "true" if perma_link else "false"})

    def get_id(self) -> str:
        return self.elements.content("guid")


ITEM_TYPES: dict[Dialect, type[Item]] = {
    Dialect.ATOM: AtomItem,
    Dialect.RSS1: RSS1Item,
    Dialect.RSS2: RSS2Item,
}
