"""Feeds: channel metadata plus an ordered list of items."""

from datetime import datetime
from typing import Any, Self

from .dates import DateInput, format_atom, format_rss, format_w3c_date, to_datetime
from .exceptions import MalformedInputError
from .identifiers import URN_UUID_PREFIX, make_uuid
from .item import ITEM_TYPES, Item
from .logging_config import create_build_logger
from .models import Dialect, Element, ElementMap


class Feed:
    """Base feed holding channel elements and items of a single dialect.

    Use ``create_feed(dialect)`` or one of the dialect classes directly.
    """

    dialect: Dialect
    # MIME type advertised by the feed's self link
    MIME_TYPE = "application/xml"

    def __init__(self, build_id: str | None = None):
        """Initialize an empty feed.

        Args:
            build_id: Optional build ID shared by the feed's log records
        """
        self.channels = ElementMap()
        self.items: list[Item] = []
        self.namespaces: dict[str, str] = {}
        self.logger = create_build_logger("feed", build_id)

        self.logger.info("Feed initialized", dialect=self.dialect.label)

    @property
    def version(self) -> str | None:
        return self.dialect.version

    @property
    def build_id(self) -> str:
        return self.logger.build_id

    def create_item(self) -> Item:
        """Create a new item of this feed's dialect.

        The item is not part of the feed until passed to add_item.
        """
        return ITEM_TYPES[self.dialect](build_id=self.build_id)

    def add_item(self, item: Item) -> Self:
        """Append an item to the feed.

        Raises:
            MalformedInputError: If the item belongs to another dialect
        """
        if item.dialect is not self.dialect:
            error = MalformedInputError(
                f"Cannot add a {item.dialect.label} item to a {self.dialect.label} feed.",
                parameter="item",
                dialect=self.dialect,
            )
            self.logger.log_rejection(error, dialect=self.dialect.label, parameter="item")
            raise error

        self.items.append(item)
        self.logger.debug(
            "Item added",
            dialect=self.dialect.label,
            metrics={"items": len(self.items)},
        )
        return self

    def set_channel_element(
        self,
        name: str,
        content: str | dict[str, str] = "",
        attributes: dict[str, Any] | None = None,
        multiple: bool = False,
    ) -> Self:
        """Set a channel-level element.

        Args:
            name: Element name
            content: Text content or sub-element texts
            attributes: Element attributes
            multiple: Append instead of replacing an element with this name
        """
        self.channels.add(name, content, attributes, multiple=multiple)
        self.logger.debug("Channel element set", dialect=self.dialect.label, element=name)
        return self

    def get_channel_element(self, name: str) -> Element | None:
        return self.channels.get(name)

    def add_namespace(self, prefix: str, uri: str) -> Self:
        """Declare an extra XML namespace, e.g. for ``media:`` elements."""
        self.namespaces[prefix] = uri
        return self

    def set_title(self, title: str) -> Self:
        return self.set_channel_element("title", title)

    def get_title(self) -> str:
        return self.channels.content("title")

    def set_description(self, description: str) -> Self:
        return self.set_channel_element("description", description)

    def get_description(self) -> str:
        return self.channels.content("description")

    def set_link(self, link: str) -> Self:
        return self.set_channel_element("link", link)

    def get_link(self) -> str | dict[str, str]:
        return self.channels.content("link")

    def set_date(self, date: DateInput) -> Self:
        """Set the channel date.

        Args:
            date: A datetime, a non-negative Unix timestamp or a string
                parseable by dateutil

        Raises:
            MalformedInputError: If the date is negative or unparseable
        """
        try:
            value = to_datetime(date)
        except MalformedInputError as e:
            e.dialect = self.dialect
            self.logger.log_rejection(e, dialect=self.dialect.label, parameter="date")
            raise

        return self._set_date(value)

    def get_date(self) -> str:
        return ""

    def set_image(self, url: str, title: str | None = None, link: str | None = None) -> Self:
        """Set the channel image.

        Title and link default to the channel's own title and link.
        """
        return self.set_channel_element(
            "image",
            {
                "url": url,
                "title": title if title is not None else self.get_title(),
                "link": link if link is not None else self._link_text(),
            },
        )

    def set_self_link(self, url: str) -> Self:
        """Advertise the URL the feed itself is published at."""
        return self.set_channel_element(
            "atom:link",
            attributes={"href": url, "rel": "self", "type": self.MIME_TYPE},
            multiple=True,
        )

    def _set_date(self, value: datetime) -> Self:
        """Store an already normalized UTC date. Each dialect feed overrides this."""
        raise NotImplementedError

    def _link_text(self) -> str:
        link = self.get_link()
        return link if isinstance(link, str) else link.get("href", "")

    def __len__(self) -> int:
        return len(self.items)


class AtomFeed(Feed):
    """ATOM 1.0 feed."""

    dialect = Dialect.ATOM
    MIME_TYPE = "application/atom+xml"

    def set_description(self, description: str) -> Self:
        return self.set_channel_element("subtitle", description)

    def get_description(self) -> str:
        return ""

    def set_link(self, link: str) -> Self:
        """Set the channel link and derive the feed id from it."""
        self.set_channel_element("link", "", {"href": link})
        return self.set_channel_element("id", make_uuid(link, URN_UUID_PREFIX))

    def get_link(self) -> dict[str, str] | str:
        """Return the attributes of the channel link, or "" if unset."""
        element = self.channels.get("link")
        return dict(element.attributes) if element is not None else ""

    def _set_date(self, value: datetime) -> Self:
        return self.set_channel_element("updated", format_atom(value))

    def get_date(self) -> str:
        return self.channels.content("updated")

    def set_image(self, url: str, title: str | None = None, link: str | None = None) -> Self:
        return self.set_channel_element("logo", url)


class RSS1Feed(Feed):
    """RSS 1.0 (RDF Site Summary) feed."""

    dialect = Dialect.RSS1
    MIME_TYPE = "application/rdf+xml"

    def __init__(self, build_id: str | None = None):
        super().__init__(build_id)
        self.channel_about: str | None = None

    def set_channel_about(self, url: str) -> Self:
        """Set the rdf:about URI of the channel. Defaults to the channel link."""
        self.channel_about = url
        return self

    def get_channel_about(self) -> str:
        return self.channel_about or self._link_text()

    def _set_date(self, value: datetime) -> Self:
        return self.set_channel_element("dc:date", format_w3c_date(value))


class RSS2Feed(Feed):
    """RSS 2.0 feed."""

    dialect = Dialect.RSS2
    MIME_TYPE = "application/rss+xml"

    def _set_date(self, value: datetime) -> Self:
        return self.set_channel_element("lastBuildDate", format_rss(value))

    def get_date(self) -> str:
        return self.channels.content("lastBuildDate")


FEED_TYPES: dict[Dialect, type[Feed]] = {
    Dialect.ATOM: AtomFeed,
    Dialect.RSS1: RSS1Feed,
    Dialect.RSS2: RSS2Feed,
}


def create_feed(dialect: Dialect | str, build_id: str | None = None) -> Feed:
    """Create an empty feed of the given dialect.

    Args:
        dialect: A Dialect or a name such as "atom", "RSS1" or "RSS 2.0"
        build_id: Optional build ID for logging context

    Raises:
        ValueError: If the dialect is unknown
    """
    return FEED_TYPES[Dialect.parse(dialect)](build_id=build_id)
