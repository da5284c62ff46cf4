"""Unit tests for feeds and their channel metadata."""

import pytest

from feedwriter.exceptions import MalformedInputError
from feedwriter.feed import AtomFeed, RSS1Feed, RSS2Feed, create_feed
from feedwriter.item import AtomItem, RSS1Item, RSS2Item
from feedwriter.models import Dialect

LINK = "http://example.com/x"


class TestFeedFactoryUnit:
    """Unit tests for feed and item construction."""

    @pytest.mark.parametrize(
        "dialect, feed_type, item_type",
        [
            (Dialect.ATOM, AtomFeed, AtomItem),
            (Dialect.RSS1, RSS1Feed, RSS1Item),
            (Dialect.RSS2, RSS2Feed, RSS2Item),
        ],
    )
    def test_create_feed_and_item(self, dialect, feed_type, item_type):
        feed = create_feed(dialect)
        item = feed.create_item()

        assert isinstance(feed, feed_type)
        assert isinstance(item, item_type)
        assert item.dialect is dialect
        assert item.logger.build_id == feed.build_id

    def test_create_feed_by_name(self):
        assert isinstance(create_feed("rss2"), RSS2Feed)

    def test_create_item_does_not_add(self):
        feed = RSS2Feed()

        feed.create_item()

        assert feed.items == []

    def test_items_keep_insertion_order(self):
        feed = RSS2Feed()
        for title in ("one", "two", "three"):
            feed.add_item(feed.create_item().set_title(title))

        assert [item.get_title() for item in feed.items] == ["one", "two", "three"]
        assert len(feed) == 3

    def test_foreign_item_is_rejected(self):
        feed = RSS2Feed()
        item = AtomFeed().create_item()

        with pytest.raises(MalformedInputError, match="Cannot add a ATOM item to a RSS2 feed"):
            feed.add_item(item)

        assert feed.items == []

    def test_versions(self):
        assert AtomFeed().version is None
        assert RSS1Feed().version == "1.0"
        assert RSS2Feed().version == "2.0"


class TestChannelGettersUnit:
    """Channel getters never fail and return empty strings for missing data."""

    @pytest.mark.parametrize("feed_type", [AtomFeed, RSS1Feed, RSS2Feed])
    def test_empty_channel(self, feed_type):
        feed = feed_type()

        assert feed.get_date() == ""
        assert feed.get_link() == ""
        assert feed.get_description() == ""
        assert feed.get_title() == ""

    def test_atom_channel(self):
        feed = AtomFeed()
        feed.set_title("Title").set_description("Subtitle").set_link(LINK).set_date(1700000000)

        assert feed.get_title() == "Title"
        assert feed.get_date() == "2023-11-14T22:13:20+00:00"
        assert feed.get_link() == {"href": LINK}
        assert feed.get_description() == ""
        assert feed.get_channel_element("subtitle").content == "Subtitle"
        assert feed.get_channel_element("id").content == (
            "urn:uuid:7a0b7c06-1fa6-2132-20fa-d7e59c5f3049"
        )

    def test_rss1_channel(self):
        feed = RSS1Feed()
        feed.set_description("Description").set_link(LINK).set_date(1700000000)

        assert feed.get_date() == ""
        assert feed.get_link() == LINK
        assert feed.get_description() == "Description"
        assert feed.get_channel_element("dc:date").content == "2023-11-14"

    def test_rss1_channel_about_defaults_to_link(self):
        feed = RSS1Feed().set_link(LINK)

        assert feed.get_channel_about() == LINK

        feed.set_channel_about("http://example.com/rss.rdf")

        assert feed.get_channel_about() == "http://example.com/rss.rdf"

    def test_rss2_channel(self):
        feed = RSS2Feed()
        feed.set_description("Description").set_link(LINK).set_date("2023-11-14T22:13:20Z")

        assert feed.get_date() == "Tue, 14 Nov 2023 22:13:20 +0000"
        assert feed.get_link() == LINK
        assert feed.get_description() == "Description"

    def test_bad_channel_date(self):
        feed = RSS2Feed()

        with pytest.raises(MalformedInputError) as exc_info:
            feed.set_date("not a date")

        assert exc_info.value.dialect is Dialect.RSS2
        assert feed.get_date() == ""


class TestChannelSettersUnit:
    """Unit tests for channel images, self links and custom elements."""

    def test_rss2_image_defaults(self):
        feed = RSS2Feed().set_title("Title").set_link(LINK)

        feed.set_image("http://example.com/logo.png")

        assert feed.get_channel_element("image").content == {
            "url": "http://example.com/logo.png",
            "title": "Title",
            "link": LINK,
        }

    def test_atom_image_is_logo(self):
        feed = AtomFeed().set_image("http://example.com/logo.png")

        assert feed.get_channel_element("logo").content == "http://example.com/logo.png"
        assert feed.get_channel_element("image") is None

    @pytest.mark.parametrize(
        "feed_type, mime_type",
        [
            (AtomFeed, "application/atom+xml"),
            (RSS1Feed, "application/rdf+xml"),
            (RSS2Feed, "application/rss+xml"),
        ],
    )
    def test_self_link(self, feed_type, mime_type):
        feed = feed_type().set_self_link("http://example.com/feed")

        assert feed.get_channel_element("atom:link").attributes == {
            "href": "http://example.com/feed",
            "rel": "self",
            "type": mime_type,
        }

    def test_repeated_channel_element(self):
        feed = RSS2Feed()

        feed.set_channel_element("category", "news", multiple=True)
        feed.set_channel_element("category", "tech", multiple=True)

        assert [element.content for element in feed.channels.get_all("category")] == [
            "news",
            "tech",
        ]
