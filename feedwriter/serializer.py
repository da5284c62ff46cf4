"""Markup serializer turning a populated Feed into an XML document."""

import xml.etree.ElementTree as ET

from .config import Config, SerializerConfig
from .exceptions import MalformedInputError
from .feed import Feed, RSS1Feed
from .item import Item
from .logging_config import create_build_logger
from .models import Dialect, Element

ATOM_NS = "http://www.w3.org/2005/Atom"
RSS1_NS = "http://purl.org/rss/1.0/"
RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
DC_NS = "http://purl.org/dc/elements/1.1/"

# Prefixes always declared on the root element of each dialect
DIALECT_NAMESPACES: dict[Dialect, dict[str, str]] = {
    Dialect.ATOM: {},
    Dialect.RSS1: {"rdf": RDF_NS, "dc": DC_NS},
    Dialect.RSS2: {"dc": DC_NS},
}

# Prefixes declared only when an element uses them. An xmlns:atom
# declaration on an RSS root makes readers sniff the document as Atom.
OPTIONAL_NAMESPACES: dict[str, str] = {"atom": ATOM_NS}


class FeedSerializer:
    """Emits ATOM, RSS 1.0 and RSS 2.0 documents.

    Element and attribute names are written exactly as stored on the feed
    and its items; prefixed names must use a prefix declared for the
    dialect or registered with ``Feed.add_namespace``.
    """

    def __init__(self, config: SerializerConfig | None = None):
        """Initialize the serializer.

        Args:
            config: Serializer settings, read from the environment if omitted
        """
        self.config = config or Config().get_serializer_config()

    def serialize(self, feed: Feed) -> str:
        """Serialize a feed into an XML document.

        Args:
            feed: The finished feed

        Returns:
            The XML document, including its declaration

        Raises:
            MalformedInputError: If an element uses an undeclared prefix, an
                RSS1 channel or item has no link, or the encoding is unknown
        """
        logger = create_build_logger("serializer", feed.build_id)
        logger.log_build_start(dialect=feed.dialect.label, items_count=len(feed.items))

        builders = {
            Dialect.ATOM: self._build_atom,
            Dialect.RSS1: self._build_rss1,
            Dialect.RSS2: self._build_rss2,
        }

        try:
            root = builders[feed.dialect](feed)
            if self.config.pretty_print:
                ET.indent(root)
            body = self._encode(ET.tostring(root, encoding="unicode"))
        except MalformedInputError as e:
            logger.log_rejection(e, dialect=feed.dialect.label, parameter=e.parameter)
            logger.log_build_end(success=False)
            raise

        document = f'<?xml version="1.0" encoding="{self.config.encoding}"?>\n{body}\n'

        logger.log_build_end(
            success=True,
            items_count=len(feed.items),
            document_length=len(document),
        )
        return document

    def _encode(self, body: str) -> str:
        # Characters the declared encoding lacks become character references
        try:
            return body.encode(self.config.encoding, "xmlcharrefreplace").decode(
                self.config.encoding
            )
        except LookupError as e:
            raise MalformedInputError(
                f"Unknown output encoding '{self.config.encoding}'.", parameter="encoding"
            ) from e

    def _build_atom(self, feed: Feed) -> ET.Element:
        namespaces = self._namespaces(feed)
        root = ET.Element("feed", {"xmlns": ATOM_NS})
        self._declare(root, namespaces)

        for element in feed.channels.iter_elements():
            self._append(root, element, self._atom_tag(element.name, namespaces))

        self._append_generator(root, feed)

        for item in feed.items:
            entry = ET.SubElement(root, "entry")
            for element in item.elements.iter_elements():
                self._append(entry, element, self._atom_tag(element.name, namespaces))

        return root

    def _build_rss2(self, feed: Feed) -> ET.Element:
        namespaces = self._namespaces(feed)
        root = ET.Element("rss", {"version": feed.version})
        self._declare(root, namespaces)
        channel = ET.SubElement(root, "channel")

        for element in feed.channels.iter_elements():
            self._append(channel, element, self._tag(element.name, namespaces))

        self._append_generator(channel, feed)

        for item in feed.items:
            item_node = ET.SubElement(channel, "item")
            for element in item.elements.iter_elements():
                self._append(item_node, element, self._tag(element.name, namespaces))

        return root

    def _build_rss1(self, feed: RSS1Feed) -> ET.Element:
        namespaces = self._namespaces(feed)
        # The default namespace comes first so readers detect RSS 1.0
        root = ET.Element("rdf:RDF", {"xmlns": RSS1_NS})
        self._declare(root, namespaces)

        about = feed.get_channel_about()
        if not about:
            raise MalformedInputError(
                "An RSS1 channel needs a link or an rdf:about URI.",
                parameter="link",
                dialect=feed.dialect,
            )

        channel = ET.SubElement(root, "channel", {"rdf:about": about})
        image = feed.channels.get("image")

        for element in feed.channels.iter_elements():
            if element.name == "image":
                ET.SubElement(channel, "image", {"rdf:resource": self._image_url(element)})
                continue
            self._append(channel, element, self._tag(element.name, namespaces))

        sequence = ET.SubElement(ET.SubElement(channel, "items"), "rdf:Seq")
        for item in feed.items:
            ET.SubElement(sequence, "rdf:li", {"rdf:resource": self._item_about(item)})

        # RSS 1.0 keeps the image and the items outside of the channel
        if image is not None:
            self._append(root, image, "image").set("rdf:about", self._image_url(image))

        for item in feed.items:
            item_node = ET.SubElement(root, "item", {"rdf:about": self._item_about(item)})
            for element in item.elements.iter_elements():
                self._append(item_node, element, self._tag(element.name, namespaces))

        return root

    def _append(self, parent: ET.Element, element: Element, tag: str) -> ET.Element:
        node = ET.SubElement(parent, tag, dict(element.attributes))

        if isinstance(element.content, dict):
            for name, text in element.content.items():
                ET.SubElement(node, name).text = text
        elif element.content:
            node.text = element.content

        return node

    def _append_generator(self, parent: ET.Element, feed: Feed) -> None:
        if self.config.generator and "generator" not in feed.channels:
            ET.SubElement(parent, "generator").text = self.config.generator

    def _namespaces(self, feed: Feed) -> dict[str, str]:
        namespaces = dict(DIALECT_NAMESPACES[feed.dialect])

        if feed.dialect is not Dialect.ATOM:
            used = {
                element.name.rpartition(":")[0]
                for elements in [feed.channels, *(item.elements for item in feed.items)]
                for element in elements.iter_elements()
            }
            for prefix, uri in OPTIONAL_NAMESPACES.items():
                if prefix in used:
                    namespaces[prefix] = uri

        return {**namespaces, **feed.namespaces}

    def _declare(self, root: ET.Element, namespaces: dict[str, str]) -> None:
        for prefix, uri in namespaces.items():
            root.set(f"xmlns:{prefix}", uri)

    def _tag(self, name: str, namespaces: dict[str, str]) -> str:
        prefix, _, _ = name.rpartition(":")
        if prefix and prefix not in namespaces:
            raise MalformedInputError(
                f"Element '{name}' uses the undeclared namespace prefix '{prefix}'.",
                parameter="name",
            )
        return name

    def _atom_tag(self, name: str, namespaces: dict[str, str]) -> str:
        # The Atom namespace is the document default
        if name.startswith("atom:"):
            return name[len("atom:"):]
        return self._tag(name, namespaces)

    def _image_url(self, element: Element) -> str:
        if isinstance(element.content, dict):
            return element.content.get("url", "")
        return element.content

    def _item_about(self, item: Item) -> str:
        about = item.elements.content("link")
        if not about:
            raise MalformedInputError(
                "Every RSS1 item needs a link, used as its rdf:about URI.",
                parameter="link",
                dialect=item.dialect,
            )
        return about
