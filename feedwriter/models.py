"""Data models for feedwriter."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum


class Dialect(str, Enum):
    """Supported syndication dialects."""

    ATOM = "ATOM"
    RSS1 = "RSS 1.0"
    RSS2 = "RSS 2.0"

    @property
    def version(self) -> str | None:
        """Version string written into the document, if the dialect has one."""
        return {Dialect.RSS1: "1.0", Dialect.RSS2: "2.0"}.get(self)

    @property
    def label(self) -> str:
        """Short name used in messages (ATOM, RSS1, RSS2)."""
        return self.name

    @classmethod
    def parse(cls, value: "str | Dialect") -> "Dialect":
        """Resolve a dialect from its value or name, case-insensitively.

        Args:
            value: A Dialect, or a string such as "atom", "RSS2" or "RSS 2.0"

        Returns:
            The matching Dialect

        Raises:
            ValueError: If the string names no dialect
        """
        if isinstance(value, Dialect):
            return value

        wanted = str(value).strip().upper()
        for dialect in cls:
            if wanted in (dialect.name, dialect.value.upper()):
                return dialect

        raise ValueError(f"Unknown feed dialect: {value!r}")


class Capability(str, Enum):
    """Item capabilities that a dialect may or may not support."""

    DESCRIPTION = "description"
    CONTENT = "content"
    TITLE = "title"
    DATE = "date"
    LINK = "link"
    ENCLOSURE = "enclosure"
    AUTHOR = "author"
    ID = "id"


@dataclass
class Element:
    """A single feed element: name, text or sub-fields, and attributes."""

    name: str
    content: str | dict[str, str] = ""
    attributes: dict[str, str] = field(default_factory=dict)
    multiple: bool = False


class ElementMap:
    """Ordered mapping of element name to one Element or a sequence of them.

    Names keep the position of their first insertion. A replacement takes
    over the slot of the value it replaces; repeated elements are kept in
    call order.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Element | list[Element]] = {}

    def add(
        self,
        name: str,
        content: str | Mapping[str, str] = "",
        attributes: Mapping[str, object] | None = None,
        overwrite: bool = False,
        multiple: bool = False,
    ) -> Element:
        """Store an element under ``name``.

        Args:
            name: Element name, possibly prefixed (``dc:date``)
            content: Text content or a mapping of sub-element texts
            attributes: Attribute values, converted to strings
            overwrite: Replace whatever is stored, including a sequence
            multiple: Append to the sequence instead of replacing

        Returns:
            The newly stored Element
        """
        element = Element(
            name=name,
            content=dict(content) if isinstance(content, Mapping) else content,
            attributes={key: str(value) for key, value in (attributes or {}).items()},
            multiple=multiple,
        )

        existing = self._entries.get(name)
        if existing is None or overwrite or not multiple:
            self._entries[name] = element
        elif isinstance(existing, list):
            existing.append(element)
        else:
            self._entries[name] = [existing, element]

        return element

    def get(self, name: str) -> Element | None:
        """Return the first Element stored under ``name``."""
        elements = self.get_all(name)
        return elements[0] if elements else None

    def get_all(self, name: str) -> list[Element]:
        """Return every Element stored under ``name``, in call order."""
        entry = self._entries.get(name)
        if entry is None:
            return []
        if isinstance(entry, list):
            return list(entry)
        return [entry]

    def content(self, name: str, default: str = "") -> str | dict[str, str]:
        """Return the content of the first Element under ``name``."""
        element = self.get(name)
        return element.content if element is not None else default

    def names(self) -> list[str]:
        return list(self._entries)

    def iter_elements(self) -> Iterator[Element]:
        """Yield every stored Element in document order."""
        for name in self._entries:
            yield from self.get_all(name)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"ElementMap({self.names()!r})"
