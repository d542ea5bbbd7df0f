"""Thin helpers over lxml shared by the request builders and the response parser.

Call sites never index into repeated elements directly: ``children`` always
returns a list, whether the document holds zero, one or many matches.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, List, Optional, Union

from lxml import etree

_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, remove_blank_text=True)


def wire_value(value: Any) -> str:
    """Render a Python value the way SmarterU expects it on the wire.

    Booleans are sent as ``"1"`` / ``"0"``; enums as their value; ``None`` as
    an empty string.
    """

    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def add_child(parent: etree._Element, tag: str, value: Any = None) -> etree._Element:
    """Append ``<tag>`` to ``parent``; set its text unless ``value`` is None."""

    child = etree.SubElement(parent, tag)
    if value is not None:
        child.text = wire_value(value)
    return child


def add_list(parent: etree._Element, tag: str, item_tag: str, values: Iterable[Any]) -> etree._Element:
    container = etree.SubElement(parent, tag)
    for value in values:
        add_child(container, item_tag, value)
    return container


def to_string(element: etree._Element) -> str:
    return etree.tostring(element, encoding="unicode")


def parse(document: Union[str, bytes]) -> etree._Element:
    """Parse an XML document; raises ``etree.XMLSyntaxError`` when malformed."""

    if isinstance(document, str):
        document = document.encode("utf-8")
    return etree.fromstring(document, parser=_PARSER)


def child(element: Optional[etree._Element], tag: str) -> Optional[etree._Element]:
    if element is None:
        return None
    return element.find(tag)


def children(element: Optional[etree._Element], tag: Optional[str] = None) -> List[etree._Element]:
    """Return the direct children of ``element`` (named ``tag`` if given) as a list."""

    if element is None:
        return []
    if tag is None:
        return [node for node in element if isinstance(node.tag, str)]
    return element.findall(tag)


def text(element: Optional[etree._Element], tag: Optional[str] = None) -> str:
    """Return the stripped text of ``element`` (or of its child ``tag``); ``""`` when absent."""

    node = child(element, tag) if tag is not None else element
    if node is None or node.text is None:
        return ""
    return node.text.strip()


def texts(element: Optional[etree._Element], tag: str) -> List[str]:
    return [text(node) for node in children(element, tag)]
