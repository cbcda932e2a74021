#!/usr/bin/env python
import dataclasses
from typing import Any
from typing import ClassVar
from typing import Dict
from typing import Optional

from lxml import etree
from lxml.etree import _Element

from schedsync.lib import xmlcodec
from schedsync.lib.xmlcodec import FieldKind
from schedsync.lib.xmlcodec import METADATA_KEY
from schedsync.lib.xmlcodec import XmlField


def _field(spec: XmlField, kwargs: Dict[str, Any]) -> Any:
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[METADATA_KEY] = spec
    return dataclasses.field(metadata=metadata, **kwargs)


def element(tag: str, **kwargs) -> Any:
    """A child element named ``tag``, independent of the field name"""
    return _field(XmlField(FieldKind.ELEMENT, tag), kwargs)


def attribute(name: str, **kwargs) -> Any:
    return _field(XmlField(FieldKind.ATTRIBUTE, name), kwargs)


def text(**kwargs) -> Any:
    return _field(XmlField(FieldKind.TEXT), kwargs)


def children(**kwargs) -> Any:
    """
    Ordered sequence of child elements of different kinds.  The field
    should be annotated as ``List[Union[A, B, ...]]``, where each of the
    variants carries its own tag.
    """
    if "default" not in kwargs:
        kwargs.setdefault("default_factory", list)
    return _field(XmlField(FieldKind.CHILDREN), kwargs)


def tags(**kwargs) -> Any:
    """The local names of all child elements, in document order"""
    if "default" not in kwargs:
        kwargs.setdefault("default_factory", list)
    return _field(XmlField(FieldKind.TAGS), kwargs)


class BaseElement:
    """
    Mixin for the element dataclasses.  Subclasses set the tag, the
    codec in schedsync.lib.xmlcodec does the rest.
    """

    tag: ClassVar[Optional[str]] = None

    def __str__(self) -> str:
        utf8 = etree.tostring(
            self.xmlelement(), encoding="utf-8", xml_declaration=True, pretty_print=True
        )
        return str(utf8, "utf-8")

    def xmlelement(self, nsmap: Optional[Dict[str, str]] = None) -> _Element:
        return xmlcodec.to_element(self, nsmap=nsmap)


@dataclasses.dataclass
class Empty:
    """
    Marker for elements that matter by presence only, like
    <d:collection/> inside <d:resourcetype>, or an empty property
    request inside <d:prop>.
    """

    pass
