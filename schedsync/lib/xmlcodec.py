#!/usr/bin/env python
"""
Typed XML serialization for the WebDAV/CalDAV element dataclasses.

The element classes in schedsync.elements are plain dataclasses carrying a
``tag`` class variable (Clark notation, see schedsync.lib.namespace.ns).
Each dataclass field is declared with one of the helpers in
schedsync.elements.base, telling the codec how it maps to XML:

* element(tag) - a child element (dataclass, scalar, list or optional)
* attribute(name) - an attribute on the element itself
* text() - the text content of the element itself
* children() - an ordered, heterogeneous sequence of child elements, the
  variant being picked by the tag of each child
* tags() - the local names of all child elements

Generic element classes (like ``MultiStatus[P]``) are supported, the type
variables are bound from the parameterized type given to decode().
"""
import dataclasses
import functools
import logging
import sys
from enum import Enum
from typing import Any
from typing import Dict
from typing import get_args
from typing import get_origin
from typing import get_type_hints
from typing import List
from typing import Optional
from typing import Tuple
from typing import Type
from typing import TypeVar
from typing import Union

from lxml import etree
from lxml.etree import _Element

from schedsync.lib import error

log = logging.getLogger(__name__)

T = TypeVar("T")

METADATA_KEY = "xml"

if sys.version_info >= (3, 10):
    import types

    _UNION_TYPES: Tuple[Any, ...] = (Union, types.UnionType)
else:
    _UNION_TYPES = (Union,)


class FieldKind(Enum):
    ELEMENT = "element"
    ATTRIBUTE = "attribute"
    TEXT = "text"
    CHILDREN = "children"
    TAGS = "tags"


@dataclasses.dataclass(frozen=True)
class XmlField:
    kind: FieldKind
    name: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class _FieldInfo:
    name: str
    spec: XmlField
    type: Any
    has_default: bool


@functools.lru_cache(maxsize=None)
def _fields_of(cls: type) -> Tuple[_FieldInfo, ...]:
    hints = get_type_hints(cls)
    infos = []
    for f in dataclasses.fields(cls):
        spec = f.metadata.get(METADATA_KEY)
        if spec is None:
            spec = XmlField(FieldKind.ELEMENT, f.name.replace("_", "-"))
        has_default = (
            f.default is not dataclasses.MISSING
            or f.default_factory is not dataclasses.MISSING
        )
        infos.append(_FieldInfo(f.name, spec, hints[f.name], has_default))
    return tuple(infos)


def _unwrap_optional(tp: Any) -> Tuple[Any, bool]:
    if get_origin(tp) in _UNION_TYPES:
        args = get_args(tp)
        rest = tuple(a for a in args if a is not type(None))
        if len(rest) < len(args):
            if len(rest) == 1:
                return rest[0], True
            return Union[rest], True
    return tp, False


def _is_list(tp: Any) -> bool:
    return get_origin(tp) in (list, List)


def _resolve(tp: Any, typevars: Dict[Any, Any]) -> Any:
    if isinstance(tp, TypeVar):
        if tp not in typevars:
            raise error.DeserializationError("unbound type variable %s" % tp)
        return typevars[tp]
    return tp


def _class_of(tp: Any, typevars: Dict[Any, Any]) -> Tuple[Any, Dict[Any, Any]]:
    """Split a possibly parameterized dataclass type into class and bindings"""
    tp = _resolve(tp, typevars)
    origin = get_origin(tp)
    if origin is not None and dataclasses.is_dataclass(origin):
        params = getattr(origin, "__parameters__", ())
        args = [_resolve(a, typevars) for a in get_args(tp)]
        return origin, dict(zip(params, args))
    return tp, {}


def _variants(tp: Any, typevars: Dict[Any, Any]) -> Dict[str, Any]:
    if _is_list(tp):
        tp = get_args(tp)[0]
    tp = _resolve(tp, typevars)
    members = get_args(tp) if get_origin(tp) in _UNION_TYPES else (tp,)
    variants = {}
    for member in members:
        cls, _ = _class_of(member, typevars)
        tag = getattr(cls, "tag", None)
        if tag is None:
            raise error.DeserializationError("variant %r has no tag" % (cls,))
        variants[tag] = member
    return variants


def _scalar(text: Optional[str], tp: Any) -> Any:
    if tp is int:
        return int((text or "").strip())
    if text is None:
        return ""
    return text


def _children(element: _Element) -> List[_Element]:
    ## comments and processing instructions have a non-string tag
    return [c for c in element if isinstance(c.tag, str)]


# Encoding


def _text(value: Any) -> Optional[str]:
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    text = str(value)
    return text or None


def _new_element(
    tag: str, parent: Optional[_Element], nsmap: Optional[Dict[str, str]]
) -> _Element:
    if parent is None:
        return etree.Element(tag, nsmap=nsmap)
    return etree.SubElement(parent, tag)


def _encode_into(
    value: Any,
    tag: str,
    parent: Optional[_Element],
    nsmap: Optional[Dict[str, str]] = None,
) -> _Element:
    element = _new_element(tag, parent, nsmap)
    if not dataclasses.is_dataclass(value):
        element.text = _text(value)
        return element

    for info in _fields_of(type(value)):
        field_value = getattr(value, info.name)
        if field_value is None:
            continue
        kind = info.spec.kind
        if kind is FieldKind.ATTRIBUTE:
            element.set(info.spec.name, str(field_value))
        elif kind is FieldKind.TEXT:
            element.text = _text(field_value)
        elif kind is FieldKind.TAGS:
            for name in field_value:
                etree.SubElement(element, name)
        elif kind is FieldKind.CHILDREN:
            for item in field_value:
                to_element(item, parent=element)
        else:
            items = field_value if isinstance(field_value, list) else [field_value]
            for item in items:
                _encode_into(item, info.spec.name, element)
    return element


def to_element(
    value: Any,
    nsmap: Optional[Dict[str, str]] = None,
    parent: Optional[_Element] = None,
) -> _Element:
    """Build the lxml element tree for an element dataclass instance"""
    tag = getattr(type(value), "tag", None)
    if tag is None:
        raise error.SerializationError(
            "%s has no tag and cannot be a standalone element" % type(value).__name__
        )
    return _encode_into(value, tag, parent, nsmap)


def encode(
    value: Any,
    nsmap: Optional[Dict[str, str]] = None,
    pretty_print: bool = False,
) -> bytes:
    """
    Serialize an element dataclass instance to an UTF-8 XML document.

    Args:
        value: instance of a dataclass having a ``tag`` class variable
        nsmap: namespace prefixes to declare on the root element

    Raises:
        SerializationError, with the underlying exception as ``cause``
    """
    try:
        root = to_element(value, nsmap=nsmap)
        return etree.tostring(
            root, encoding="utf-8", xml_declaration=True, pretty_print=pretty_print
        )
    except error.SerializationError:
        raise
    except (TypeError, ValueError, AttributeError) as err:
        raise error.SerializationError(
            "could not serialize %s" % type(value).__name__, cause=err
        ) from err


# Decoding


def _decode_element(element: _Element, tp: Any, typevars: Dict[Any, Any]) -> Any:
    cls, typevars = _class_of(tp, typevars)
    if not dataclasses.is_dataclass(cls):
        return _scalar(element.text, cls)

    kwargs: Dict[str, Any] = {}
    for info in _fields_of(cls):
        inner, optional = _unwrap_optional(_resolve(info.type, typevars))
        kind = info.spec.kind
        value: Any = None

        if kind is FieldKind.ATTRIBUTE:
            raw = element.get(info.spec.name)
            if raw is not None:
                value = _scalar(raw, inner)
        elif kind is FieldKind.TEXT:
            if element.text is not None or not optional:
                value = _scalar(element.text, inner)
        elif kind is FieldKind.TAGS:
            value = [etree.QName(c).localname for c in _children(element)]
        elif kind is FieldKind.CHILDREN:
            variants = _variants(inner, typevars)
            value = []
            for child in _children(element):
                variant = variants.get(child.tag)
                if variant is None:
                    log.debug("ignoring unexpected element %s in %s", child.tag, element.tag)
                    continue
                value.append(_decode_element(child, variant, typevars))
        else:
            matches = [c for c in _children(element) if c.tag == info.spec.name]
            if _is_list(inner):
                item_type = get_args(inner)[0]
                value = [_decode_element(c, item_type, typevars) for c in matches]
            elif matches:
                value = _decode_element(matches[0], inner, typevars)

        if value is None:
            if info.has_default:
                continue
            if optional:
                kwargs[info.name] = None
                continue
            raise error.DeserializationError(
                "required %s %s missing in %s"
                % (kind.value, info.spec.name or info.name, element.tag)
            )
        kwargs[info.name] = value
    return cls(**kwargs)


def decode(cls: Type[T], data: Union[str, bytes], huge_tree: bool = False) -> T:
    """
    Parse an XML document into an instance of the given element dataclass.

    Optional fields whose element is missing are set to None, list fields
    to an empty list.  ``cls`` may be a parameterized generic, like
    ``MultiStatus[CalendarProp]``.

    Raises:
        DeserializationError, with the underlying exception as ``cause``
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    try:
        parser = etree.XMLParser(remove_blank_text=True, huge_tree=huge_tree)
        root = etree.fromstring(data, parser)
    except (etree.XMLSyntaxError, ValueError) as err:
        raise error.DeserializationError("body is not well-formed XML", cause=err) from err
    if root is None:
        raise error.DeserializationError("empty XML document")

    origin, _ = _class_of(cls, {})
    expected = getattr(origin, "tag", None)
    if expected is not None and root.tag != expected:
        raise error.DeserializationError(
            "expected root element %s, got %s" % (expected, root.tag)
        )
    try:
        return _decode_element(root, cls, {})
    except error.DeserializationError:
        raise
    except (TypeError, ValueError) as err:
        raise error.DeserializationError(
            "could not decode %s" % getattr(origin, "__name__", origin), cause=err
        ) from err
