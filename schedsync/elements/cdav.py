#!/usr/bin/env python
from dataclasses import dataclass
from typing import ClassVar
from typing import List
from typing import Optional
from typing import Union

from .base import attribute
from .base import BaseElement
from .base import children
from .base import element
from .base import Empty
from .dav import CurrentUserPrivilegeSet
from .dav import ResourceType
from schedsync.lib.namespace import ns


# Components / Data
@dataclass
class CompProp(BaseElement):
    """<c:prop name="..."/> inside a calendar-data request"""

    tag: ClassVar[str] = ns("C", "prop")

    name: str = attribute("name")


@dataclass
class Comp(BaseElement):
    tag: ClassVar[str] = ns("C", "comp")

    name: str = attribute("name")
    children: List[Union["Comp", CompProp]] = children()


@dataclass
class CalendarData(BaseElement):
    tag: ClassVar[str] = ns("C", "calendar-data")

    comp: Comp = element(ns("C", "comp"))


@dataclass
class SupportedComp(BaseElement):
    """<c:comp name="..."/> as reported by the server, the name may be missing"""

    tag: ClassVar[str] = ns("C", "comp")

    name: Optional[str] = attribute("name", default=None)


@dataclass
class SupportedCalendarComponentSet(BaseElement):
    tag: ClassVar[str] = ns("C", "supported-calendar-component-set")

    comp: List[SupportedComp] = element(ns("C", "comp"), default_factory=list)

    def names(self) -> List[str]:
        return [c.name for c in self.comp if c.name is not None]


# Filters
@dataclass
class CompFilter(BaseElement):
    tag: ClassVar[str] = ns("C", "comp-filter")

    name: str = attribute("name")
    comp_filter: Optional["CompFilter"] = element(ns("C", "comp-filter"), default=None)


@dataclass
class Filter(BaseElement):
    tag: ClassVar[str] = ns("C", "filter")

    comp_filter: CompFilter = element(ns("C", "comp-filter"))


# Property requests
@dataclass
class CalendarRequestProp(BaseElement):
    tag: ClassVar[str] = ns("D", "prop")

    current_user_privilege_set: Empty = element(
        ns("D", "current-user-privilege-set"), default_factory=Empty
    )
    displayname: Empty = element(ns("D", "displayname"), default_factory=Empty)
    calendar_description: Empty = element(
        ns("C", "calendar-description"), default_factory=Empty
    )
    resourcetype: Empty = element(ns("D", "resourcetype"), default_factory=Empty)
    source: Empty = element(ns("CS", "source"), default_factory=Empty)
    calendar_color: Empty = element(ns("I", "calendar-color"), default_factory=Empty)
    supported_calendar_component_set: Empty = element(
        ns("C", "supported-calendar-component-set"), default_factory=Empty
    )
    calendar_timezone: Empty = element(
        ns("C", "calendar-timezone"), default_factory=Empty
    )


@dataclass
class EventRequestProp(BaseElement):
    tag: ClassVar[str] = ns("D", "prop")

    calendar_data: CalendarData = element(ns("C", "calendar-data"))
    getetag: Empty = element(ns("D", "getetag"), default_factory=Empty)


# Operations
@dataclass
class CalendarQuery(BaseElement):
    tag: ClassVar[str] = ns("C", "calendar-query")

    prop: EventRequestProp = element(ns("D", "prop"))
    filter: Filter = element(ns("C", "filter"))


# Properties returned by the server
@dataclass
class CalendarProp(BaseElement):
    tag: ClassVar[str] = ns("D", "prop")

    displayname: Optional[str] = element(ns("D", "displayname"), default=None)
    resourcetype: Optional[ResourceType] = element(
        ns("D", "resourcetype"), default=None
    )
    privileges: Optional[CurrentUserPrivilegeSet] = element(
        ns("D", "current-user-privilege-set"), default=None
    )
    calendar_color: Optional[str] = element(ns("I", "calendar-color"), default=None)
    components: Optional[SupportedCalendarComponentSet] = element(
        ns("C", "supported-calendar-component-set"), default=None
    )
    description: Optional[str] = element(ns("C", "calendar-description"), default=None)


@dataclass
class EventProp(BaseElement):
    tag: ClassVar[str] = ns("D", "prop")

    getetag: Optional[str] = element(ns("D", "getetag"), default=None)
    calendar_data: Optional[str] = element(ns("C", "calendar-data"), default=None)
