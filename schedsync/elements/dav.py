#!/usr/bin/env python
from dataclasses import dataclass
from typing import ClassVar
from typing import Generic
from typing import List
from typing import Optional
from typing import TypeVar

from .base import BaseElement
from .base import element
from .base import Empty
from .base import tags
from schedsync.lib.namespace import ns

P = TypeVar("P")


# Operations
@dataclass
class Propfind(BaseElement, Generic[P]):
    tag: ClassVar[str] = ns("D", "propfind")

    prop: P = element(ns("D", "prop"))


# Properties
@dataclass
class CurrentUserPrincipal(BaseElement):
    tag: ClassVar[str] = ns("D", "current-user-principal")

    href: Optional[str] = element(ns("D", "href"), default=None)


@dataclass
class ResourceType(BaseElement):
    tag: ClassVar[str] = ns("D", "resourcetype")

    collection: Optional[Empty] = element(ns("D", "collection"), default=None)
    calendar: Optional[Empty] = element(ns("C", "calendar"), default=None)


@dataclass
class Privilege(BaseElement):
    tag: ClassVar[str] = ns("D", "privilege")

    names: List[str] = tags()


@dataclass
class CurrentUserPrivilegeSet(BaseElement):
    tag: ClassVar[str] = ns("D", "current-user-privilege-set")

    privilege: List[Privilege] = element(ns("D", "privilege"), default_factory=list)

    def names(self) -> List[str]:
        return [name for p in self.privilege for name in p.names]


# Property requests
@dataclass
class PrincipalRequestProp(BaseElement):
    tag: ClassVar[str] = ns("D", "prop")

    current_user_principal: Empty = element(
        ns("D", "current-user-principal"), default_factory=Empty
    )


@dataclass
class PrincipalProp(BaseElement):
    tag: ClassVar[str] = ns("D", "prop")

    current_user_principal: Optional[CurrentUserPrincipal] = element(
        ns("D", "current-user-principal"), default=None
    )


# Responses
@dataclass
class PropStat(BaseElement, Generic[P]):
    tag: ClassVar[str] = ns("D", "propstat")

    status: str = element(ns("D", "status"))
    prop: Optional[P] = element(ns("D", "prop"), default=None)


@dataclass
class Response(BaseElement, Generic[P]):
    tag: ClassVar[str] = ns("D", "response")

    href: str = element(ns("D", "href"))
    propstat: List[PropStat[P]] = element(ns("D", "propstat"), default_factory=list)
    status: Optional[str] = element(ns("D", "status"), default=None)

    def first_propstat(self) -> Optional[PropStat[P]]:
        return self.propstat[0] if self.propstat else None


@dataclass
class MultiStatus(BaseElement, Generic[P]):
    tag: ClassVar[str] = ns("D", "multistatus")

    response: List[Response[P]] = element(ns("D", "response"), default_factory=list)
