#!/usr/bin/env python
from typing import Dict
from typing import Optional

nsmap: Dict[str, str] = {
    "D": "DAV:",
    "C": "urn:ietf:params:xml:ns:caldav",
    "CS": "http://calendarserver.org/ns/",
    "I": "http://apple.com/ns/ical/",
}

## Prefixes as they go out on the wire.  iCloud and friends don't care
## about the prefixes, but some servers echo them back in error bodies,
## so we stick to the ones everybody else is using.
propfind_nsmap: Dict[str, str] = {
    "d": nsmap["D"],
    "cal": nsmap["C"],
    "cs": nsmap["CS"],
    "apple": nsmap["I"],
}

calendar_query_nsmap: Dict[str, str] = {
    "c": nsmap["C"],
    "d": nsmap["D"],
}


def ns(prefix: str, tag: Optional[str] = None) -> str:
    name = "{%s}" % nsmap[prefix]
    if tag is not None:
        name = "%s%s" % (name, tag)
    return name
