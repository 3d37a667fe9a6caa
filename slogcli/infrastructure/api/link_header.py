"""Decoder for Sentry's cursor `link` header.

Sentry paginates with an RFC 5988 style header carrying two extra
attributes, e.g.::

    <https://sentry.io/api/0/organizations/acme/issues/?&cursor=0:0:1>;
        rel="previous"; results="false"; cursor="0:0:1",
    <https://sentry.io/api/0/organizations/acme/issues/?&cursor=0:100:0>;
        rel="next"; results="true"; cursor="0:100:0"

`results` says whether following the cursor yields anything. The URL itself
is ignored; only the cursor token is reused. Tokenizing is left to httpx
(`Response.links`); this module only validates the parsed links.
"""

from typing import Dict, Mapping, Optional

import httpx

from slogcli.domain.models.common import CursorLink, PaginationLinks

_RELATIONS = ("next", "previous")


def decode_links(links: Mapping[str, Mapping[str, str]]) -> PaginationLinks:
    """Builds next/previous cursors from `httpx.Response.links`.

    Links lacking `rel`, `results` or `cursor`, or whose `rel` is not
    next/previous, are dropped.
    """
    found: Dict[str, CursorLink] = {}
    for link in links.values():
        attrs = {str(key).lower(): value for key, value in link.items()}
        rel = attrs.get("rel")
        results = attrs.get("results")
        cursor = attrs.get("cursor")
        if rel not in _RELATIONS or results is None or not cursor:
            continue
        found[rel] = CursorLink(cursor=cursor, has_more=results == "true")

    return PaginationLinks(next=found.get("next"), previous=found.get("previous"))


def decode_link_header(header: Optional[str]) -> PaginationLinks:
    """Parses a raw `link` header value into next/previous cursors.

    Never raises; a header with nothing usable decodes to empty links,
    which ends pagination.
    """
    if not header:
        return PaginationLinks()
    return decode_links(httpx.Response(200, headers={"link": header}).links)
