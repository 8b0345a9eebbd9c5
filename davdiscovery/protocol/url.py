"""
URL synthesis from a selected SRV/TXT record pair.
"""

from typing import Optional

from davdiscovery.protocol.types import Selection, ServiceInfo, TXTRecord

PATH_ATTRIBUTE = "path="


def txt_path(txt: Optional[TXTRecord]) -> Optional[str]:
    """
    Extract the context path from a TXT record.

    According to RFC 6764 the TXT record holds attribute=value strings;
    the ``path`` attribute name is matched case-insensitively.

    Examples:
        >>> txt_path(TXTRecord("_caldavs._tcp.example.net", ("path=/dav/",)))
        '/dav/'
        >>> txt_path(TXTRecord("_caldavs._tcp.example.net", ("PATH=dav",)))
        '/dav'
        >>> txt_path(None) is None
        True
    """
    if txt is None:
        return None
    for string in txt.strings:
        if string.lower().startswith(PATH_ATTRIBUTE):
            path = string[len(PATH_ATTRIBUTE) :]
            if not path.startswith("/"):
                path = "/" + path
            return path
    return None


def port_part(port: int, secure: bool) -> str:
    """
    ``:<port>``, or nothing for the default port of the scheme.

    >>> port_part(443, True)
    ''
    >>> port_part(443, False)
    ':443'
    """
    if (port == 80 and not secure) or (port == 443 and secure):
        return ""
    return f":{port}"


def service_info(selection: Selection) -> ServiceInfo:
    """Build the ServiceInfo (including the URL) for a selection."""
    secure = selection.secure
    protocol = "https" if secure else "http"
    srv = selection.srv
    path = txt_path(selection.txt) or selection.service.well_known_path
    url = f"{protocol}://{srv.target}{port_part(srv.port, secure)}{path}"
    return ServiceInfo(
        url=url,
        hostname=srv.target,
        port=srv.port,
        path=path,
        tls=secure,
        priority=srv.priority,
        weight=srv.weight,
        source="srv",
    )


def service_url(selection: Selection) -> str:
    """
    Synthesize the service URL for a selection.

    >>> from davdiscovery.protocol.types import ServiceKind, SRVRecord
    >>> owner = "_caldav._tcp.example.net"
    >>> srv = SRVRecord(owner, 0, 0, "cal.example.net", 8008)
    >>> service_url(Selection(ServiceKind.CALDAV, owner, srv))
    'http://cal.example.net:8008/.well-known/caldav'
    """
    return service_info(selection).url
