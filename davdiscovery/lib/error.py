#!/usr/bin/env python
import logging
import os
from typing import Optional

from davdiscovery import __version__

## Environmental variables prepended with "DAVDISCOVERY_" are read here and
## in davdiscovery.config.  DEBUGMODE is one of DEBUG_PDB, DEBUG, DEVELOPMENT, PRODUCTION
try:
    debugmode = os.environ["DAVDISCOVERY_DEBUGMODE"]
except KeyError:
    if "dev" in __version__ or __version__ == "(unknown)":
        debugmode = "DEVELOPMENT"
    else:
        debugmode = "PRODUCTION"

log = logging.getLogger("davdiscovery")
if debugmode.startswith("DEBUG"):
    log.setLevel(logging.DEBUG)
else:
    log.setLevel(logging.WARNING)


def assert_(condition: object) -> None:
    try:
        assert condition
    except AssertionError:
        if debugmode == "PRODUCTION":
            log.error(
                "Deviation from expectations found.  %s" % ERR_FRAGMENT, exc_info=True
            )
        elif debugmode == "DEBUG_PDB":
            log.error("Deviation from expectations found.  Dropping into debugger")
            import pdb

            pdb.set_trace()
        else:
            raise


ERR_FRAGMENT: str = "Please consider raising an issue, include this error, the traceback (if any) and the DNS records published for the domain"


class DiscoveryError(Exception):
    domain: Optional[str] = None
    reason: str = "no reason"

    def __init__(
        self, domain: Optional[str] = None, reason: Optional[str] = None
    ) -> None:
        if domain:
            self.domain = domain
        if reason:
            self.reason = reason

    def __str__(self) -> str:
        return "%s for '%s', reason %s" % (
            self.__class__.__name__,
            self.domain,
            self.reason,
        )


class InvalidInputError(DiscoveryError):
    """
    The email address given has no domain part.  Raised before any DNS
    query is sent.
    """

    pass


class ConfigurationError(DiscoveryError):
    """
    The options given can't lead to any lookup, i.e. both check_caldav
    and check_carddav are off, or an unknown override was passed.
    """

    pass


class DispatchError(DiscoveryError):
    """
    The resolver failed to send a query.  The whole discovery is aborted,
    no partial result is returned.
    """

    pass
