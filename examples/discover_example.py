#!/usr/bin/env python3
"""
Example usage of RFC 6764 service discovery.

Run with an email address as the argument:

    python examples/discover_example.py user@example.com
"""
import asyncio
import sys

from davdiscovery import AsyncServiceDiscoverer, DiscoveryError, ServiceDiscoverer

email = sys.argv[1] if len(sys.argv) > 1 else "user@example.com"

# Example 1: Discover both CalDAV and CardDAV
print("Example 1: CalDAV and CardDAV, TLS preferred")
print("-" * 70)
try:
    urls = ServiceDiscoverer(timeout=5).discover(email)
    print(f"CalDAV URL:  {urls.get('caldav', '(not found)')}")
    print(f"CardDAV URL: {urls.get('carddav', '(not found)')}")
except DiscoveryError as e:
    print(f"Discovery failed: {e}")

print("\n")

# Example 2: Only https endpoints, only CalDAV, with details
print("Example 2: Only https, only CalDAV")
print("-" * 70)
try:
    discoverer = ServiceDiscoverer(secure_only=True)
    for service, info in discoverer.discover_services(email, check_carddav=False).items():
        print(f"{service.value}: {info}")
except DiscoveryError as e:
    print(f"Discovery failed: {e}")

print("\n")

# Example 3: asyncio
print("Example 3: asyncio")
print("-" * 70)


async def main():
    return await AsyncServiceDiscoverer().discover(email)


try:
    print(asyncio.run(main()))
except DiscoveryError as e:
    print(f"Discovery failed: {e}")
