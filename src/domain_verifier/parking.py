"""
Parking classifier.

Detects domains pointed at placeholder advertising or for-sale landing
services, using fixed catalogs of known parking nameserver suffixes and
parking IP prefixes. The catalogs are immutable module constants, so the
classifier is safe to call from any number of concurrent tasks.

IP matching is a plain string prefix comparison, not CIDR containment:
"91.195.240." matches 91.195.240.0/24 exactly, but a prefix without a
trailing dot would also match unrelated addresses.
"""

from typing import Iterable, Optional

# Hostname suffixes of known parking nameserver providers
PARKING_NAMESERVER_SUFFIXES: tuple[str, ...] = (
    "sedoparking.com",
    "bodis.com",
    "parkingcrew.net",
    "above.com",
    "pendingrenewaldeletion.com",
    "parklogic.com",
    "parkitonline.com",
    "domainparking.com",
    "hugedomains.com",
    "afternic.com",
    "undeveloped.com",
    "dan.com",
    "uniregistry.com",
    "domaincontrol.com",
    "registrar-servers.com",
    "namebrightdns.com",
    "dns-parking.com",
    "ztomy.com",
)

# IPv4 string prefixes of known parking services
PARKING_IP_PREFIXES: tuple[str, ...] = (
    # Sedo
    "52.119.124.",
    # GoDaddy parking
    "34.102.136.",
    "184.168.131.",
    # Bodis
    "199.59.242.",
    "199.59.243.",
    # ParkingCrew / Freenom
    "104.219.248.",
    "104.219.249.",
    # Sedoparking
    "91.195.240.",
    "91.195.241.",
    # Above.com
    "66.96.149.",
    # HugeDomains
    "65.55.72.",
    # Team Internet / ParkLogic
    "185.53.178.",
    "185.53.179.",
)


def _match_nameserver(host: str) -> Optional[str]:
    lower = host.lower().rstrip(".")
    for suffix in PARKING_NAMESERVER_SUFFIXES:
        if lower.endswith(suffix):
            return suffix
    return None


def _match_ip(ip: str) -> Optional[str]:
    for prefix in PARKING_IP_PREFIXES:
        if ip.startswith(prefix):
            return prefix
    return None


def is_parking_nameserver(ns_hosts: Iterable[str]) -> bool:
    """Report whether any nameserver matches a parking provider suffix."""
    return any(_match_nameserver(host) for host in ns_hosts)


def is_parking_ip(ipv4s: Iterable[str]) -> bool:
    """Report whether any IPv4 address matches a parking IP prefix."""
    return any(_match_ip(ip) for ip in ipv4s)


def classify_parked(ns_hosts: Iterable[str], ipv4s: Iterable[str]) -> bool:
    """
    Classify a domain as parked.

    Args:
        ns_hosts: Nameserver hostnames of the domain
        ipv4s: IPv4 addresses from the domain's A records

    Returns:
        True on the first nameserver or IP catalog match, False otherwise
    """
    return is_parking_nameserver(ns_hosts) or is_parking_ip(ipv4s)


def parking_provider(
    ns_hosts: Iterable[str], ipv4s: Iterable[str]
) -> Optional[str]:
    """Return the first matching catalog entry, e.g. "ns:bodis.com"."""
    for host in ns_hosts:
        suffix = _match_nameserver(host)
        if suffix:
            return f"ns:{suffix}"
    for ip in ipv4s:
        prefix = _match_ip(ip)
        if prefix:
            return f"ip:{prefix}"
    return None
