"""
TLD Registry - WHOIS servers for the top-level domains we know about.

Unknown TLDs fall back to whois.nic.<tld>, which many newer registries
operate. The table is read-only process-wide state.
"""

from types import MappingProxyType
from typing import Mapping, Optional

# ============================================================================
# GENERIC TLDs (gTLDs)
# ============================================================================
GENERIC_SERVERS = {
    "com": "whois.verisign-grs.com",
    "net": "whois.verisign-grs.com",
    "org": "whois.pir.org",
    "info": "whois.afilias.net",
    "biz": "whois.biz",
    "name": "whois.nic.name",
    "mobi": "whois.afilias.net",
    "pro": "whois.afilias.net",
}

# ============================================================================
# NEW gTLDs
# ============================================================================
NEW_GENERIC_SERVERS = {
    "io": "whois.nic.io",
    "co": "whois.nic.co",
    "app": "whois.nic.google",
    "dev": "whois.nic.google",
    "ai": "whois.nic.ai",
    "xyz": "whois.nic.xyz",
    "tech": "whois.centralnic.com",
    "online": "whois.centralnic.com",
    "site": "whois.centralnic.com",
    "store": "whois.centralnic.com",
    "shop": "whois.nic.shop",
    "club": "whois.nic.club",
    "live": "whois.donuts.co",
    "digital": "whois.donuts.co",
    "top": "whois.nic.top",
}

# ============================================================================
# COUNTRY CODE TLDs (ccTLDs)
# ============================================================================
COUNTRY_SERVERS = {
    "us": "whois.nic.us",
    "me": "whois.nic.me",
    "uk": "whois.nic.uk",
    "de": "whois.denic.de",
    "fr": "whois.nic.fr",
    "eu": "whois.eu",
    "ru": "whois.tcinet.ru",
    "au": "whois.auda.org.au",
    "ca": "whois.cira.ca",
    "br": "whois.registro.br",
    "in": "whois.registry.in",
    "nl": "whois.sidn.nl",
    "be": "whois.dns.be",
    "at": "whois.nic.at",
    "ch": "whois.nic.ch",
    "li": "whois.nic.li",
    "it": "whois.nic.it",
    "se": "whois.iis.se",
    "no": "whois.norid.no",
    "dk": "whois.dk-hostmaster.dk",
    "fi": "whois.fi",
    "pl": "whois.dns.pl",
    "cz": "whois.nic.cz",
    "jp": "whois.jprs.jp",
    "kr": "whois.kr",
    "cn": "whois.cnnic.cn",
    "tw": "whois.twnic.net.tw",
}

WHOIS_SERVERS: Mapping[str, str] = MappingProxyType(
    {**GENERIC_SERVERS, **NEW_GENERIC_SERVERS, **COUNTRY_SERVERS}
)


def extract_tld(domain: str) -> str:
    """Return the lowercase top-level label of a domain."""
    return domain.rstrip(".").rsplit(".", 1)[-1].lower()


def whois_server_for(
    domain: str, custom_servers: Optional[Mapping[str, str]] = None
) -> str:
    """
    Return the WHOIS server for a domain's TLD.

    Args:
        domain: Canonical domain name
        custom_servers: Optional per-TLD overrides consulted first

    Returns:
        Server hostname, falling back to whois.nic.<tld>
    """
    tld = extract_tld(domain)
    if custom_servers and tld in custom_servers:
        return custom_servers[tld]
    return WHOIS_SERVERS.get(tld, f"whois.nic.{tld}")


def get_supported_tlds() -> list[str]:
    """Return the TLDs with an explicitly configured WHOIS server."""
    return sorted(WHOIS_SERVERS)
