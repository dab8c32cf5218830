"""Hostname parsing: classify a request hostname into a routing intent."""
import codecs
import logging
import re
from typing import List, Optional

from nearme.config.settings import Config
from nearme.config.subdomains import (
    BLOCKED_LABELS,
    LOCAL_HOSTS,
    get_special_service,
    resolve_city,
)
from nearme.domain.entities.subdomain import SubdomainInfo


logger = logging.getLogger(__name__)

_LABEL = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")
_PORT = re.compile(r":\d*$")
_LOCAL_ROOT = "localhost"


class HostnameParser:
    """
    Utility class turning hostnames into ``SubdomainInfo`` values.

    ``parse`` is total: any input, including garbage, yields a value.
    Unrecognized or malformed hostnames yield the default ``SubdomainInfo``
    (no category, no city, no intent flag).
    """

    @staticmethod
    def parse(hostname: Optional[str], path: Optional[str] = "/", root_domain: Optional[str] = None) -> SubdomainInfo:
        """
        Classify a hostname.

        Args:
            hostname: Request hostname, optionally with a port
            path: Request path; path-based worlds read their city from it
            root_domain: Root domain the cosmetic subdomains hang off (defaults to Config)

        Returns:
            SubdomainInfo describing the routing intent
        """
        try:
            return HostnameParser._parse(hostname, path, root_domain or Config.ROOT_DOMAIN)
        except Exception as e:
            logger.warning(f"Hostname {hostname!r} could not be parsed, using default world: {e}")
            return SubdomainInfo()

    @staticmethod
    def _parse(hostname: Optional[str], path: Optional[str], root_domain: str) -> SubdomainInfo:
        host = HostnameParser._normalize(hostname)
        if not host:
            return SubdomainInfo()

        if host in LOCAL_HOSTS:
            return SubdomainInfo(is_services=True)

        labels = host.split(".")
        if not all(HostnameParser._is_valid_label(label) for label in labels):
            logger.debug(f"Malformed hostname: {host}")
            return SubdomainInfo()

        sub_labels = HostnameParser._strip_root(labels, root_domain)
        if sub_labels is None:
            return SubdomainInfo()

        # Local development: bare localhost behaves like services.near-me.us
        if not sub_labels and labels[-1] == _LOCAL_ROOT:
            return SubdomainInfo(is_services=True)

        if len(sub_labels) > 1 and sub_labels[0] == "www":
            sub_labels = sub_labels[1:]

        if not sub_labels or sub_labels[0] in BLOCKED_LABELS:
            return SubdomainInfo()

        special = get_special_service(sub_labels[0])
        if special is not None:
            return HostnameParser._parse_special(special, sub_labels, path)

        if len(sub_labels) == 1:
            return SubdomainInfo(category=sub_labels[0])

        if len(sub_labels) == 2:
            city, state = resolve_city(sub_labels[1])
            return SubdomainInfo(category=sub_labels[0], city=city, state=state)

        return SubdomainInfo()

    @staticmethod
    def _parse_special(special, sub_labels: List[str], path: Optional[str]) -> SubdomainInfo:
        if len(sub_labels) > 2:
            return SubdomainInfo()

        city, state = "", ""
        if len(sub_labels) == 2:
            city, state = resolve_city(sub_labels[1])
        elif special.path_based:
            # Only known cities count; other segments are page paths (/about, /stations)
            segment = HostnameParser._first_path_segment(path)
            if segment:
                candidate, candidate_state = resolve_city(segment)
                if candidate_state:
                    city, state = candidate, candidate_state

        return SubdomainInfo(
            category=special.label if special.path_based else "",
            city=city,
            state=state,
            is_path_based=special.path_based,
            **{special.flag: True},
        )

    @staticmethod
    def _normalize(hostname: Optional[str]) -> str:
        if hostname is None:
            return ""
        host = str(hostname).strip().lower()
        if host.startswith("["):
            # IPv6 literals never carry a directory subdomain
            return ""
        host = _PORT.sub("", host)
        return host.rstrip(".")

    @staticmethod
    def _is_valid_label(label: str) -> bool:
        if not _LABEL.match(label):
            return False
        if label.startswith("xn--"):
            try:
                codecs.decode(label[4:].encode("ascii"), "punycode")
            except (UnicodeError, ValueError):
                return False
        return True

    @staticmethod
    def _strip_root(labels: List[str], root_domain: str) -> Optional[List[str]]:
        """Return the labels left of the root domain, or None when the host is foreign."""
        root_labels = root_domain.lower().strip(".").split(".")
        if labels[-len(root_labels):] == root_labels:
            return labels[:-len(root_labels)]
        if labels[-1] == _LOCAL_ROOT:
            return labels[:-1]
        return None

    @staticmethod
    def _first_path_segment(path: Optional[str]) -> str:
        if not path:
            return ""
        for part in str(path).split("/"):
            if part:
                return part.lower()
        return ""
