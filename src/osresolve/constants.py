"""Static data for the resolver."""
from __future__ import annotations

DEBIAN_OPERATOR_ALIASES = {
    "<<": "<<",
    "<=": "<=",
    "=": "=",
    ">=": ">=",
    ">>": ">>",
    # Obsolete dpkg spellings, which mean "or equal".
    "<": "<=",
    ">": ">=",
}

RPM_OPERATOR_ALIASES = {
    "<": "<<",
    "<=": "<=",
    "=": "=",
    "==": "=",
    ">=": ">=",
    ">": ">>",
}

ECOSYSTEM_ALIASES = {
    "deb": "deb",
    "debian": "deb",
    "ubuntu": "deb",
    "elxr": "deb",
    "rpm": "rpm",
    "rpmmd": "rpm",
    "azurelinux": "rpm",
    "azl": "rpm",
    "emt": "rpm",
}

DEFAULT_ECOSYSTEM = "deb"

# Name recorded as the requester of root packages.
REQUESTED_BY_USER = "<requested>"

# Path segments separating a repository base URL from the package file.
REPOSITORY_MARKERS = ("/pool/", "/Packages/")
