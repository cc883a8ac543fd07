"""Application services.

Services coordinate the domain layers (release/, oci/) with infrastructure
(git/, registry clients) for a single CLI command.
"""

from reltool.services.package import (
    PackageRequest,
    PackageResult,
    package_directory,
)

__all__ = [
    "PackageRequest",
    "PackageResult",
    "package_directory",
]
