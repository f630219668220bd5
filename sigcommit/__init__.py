"""sigcommit - bootstrap git repositories with an SSH-signed initial commit.

Signs the first commit of a fresh repository with the user's SSH key and
writes it through two independent git implementations (libgit2 and dulwich).
"""

__version__ = "0.1.0"
__author__ = "sigcommit Contributors"

from sigcommit.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__"]
