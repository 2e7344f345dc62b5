"""
baccounts: a local, file-based credential store.

One GPG-encrypted document holds every profile and every site
credential. Decrypt it, look something up, encrypt it back.
"""

import os

__version__ = "0.2.0"
__author__ = "baccounts contributors"

BACCOUNTS_HOME = os.environ.get("BACCOUNTS_HOME", "~/.baccounts.d")
