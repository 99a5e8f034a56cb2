"""Hooks provided by buildhooks.

Importing this package registers every hook with the global registry
under the id the host uses to select it.
"""

from buildhooks.hooks.exec_hook import ExecHook
from buildhooks.hooks.http_request import HttpRequestHook
from buildhooks.hooks.maven import MavenHook

__all__ = [
    "ExecHook",
    "HttpRequestHook",
    "MavenHook",
]
