"""zkclient dispatch core.

Normalizes call arguments, runs each primitive call in blocking or
non-blocking mode, and translates outcome codes into named errors.
"""

from .dispatcher import Dispatcher
from .handlers import CompletionHandler, FunctionHandler, ObjectHandler, as_completion_handler
from .normalize import ArgumentNormalizer, Request
from .options import (
    AddAuthOptions,
    CreateOptions,
    DeleteOptions,
    ExistsOptions,
    GetAclsOptions,
    GetChildrenOptions,
    GetOptions,
    SetAclsOptions,
    SetOptions,
)
from .outcome import Outcome
from .translate import ErrorTranslator, find_call_site
from .watches import WatchRegistrar

__all__ = [
    "Dispatcher",
    "CompletionHandler",
    "FunctionHandler",
    "ObjectHandler",
    "as_completion_handler",
    "ArgumentNormalizer",
    "Request",
    "AddAuthOptions",
    "CreateOptions",
    "DeleteOptions",
    "ExistsOptions",
    "GetAclsOptions",
    "GetChildrenOptions",
    "GetOptions",
    "SetAclsOptions",
    "SetOptions",
    "Outcome",
    "ErrorTranslator",
    "find_call_site",
    "WatchRegistrar",
]
