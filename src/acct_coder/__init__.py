"""Account Coder - IDL-driven account record encoding."""
from .accounts import AccountsCoder
from .errors import (
    AccountCoderError,
    DiscriminatorMismatch,
    EncodeError,
    LayoutResolutionFailure,
    MalformedInput,
    UnknownType,
)
from .header import AccountHeader
from .idl import Idl, load_idl
from .registry import LayoutRegistry

__all__ = [
    "AccountsCoder",
    "AccountHeader",
    "LayoutRegistry",
    "Idl",
    "load_idl",
    "AccountCoderError",
    "UnknownType",
    "DiscriminatorMismatch",
    "MalformedInput",
    "LayoutResolutionFailure",
    "EncodeError",
]
