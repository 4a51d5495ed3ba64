"""Core building blocks shared by all neo-membership features."""

from .exceptions import *  # noqa: F401,F403
from .exceptions import __all__ as _exceptions_all

__all__ = list(_exceptions_all)
