"""ORM models; importing this package registers every table on ``Base.metadata``."""

from .account import Account
from .member import Member
from .role import Role
from .user import User
from .workspace import Workspace

__all__ = ["Account", "Member", "Role", "User", "Workspace"]
