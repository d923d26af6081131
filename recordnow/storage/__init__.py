from .files import FileAccessError
from .local_store import LocalStore
from .models import Document, SaveStatus
from .workspace import Workspace

__all__ = ["Document", "FileAccessError", "LocalStore", "SaveStatus", "Workspace"]
