from .application import Application
from .candidate import Candidate
from .client import Client
from .user import User

__all__ = ["Application", "Candidate", "Client", "User"]
