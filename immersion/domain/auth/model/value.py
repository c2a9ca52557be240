"""Value objects for the auth domain."""

from typing import NewType

UserId = NewType("UserId", str)
