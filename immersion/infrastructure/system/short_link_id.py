import secrets
import string

from immersion.domain.link.model.value import ShortLinkId
from immersion.domain.link.port.short_link import ShortLinkIdGenerator

_ALPHABET = string.ascii_letters + string.digits


class RandomShortLinkIdGenerator(ShortLinkIdGenerator):
    """Unguessable alphanumeric ids drawn from the OS CSPRNG."""

    def __init__(self, length: int) -> None:
        self.length = length

    def generate(self) -> ShortLinkId:
        return ShortLinkId("".join(secrets.choice(_ALPHABET) for _ in range(self.length)))
