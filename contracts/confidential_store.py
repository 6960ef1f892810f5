# contracts/confidential_store.py
# Confidential values + two-state decrypt grants over a pluggable primitive
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Union

from decrypt_auth import DecryptAuthorization
from tile_errors import NotAuthorized, Outcome

logger = logging.getLogger(__name__)

ZERO_HANDLE = "0x" + "00" * 32


# -------- Grants (tagged variant) --------
@dataclass(frozen=True)
class OwnerOnly:
    owner: str


@dataclass(frozen=True)
class Public:
    pass


PUBLIC = Public()
Grant = Union[OwnerOnly, Public]


def widen(grant: Grant) -> Grant:
    """The only grant transition there is: OwnerOnly -> Public. Public stays Public."""
    if isinstance(grant, (OwnerOnly, Public)):
        return PUBLIC
    raise TypeError(f"unknown grant {grant!r}")


def may_decrypt(grant: Grant, requester: Optional[str]) -> bool:
    if isinstance(grant, Public):
        return True
    return requester is not None and grant.owner == requester


@dataclass(frozen=True)
class ConfidentialValue:
    handle: str
    grant: Grant

    @property
    def is_public(self) -> bool:
        return isinstance(self.grant, Public)


# -------- Primitive boundary --------
class ConfidentialPrimitive(Protocol):
    def encrypt(self, value: int, owner: str) -> str: ...
    def allow(self, handle: str, identity: str) -> None: ...
    def make_publicly_decryptable(self, handle: str) -> None: ...
    def eq(self, a: str, b: str) -> str: ...
    def user_decrypt(self, handle: str, authorization: DecryptAuthorization) -> int: ...
    def public_decrypt(self, handle: str) -> int: ...


class ConfidentialValueStore:
    def __init__(self, primitive: ConfidentialPrimitive):
        self.primitive = primitive
        self._grants: dict[str, Grant] = {}

    def wrap(self, plain_value: int, owner: str) -> ConfidentialValue:
        handle = self.primitive.encrypt(int(plain_value), owner)
        self.primitive.allow(handle, owner)
        grant = OwnerOnly(owner)
        self._grants[handle] = grant
        logger.debug("wrapped %s for %s", handle, owner)
        return ConfidentialValue(handle, grant)

    def grant_of(self, handle: str) -> Grant:
        try:
            return self._grants[handle]
        except KeyError:
            raise NotAuthorized(f"unknown handle {handle}") from None

    def value(self, handle: str) -> ConfidentialValue:
        return ConfidentialValue(handle, self.grant_of(handle))

    def grant_public(self, value: ConfidentialValue) -> tuple[ConfidentialValue, Outcome]:
        current = self.grant_of(value.handle)
        if isinstance(current, Public):
            return ConfidentialValue(value.handle, current), Outcome.ALREADY_PUBLIC
        self.primitive.make_publicly_decryptable(value.handle)
        self._grants[value.handle] = widen(current)
        logger.debug("widened %s to public", value.handle)
        return self.value(value.handle), Outcome.DISCLOSED

    def decrypt(self, value: ConfidentialValue, requester: Optional[str],
                authorization: Optional[DecryptAuthorization] = None) -> int:
        grant = self.grant_of(value.handle)
        if isinstance(grant, Public):
            return self.primitive.public_decrypt(value.handle)
        if not may_decrypt(grant, requester):
            raise NotAuthorized(f"{requester} holds no grant on {value.handle}")
        if authorization is None or authorization.requester != requester:
            raise NotAuthorized(f"decrypting {value.handle} needs a signed authorization from {requester}")
        return self.primitive.user_decrypt(value.handle, authorization)

    def decrypt_public(self, handle: str) -> int:
        grant = self.grant_of(handle)
        if not isinstance(grant, Public):
            raise NotAuthorized(f"{handle} has not been made public")
        return self.primitive.public_decrypt(handle)

    def equals(self, a: ConfidentialValue, b: ConfidentialValue, owner: str) -> ConfidentialValue:
        """Encrypted a == b; the result decrypts to 1 or 0 and is granted to owner only.

        owner must already be able to decrypt both operands.
        """
        for operand in (a, b):
            if not may_decrypt(self.grant_of(operand.handle), owner):
                raise NotAuthorized(f"{owner} holds no grant on {operand.handle}")
        handle = self.primitive.eq(a.handle, b.handle)
        self.primitive.allow(handle, owner)
        grant = OwnerOnly(owner)
        self._grants[handle] = grant
        return ConfidentialValue(handle, grant)

    # -------- transaction support --------
    def snapshot(self) -> dict:
        return dict(self._grants)

    def restore(self, grants: dict) -> None:
        self._grants = dict(grants)
