# contracts/decrypt_auth.py
# Signed decrypt authorizations: an identity's Algorand key signs the request
import json, time
from dataclasses import dataclass

from algosdk import account, encoding, util

from tile_errors import InvalidIdentity, NotAuthorized
from tile_settings import DECRYPT_DURATION_DAYS

SECONDS_PER_DAY = 86_400
DOMAIN_TAG = "cipherlands/user-decrypt/v1"


def check_identity(identity: str) -> str:
    if not isinstance(identity, str) or not encoding.is_valid_address(identity):
        raise InvalidIdentity(f"not an Algorand address: {identity!r}")
    return identity


def request_bytes(requester: str, handles: tuple, start_timestamp: int, duration_days: int) -> bytes:
    body = {
        "domain": DOMAIN_TAG,
        "requester": requester,
        "handles": sorted(handles),
        "start": int(start_timestamp),
        "days": int(duration_days),
    }
    return json.dumps(body, sort_keys=True, separators=(",", ":")).encode("utf-8")


@dataclass(frozen=True)
class DecryptAuthorization:
    requester: str
    handles: tuple
    start_timestamp: int
    duration_days: int
    signature: str  # base64, as produced by algosdk.util.sign_bytes

    def covers(self, handle: str) -> bool:
        return handle in self.handles

    def expires_at(self) -> int:
        return self.start_timestamp + self.duration_days * SECONDS_PER_DAY

    def verify(self, handle: str, now: int | None = None) -> None:
        """Raise NotAuthorized unless this artifact is a live, correctly signed request for handle."""
        now = int(time.time()) if now is None else int(now)
        if not self.covers(handle):
            raise NotAuthorized(f"authorization does not cover {handle}")
        if not self.start_timestamp <= now < self.expires_at():
            raise NotAuthorized("authorization expired or not yet valid")
        message = request_bytes(self.requester, self.handles, self.start_timestamp, self.duration_days)
        try:
            valid = util.verify_bytes(message, self.signature, self.requester)
        except (ValueError, TypeError) as exc:
            raise NotAuthorized(f"malformed signature: {exc}") from exc
        if not valid:
            raise NotAuthorized(f"signature does not match {self.requester}")


def authorize(private_key: str, handles, duration_days: int = DECRYPT_DURATION_DAYS,
              start_timestamp: int | None = None) -> DecryptAuthorization:
    requester = account.address_from_private_key(private_key)
    handles = tuple(handles)
    start = int(time.time()) if start_timestamp is None else int(start_timestamp)
    signature = util.sign_bytes(request_bytes(requester, handles, start, duration_days), private_key)
    return DecryptAuthorization(requester, handles, start, int(duration_days), signature)
