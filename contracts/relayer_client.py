# contracts/relayer_client.py
# Remote confidential primitive: thin HTTP client for a coprocessor relayer
import logging

import requests

from decrypt_auth import DecryptAuthorization
from tile_errors import NotAuthorized, PrimitiveError
from tile_settings import Settings

logger = logging.getLogger(__name__)

TIMEOUT = 15


class RelayerPrimitive:
    def __init__(self, url: str, token: str = "", timeout: float = TIMEOUT, session=None):
        self.url = url.rstrip("/")
        self.timeout = timeout
        self.headers = {"Content-Type": "application/json", "X-Relayer-API-Token": token}
        self.http = session or requests

    @classmethod
    def from_env(cls) -> "RelayerPrimitive":
        s = Settings.from_env()
        return cls(s.relayer_url, s.relayer_token)

    def _post(self, path: str, payload: dict) -> dict:
        try:
            r = self.http.post(f"{self.url}{path}", json=payload, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise PrimitiveError(f"relayer unreachable at {self.url}: {exc}") from exc
        if r.status_code == 403:
            raise NotAuthorized(f"relayer refused {path}: {r.text}")
        if r.status_code != 200:
            raise PrimitiveError(f"relayer {path} failed: {r.status_code} {r.text}")
        try:
            body = r.json()
        except ValueError as exc:
            raise PrimitiveError(f"relayer {path} returned non-JSON body: {r.text}") from exc
        if not isinstance(body, dict):
            raise PrimitiveError(f"relayer {path} returned {type(body).__name__}, expected an object")
        return body

    def _field(self, path: str, payload: dict, key: str):
        body = self._post(path, payload)
        try:
            return body[key]
        except KeyError:
            raise PrimitiveError(f"relayer {path} response lacks {key!r}") from None

    def _plain(self, path: str, payload: dict, handle: str) -> int:
        value = self._field(path, payload, handle)
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise PrimitiveError(f"relayer {path} returned non-integer plaintext for {handle}") from exc

    def health(self) -> bool:
        try:
            r = self.http.get(f"{self.url}/health", headers=self.headers, timeout=self.timeout)
        except requests.RequestException:
            return False
        return r.status_code == 200

    def encrypt(self, value: int, owner: str) -> str:
        return self._field("/v1/encrypt", {"type": "euint32", "value": int(value), "owner": owner}, "handle")

    def allow(self, handle: str, identity: str) -> None:
        self._post("/v1/acl/allow", {"handle": handle, "identity": identity})

    def make_publicly_decryptable(self, handle: str) -> None:
        self._post("/v1/acl/public", {"handle": handle})

    def eq(self, a: str, b: str) -> str:
        return self._field("/v1/eq", {"lhs": a, "rhs": b}, "handle")

    def user_decrypt(self, handle: str, authorization: DecryptAuthorization) -> int:
        payload = {
            "handles": list(authorization.handles),
            "requester": authorization.requester,
            "start": authorization.start_timestamp,
            "days": authorization.duration_days,
            "signature": authorization.signature,
        }
        value = self._plain("/v1/user-decrypt", payload, handle)
        logger.debug("relayer user decrypt of %s for %s", handle, authorization.requester)
        return value

    def public_decrypt(self, handle: str) -> int:
        return self._plain("/v1/public-decrypt", {"handles": [handle]}, handle)
