# contracts/paillier_coprocessor.py
# In-process confidential primitive: Paillier ciphertexts + per-handle ACL
import hashlib, logging, secrets, time
from dataclasses import dataclass, field

from phe import paillier

from decrypt_auth import DecryptAuthorization, check_identity
from tile_errors import NotAuthorized, PrimitiveError

logger = logging.getLogger(__name__)

EUINT32 = "euint32"
EBOOL = "ebool"
UINT32_MAX = 2**32 - 1


@dataclass
class _Entry:
    ciphertext: paillier.EncryptedNumber
    kind: str
    allowed: set = field(default_factory=set)
    public: bool = False


class PaillierCoprocessor:
    """Holds the decryption key; the engine only ever sees handles."""

    def __init__(self, n_length: int = 2048, clock=time.time):
        self.public_key, self._private_key = paillier.generate_paillier_keypair(n_length=n_length)
        self._entries: dict[str, _Entry] = {}
        self._clock = clock

    def _handle_for(self, ciphertext: paillier.EncryptedNumber) -> str:
        raw = ciphertext.ciphertext(be_secure=False)
        digest = hashlib.sha256(raw.to_bytes((raw.bit_length() + 7) // 8, "big") + secrets.token_bytes(16))
        return "0x" + digest.hexdigest()

    def _store(self, ciphertext: paillier.EncryptedNumber, kind: str) -> str:
        handle = self._handle_for(ciphertext)
        self._entries[handle] = _Entry(ciphertext, kind)
        return handle

    def _entry(self, handle: str) -> _Entry:
        try:
            return self._entries[handle]
        except KeyError:
            raise PrimitiveError(f"no ciphertext for handle {handle}") from None

    def _plain(self, entry: _Entry) -> int:
        value = self._private_key.decrypt(entry.ciphertext)
        if entry.kind == EBOOL:
            return int(value == 0)
        return value

    # -------- primitive surface --------
    def encrypt(self, value: int, owner: str) -> str:
        check_identity(owner)
        if not 0 <= value <= UINT32_MAX:
            raise PrimitiveError(f"{EUINT32} out of range: {value}")
        return self._store(self.public_key.encrypt(int(value)), EUINT32)

    def allow(self, handle: str, identity: str) -> None:
        self._entry(handle).allowed.add(check_identity(identity))

    def make_publicly_decryptable(self, handle: str) -> None:
        self._entry(handle).public = True

    def eq(self, a: str, b: str) -> str:
        # blinded difference: r * (a - b) decrypts to zero iff a == b
        diff = self._entry(a).ciphertext - self._entry(b).ciphertext
        blind = secrets.randbelow(2**64) + 1
        return self._store(diff * blind, EBOOL)

    def user_decrypt(self, handle: str, authorization: DecryptAuthorization) -> int:
        entry = self._entry(handle)
        if authorization.requester not in entry.allowed and not entry.public:
            raise NotAuthorized(f"ACL of {handle} does not include {authorization.requester}")
        authorization.verify(handle, now=int(self._clock()))
        logger.debug("user decrypt of %s for %s", handle, authorization.requester)
        return self._plain(entry)

    def public_decrypt(self, handle: str) -> int:
        entry = self._entry(handle)
        if not entry.public:
            raise NotAuthorized(f"{handle} is not publicly decryptable")
        return self._plain(entry)
