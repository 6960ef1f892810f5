# contracts/tile_manifest.py
# Writes the public state of a game plus its digest, the way build artifacts are written
import json, hashlib
from pathlib import Path

from cipherlands_app import Cipherlands

MANIFEST_NAME = "cipherlands.manifest.json"


def sha256_hex(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


def write_manifest(game: Cipherlands, directory) -> Path:
    out = Path(directory)
    out.mkdir(parents=True, exist_ok=True)

    state = game.public_state()
    state_json = json.dumps(state, sort_keys=True, separators=(",", ":"))
    (out / "public_state.json").write_text(state_json, encoding="utf-8")

    manifest = {
        "game": "Cipherlands — encrypted tile map",
        "grid": {"width": game.grid.width, "height": game.grid.height},
        "artifacts": {
            "public_state": {"file": "public_state.json", "sha256": sha256_hex(state_json)},
        },
        "digest": game.state_digest(),
    }
    path = out / MANIFEST_NAME
    path.write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    return path
