import hashlib
from pathlib import Path


def sha256_bytes(b: bytes) -> str:
    h = hashlib.sha256()
    h.update(b)
    return h.hexdigest()


def write_sha256_sum_txt(path: Path, name: str, digest: str) -> None:
    """
    Writes a single-entry sha256sum line, `<digest>  <name>`
    """
    path.write_text(f"{digest}  {name}\n", encoding="utf-8")
