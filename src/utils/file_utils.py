"""
File and directory helpers for the local data directory.
"""

from pathlib import Path


def ensure_directory_exists(path: str | Path) -> Path:
    """
    Create the directory (and any missing parents) if it does not exist.

    Args:
        path: Directory path as string or Path.

    Returns:
        Resolved Path of the directory.
    """
    p = Path(path).resolve()
    p.mkdir(parents=True, exist_ok=True)
    return p


def read_upload_bytes(uploaded_file: object) -> bytes:
    """
    Read every byte of a file-like upload, rewinding first when possible.

    Raises:
        ValueError: If the object cannot be read or holds no data.
    """
    seek = getattr(uploaded_file, "seek", None)
    if callable(seek):
        seek(0)
    try:
        data = uploaded_file.read()  # type: ignore[attr-defined]
    except Exception as e:
        raise ValueError(f"Unable to read file: {e!s}") from e
    if not data:
        raise ValueError("File is empty and cannot be processed.")
    return bytes(data)
