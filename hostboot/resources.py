from __future__ import annotations

from pathlib import Path


def _package_dir(package_name: str) -> Path:
    """
    Return the on-disk directory for an imported package.

    Note:
    This assumes a filesystem-backed install (wheel or editable). Under a
    zipimport-style environment this may not be a real directory.
    """
    module = __import__(package_name, fromlist=["__file__"])
    p = getattr(module, "__file__", None)
    if isinstance(p, str) and p:
        return Path(p).resolve().parent
    # Namespace packages have no __file__ but do have a search path.
    paths = list(getattr(module, "__path__", []) or [])
    if not paths:
        raise RuntimeError(f"Cannot resolve package directory for: {package_name}")
    return Path(paths[0]).resolve()


def contracts_dir() -> Path:
    """
    Directory holding the shipped JSON Schemas (profile, plan).
    """
    return _package_dir("hostboot") / "contracts"


def profiles_dir() -> Path:
    return _package_dir("hostboot") / "profiles"


def default_profile_path() -> Path:
    return profiles_dir() / "default.yml"
