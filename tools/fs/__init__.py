from .chmod import run as chmod_run
from .chown import run as chown_run
from .copy import run as copy_run
from .mkdir import run as mkdir_run
from .replace_text import run as replace_text_run
from .require import run as require_run
from .reset_dir import run as reset_dir_run
from .symlink import run as symlink_run
from .write_file import run as write_file_run

__all__ = [
    "chmod_run",
    "chown_run",
    "copy_run",
    "mkdir_run",
    "replace_text_run",
    "require_run",
    "reset_dir_run",
    "symlink_run",
    "write_file_run",
]
