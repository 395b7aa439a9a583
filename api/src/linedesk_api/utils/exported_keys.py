from __future__ import annotations

import string

_KEY_CHARS = frozenset(string.ascii_uppercase + string.digits)


def _key_char(ch: str) -> str:
    upper = ch.upper()
    # Characters whose uppercase form is not a single A-Z/0-9 char (including
    # expanding ones such as "ß" -> "SS") collapse to "_" to keep the length.
    return upper if upper in _KEY_CHARS else "_"


def build_exported_key(project_name: str, group_name: str, entry_key: str) -> str:
    """
    Canonical key handed to game tooling for a translation entry.

    ``<project>_<group>_<key>`` uppercased, with every character outside
    ``[A-Z0-9]`` replaced by ``_``. Every export path goes through here.
    """
    raw = f"{project_name}_{group_name}_{entry_key}"
    return "".join(_key_char(ch) for ch in raw)
