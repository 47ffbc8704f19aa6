"""Input checks used by the command-line front end."""

INVALID_FILENAME_CHARS = set('<>:"/\\|?*')


def _is_int(value: str) -> bool:
    try:
        int(value)
    except ValueError:
        return False
    return True


def is_valid_host(host: str) -> bool:
    """
    Loose check for a dotted-quad IPv4 address or a domain name.

    Examples:
        >>> is_valid_host("192.168.1.1")
        True
        >>> is_valid_host("999.1.1.1")
        False
        >>> is_valid_host(".startswithdot")
        False
    """
    if not host or not host.strip() or " " in host:
        return False
    parts = host.split(".")
    if len(parts) == 4 and all(_is_int(p) for p in parts):
        return all(0 <= int(p) <= 255 for p in parts)
    dot = host.find(".")
    return dot not in (-1, 0, len(host) - 1)


def is_valid_filename(filename: str) -> bool:
    if not filename or not filename.strip():
        return False
    return not any(c in INVALID_FILENAME_CHARS or ord(c) < 32 for c in filename)
