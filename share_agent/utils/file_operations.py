MAX_CONFLICT_ATTEMPTS = 9999


def split_name(name: str) -> tuple[str, str]:
    # Handle complex extensions like .tar.gz properly
    if "." in name.lstrip("."):
        offset = len(name) - len(name.lstrip("."))
        base_name, extensions = name[offset:].split(".", 1)
        return name[:offset] + base_name, "." + extensions
    return name, ""


def numbered_variant(name: str, counter: int) -> str:
    """video.tar.gz, 2 -> video_2.tar.gz"""
    base_name, extensions = split_name(name)
    return f"{base_name}_{counter}{extensions}"


def error_sidecar_name(name: str) -> str:
    return f"{name}.error.txt"
