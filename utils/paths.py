"""Resolve file system paths back to loaded files"""


def normalize_separators(path):
    """Treat / and \\ alike."""
    return path.replace("\\", "/")


def _strip_current_dir(path):
    while path.startswith("./"):
        path = path[2:]
    return path


def find_file_index(files, search_path):
    """
    Index of the loaded file that search_path refers to, or -1.

    An exact match wins. Otherwise the first file whose path ends with
    search_path on a path component boundary is returned.
    """
    for i, parsed in enumerate(files):
        if parsed.path == search_path:
            return i

    needle = _strip_current_dir(normalize_separators(search_path))
    if not needle:
        return -1

    for i, parsed in enumerate(files):
        candidate = normalize_separators(parsed.path)
        if candidate == needle:
            return i
        if needle.startswith("/"):
            if candidate.endswith(needle):
                return i
        elif candidate.endswith("/" + needle):
            return i
    return -1
