import gzip


def open_text_file(file_path):
    """Open text or gz file in text mode."""
    file_path = str(file_path)
    if file_path.endswith(".gz"):
        return gzip.open(file_path, "rt")
    return open(file_path, "r")


def read_first_line(file_path):
    """Return the first line of a text or gz file, stripped; raise if the file is empty."""
    with open_text_file(file_path) as handle:
        line = handle.readline()
    if not line:
        raise ValueError(f"{file_path} appears empty.")
    return line.strip()


def separator_from_name(name):
    """Map 'tab' / 'comma' to the column separator."""
    separators = {"tab": "\t", "comma": ","}
    if name not in separators:
        raise ValueError(f"Unknown separator: {name}. Supported: {', '.join(separators)}")
    return separators[name]
