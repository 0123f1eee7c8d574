BYTES_PER_KB = 1024


def format_byte_size(n_bytes: int) -> str:
    """Human readable size, e.g. 'File Size: 2048 bytes (2 KB, <1 MB)'."""
    size_kb = round(n_bytes / BYTES_PER_KB)
    size_mb = n_bytes / BYTES_PER_KB / BYTES_PER_KB
    size_mb_display = "<1" if size_mb < 1 else str(round(size_mb))
    return f"File Size: {n_bytes} bytes ({size_kb} KB, {size_mb_display} MB)"


def format_duration(seconds: float) -> str:
    """Format a duration in seconds with two decimals."""
    return f"{seconds:.2f} seconds"
