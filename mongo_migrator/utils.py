# Helpers shared by the migrator and the command line scripts
from tqdm import tqdm
from typing import Callable, Iterable, Iterator, Optional

BAR_FORMAT = '{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]'


def progress_bar_iter(iterable: Iterable, total: Optional[int] = None, desc: str = "",
                      get_desc: Optional[Callable] = None, disable: bool = False) -> Iterator:
    """
    Wrap an iterable with a tqdm progress bar, optionally naming the current item.
    Args:
        iterable: The iterable to wrap
        total: Total number of items (if known)
        desc: Static description (e.g. "Exporting")
        get_desc: Function returning a label for the current item
        disable: Hide the bar entirely (items are still yielded)
    Yields:
        The items of the iterable, in order
    """
    bar = tqdm(iterable, total=total, desc=desc, ncols=100, bar_format=BAR_FORMAT,
               disable=disable, leave=False)
    try:
        for item in bar:
            if get_desc:
                bar.set_description(f"{desc}: {get_desc(item)}")
            yield item
    finally:
        bar.close()


def format_size(size_bytes: int) -> str:
    """Format a size in bytes to a human-readable string."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.2f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.2f} MB"
    return f"{size_bytes / (1024 * 1024 * 1024):.2f} GB"
