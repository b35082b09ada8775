from .specs import find, find_zombies, zombie_cutoff
from .tags import get_tag_like_string

__version__ = "0.1.0"

__all__ = ["find", "find_zombies", "zombie_cutoff", "get_tag_like_string", "__version__"]
