from .aside import rehype_aside
from .feed import get_rss
from .posts import Post, drafted, published
from .tabbed_code import remark_tabbed_code

__version__ = "0.1.0"

__all__ = ["Post", "drafted", "get_rss", "published", "rehype_aside", "remark_tabbed_code"]
