from .navigation import NavigationView, render_text
from .host import NavigationHost

__all__ = ["NavigationView", "NavigationHost", "render_text"]
