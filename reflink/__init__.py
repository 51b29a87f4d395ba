"""Reference resolution for commit and pull request text.

Maps git remotes to their hosting providers and turns issue references into links.
"""

__version__ = "0.1.0"
