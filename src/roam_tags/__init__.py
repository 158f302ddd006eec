"""
Roam Tags - content tags layered on a markdown note collection.

Some notes are designated as tags (notes whose titles look like tags), other
notes reference them with links collected on a per-note "tag line". Following
a link to a tag opens the list of every note that references it instead of
the tag note itself.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("roam-tags")
except PackageNotFoundError:
    __version__ = "0.3.0"
