"""Formatting-preserving YAML editing."""

from relcat.yml.document import YamlDocument, find_node, split_dotted

__all__ = [
    "YamlDocument",
    "find_node",
    "split_dotted",
]
