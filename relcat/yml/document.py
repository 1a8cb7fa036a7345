"""Formatting-preserving YAML documents.

A ``YamlDocument`` owns one parsed YAML document under two views:

- the structural view: the PyYAML node tree (``yaml.compose``) whose nodes
  carry the character offsets of their source text;
- the value view: the decoded data (``yaml.safe_load``).

Edits go through the structural view. ``set_scalar`` assigns a leaf's text
and records the span it replaces; ``update_values_from_tree`` splices
exactly those spans into the raw text, then re-composes the tree and
reloads the value view. Everything outside the edited spans (comments, key
order, blank lines, anchors) is left byte for byte.

Not guaranteed to preserve formatting: multi-document files (rejected at
parse time), anchors or aliases pointing at an edited node, and flow-style
collections touched by ``replace_block``.
"""

from __future__ import annotations

import json
import logging
import os
import re
import stat
from dataclasses import dataclass
from pathlib import Path

import yaml
from yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode

from relcat.core.errors import CatalogError
from relcat.core.result import Err, Ok, Result
from relcat.core.structured import YamlValue

__all__ = [
    "YamlDocument",
    "find_node",
    "split_dotted",
]

logger = logging.getLogger(__name__)

# Characters that cannot start a plain scalar.
_PLAIN_INDICATORS = frozenset("-?:,[]{}#&*!|>'\"%@`")
_UNSAFE_PLAIN = re.compile(r": |\s#|^\s|\s$|[\n\r\t]")


@dataclass(frozen=True, slots=True)
class _Edit:
    start: int
    end: int
    replacement: str


def split_dotted(path: str) -> list[str]:
    """Split ``spec.version`` style paths. Leading dot is optional."""
    return [segment for segment in path.lstrip(".").split(".") if segment]


def _mapping_pair(mapping: MappingNode, key: str) -> tuple[ScalarNode, Node] | None:
    for key_node, value_node in mapping.value:
        if isinstance(key_node, ScalarNode) and key_node.value == key:
            return key_node, value_node
    return None


def find_node(tree: Node, dotted_path: str) -> Result[Node, CatalogError]:
    """Walk mapping keys along ``dotted_path`` and return the node found.

    Fails with a "property not found" error naming the missing segment.
    """
    node = tree
    walked: list[str] = []
    for segment in split_dotted(dotted_path):
        walked.append(segment)
        match node:
            case MappingNode():
                pair = _mapping_pair(node, segment)
                if pair is None:
                    return Err(
                        CatalogError(
                            "not_found",
                            f"property not found: {segment!r} (in {'.'.join(walked)})",
                        )
                    )
                node = pair[1]
            case ScalarNode() | SequenceNode():
                return Err(
                    CatalogError(
                        "not_found",
                        f"property not found: {segment!r} ({'.'.join(walked[:-1])} is not a mapping)",
                    )
                )
    return Ok(node)


def _render_scalar(node: ScalarNode, value: str, original: str) -> str:
    """Render ``value`` as scalar text, keeping the node's quoting style when possible."""
    style = node.style
    if style is None or style == "":
        if value and value[0] not in _PLAIN_INDICATORS and not _UNSAFE_PLAIN.search(value):
            return value
        return json.dumps(value, ensure_ascii=False)
    if style == "'" and "\n" not in value:
        return "'" + value.replace("'", "''") + "'"
    if style == '"':
        return json.dumps(value, ensure_ascii=False)
    # Block scalar ('|' or '>'): its span ends with the line break(s) it owned.
    tail = original[len(original.rstrip()) :]
    return json.dumps(value, ensure_ascii=False) + tail


def _line_start(text: str, index: int) -> int:
    return text.rfind("\n", 0, index) + 1


def _line_end(text: str, index: int) -> int:
    """Offset just past the line break of the line containing ``index``."""
    nl = text.find("\n", index)
    return len(text) if nl < 0 else nl + 1


def _is_block(node: Node) -> bool:
    return isinstance(node, (MappingNode, SequenceNode)) and not node.flow_style and bool(node.value)


def _block_end(text: str, node: Node) -> int:
    """Offset past the last line owned by a block collection node.

    Trailing blank and comment-only lines are left to whatever follows.
    """
    mark = node.end_mark.index
    start = _line_start(text, mark)
    end = start if text[start:mark].strip() == "" else _line_end(text, mark)

    floor = _line_end(text, node.start_mark.index)
    while end > floor:
        prev = _line_start(text, end - 1)
        content = text[prev:end].strip()
        if content and not content.startswith("#"):
            break
        end = prev
    return end


def _reindent(lines: list[str], dedent: int, indent: int) -> str:
    out: list[str] = []
    pad = " " * indent
    for line in lines:
        body = line.rstrip("\n")
        stripped = body[:dedent].lstrip(" ") + body[dedent:] if len(body) >= dedent else body.lstrip(" ")
        out.append(pad + stripped if stripped.strip() else "")
    return "\n".join(out) + "\n"


class YamlDocument:
    """A single YAML document with structural and value views.

    Attributes:
        path: File the document was read from (None for in-memory documents)
    """

    def __init__(self, text: str, tree: Node, values: YamlValue, path: Path | None = None) -> None:
        self._text = text
        self._tree = tree
        self._values = values
        self._edits: list[_Edit] = []
        self.path = path

    @classmethod
    def parse(cls, text: str, path: Path | None = None) -> Result[YamlDocument, CatalogError]:
        """Parse text holding exactly one YAML document."""
        where = str(path) if path is not None else "<memory>"
        try:
            tree = yaml.compose(text, Loader=yaml.SafeLoader)
            values: YamlValue = yaml.safe_load(text)
        except yaml.YAMLError as e:
            return Err(CatalogError("invalid_catalog", f"invalid YAML in {where}: {e}"))
        if tree is None:
            return Err(CatalogError("invalid_catalog", f"empty YAML document: {where}"))
        return Ok(cls(text, tree, values, path))

    @classmethod
    def load(cls, path: Path) -> Result[YamlDocument, CatalogError]:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            return Err(CatalogError("io", f"failed to read {path}: {e}"))
        return cls.parse(text, path)

    @property
    def text(self) -> str:
        """Raw text as of the last resync."""
        return self._text

    @property
    def tree(self) -> Node:
        return self._tree

    @property
    def values(self) -> YamlValue:
        """Decoded value view as of the last resync."""
        return self._values

    @property
    def dirty(self) -> bool:
        """True when structural edits are waiting for ``update_values_from_tree``."""
        return bool(self._edits)

    def copy(self) -> YamlDocument:
        """Independent document with the same (resynced) content."""
        tree = yaml.compose(self._text, Loader=yaml.SafeLoader)
        return YamlDocument(self._text, tree, yaml.safe_load(self._text), self.path)

    def find(self, dotted_path: str) -> Result[Node, CatalogError]:
        return find_node(self._tree, dotted_path)

    def _record(self, edit: _Edit) -> Result[None, CatalogError]:
        for existing in self._edits:
            if existing.start < edit.end and edit.start < existing.end:
                # Overlapping spans cannot both be spliced; commit the earlier edit first.
                return Err(
                    CatalogError(
                        "invalid_catalog",
                        "overlapping edits; call update_values_from_tree() between them",
                    )
                )
        self._edits.append(edit)
        return Ok(None)

    def set_scalar(self, dotted_path: str, value: str) -> Result[None, CatalogError]:
        """Assign the text of the scalar at ``dotted_path``."""
        found = self.find(dotted_path)
        if isinstance(found, Err):
            return found
        node = found.value
        if not isinstance(node, ScalarNode):
            return Err(CatalogError("invalid_catalog", f"property is not a scalar: {dotted_path}"))

        start, end = node.start_mark.index, node.end_mark.index
        replacement = _render_scalar(node, value, self._text[start:end])
        recorded = self._record(_Edit(start, end, replacement))
        if isinstance(recorded, Err):
            return recorded
        node.value = value
        logger.debug("set %s = %r in %s", dotted_path, value, self.path)
        return Ok(None)

    def replace_block(
        self, dotted_path: str, source: YamlDocument, source_path: str | None = None
    ) -> Result[None, CatalogError]:
        """Copy the subtree at ``source_path`` of ``source`` to ``dotted_path``.

        The source's block text (comments included) is re-indented under the
        target key. When the target key is absent it is appended to its
        parent mapping, which must be a block mapping.
        """
        found = source.find(source_path or dotted_path)
        if isinstance(found, Err):
            return found
        body = self._source_body(source, found.value)

        segments = split_dotted(dotted_path)
        if not segments:
            return Err(CatalogError("invalid_catalog", "cannot replace the document root"))
        parent = find_node(self._tree, ".".join(segments[:-1]))
        if isinstance(parent, Err):
            return parent
        if not isinstance(parent.value, MappingNode):
            return Err(
                CatalogError("invalid_catalog", f"property is not a mapping: {'.'.join(segments[:-1])}")
            )

        key = segments[-1]
        pair = _mapping_pair(parent.value, key)
        if pair is None:
            return self._append_key(parent.value, key, body, dotted_path)

        key_node, value_node = pair
        text = self._text
        start = _line_start(text, key_node.start_mark.index)
        indent = key_node.start_mark.column
        if _is_block(value_node):
            header = text[start : _line_end(text, key_node.start_mark.index)].rstrip("\n")
            end = _block_end(text, value_node)
        else:
            header = text[start : key_node.end_mark.index] + ":"
            end_mark = value_node.end_mark
            # Block scalars end at the start of the following line.
            end = end_mark.index if end_mark.column == 0 else _line_end(text, end_mark.index)
        return self._record(_Edit(start, end, self._keyed(header, body, indent)))

    def _source_body(self, source: YamlDocument, node: Node) -> tuple[list[str], int] | str:
        """Block lines plus their indentation, or inline text for flow/empty/scalar nodes."""
        if _is_block(node):
            text = source.text
            start = _line_start(text, node.start_mark.index)
            lines = text[start : _block_end(text, node)].splitlines(keepends=True)
            return lines, node.start_mark.column
        if isinstance(node, ScalarNode) or not node.value:
            return source.text[node.start_mark.index : node.end_mark.index]
        # Flow collection: re-emit in block style.
        data = yaml.safe_load(source.text[node.start_mark.index : node.end_mark.index])
        dumped = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
        return dumped.splitlines(keepends=True), 0

    @staticmethod
    def _keyed(header: str, body: tuple[list[str], int] | str, indent: int) -> str:
        if isinstance(body, str):
            return f"{header} {body}\n"
        lines, dedent = body
        return f"{header}\n" + _reindent(lines, dedent, indent + 2)

    def _append_key(
        self, parent: MappingNode, key: str, body: tuple[list[str], int] | str, dotted_path: str
    ) -> Result[None, CatalogError]:
        if not _is_block(parent):
            return Err(
                CatalogError(
                    "invalid_catalog",
                    f"cannot add {dotted_path}: parent is not a block mapping",
                )
            )
        indent = parent.value[0][0].start_mark.column
        at = _block_end(self._text, parent)
        prefix = "" if at == 0 or self._text[at - 1] == "\n" else "\n"
        header = " " * indent + key + ":"
        return self._record(_Edit(at, at, prefix + self._keyed(header, body, indent)))

    def update_values_from_tree(self) -> Result[None, CatalogError]:
        """Splice pending edits into the text and resync both views."""
        if not self._edits:
            return Ok(None)
        text = self._text
        for edit in sorted(self._edits, key=lambda e: e.start, reverse=True):
            text = text[: edit.start] + edit.replacement + text[edit.end :]

        parsed = YamlDocument.parse(text, self.path)
        if isinstance(parsed, Err):
            return Err(parsed.error.wrap("edit produced invalid YAML"))
        self._text = text
        self._tree = parsed.value.tree
        self._values = parsed.value.values
        self._edits.clear()
        return Ok(None)

    def write(self, path: Path | None = None, *, mode: int | None = None) -> Result[None, CatalogError]:
        """Persist the document.

        An existing file keeps its permission bits; ``mode`` applies to new files.
        """
        synced = self.update_values_from_tree()
        if isinstance(synced, Err):
            return synced

        target = path or self.path
        if target is None:
            return Err(CatalogError("io", "document has no file path"))

        try:
            if target.exists():
                mode = stat.S_IMODE(target.stat().st_mode)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(self._text, encoding="utf-8")
            if mode is not None:
                os.chmod(target, mode)
        except OSError as e:
            return Err(CatalogError("io", f"failed to write {target}: {e}"))

        self.path = target
        logger.debug("wrote %s", target)
        return Ok(None)
