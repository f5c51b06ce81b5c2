"""Unity YAML document reader.

Turns the bytes of a Unity serialized asset into Value trees. Parsing goes
through PyYAML's reader/scanner/parser/composer, but skips its constructors:
composed nodes are mapped straight onto tree variants so that every scalar
keeps the exact kind it was written as.

Unity specifics handled here:

  * Document headers such as `--- !u!114 &11400000` (optionally followed by
    `stripped`) are rewritten to a bare `---`. Unity declares the `!u!` tag
    handle only once per file, which YAML scopes to the first document.
  * Plain scalars resolve like serde_yaml does, close to the YAML 1.2 core
    schema rather than PyYAML's YAML 1.1 default. In particular a digit
    string with a leading zero (`0300000002000000`) stays Text instead of
    turning into an octal integer.
"""

from __future__ import annotations

import logging
import math
import re
from pathlib import Path

import yaml
from yaml.composer import Composer
from yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode
from yaml.parser import Parser
from yaml.reader import Reader
from yaml.resolver import BaseResolver
from yaml.scanner import Scanner

from sots_inspect.errors import DocumentParseError, DocumentReadError
from sots_inspect.tree import Bool, Float, Int, List, Null, Struct, Text, UInt, Value

logger = logging.getLogger(__name__)

BOOL_TAG = "tag:yaml.org,2002:bool"
NULL_TAG = "tag:yaml.org,2002:null"
INT_TAG = "tag:yaml.org,2002:int"
FLOAT_TAG = "tag:yaml.org,2002:float"

_UNITY_HEADER = re.compile(r"^--- !u!\d+ &-?\d+(?: stripped)?[ \t\r]*$", re.MULTILINE)

_U64_MAX = 2**64 - 1
_I64_MIN = -(2**63)


# ---------------------------------------------------------------------------
# Loader: composer only, with serde_yaml-style implicit scalar resolution
# ---------------------------------------------------------------------------

class UnityLoader(Reader, Scanner, Parser, Composer, BaseResolver):
    def __init__(self, stream) -> None:
        Reader.__init__(self, stream)
        Scanner.__init__(self)
        Parser.__init__(self)
        Composer.__init__(self)
        BaseResolver.__init__(self)


UnityLoader.add_implicit_resolver(
    BOOL_TAG,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)
UnityLoader.add_implicit_resolver(
    NULL_TAG,
    re.compile(r"^(?:~|null|Null|NULL|)$"),
    ["~", "n", "N", ""],
)
UnityLoader.add_implicit_resolver(
    INT_TAG,
    re.compile(r"^(?:[-+]?(?:0|[1-9][0-9]*)|0x[0-9a-fA-F]+|0o[0-7]+)$"),
    list("-+0123456789"),
)
UnityLoader.add_implicit_resolver(
    FLOAT_TAG,
    re.compile(
        r"""^(?:[-+]?(?:[0-9]+\.[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?
               |[-+]?[0-9]+[eE][-+]?[0-9]+
               |[-+]?\.(?:inf|Inf|INF)
               |\.(?:nan|NaN|NAN))$""",
        re.VERBOSE,
    ),
    list("-+0123456789."),
)


# ---------------------------------------------------------------------------
# Node → Value
# ---------------------------------------------------------------------------

def _parse_int(text: str) -> int:
    if text.startswith("0x"):
        return int(text[2:], 16)
    if text.startswith("0o"):
        return int(text[2:], 8)
    return int(text)


def _parse_float(text: str) -> float:
    lowered = text.lower()
    if lowered.endswith(".inf"):
        return -math.inf if lowered.startswith("-") else math.inf
    if lowered == ".nan":
        return math.nan
    return float(text)


def _scalar(node: ScalarNode) -> Value:
    text = node.value
    if node.tag == NULL_TAG:
        return Null()
    if node.tag == BOOL_TAG:
        return Bool(text.lower() == "true")
    if node.tag == INT_TAG:
        number = _parse_int(text)
        if 0 <= number <= _U64_MAX:
            return UInt(number)
        if _I64_MIN <= number < 0:
            return Int(number)
        # Out of 64-bit range: serde_yaml falls back to a float here too.
        return Float(float(number))
    if node.tag == FLOAT_TAG:
        return Float(_parse_float(text))
    return Text(text)


def _to_value(node: Node) -> Value:
    if isinstance(node, ScalarNode):
        return _scalar(node)
    if isinstance(node, SequenceNode):
        return List(tuple(_to_value(item) for item in node.value))
    if isinstance(node, MappingNode):
        fields: dict[str, Value] = {}
        for key_node, value_node in node.value:
            if not isinstance(key_node, ScalarNode):
                raise DocumentParseError(
                    f"mapping key at line {key_node.start_mark.line + 1} is not a scalar"
                )
            key = key_node.value
            if key in fields:
                raise DocumentParseError(
                    f"duplicate key `{key}` at line {key_node.start_mark.line + 1}"
                )
            fields[key] = _to_value(value_node)
        return Struct(fields)
    raise DocumentParseError(f"unsupported YAML node {type(node).__name__}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_documents(text: str, source: str = "<string>") -> list[Value]:
    """Parse every document in `text`."""
    text = _UNITY_HEADER.sub("---", text)
    try:
        nodes = list(yaml.compose_all(text, Loader=UnityLoader))
        return [_to_value(node) for node in nodes]
    except yaml.YAMLError as e:
        raise DocumentParseError(f"{source}: {e}") from e
    except DocumentParseError as e:
        raise DocumentParseError(f"{source}: {e}") from e
    except ValueError as e:
        raise DocumentParseError(f"{source}: invalid scalar: {e}") from e
    except RecursionError as e:
        raise DocumentParseError(
            f"{source}: document nests too deeply or is self-referential"
        ) from e


def parse_document(text: str, source: str = "<string>") -> Value:
    """Parse `text`, which must hold exactly one document."""
    documents = parse_documents(text, source)
    if len(documents) != 1:
        raise DocumentParseError(
            f"{source}: expected exactly one YAML document, found {len(documents)}"
        )
    return documents[0]


def _read_text(path: Path) -> str:
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise DocumentReadError(f"Cannot read `{path}`: {e.strerror or e}") from e
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise DocumentParseError(f"{path}: not valid UTF-8 ({e.reason})") from e


def read_documents(path: Path) -> list[Value]:
    documents = parse_documents(_read_text(path), str(path))
    logger.debug("parsed path=%s documents=%d", path, len(documents))
    return documents


def read_document(path: Path) -> Value:
    document = parse_document(_read_text(path), str(path))
    logger.debug("parsed path=%s documents=1", path)
    return document
