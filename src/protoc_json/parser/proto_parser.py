from __future__ import annotations

from pathlib import Path

from protoc_json.errors import ProtoIOError, ProtoNestingError
from protoc_json.models import Proto
from protoc_json.serializer import to_json
from protoc_json.utils.logging import get_logger

from .proto_transform import transform_proto
from .proto_tree_parser import parse_tree

logger = get_logger(__name__)


def parse(text: str) -> Proto:
    """Parse proto source text into a Proto.

    Raises ProtoSyntaxError if the text does not match the grammar and
    ProtoNestingError if definitions nest too deeply to walk.
    """
    try:
        return transform_proto(parse_tree(text))
    except RecursionError as e:
        raise ProtoNestingError("Definitions are nested too deeply to parse") from e


def parse_file(file_path: str) -> Proto:
    """Read a .proto file and parse it."""
    logger.debug("parsing_proto_file", path=str(file_path))
    try:
        text = Path(file_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ProtoIOError(str(file_path), str(e)) from e
    return parse(text)


def parse_to_json(text: str, pretty: bool = True) -> str:
    return to_json(parse(text), pretty=pretty)


def parse_file_to_json(file_path: str, pretty: bool = True) -> str:
    return to_json(parse_file(file_path), pretty=pretty)
