"""Serialize parsed proto models to JSON."""

from __future__ import annotations

import dataclasses
import json
from typing import Any, Dict

from protoc_json import config
from protoc_json.errors import ProtoSerializationError
from protoc_json.models import Proto


def to_dict(proto: Proto) -> Dict[str, Any]:
    """Convert a Proto to plain dicts and tuples, keeping declaration order."""
    return dataclasses.asdict(proto, dict_factory=dict)


def to_json(proto: Proto, pretty: bool = True) -> str:
    """Render a Proto as a JSON document.

    ``pretty`` indents every level the same way; otherwise the output is a
    single line.
    """
    try:
        return json.dumps(
            to_dict(proto),
            indent=config.JSON_INDENT if pretty else None,
            ensure_ascii=False,
        )
    except (TypeError, ValueError) as e:
        raise ProtoSerializationError(f"Cannot serialize proto document: {e}") from e
