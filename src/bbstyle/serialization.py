"""Serialization of parse results to JSON-compatible dicts.

Useful for handing styled messages to a renderer in another process,
for logging and for snapshot tests.

All output is deterministic (sorted keys). Image placeholders are written
as their URL, run id and state; image bytes are never serialized.

Example:
    from bbstyle import parse
    from bbstyle.serialization import to_json, from_json

    styled = parse("[b]Hello[/b] [color=red]World[/color]")
    json_str = to_json(styled)
    restored = from_json(json_str)
    assert restored.text == styled.text

Thread Safety:
    All functions are pure. Safe to call from any thread.

"""

import json
from typing import Any

from bbstyle.images import ImagePlaceholder
from bbstyle.runs import (
    Color,
    ImageReference,
    Link,
    Payload,
    Reference,
    RelativeSize,
    RunKind,
    StyledText,
    StyleRun,
)


def _payload_to_dict(payload: Payload) -> dict[str, Any] | None:
    match payload:
        case None:
            return None
        case Color(argb=argb):
            return {"_type": "Color", "argb": argb, "hex": payload.hex}
        case Link(url=url):
            return {"_type": "Link", "url": url}
        case Reference(identifier=identifier, display_name=display_name, private=private):
            return {
                "_type": "Reference",
                "identifier": identifier,
                "display_name": display_name,
                "private": private,
            }
        case RelativeSize(scale=scale):
            return {"_type": "RelativeSize", "scale": scale}
        case ImageReference(url=url, placeholder=placeholder):
            pending = placeholder.pending
            return {
                "_type": "ImageReference",
                "url": url,
                "run_id": placeholder.run_id,
                "state": placeholder.state.name,
                "pending": pending if isinstance(pending, str) else None,
            }
    msg = f"Unknown payload type: {type(payload).__name__}"
    raise TypeError(msg)


def _payload_from_dict(data: dict[str, Any] | None) -> Payload:
    if data is None:
        return None
    match data.get("_type"):
        case "Color":
            return Color(data["argb"])
        case "Link":
            return Link(data["url"])
        case "Reference":
            return Reference(
                data["identifier"],
                display_name=data.get("display_name"),
                private=data.get("private", False),
            )
        case "RelativeSize":
            return RelativeSize(data["scale"])
        case "ImageReference":
            # Restored placeholders start over as pending
            placeholder = ImagePlaceholder(data["url"], pending=data.get("pending"))
            return ImageReference(data["url"], placeholder)
        case type_name:
            msg = f"Unknown payload type: {type_name!r}"
            raise ValueError(msg)


def to_dict(styled: StyledText) -> dict[str, Any]:
    """Convert a StyledText to a JSON-compatible dict.

    Args:
        styled: Parse result

    Returns:
        Dict with ``text`` and a ``runs`` list.

    """
    return {
        "text": styled.text,
        "runs": [
            {
                "start": run.start,
                "end": run.end,
                "kind": run.kind.name,
                "inclusive": run.inclusive,
                "payload": _payload_to_dict(run.payload),
            }
            for run in styled.runs
        ],
    }


def from_dict(data: dict[str, Any]) -> StyledText:
    """Rebuild a StyledText from a dict produced by to_dict.

    Raises:
        ValueError: If a run kind or payload type is unknown.

    """
    runs: list[StyleRun] = []
    for raw in data.get("runs", ()):
        try:
            kind = RunKind[raw["kind"]]
        except KeyError:
            msg = f"Unknown run kind: {raw.get('kind')!r}"
            raise ValueError(msg) from None
        runs.append(
            StyleRun(
                start=raw["start"],
                end=raw["end"],
                kind=kind,
                payload=_payload_from_dict(raw.get("payload")),
                inclusive=raw.get("inclusive", True),
            )
        )
    return StyledText(text=data["text"], runs=tuple(runs))


def to_json(styled: StyledText, *, indent: int | None = None) -> str:
    """Serialize a StyledText to a JSON string (sorted keys)."""
    return json.dumps(to_dict(styled), sort_keys=True, indent=indent)


def from_json(data: str) -> StyledText:
    """Deserialize a StyledText from a JSON string produced by to_json."""
    return from_dict(json.loads(data))


__all__ = ["to_dict", "from_dict", "to_json", "from_json"]
