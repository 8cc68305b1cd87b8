"""Normalization of article bodies into ordered, typed content blocks.

Authors submit an ordered list of loosely-typed block mappings. Before
storage they are normalized into one of three block variants, empty blocks
are dropped and missing ids are generated. Stored block JSON is parsed back
with the same rules; anything unreadable falls back to a single paragraph
built from the post's legacy plain-text content.
"""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, ClassVar, Final

logger = logging.getLogger(__name__)

PARAGRAPH: Final = "paragraph"
IMAGE: Final = "image"
CODE: Final = "code"
BLOCK_TYPES: Final = (PARAGRAPH, IMAGE, CODE)


class UnknownBlockTypeError(ValueError):
    """Raised when a block carries a type outside the supported variants."""

    def __init__(self, block_type: str) -> None:
        super().__init__(f"Unsupported content block type: {block_type or '<empty>'}")
        self.block_type = block_type


@dataclass(frozen=True)
class ParagraphBlock:
    id: str
    text: str

    type: ClassVar[str] = PARAGRAPH


@dataclass(frozen=True)
class ImageBlock:
    id: str
    src: str
    alt: str = ""

    type: ClassVar[str] = IMAGE


@dataclass(frozen=True)
class CodeBlock:
    id: str
    code: str
    language: str = ""

    type: ClassVar[str] = CODE


ContentBlock = ParagraphBlock | ImageBlock | CodeBlock


def new_block_id() -> str:
    """Return a fresh block identifier."""
    return uuid.uuid4().hex


def _text(raw: Mapping[str, Any], key: str) -> str:
    value = raw.get(key)
    return value if isinstance(value, str) else ""


def _is_blank(value: str) -> bool:
    return not value.strip()


def parse_block(raw: Mapping[str, Any]) -> ContentBlock | None:
    """Convert one submitted block mapping into a typed block.

    Returns None for blocks without content (blank paragraph text, image
    source or code body).

    Raises:
        UnknownBlockTypeError: If the ``type`` discriminator is not supported.
    """
    block_type = _text(raw, "type").strip().lower()
    block_id = _text(raw, "id").strip() or new_block_id()

    if block_type == PARAGRAPH:
        text = _text(raw, "text")
        return None if _is_blank(text) else ParagraphBlock(id=block_id, text=text)
    if block_type == IMAGE:
        src = _text(raw, "src")
        if _is_blank(src):
            return None
        return ImageBlock(id=block_id, src=src, alt=_text(raw, "alt"))
    if block_type == CODE:
        code = _text(raw, "code")
        if _is_blank(code):
            return None
        return CodeBlock(id=block_id, code=code, language=_text(raw, "language"))
    raise UnknownBlockTypeError(block_type)


def block_to_dict(block: ContentBlock) -> dict[str, str]:
    """Serialize a block to its stored/wire mapping."""
    if isinstance(block, ParagraphBlock):
        return {"id": block.id, "type": PARAGRAPH, "text": block.text}
    if isinstance(block, ImageBlock):
        return {"id": block.id, "type": IMAGE, "src": block.src, "alt": block.alt}
    if isinstance(block, CodeBlock):
        return {"id": block.id, "type": CODE, "language": block.language, "code": block.code}
    raise TypeError(f"Not a content block: {block!r}")


def _legacy_paragraph(legacy_text: str | None) -> list[ContentBlock]:
    if legacy_text is None or _is_blank(legacy_text):
        return []
    return [ParagraphBlock(id=new_block_id(), text=legacy_text)]


def normalize(
    blocks: Iterable[Mapping[str, Any]] | None,
    legacy_text: str | None = "",
) -> list[ContentBlock]:
    """Return the canonical block list for submitted content.

    Empty blocks are dropped and order is preserved. When nothing survives,
    non-blank ``legacy_text`` becomes a single paragraph.

    Raises:
        UnknownBlockTypeError: If any block has an unsupported type.
    """
    normalized = [block for block in (parse_block(raw) for raw in blocks or ()) if block]
    return normalized or _legacy_paragraph(legacy_text)


def serialize(blocks: Iterable[ContentBlock]) -> str:
    """Encode canonical blocks as the stored JSON array."""
    return json.dumps([block_to_dict(block) for block in blocks], ensure_ascii=False)


def denormalize(stored_json: str | None, legacy_text: str | None = "") -> list[ContentBlock]:
    """Parse stored block JSON.

    Malformed JSON, unknown block types or an empty array all fall back to a
    paragraph built from ``legacy_text``; with no legacy text the result is
    empty. Never raises.
    """
    if stored_json and stored_json.strip():
        try:
            parsed = json.loads(stored_json)
            if not isinstance(parsed, list):
                raise ValueError("stored content blocks are not a JSON array")
            blocks = normalize(
                (item if isinstance(item, Mapping) else {} for item in parsed),
                "",
            )
        except ValueError as err:
            logger.warning("Discarding unreadable content blocks: %s", err)
        else:
            if blocks:
                return blocks
    return _legacy_paragraph(legacy_text)
