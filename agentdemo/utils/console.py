"""Console rendering of chat messages."""

from typing import Callable, Dict, List, Optional

from ..models.message import (
    AnnotationContent,
    AuthorRole,
    ContentItem,
    FileReferenceContent,
    FunctionCallContent,
    FunctionResultContent,
    ImageContent,
    Message,
    TextContent,
)


def _annotation(item: AnnotationContent) -> Optional[str]:
    return f"{item.quote}: File #{item.file_id}"


def _file_reference(item: FileReferenceContent) -> Optional[str]:
    return f"File #{item.file_id}"


def _image(item: ImageContent) -> Optional[str]:
    return item.uri or item.data_uri or f"{len(item.data) if item.data else 0} bytes"


def _function_call(item: FunctionCallContent) -> Optional[str]:
    return f"{item.id}"


def _function_result(item: FunctionResultContent) -> Optional[str]:
    result = "*" if item.result is None else str(item.result)
    return f"{item.call_id} - {result}"


def _text(item: TextContent) -> Optional[str]:
    # Already shown as the message content
    return None


_ITEM_FORMATTERS: Dict[type, Callable] = {
    TextContent: _text,
    AnnotationContent: _annotation,
    FileReferenceContent: _file_reference,
    ImageContent: _image,
    FunctionCallContent: _function_call,
    FunctionResultContent: _function_result,
}


def format_item(item: ContentItem) -> Optional[str]:
    """
    Render one content item, or None for items with no extra line.

    Raises:
        TypeError: If `item` is not one of the known content kinds
    """
    formatter = _ITEM_FORMATTERS.get(type(item))
    if formatter is None:
        raise TypeError(f"Unsupported content item: {type(item).__name__}")
    detail = formatter(item)
    if detail is None:
        return None
    return f"  [{type(item).__name__}] {detail}"


def format_chat_message(message: Message) -> str:
    """
    Render a message the way the demos print it.

    Example:
        # assistant - ArtDirector: This copy is approved.
    """
    author = "" if message.role == AuthorRole.USER else f" - {message.name or '*'}"
    content = message.content if message.content and message.content.strip() else ""
    code_marker = "\n  [CODE]\n" if message.is_code else " "

    lines: List[str] = [f"\n# {message.role.value}{author}:{code_marker}{content}"]
    for item in message.items:
        line = format_item(item)
        if line is not None:
            lines.append(line)
    return "\n".join(lines)


def print_chat_message(message: Message) -> None:
    print(format_chat_message(message))
