"""Chat message data models."""

from .message import (
    AuthorRole,
    ContentItem,
    TextContent,
    AnnotationContent,
    FileReferenceContent,
    ImageContent,
    FunctionCallContent,
    FunctionResultContent,
    Message,
)

__all__ = [
    "AuthorRole",
    "ContentItem",
    "TextContent",
    "AnnotationContent",
    "FileReferenceContent",
    "ImageContent",
    "FunctionCallContent",
    "FunctionResultContent",
    "Message",
]
