"""Chat message and content item data models."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Union


class AuthorRole(Enum):
    """Who authored a message."""
    USER = "user"
    AGENT = "assistant"


@dataclass(frozen=True)
class TextContent:
    """Plain text produced by the model."""
    text: str
    kind = "text"


@dataclass(frozen=True)
class AnnotationContent:
    """A quote from a file attached to the response."""
    quote: str
    file_id: str
    kind = "annotation"


@dataclass(frozen=True)
class FileReferenceContent:
    """A reference to a file produced or used by the model."""
    file_id: str
    kind = "file_reference"


@dataclass(frozen=True)
class ImageContent:
    """
    An image returned by the model.

    Attributes:
        uri: Remote location, when the image is hosted
        data_uri: Inline data URI, when available
        data: Raw image bytes
        format: Image format (png, jpeg, ...)
    """
    uri: Optional[str] = None
    data_uri: Optional[str] = None
    data: Optional[bytes] = None
    format: Optional[str] = None
    kind = "image"


@dataclass(frozen=True)
class FunctionCallContent:
    """A tool call requested by the model."""
    id: str
    name: str
    arguments: Mapping[str, Any] = field(default_factory=dict, hash=False)
    kind = "function_call"

    def __post_init__(self):
        object.__setattr__(self, "arguments", MappingProxyType(dict(self.arguments)))


@dataclass(frozen=True)
class FunctionResultContent:
    """The result of a tool call, sent back to the model."""
    call_id: str
    name: str
    result: Any = field(default=None, hash=False)
    kind = "function_result"


ContentItem = Union[
    TextContent,
    AnnotationContent,
    FileReferenceContent,
    ImageContent,
    FunctionCallContent,
    FunctionResultContent,
]

CONTENT_KINDS = (
    TextContent,
    AnnotationContent,
    FileReferenceContent,
    ImageContent,
    FunctionCallContent,
    FunctionResultContent,
)


@dataclass(frozen=True)
class Message:
    """
    A single chat message.

    Attributes:
        role: AuthorRole of the message author
        content: Text content of the message
        name: Author name (agent name for agent messages)
        sequence_number: Position in the conversation log; 0 until appended
        items: Non-text content items (tool calls, tool results, images, ...)
        metadata: Free-form metadata (e.g. {"code": True})
    """
    role: AuthorRole
    content: str
    name: Optional[str] = None
    sequence_number: int = 0
    items: Tuple[ContentItem, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        # Read-only view so a logged message cannot change underneath the log
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @classmethod
    def user(cls, content: str, name: Optional[str] = None) -> "Message":
        return cls(role=AuthorRole.USER, content=content, name=name)

    @classmethod
    def agent(cls, name: str, content: str, items: Tuple[ContentItem, ...] = ()) -> "Message":
        return cls(role=AuthorRole.AGENT, content=content, name=name, items=tuple(items))

    @property
    def is_code(self) -> bool:
        return bool(self.metadata.get("code", False))
