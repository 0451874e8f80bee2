"""Presentation and write-back collaborators used after a derivation pass."""

import sys
from dataclasses import dataclass, field
from typing import Any, Protocol, TextIO

import structlog

logger = structlog.get_logger(__name__)


class Presenter(Protocol):
    """Renders a named template with data (a chat card, a console line...)."""

    def render(self, template_id: str, data: dict[str, Any]) -> None: ...


@dataclass(frozen=True)
class WriteBackRequest:
    """
    Request to persist one value on the owner's records.

    Attributes:
        path: Dotted path, ``"<record id>.<field>"``
        value: New value for the field
    """

    path: str
    value: Any

    @property
    def record_id(self) -> str:
        return self.path.rpartition(".")[0]

    @property
    def field_name(self) -> str:
        return self.path.rpartition(".")[2]


class WriteBack(Protocol):
    """Applies write-back requests to the persistence layer."""

    def apply(self, request: WriteBackRequest) -> None: ...


@dataclass
class RecordingPresenter:
    """Keeps every rendered template in memory."""

    rendered: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    def render(self, template_id: str, data: dict[str, Any]) -> None:
        self.rendered.append((template_id, data))


class ConsolePresenter:
    """Writes a one-line summary of each rendered template to a stream."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream or sys.stdout

    def render(self, template_id: str, data: dict[str, Any]) -> None:
        description = data.get("description") or ""
        title = data.get("title") or template_id
        print(f"[{template_id}] {title}: {description}", file=self.stream)


@dataclass
class InMemoryWriteBack:
    """Collects write-back requests; ``values`` holds the latest value per path."""

    requests: list[WriteBackRequest] = field(default_factory=list)
    values: dict[str, Any] = field(default_factory=dict)

    def apply(self, request: WriteBackRequest) -> None:
        self.requests.append(request)
        self.values[request.path] = request.value
        logger.info("write_back_applied", path=request.path, value=request.value)
