"""Human-in-the-loop decision requests and resolvers.

Importers never talk to a UI directly. When automatic inference is not enough
they build a request, hand it to a *resolver* and suspend until it answers:

    answer = await request_decision(resolver, FieldMappingRequest(...))

A resolver is any async callable ``resolver(request) -> answer | None``.
Returning ``None`` (or raising ImportCancelledError) cancels the import.

Three resolvers ship with the package:

- ScriptedResolver: preset answers for headless runs and tests.
- DecisionChannel: queue-backed; a UI task pulls pending decisions and
  resolves or cancels them while the pipeline awaits.
- PromptResolver (in draftkit.cli.prompts): interactive Typer prompts.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Literal, Optional, Union

from pydantic import BaseModel, Field

from draftkit.core.errors import ImportCancelledError


class FieldMappingRequest(BaseModel):
    """Ask which JSON keys hold the fields automatic alias matching missed."""
    kind: Literal["field_mapping"] = "field_mapping"
    file_name: str
    keys: list[str]
    missing: list[str]
    suggested: dict[str, str] = Field(default_factory=dict)


class TextReviewRequest(BaseModel):
    """Ask a human to review/edit raw PDF text before segmentation."""
    kind: Literal["text_review"] = "text_review"
    file_name: str
    text: str
    page_count: int = 0


DecisionRequest = Union[FieldMappingRequest, TextReviewRequest]
Resolver = Callable[[DecisionRequest], Awaitable[Any]]


async def request_decision(resolver: Resolver, request: DecisionRequest) -> Any:
    """Suspend until the resolver answers; a None answer becomes ImportCancelledError."""
    answer = await resolver(request)
    if answer is None:
        raise ImportCancelledError(f"Import cancelled: {request.kind} for {request.file_name}")
    return answer


class ScriptedResolver:
    """Answer decisions from preset values; unanswered kinds cancel.

    ``mapping`` answers field mapping requests (a field -> key dict).
    ``review`` answers text review requests: a string replaces the text, a
    callable receives the extracted text and returns the edit, and True
    accepts the text unchanged.
    """

    def __init__(
        self,
        mapping: Optional[dict[str, str]] = None,
        review: Union[str, bool, Callable[[str], Optional[str]], None] = None,
        ):
        self.mapping = mapping
        self.review = review
        self.requests: list[DecisionRequest] = []

    async def __call__(self, request: DecisionRequest) -> Any:
        self.requests.append(request)
        if isinstance(request, FieldMappingRequest):
            return dict(self.mapping) if self.mapping is not None else None
        if self.review is True:
            return request.text
        if callable(self.review):
            return self.review(request.text)
        return self.review or None


@dataclass
class PendingDecision:
    """A request awaiting an answer from whoever drains the channel."""
    request: DecisionRequest
    future: asyncio.Future = field(repr=False)

    def resolve(self, answer: Any) -> None:
        if not self.future.done():
            self.future.set_result(answer)

    def cancel(self) -> None:
        self.resolve(None)


class DecisionChannel:
    """Queue-backed resolver: the pipeline awaits, a consumer task answers."""

    def __init__(self) -> None:
        self._pending: asyncio.Queue[PendingDecision] = asyncio.Queue()

    async def __call__(self, request: DecisionRequest) -> Any:
        future = asyncio.get_running_loop().create_future()
        await self._pending.put(PendingDecision(request=request, future=future))
        return await future

    async def next_decision(self) -> PendingDecision:
        """Wait for the next request the pipeline is blocked on."""
        return await self._pending.get()
