"""Unit tests for core/decisions.py"""

import asyncio

import pytest

from draftkit.core.decisions import (
    DecisionChannel, FieldMappingRequest, ScriptedResolver, TextReviewRequest, request_decision,
)
from draftkit.core.errors import ImportCancelledError


MAPPING = FieldMappingRequest(file_name="a.json", keys=["foo", "bar"], missing=["title", "body"])
REVIEW = TextReviewRequest(file_name="a.pdf", text="raw text", page_count=1)


@pytest.mark.asyncio
async def test_request_decision_none_cancels():
    with pytest.raises(ImportCancelledError):
        await request_decision(ScriptedResolver(), MAPPING)


@pytest.mark.asyncio
@pytest.mark.parametrize("review,expected", [
    (True, "raw text"),
    ("edited", "edited"),
    (str.upper, "RAW TEXT"),
])
async def test_scripted_resolver_review(review, expected):
    resolver = ScriptedResolver(review=review)
    assert await request_decision(resolver, REVIEW) == expected
    assert resolver.requests == [REVIEW]


@pytest.mark.asyncio
async def test_scripted_resolver_mapping_returns_copy():
    mapping = {"title": "foo", "body": "bar"}
    answer = await ScriptedResolver(mapping=mapping)(MAPPING)
    assert answer == mapping
    assert answer is not mapping


@pytest.mark.asyncio
async def test_decision_channel_resolve():
    """The awaiting side resumes with whatever the consumer answers."""
    channel = DecisionChannel()
    task = asyncio.create_task(request_decision(channel, REVIEW))
    pending = await channel.next_decision()
    assert pending.request is REVIEW
    pending.resolve("reviewed")
    assert await task == "reviewed"


@pytest.mark.asyncio
async def test_decision_channel_cancel():
    channel = DecisionChannel()
    task = asyncio.create_task(request_decision(channel, MAPPING))
    (await channel.next_decision()).cancel()
    with pytest.raises(ImportCancelledError):
        await task
