"""Unit tests for cancellable chat streams."""

import pytest

from src.services.chat_session import ChatSubscription
from src.services.errors import LLMError


async def _chunks(*parts, fail_after=None):
    for index, part in enumerate(parts):
        if fail_after is not None and index == fail_after:
            raise LLMError("connection reset")
        yield part


@pytest.mark.asyncio
async def test_all_chunks_delivered():
    subscription = ChatSubscription(_chunks("The ", "drill ", "costs $129."))

    received = [chunk async for chunk in subscription.chunks()]

    assert received == ["The ", "drill ", "costs $129."]
    assert subscription.text == "The drill costs $129."
    assert subscription.error_message() is None


@pytest.mark.asyncio
async def test_cancel_stops_delivery_and_keeps_partial_text():
    subscription = ChatSubscription(_chunks("one ", "two ", "three"))
    received = []

    async for chunk in subscription.chunks():
        received.append(chunk)
        if len(received) == 2:
            subscription.cancel()

    assert received == ["one ", "two "]
    assert subscription.cancelled
    assert subscription.text == "one two "


@pytest.mark.asyncio
async def test_stream_error_becomes_apology():
    subscription = ChatSubscription(_chunks("partial ", "never", fail_after=1))

    received = [chunk async for chunk in subscription.chunks()]

    assert received == ["partial "]
    assert subscription.error == "connection reset"
    assert subscription.error_message() == "Sorry, I ran into an error: connection reset"


@pytest.mark.asyncio
async def test_unexpected_stream_error_becomes_apology():
    async def broken():
        yield "Hello"
        raise AttributeError("'list' object has no attribute 'get'")

    subscription = ChatSubscription(broken())

    received = [chunk async for chunk in subscription.chunks()]

    assert received == ["Hello"]
    assert subscription.text == "Hello"
    assert subscription.error_message() == (
        "Sorry, I ran into an error: 'list' object has no attribute 'get'"
    )
