"""Tests for the auth context stream."""

import asyncio

import pytest

from tandem.core.auth import AuthContext, AuthenticatedUser


class TestAuthContext:
    @pytest.mark.asyncio
    async def test_returns_immediately_when_signed_in(self):
        user = AuthenticatedUser(id="u1")
        auth = AuthContext(user)
        assert await auth.await_authenticated() == user

    @pytest.mark.asyncio
    async def test_waits_for_publish(self):
        auth = AuthContext()
        waiter = asyncio.create_task(auth.await_authenticated())
        await asyncio.sleep(0)
        assert not waiter.done()

        await auth.publish(AuthenticatedUser(id="u2"))
        user = await asyncio.wait_for(waiter, timeout=1)
        assert user.id == "u2"
        assert auth.current == user

    @pytest.mark.asyncio
    async def test_states_yields_current_first(self):
        auth = AuthContext()
        states = auth.states()
        assert await states.__anext__() is None
        await states.aclose()
