import asyncio

from shipment_query.session import NavigationSession, SemanticRequestGuard


def test_stale_semantic_response_is_dropped():
    async def scenario():
        guard = SemanticRequestGuard()
        release = asyncio.Event()

        async def slow(query, records):
            await release.wait()
            return ["stale"]

        async def fast(query, records):
            return ["fresh"]

        first = asyncio.ensure_future(guard.run(slow, "deliv", []))
        await asyncio.sleep(0)
        second = await guard.run(fast, "delivered", [])
        release.set()
        return await first, second

    first, second = asyncio.run(scenario())
    assert first is None
    assert second == ["fresh"]


def test_latest_request_is_accepted():
    async def provider(query, records):
        return list(records)

    guard = SemanticRequestGuard()
    assert asyncio.run(guard.run(provider, "q", [1, 2])) == [1, 2]
    assert guard.latest == 1


def test_invalidate_marks_in_flight_requests_stale():
    guard = SemanticRequestGuard()
    seq = guard.issue()
    assert guard.is_current(seq)
    guard.invalidate()
    assert not guard.is_current(seq)


def test_navigation_throttle():
    session = NavigationSession()
    assert not session.should_throttle(0.5, now=10.0)
    session.mark_action(now=10.0)
    assert session.should_throttle(0.5, now=10.2)
    assert not session.should_throttle(0.5, now=10.6)


def test_auto_open_is_claimed_once_per_session():
    session = NavigationSession()
    assert session.claim_auto_open()
    assert not session.claim_auto_open()
    session.reset()
    assert session.claim_auto_open()
    assert session.last_action_at is None


def test_sessions_do_not_share_state():
    a, b = NavigationSession(), NavigationSession()
    a.claim_auto_open()
    a.mark_action(now=1.0)
    assert b.claim_auto_open()
    assert not b.should_throttle(5.0, now=1.0)
