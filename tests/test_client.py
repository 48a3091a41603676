import asyncio
import json

import httpx
import pytest

from sams.client import TOKEN_KEY, ApiClient, ApiError, RequestCoalescer, TokenStore
from sams.errors import ValidationError


class FakeServer:
    """Records requests and answers with the API envelope."""

    def __init__(self, routes=None, delay=0.01):
        self.routes = routes or {}
        self.delay = delay
        self.calls = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        await asyncio.sleep(self.delay)
        key = f"{request.method} {request.url.path}"
        status, body = self.routes.get(key, (200, {"success": True, "message": "", "data": []}))
        return httpx.Response(status, json=body)


def make_client(server, token=None):
    store = TokenStore(path=None)
    if token:
        store.set(token)
    return ApiClient("http://testserver/api", token_store=store, transport=httpx.MockTransport(server))


def test_concurrent_gets_share_one_request():
    server = FakeServer()

    async def scenario():
        async with make_client(server) as client:
            first, second = await asyncio.gather(client.list_appointments(), client.list_appointments())
            assert first == second == []
            assert len(client.coalescer) == 0
            await client.list_appointments()

    asyncio.run(scenario())
    # two concurrent calls, then one after the first settled
    assert len(server.calls) == 2


def test_different_queries_are_not_shared():
    server = FakeServer()

    async def scenario():
        async with make_client(server) as client:
            await asyncio.gather(client.list_available_users(), client.list_available_users(include_staffed=True))

    asyncio.run(scenario())
    assert sorted(str(c.url.params) for c in server.calls) == ["", "includeStaffed=true"]


def test_writes_are_never_shared():
    server = FakeServer()

    async def scenario():
        async with make_client(server) as client:
            await asyncio.gather(
                client.create_staff({"userId": 1}),
                client.create_staff({"userId": 1}),
            )

    asyncio.run(scenario())
    assert [c.method for c in server.calls] == ["POST", "POST"]


def test_failure_reaches_every_waiter_and_clears_entry():
    server = FakeServer({"GET /api/appointments": (500, {"success": False, "message": "boom"})})

    async def scenario():
        async with make_client(server) as client:
            results = await asyncio.gather(
                client.list_appointments(), client.list_appointments(), return_exceptions=True,
            )
            assert len(client.coalescer) == 0
            return results

    results = asyncio.run(scenario())
    assert all(isinstance(r, ApiError) and r.message == "boom" for r in results)
    assert len(server.calls) == 1


def test_coalescer_drops_key_after_settling():
    coalescer = RequestCoalescer()
    key = coalescer.key("get", "/x")
    assert key == "GET:/x"

    async def scenario():
        gate = asyncio.Event()
        calls = []

        async def produce():
            calls.append(1)
            await gate.wait()
            return "done"

        waiters = [asyncio.ensure_future(coalescer.run(key, produce)) for _ in range(3)]
        await asyncio.sleep(0)
        assert key in coalescer
        gate.set()
        results = await asyncio.gather(*waiters)
        await asyncio.sleep(0)
        return results, calls

    results, calls = asyncio.run(scenario())
    assert results == ["done"] * 3
    assert calls == [1]
    assert key not in coalescer


def test_cancelled_waiter_leaves_shared_request_running():
    coalescer = RequestCoalescer()
    key = coalescer.key("GET", "/x")

    async def scenario():
        gate = asyncio.Event()
        calls = []

        async def produce():
            calls.append(1)
            await gate.wait()
            return "done"

        first = asyncio.ensure_future(coalescer.run(key, produce))
        second = asyncio.ensure_future(coalescer.run(key, produce))
        await asyncio.sleep(0)

        first.cancel()
        await asyncio.sleep(0)
        gate.set()

        results = await asyncio.gather(first, second, return_exceptions=True)
        return results, calls

    results, calls = asyncio.run(scenario())
    assert isinstance(results[0], asyncio.CancelledError)
    assert results[1] == "done"
    assert calls == [1]
    assert key not in coalescer


def test_bearer_header_from_token_store():
    server = FakeServer()

    async def scenario():
        async with make_client(server, token="abc") as client:
            await client.get_appointment(7)
            client.logout()
            await client.get_appointment(8)

    asyncio.run(scenario())
    assert server.calls[0].headers["Authorization"] == "Bearer abc"
    assert "Authorization" not in server.calls[1].headers


def test_login_stores_token():
    server = FakeServer({"POST /api/auth/login": (200, {"access_token": "tok", "token_type": "bearer"})})

    async def scenario():
        async with make_client(server) as client:
            token = await client.login("a@example.com", "pw")
            return token, client.tokens.get()

    assert asyncio.run(scenario()) == ("tok", "tok")
    assert b"username=a%40example.com" in server.calls[0].content


def test_detail_errors_become_api_errors():
    server = FakeServer({"GET /api/appointments/1": (401, {"detail": "Could not validate credentials"})})

    async def scenario():
        async with make_client(server) as client:
            await client.get_appointment(1)

    with pytest.raises(ApiError) as err:
        asyncio.run(scenario())
    assert err.value.status_code == 401
    assert err.value.message == "Could not validate credentials"


@pytest.mark.parametrize("staff_id", [None, 0])
def test_assign_without_staff_sends_nothing(staff_id):
    server = FakeServer()

    async def scenario():
        async with make_client(server) as client:
            await client.assign_staff(5, staff_id)

    with pytest.raises(ValidationError, match="Please select a staff member"):
        asyncio.run(scenario())
    assert server.calls == []


def test_assign_confirms_then_reloads():
    confirmed = {"id": 5, "status": "confirmed", "staffId": 2}
    server = FakeServer({
        "PUT /api/appointments/5/status": (200, {"success": True, "message": "", "data": confirmed}),
        "GET /api/appointments": (200, {"success": True, "message": "", "data": [confirmed]}),
    })

    async def scenario():
        async with make_client(server) as client:
            return await client.assign_staff(5, 2)

    appointment, appointments = asyncio.run(scenario())
    assert appointment == confirmed
    assert appointments == [confirmed]
    assert [(c.method, c.url.path) for c in server.calls] == [
        ("PUT", "/api/appointments/5/status"),
        ("GET", "/api/appointments"),
    ]
    assert json.loads(server.calls[0].content) == {"status": "confirmed", "staffId": 2}


def test_token_store_file(tmp_path):
    path = tmp_path / "nested" / "storage.json"
    store = TokenStore(str(path))
    assert store.get() is None

    store.set("xyz")
    assert json.loads(path.read_text()) == {TOKEN_KEY: "xyz"}
    assert TokenStore(str(path)).get() == "xyz"

    store.clear()
    assert store.get() is None
