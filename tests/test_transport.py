import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from bbmp_launcher.exceptions import HttpStatusError, NetworkError
from bbmp_launcher.net.transport import Transport

PAYLOAD = bytes(range(256)) * 1200  # ~300 KB, several read chunks


async def _jar(request):
    return web.Response(body=PAYLOAD, content_type="application/java-archive")


async def _chunked(request):
    response = web.StreamResponse()
    response.enable_chunked_encoding()
    await response.prepare(request)
    for _ in range(3):
        await response.write(b"a" * 1000)
    await response.write_eof()
    return response


async def _hop(request):
    hops = {
        "1": web.HTTPFound,
        "2": web.HTTPMovedPermanently,
        "3": web.HTTPTemporaryRedirect,
    }
    step = request.match_info["step"]
    if step == "3":
        # relative Location
        raise hops[step]("../jar")
    raise hops[step](f"/hop/{int(step) + 1}")


async def _loop(request):
    raise web.HTTPFound("/loop")


async def _missing(request):
    raise web.HTTPNotFound()


async def _release(request):
    return web.json_response(
        {"tag_name": "v2.1", "user_agent": request.headers.get("User-Agent")}
    )


async def _not_json(request):
    return web.Response(text="<html>maintenance</html>", content_type="text/html")


@pytest.fixture
async def server():
    app = web.Application()
    app.router.add_get("/jar", _jar)
    app.router.add_get("/chunked", _chunked)
    app.router.add_get("/hop/{step}", _hop)
    app.router.add_get("/loop", _loop)
    app.router.add_get("/missing", _missing)
    app.router.add_get("/release", _release)
    app.router.add_get("/broken", _not_json)
    test_server = TestServer(app)
    await test_server.start_server()
    yield test_server
    await test_server.close()


@pytest.fixture
async def transport():
    client = Transport(user_agent="BBMP-Test")
    yield client
    await client.close()


async def test_download_follows_redirect_chain(server, transport, tmp_path):
    progress: list[float] = []
    destination = tmp_path / "nested" / "proxy.jar"

    result = await transport.download_file(
        str(server.make_url("/hop/1")), destination, progress.append
    )

    assert result == str(destination)
    assert destination.read_bytes() == PAYLOAD
    assert progress
    assert progress == sorted(progress)
    assert progress[-1] == pytest.approx(1.0)
    assert all(0 < p <= 1.0 for p in progress)


async def test_unknown_length_reports_no_progress(server, transport, tmp_path):
    progress: list[float] = []
    destination = tmp_path / "chunked.bin"

    await transport.download_file(
        str(server.make_url("/chunked")), destination, progress.append
    )

    assert destination.read_bytes() == b"a" * 3000
    assert progress == []


async def test_download_error_status(server, transport, tmp_path):
    with pytest.raises(HttpStatusError) as exc_info:
        await transport.download_file(
            str(server.make_url("/missing")), tmp_path / "x.jar"
        )

    assert exc_info.value.status == 404
    assert isinstance(exc_info.value, NetworkError)


async def test_fetch_json_sends_user_agent(server, transport):
    data = await transport.fetch_json(str(server.make_url("/release")))

    assert data == {"tag_name": "v2.1", "user_agent": "BBMP-Test"}


async def test_fetch_json_rejects_non_json_body(server, transport):
    with pytest.raises(NetworkError, match="Invalid JSON"):
        await transport.fetch_json(str(server.make_url("/broken")))


async def test_fetch_json_error_status(server, transport):
    with pytest.raises(HttpStatusError):
        await transport.fetch_json(str(server.make_url("/missing")))


async def test_redirect_limit(server):
    async with Transport(max_redirects=2) as limited:
        with pytest.raises(NetworkError, match="Too many redirects"):
            await limited.fetch_json(str(server.make_url("/loop")))


async def test_redirect_limit_allows_short_chains(server, tmp_path):
    async with Transport(max_redirects=3) as limited:
        await limited.download_file(str(server.make_url("/hop/1")), tmp_path / "a.jar")

    assert (tmp_path / "a.jar").stat().st_size == len(PAYLOAD)


async def test_unreachable_host(transport, tmp_path):
    with pytest.raises(NetworkError):
        await transport.download_file("http://127.0.0.1:1/proxy.jar", tmp_path / "x")


async def test_session_is_recreated_after_close(server, transport):
    await transport.fetch_json(str(server.make_url("/release")))
    await transport.close()

    data = await transport.fetch_json(str(server.make_url("/release")))

    assert data["tag_name"] == "v2.1"
