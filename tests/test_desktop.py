import subprocess

import httpx
import pytest

from pjmotors import desktop
from pjmotors.desktop import ServerProcess, ServerStartupError


class FakeProcess:
    def __init__(self, returncode=None, hangs=False):
        self.returncode = returncode
        self.hangs = hangs
        self.terminated = False
        self.killed = False

    def poll(self):
        return self.returncode

    def terminate(self):
        self.terminated = True
        if not self.hangs:
            self.returncode = 0

    def kill(self):
        self.killed = True
        self.returncode = -9

    def wait(self, timeout=None):
        if self.returncode is None:
            raise subprocess.TimeoutExpired("uvicorn", timeout)
        return self.returncode


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr(desktop.time, "sleep", lambda seconds: None)


def test_start_server_spawns_uvicorn(monkeypatch):
    calls = []

    def fake_popen(command):
        calls.append(command)
        return FakeProcess()

    monkeypatch.setattr(desktop.subprocess, "Popen", fake_popen)

    server = desktop.start_server("127.0.0.1", 3456)

    assert server.url == "http://127.0.0.1:3456"
    assert server.running
    assert calls[0][1:4] == ["-m", "uvicorn", "pjmotors.main:app"]
    assert calls[0][-2:] == ["--port", "3456"]


def test_start_server_failure_is_startup_error(monkeypatch):
    def broken_popen(command):
        raise FileNotFoundError("no python")

    monkeypatch.setattr(desktop.subprocess, "Popen", broken_popen)

    with pytest.raises(ServerStartupError):
        desktop.start_server()


def test_wait_until_ready_polls_until_response(monkeypatch):
    attempts = []

    def fake_get(url, timeout):
        attempts.append(url)
        if len(attempts) < 3:
            raise httpx.ConnectError("refused")
        return httpx.Response(200)

    monkeypatch.setattr(desktop.httpx, "get", fake_get)
    server = ServerProcess(url="http://127.0.0.1:3000", process=FakeProcess())

    desktop.wait_until_ready(server, timeout=10)

    assert attempts == ["http://127.0.0.1:3000"] * 3


def test_wait_until_ready_times_out(monkeypatch):
    def refuse(url, timeout):
        raise httpx.ConnectError("refused")

    monkeypatch.setattr(desktop.httpx, "get", refuse)
    server = ServerProcess(url="http://127.0.0.1:3000", process=FakeProcess())

    with pytest.raises(ServerStartupError, match="in time"):
        desktop.wait_until_ready(server, timeout=0)


def test_wait_until_ready_notices_dead_child():
    server = ServerProcess(url="http://127.0.0.1:3000", process=FakeProcess(returncode=1))

    with pytest.raises(ServerStartupError, match="exited"):
        desktop.wait_until_ready(server)


def test_stop_server_terminates_then_kills():
    polite = FakeProcess()
    desktop.stop_server(ServerProcess(url="u", process=polite))
    assert polite.terminated and not polite.killed

    stubborn = FakeProcess(hangs=True)
    desktop.stop_server(ServerProcess(url="u", process=stubborn), grace=0)
    assert stubborn.terminated and stubborn.killed


def test_stop_server_without_child_is_noop():
    desktop.stop_server(ServerProcess(url="u"))
    exited = FakeProcess(returncode=0)
    desktop.stop_server(ServerProcess(url="u", process=exited))
    assert not exited.terminated


def test_main_opens_window_even_if_startup_fails(monkeypatch):
    opened = []

    def broken_start(host, port):
        raise ServerStartupError("port in use")

    monkeypatch.setattr(desktop, "setup_logging", lambda level: None)
    monkeypatch.setattr(desktop, "start_server", broken_start)
    monkeypatch.setattr(desktop, "open_window", opened.append)

    assert desktop.main(["--host", "127.0.0.1", "--port", "4000"]) == 0
    assert opened == ["http://127.0.0.1:4000"]


def test_main_stops_server_after_window_session(monkeypatch):
    opened = []
    child = FakeProcess(returncode=0)

    monkeypatch.setattr(desktop, "setup_logging", lambda level: None)
    monkeypatch.setattr(desktop, "start_server", lambda host, port: ServerProcess(url="http://h:1", process=child))
    monkeypatch.setattr(desktop, "open_window", opened.append)

    assert desktop.main([]) == 0
    assert opened == ["http://h:1"]
