import asyncio

import pytest

from bbmp_launcher.core.dispatcher import BoundaryDispatcher
from bbmp_launcher.core.events import (
    DOWNLOAD_PROGRESS,
    PROCESS_EXIT,
    PROCESS_LOG,
    RUNTIME_PROGRESS,
)
from bbmp_launcher.core.host import HeadlessHost
from bbmp_launcher.core.orchestrator import LaunchOrchestrator, build_launch_arguments
from bbmp_launcher.exceptions import AlreadyRunningError, SpawnError
from bbmp_launcher.models.config import LaunchOptions
from bbmp_launcher.models.records import RuntimeHandle, RuntimeStatus

from conftest import FakeTransport, posix_only, python_child


class GatedTransport(FakeTransport):
    """Holds every metadata request until the gate is opened."""

    def __init__(self):
        super().__init__()
        self.gate = asyncio.Event()
        self.waiting = asyncio.Event()
        self.requests = 0

    async def fetch_json(self, url):
        self.requests += 1
        self.waiting.set()
        await self.gate.wait()
        return await super().fetch_json(url)


class FakeProvisioner:
    """Records which runtime lookup steps the orchestrator went through."""

    default_command = "java"

    def __init__(self, on_path=False, installed=None, install_result=None):
        self.on_path = on_path
        self.installed = installed
        self.install_result = install_result
        self.calls: list[str] = []

    async def detect_runtime(self, executable=None):
        self.calls.append(f"detect:{executable}")
        if executable is None:
            return RuntimeStatus(self.on_path, "java")
        return RuntimeStatus(executable == self.installed, executable)

    def locate_executable(self):
        self.calls.append("locate")
        return RuntimeHandle(self.installed)

    async def install_runtime(self, on_progress=None):
        self.calls.append("install")
        if on_progress:
            on_progress(1.0)
        return RuntimeHandle(self.install_result)


@pytest.fixture
async def orchestrator(config, fake_transport):
    orch = LaunchOrchestrator(config, transport=fake_transport)
    yield orch
    await orch.close()


def test_launch_arguments():
    options = LaunchOptions(server="mc.example", port=25570, rport=25566)

    assert build_launch_arguments("/data/p.jar", options) == [
        "-jar", "/data/p.jar", "-port", "25570", "-ip", "mc.example", "-rport", "25566",
    ]


def test_launch_arguments_devmode():
    args = build_launch_arguments("p.jar", LaunchOptions(devmode=True))

    assert args[-2:] == ["-devmode", "true"]


def test_launch_options_from_config(config):
    config.server = "saved.example"
    config.java_path = "/opt/java"

    options = LaunchOptions.from_config(config, port=30000, server=None)

    assert options.server == "saved.example"
    assert options.port == 30000
    assert options.java_path == "/opt/java"


def test_empty_server_uses_default():
    assert LaunchOptions(server="").server == "play.hypixel.net"


@pytest.mark.parametrize("unset", [None, 0])
def test_unset_ports_use_default(unset):
    options = LaunchOptions(port=unset, rport=unset)

    assert options.port == 25565
    assert options.rport == 25565


def test_null_payload_fields_use_defaults():
    options = LaunchOptions(**{"server": None, "devmode": None, "java_path": None})

    assert options.server == "play.hypixel.net"
    assert options.devmode is False
    assert options.java_path is None


@posix_only
async def test_launch_runs_proxy_jar(orchestrator, fake_java, data_dir):
    logs: list[str] = []
    exits: list[int] = []
    orchestrator.events.subscribe(PROCESS_LOG, logs.append)
    orchestrator.events.subscribe(PROCESS_EXIT, exits.append)

    result = await orchestrator.launch(LaunchOptions(java_path=fake_java, devmode=True))
    code = await orchestrator.supervisor.wait()

    jar = str(data_dir / "BlueBerryMinecraftProxy-v2.1.jar")
    assert result.version == "v2.1"
    assert result.argv == [
        fake_java, "-jar", jar, "-port", "25565", "-ip", "play.hypixel.net",
        "-rport", "25565", "-devmode", "true",
    ]
    assert result.cmd == " ".join(result.argv)
    assert code == 0
    assert exits == [0]
    assert f"args: -jar {jar}" in "".join(logs)
    assert not orchestrator.is_running()


async def test_launch_while_running_touches_nothing(config, tmp_path):
    transport = FakeTransport()
    orchestrator = LaunchOrchestrator(config, transport=transport)
    await orchestrator.supervisor.spawn(
        python_child("import time; time.sleep(30)"), cwd=tmp_path
    )

    with pytest.raises(AlreadyRunningError):
        await orchestrator.launch(LaunchOptions())

    result = await BoundaryDispatcher(orchestrator).launch({"port": 25570})
    assert not result.ok
    assert result.error.startswith("AlreadyRunningError")
    assert transport.fetches == []
    assert transport.downloads == []

    await orchestrator.close()
    assert not orchestrator.is_running()
    assert transport.closed


async def test_failed_spawn_frees_the_slot(orchestrator, tmp_path):
    missing = str(tmp_path / "no-java-here")

    result = await BoundaryDispatcher(orchestrator).launch({"java_path": missing})

    assert not result.ok
    assert result.error.startswith("SpawnError: ")
    assert not orchestrator.is_running()
    orchestrator.supervisor.reserve()


async def test_launch_during_preparation_is_refused(config, tmp_path):
    transport = GatedTransport()
    orchestrator = LaunchOrchestrator(config, transport=transport)
    missing = str(tmp_path / "no-java-here")
    first = asyncio.create_task(orchestrator.launch(LaunchOptions(java_path=missing)))
    await transport.waiting.wait()

    with pytest.raises(AlreadyRunningError, match="in progress"):
        await orchestrator.launch(LaunchOptions())
    result = await BoundaryDispatcher(orchestrator).launch()
    assert result.error.startswith("AlreadyRunningError")
    assert transport.requests == 1

    transport.gate.set()
    with pytest.raises(SpawnError):
        await first

    # the slot is free again once the first launch has failed
    orchestrator.supervisor.reserve()
    orchestrator.supervisor.release()
    await orchestrator.close()


async def test_download_progress_reaches_bus(orchestrator):
    progress: list[float] = []
    orchestrator.events.subscribe(DOWNLOAD_PROGRESS, progress.append)

    await orchestrator.download_latest()

    assert progress == [0.5, 1.0]


async def test_resolve_java_prefers_explicit_path(config, fake_transport):
    provisioner = FakeProvisioner(on_path=True)
    orchestrator = LaunchOrchestrator(
        config, transport=fake_transport, provisioner=provisioner
    )

    assert await orchestrator.resolve_java("/custom/java") == "/custom/java"
    assert provisioner.calls == []


async def test_resolve_java_from_path(config, fake_transport):
    provisioner = FakeProvisioner(on_path=True)
    orchestrator = LaunchOrchestrator(
        config, transport=fake_transport, provisioner=provisioner
    )

    assert await orchestrator.resolve_java() == "java"
    assert provisioner.calls == ["detect:None"]


async def test_resolve_java_reuses_installed_runtime(config, fake_transport):
    provisioner = FakeProvisioner(installed="/data/jre17/bin/java")
    orchestrator = LaunchOrchestrator(
        config, transport=fake_transport, provisioner=provisioner
    )

    assert await orchestrator.resolve_java() == "/data/jre17/bin/java"
    assert "install" not in provisioner.calls


async def test_resolve_java_installs_runtime(config, fake_transport):
    provisioner = FakeProvisioner(install_result="/data/jre17/jdk-17/bin/java")
    orchestrator = LaunchOrchestrator(
        config, transport=fake_transport, provisioner=provisioner
    )
    progress: list[float] = []
    orchestrator.events.subscribe(RUNTIME_PROGRESS, progress.append)

    assert await orchestrator.resolve_java() == "/data/jre17/jdk-17/bin/java"
    assert provisioner.calls[-1] == "install"
    assert progress == [1.0]


async def test_resolve_java_falls_back_to_bare_command(config, fake_transport):
    provisioner = FakeProvisioner()
    orchestrator = LaunchOrchestrator(
        config, transport=fake_transport, provisioner=provisioner
    )

    assert await orchestrator.resolve_java() == "java"
    assert provisioner.calls == ["detect:None", "locate", "install"]


def test_window_operations_use_host(config, fake_transport):
    host = HeadlessHost()
    orchestrator = LaunchOrchestrator(config, host=host, transport=fake_transport)

    orchestrator.set_always_on_top(True)

    assert host.always_on_top is True
    assert orchestrator.pick_runtime_executable() is None
