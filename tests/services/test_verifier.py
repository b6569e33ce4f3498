import subprocess

from dbprovisioner.errors import ProvisionerError
from dbprovisioner.models import DatabaseConfig
from dbprovisioner.services.verifier import ConnectivityVerifier


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None

    def error(self, *_args, **_kwargs):
        return None


class RecordingConsole:
    def __init__(self):
        self.lines = []

    def print(self, *args, **_kwargs):
        self.lines.append(" ".join(str(arg) for arg in args))

    def rule(self, *_args, **_kwargs):
        return None


CONFIG = DatabaseConfig(
    name="universal_db",
    user="webadmin",
    password="Password123!",
    host="localhost",
    port=3306,
)


def test_verify_logs_in_as_service_account():
    calls = []

    def run_cmd(cmd, **_kwargs):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, stdout="1\n", stderr="")

    console = RecordingConsole()

    assert ConnectivityVerifier(DummyLogger(), console, run_cmd).verify(CONFIG) is True

    cmd = calls[0]
    assert cmd[cmd.index("-u") + 1] == "webadmin"
    assert cmd[cmd.index("-D") + 1] == "universal_db"
    assert "-p" in cmd
    assert "root" not in cmd
    assert "Password123!" not in " ".join(cmd)
    assert any("Database user (webadmin)" in line for line in console.lines)


def test_verify_fails_on_access_denied():
    def run_cmd(cmd, **_kwargs):
        return subprocess.CompletedProcess(
            cmd, 1, stdout="", stderr="ERROR 1045 (28000): Access denied for user 'webadmin'"
        )

    assert ConnectivityVerifier(DummyLogger(), RecordingConsole(), run_cmd).verify(CONFIG) is False


def test_verify_fails_when_client_is_missing():
    def run_cmd(cmd, **_kwargs):
        raise ProvisionerError("Required command not found: mysql.")

    assert ConnectivityVerifier(DummyLogger(), RecordingConsole(), run_cmd).verify(CONFIG) is False
