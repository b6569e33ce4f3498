import re
import subprocess

import pytest

import dbprovisioner.core as core_module
from dbprovisioner.core import DatabaseProvisioner, ProvisionState
from dbprovisioner.models import AuthStrategy, DatabaseConfig, SetupOptions
from dbprovisioner.services.package_managers import PACKAGE_MANAGERS

CONFIG = DatabaseConfig(
    name="universal_db",
    user="webadmin",
    password="Password123!",
    host="localhost",
    port=3306,
)

DETECT_BINARIES = {profile.detect_command[0] for profile in PACKAGE_MANAGERS}


class FakeHost:
    """Simulates a Linux host behind the CommandRunner interface."""

    def __init__(
        self,
        managers=("apt",),
        installed=False,
        running=False,
        service_starts=True,
        install_ok=True,
        auth=AuthStrategy.SOCKET,
        failing_sql=None,
        verify_ok=True,
        sudo_ok=True,
    ):
        self.managers = set(managers)
        self.installed = installed
        self.running = running
        self.service_starts = service_starts
        self.install_ok = install_ok
        self.auth = auth
        self.failing_sql = failing_sql
        self.verify_ok = verify_ok
        self.sudo_ok = sudo_ok
        self.calls = []
        self.sql_batches = []
        self.verify_calls = []

    def _result(self, cmd, ok, stderr=""):
        return subprocess.CompletedProcess(cmd, 0 if ok else 1, stdout="", stderr=stderr)

    def run(self, cmd, check=True, capture_output=False, quiet=False, redact=()):
        self.calls.append(cmd)

        if cmd[:2] == ["sudo", "-n"] or cmd == ["sudo", "true"]:
            return self._result(cmd, self.sudo_ok)

        if len(cmd) == 2 and cmd[1] == "--version":
            if cmd[0] == "mysql":
                return self._result(cmd, self.installed)
            if cmd[0] in DETECT_BINARIES:
                return self._result(cmd, cmd[0] in self.managers)

        if "install" in cmd or "add" in cmd:
            self.installed = self.install_ok
            return self._result(cmd, self.install_ok)

        if cmd[:2] == ["systemctl", "is-active"] or (cmd[0] == "service" and cmd[-1] == "status"):
            return self._result(cmd, self.running)

        if "start" in cmd:
            self.running = self.running or self.service_starts
            return self._result(cmd, True)

        if "--execute" in cmd:
            return self._mysql(cmd)

        return self._result(cmd, True)

    def _mysql(self, cmd):
        sql = cmd[cmd.index("--execute") + 1]
        user = cmd[cmd.index("-u") + 1]

        if user != "root":
            self.verify_calls.append(cmd)
            return self._result(cmd, self.verify_ok, stderr="ERROR 1045 (28000): Access denied")

        if sql == "SELECT 1;":
            if cmd[0] == "sudo":
                strategy = AuthStrategy.SOCKET
            elif "-p" in cmd:
                strategy = AuthStrategy.PASSWORD
            else:
                strategy = AuthStrategy.NO_PASSWORD
            return self._result(cmd, strategy is self.auth, stderr="Access denied")

        self.sql_batches.append(cmd)
        failed = self.failing_sql is not None and self.failing_sql in sql
        return self._result(cmd, not failed, stderr="ERROR 1146 (42S02): Table doesn't exist")


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    sleeps = []
    monkeypatch.setattr(core_module.time, "sleep", lambda seconds: sleeps.append(seconds))
    return sleeps


def build_provisioner(host, **option_kwargs):
    provisioner = DatabaseProvisioner(
        config=CONFIG, options=SetupOptions(**option_kwargs), command_runner=host
    )
    provisioner.privilege_checker.geteuid = lambda: 1000
    return provisioner


def test_fresh_apt_host_is_fully_provisioned():
    host = FakeHost(managers=("apt",), installed=False, running=False)
    provisioner = build_provisioner(host)

    assert provisioner.run() == 0

    assert provisioner.history == [
        ProvisionState.START,
        ProvisionState.PRIVILEGE_CHECK,
        ProvisionState.DETECT,
        ProvisionState.ENSURE_INSTALLED,
        ProvisionState.ENSURE_RUNNING,
        ProvisionState.AUTH_PROBE,
        ProvisionState.PROVISION_SCHEMA,
        ProvisionState.PROVISION_USER,
        ProvisionState.VERIFY,
        ProvisionState.SUMMARY,
        ProvisionState.DONE,
    ]
    assert ["sudo", "apt", "install", "-y", "mariadb-server", "mariadb-client"] in host.calls
    assert provisioner.profile.name == "APT"
    assert provisioner.auth.strategy is AuthStrategy.SOCKET

    schema_sql = host.sql_batches[0][-1]
    assert host.sql_batches[0][0] == "sudo"
    assert "CREATE DATABASE IF NOT EXISTS universal_db" in schema_sql
    assert len(re.findall(r"CREATE TABLE IF NOT EXISTS", schema_sql)) == 7
    assert "CREATE USER IF NOT EXISTS 'webadmin'@'localhost'" in host.sql_batches[1][-1]
    assert len(host.sql_batches) == 2
    assert len(host.verify_calls) == 1


def test_rerun_on_provisioned_host_issues_the_same_statements():
    first_host = FakeHost(installed=False)
    build_provisioner(first_host).run()
    second_host = FakeHost(installed=True, running=True)

    assert build_provisioner(second_host).run() == 0
    assert [cmd[-1] for cmd in second_host.sql_batches] == [
        cmd[-1] for cmd in first_host.sql_batches
    ]
    assert not any("install" in cmd for cmd in second_host.calls)


def test_test_only_mode_skips_installation_and_auth_probe():
    host = FakeHost(managers=())
    provisioner = build_provisioner(host, test_only=True)

    assert provisioner.run() == 0

    assert provisioner.history == [
        ProvisionState.START,
        ProvisionState.VERIFY,
        ProvisionState.DONE,
    ]
    assert host.calls == host.verify_calls
    assert len(host.verify_calls) == 1


def test_test_only_mode_exits_one_when_connection_fails():
    host = FakeHost(verify_ok=False)
    provisioner = build_provisioner(host, test_only=True)

    assert provisioner.run() == 1
    assert provisioner.state is ProvisionState.FAILED


def test_missing_package_manager_fails_without_sql():
    host = FakeHost(managers=())
    provisioner = build_provisioner(host)

    assert provisioner.run() == 1

    assert provisioner.state is ProvisionState.FAILED
    assert "APT, DNF, YUM, Pacman, Zypper, APK, Portage, XBPS" in provisioner.failure_reason
    assert not any("--execute" in cmd for cmd in host.calls)


def test_seed_failure_is_a_warning_only():
    host = FakeHost(failing_sql="INSERT IGNORE")
    provisioner = build_provisioner(host, sample_data=True)

    assert provisioner.run() == 0

    assert ProvisionState.SEED_OPTIONAL in provisioner.history
    assert provisioner.state is ProvisionState.DONE
    assert len(host.sql_batches) == 3
    assert "CREATE TABLE IF NOT EXISTS" in host.sql_batches[0][-1]
    assert host.sql_batches[2][host.sql_batches[2].index("-D") + 1] == "universal_db"


def test_auth_failure_stops_before_schema():
    host = FakeHost(auth=AuthStrategy.NONE)
    provisioner = build_provisioner(host)

    assert provisioner.run() == 1

    assert provisioner.state is ProvisionState.FAILED
    assert ProvisionState.PROVISION_SCHEMA not in provisioner.history
    assert host.sql_batches == []
    assert "mysql_secure_installation" in provisioner.failure_reason


def test_password_strategy_is_used_for_every_sql_batch():
    host = FakeHost(auth=AuthStrategy.PASSWORD)

    assert build_provisioner(host).run() == 0
    assert all("-p" in cmd and cmd[0] == "mysql" for cmd in host.sql_batches)


def test_install_failure_is_fatal():
    host = FakeHost(install_ok=False)
    provisioner = build_provisioner(host)

    assert provisioner.run() == 1
    assert ProvisionState.ENSURE_RUNNING not in provisioner.history


def test_service_that_never_starts_is_fatal_after_one_wait(no_sleep):
    host = FakeHost(installed=True, running=False, service_starts=False)
    provisioner = build_provisioner(host)

    assert provisioner.run() == 1

    assert no_sleep == [3.0]
    assert "mariadb" in provisioner.failure_reason
    assert ProvisionState.AUTH_PROBE not in provisioner.history


def test_stopped_service_is_started_and_rechecked(no_sleep):
    host = FakeHost(installed=True, running=False)

    assert build_provisioner(host).run() == 0
    assert no_sleep == [3.0]


def test_schema_failure_stops_before_user_creation():
    host = FakeHost(failing_sql="CREATE DATABASE")
    provisioner = build_provisioner(host)

    assert provisioner.run() == 1

    assert len(host.sql_batches) == 1
    assert ProvisionState.PROVISION_USER not in provisioner.history


def test_missing_privileges_is_fatal():
    host = FakeHost(sudo_ok=False)
    provisioner = build_provisioner(host)

    assert provisioner.run() == 1
    assert ProvisionState.DETECT not in provisioner.history
    assert "sudo" in provisioner.failure_reason


def test_root_without_sudo_binary_fails_before_detection():
    host = FakeHost()
    provisioner = build_provisioner(host)
    provisioner.privilege_checker.geteuid = lambda: 0
    provisioner.privilege_checker.which = lambda _: None

    assert provisioner.run() == 1

    assert provisioner.history[-2] is ProvisionState.PRIVILEGE_CHECK
    assert ProvisionState.DETECT not in provisioner.history
    assert host.calls == []
