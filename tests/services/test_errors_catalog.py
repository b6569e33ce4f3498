import pytest

from dbprovisioner.errors_catalog import actionable_error


def test_actionable_error_formats_message_with_suggested_action():
    message = actionable_error("service_not_running", service="mariadb")

    assert "Failed to start the MariaDB service `mariadb`." in message
    assert "Suggested action:" in message
    assert "journalctl -u mariadb" in message


def test_actionable_error_rejects_unknown_key():
    with pytest.raises(KeyError):
        actionable_error("disk_full")
