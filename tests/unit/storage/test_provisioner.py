"""
Unit tests for table provisioning.
"""

import asyncio

import pytest

from botstorage.storage.exceptions import ProvisionError
from botstorage.storage.memory import InMemoryTableStoreClient
from botstorage.storage.provisioner import TableProvisioner


@pytest.fixture
def client():
    """Create a fresh in-memory client."""
    return InMemoryTableStoreClient(latency=0.01)


@pytest.fixture
def provisioner(client):
    """Create a provisioner over the in-memory client."""
    return TableProvisioner(client)


class TestEnsure:
    """Tests for ensure."""

    @pytest.mark.asyncio
    async def test_ensure_creates_table(self, provisioner, client):
        """Test that the first ensure creates the table."""
        await provisioner.ensure("botkitTeams")

        assert provisioner.is_provisioned("botkitTeams")
        assert "botkitTeams" in client.table_names()
        assert client.calls["create_table_if_not_exists"] == 1

    @pytest.mark.asyncio
    async def test_ensure_short_circuits(self, provisioner, client):
        """Test that later calls issue no create call."""
        await provisioner.ensure("botkitTeams")
        await provisioner.ensure("botkitTeams")
        await provisioner.ensure("botkitTeams")

        assert client.calls["create_table_if_not_exists"] == 1

    @pytest.mark.asyncio
    async def test_concurrent_first_calls(self, provisioner, client):
        """Test that racing first calls create the table once."""
        await asyncio.gather(*(provisioner.ensure("botkitUsers") for _ in range(10)))

        assert client.calls["create_table_if_not_exists"] == 1
        assert provisioner.provisioned_tables == frozenset({"botkitUsers"})

    @pytest.mark.asyncio
    async def test_tables_tracked_independently(self, provisioner, client):
        """Test that each table is provisioned separately."""
        await provisioner.ensure("botkitTeams")
        await provisioner.ensure("botkitUsers")

        assert client.calls["create_table_if_not_exists"] == 2
        assert provisioner.provisioned_tables == frozenset({"botkitTeams", "botkitUsers"})


class TestEnsureFailure:
    """Tests for provisioning failures."""

    @pytest.mark.asyncio
    async def test_failure_raises_provision_error(self, provisioner, client):
        """Test that a failed create surfaces as ProvisionError."""
        client.fail_next("create_table_if_not_exists")

        with pytest.raises(ProvisionError) as exc_info:
            await provisioner.ensure("botkitTeams")

        assert exc_info.value.table_name == "botkitTeams"
        assert exc_info.value.error_code == "TableProvisioningFailed"
        assert not provisioner.is_provisioned("botkitTeams")

    @pytest.mark.asyncio
    async def test_failure_is_retried(self, provisioner, client):
        """Test that the call after a failure tries again."""
        client.fail_next("create_table_if_not_exists")

        with pytest.raises(ProvisionError):
            await provisioner.ensure("botkitTeams")
        await provisioner.ensure("botkitTeams")

        assert client.calls["create_table_if_not_exists"] == 2
        assert provisioner.is_provisioned("botkitTeams")

    @pytest.mark.asyncio
    async def test_invalid_table_name(self, provisioner):
        """Test that a name the store rejects is not marked provisioned."""
        with pytest.raises(ProvisionError):
            await provisioner.ensure("bad-name")

        assert not provisioner.is_provisioned("bad-name")
