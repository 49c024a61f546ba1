"""Orchestrator state machine and reporting, against an in-memory store."""

from __future__ import annotations

import pytest

from teamsync_api.core.rbac import RoleCatalog, RoleName
from teamsync_api.features.bootstrap import (
    BootstrapConfig,
    BootstrapService,
    BootstrapState,
    MissingDependencyError,
)
from tests.unit.features.bootstrap.fakes import make_fake_store

CATALOG = RoleCatalog.from_mapping(
    {
        RoleName.OWNER: ["CREATE_WORKSPACE", "VIEW_ONLY"],
        RoleName.MEMBER: ["VIEW_ONLY"],
    }
)


def _config(catalog: RoleCatalog = CATALOG) -> BootstrapConfig:
    return BootstrapConfig(
        admin_email="admin@x.com",
        admin_name="System Admin",
        admin_password="pw-123456",
        workspace_name="Main",
        workspace_description="Seeded",
        catalog=catalog,
    )


async def test_run_reports_created_records_and_completes() -> None:
    store, _ = make_fake_store()
    service = BootstrapService(store, _config())
    assert service.state is BootstrapState.NOT_STARTED

    report = await service.run()

    assert service.state is BootstrapState.COMPLETE
    assert report.state is BootstrapState.COMPLETE
    assert report.roles_created == (RoleName.OWNER, RoleName.MEMBER)
    assert report.roles_existing == ()
    assert report.admin_created is True
    assert report.admin_user_id is not None
    assert report.workspace_id == store.workspaces.rows[0].id


async def test_second_run_on_same_store_creates_nothing() -> None:
    store, journal = make_fake_store()
    await BootstrapService(store, _config()).run()
    journal.clear()

    report = await BootstrapService(store, _config()).run()

    assert journal == []
    assert report.roles_created == ()
    assert report.roles_existing == (RoleName.OWNER, RoleName.MEMBER)
    assert report.admin_created is False


async def test_service_instances_are_single_use() -> None:
    store, _ = make_fake_store()
    service = BootstrapService(store, _config())
    await service.run()

    with pytest.raises(RuntimeError, match="already ran"):
        await service.run()


async def test_failure_moves_to_failed_and_is_reraised(log_capture) -> None:
    store, _ = make_fake_store()
    catalog = RoleCatalog.from_mapping({RoleName.MEMBER: ["VIEW_ONLY"]})
    service = BootstrapService(store, _config(catalog))

    with pytest.raises(MissingDependencyError):
        await service.run()

    assert service.state is BootstrapState.FAILED
    [failure] = log_capture.find("bootstrap.failed")
    assert failure.levelname == "ERROR"
    assert failure.stage == "resolve_owner_role"
    assert failure.state == BootstrapState.IDENTITY_PROVISIONING
    assert failure.exc_info is not None


async def test_state_transitions_are_logged_in_order(log_capture) -> None:
    store, _ = make_fake_store()

    await BootstrapService(store, _config()).run()

    states = [record.state for record in log_capture.find("bootstrap.state")]
    assert states == [
        BootstrapState.ROLES_RECONCILING,
        BootstrapState.ROLES_DONE,
        BootstrapState.IDENTITY_PROVISIONING,
        BootstrapState.COMPLETE,
    ]


async def test_role_logs_follow_catalog_order(log_capture) -> None:
    store, _ = make_fake_store()

    await BootstrapService(store, _config()).run()

    created = [record.role for record in log_capture.find("bootstrap.role.created")]
    assert created == ["OWNER", "MEMBER"]
