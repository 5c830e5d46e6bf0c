"""
Tests for WalletSessionManager

Covers discovery, connect, provider events, ordering of fetch results and
teardown against the in-memory provider.
"""

import asyncio
from typing import List

import pytest

from walletnav.core.wallet import (
    INFO_FETCH_FAILED_MESSAGE,
    USER_REJECTED_MESSAGE,
    ProviderRpcError,
    SessionStatus,
    WalletErrorKind,
    WalletSession,
    WalletSessionManager,
)
from walletnav.providers.base import ACCOUNTS_CHANGED, CHAIN_CHANGED, DISCONNECT, Network
from walletnav.providers.mock import MockWalletProvider


ACCOUNT_A = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
ACCOUNT_B = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
ACCOUNT_C = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"

ONE_ETH = 10**18


class RecordingReloader:
    def __init__(self):
        self.reasons: List[str] = []

    def request_reload(self, reason: str) -> None:
        self.reasons.append(reason)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def provider() -> MockWalletProvider:
    return MockWalletProvider(
        accounts=[ACCOUNT_A],
        balances={ACCOUNT_A: 2 * ONE_ETH, ACCOUNT_B: ONE_ETH, ACCOUNT_C: 3 * ONE_ETH},
    )


@pytest.fixture
def reloader() -> RecordingReloader:
    return RecordingReloader()


@pytest.fixture
def manager(provider, reloader) -> WalletSessionManager:
    return WalletSessionManager(provider, reloader=reloader, wallet_name="MetaMask")


def assert_invariants(session: WalletSession) -> None:
    assert (session.signer is None) == (session.account is None)
    if session.network is not None or session.balance is not None:
        assert session.account is not None


def listener_total(provider: MockWalletProvider) -> int:
    return sum(
        provider.listener_count(event)
        for event in (ACCOUNTS_CHANGED, CHAIN_CHANGED, DISCONNECT)
    )


# =============================================================================
# Provider availability
# =============================================================================

class TestProviderUnavailable:
    @pytest.mark.asyncio
    async def test_connect_without_provider_reports_unavailable(self):
        manager = WalletSessionManager(None, wallet_name="MetaMask")

        session = await manager.connect()

        assert session.error_kind == WalletErrorKind.PROVIDER_UNAVAILABLE
        assert session.error == "MetaMask is not installed. Please install it to use this store."
        assert session.account is None
        assert session.status == SessionStatus.DISCONNECTED

    @pytest.mark.asyncio
    async def test_initialize_without_provider_subscribes_nothing(self):
        manager = WalletSessionManager(None, wallet_name="MetaMask")

        session = await manager.initialize()
        manager.teardown()

        assert session.error_kind == WalletErrorKind.PROVIDER_UNAVAILABLE
        assert manager.bridge.subscribe_count == 0
        assert manager.bridge.unsubscribe_count == 0


# =============================================================================
# Initialize (non-intrusive discovery)
# =============================================================================

class TestInitialize:
    @pytest.mark.asyncio
    async def test_preauthorized_account_connects_without_prompt(self, provider, manager):
        provider.authorized = True

        session = await manager.initialize()

        assert session.status == SessionStatus.CONNECTED
        assert session.account == ACCOUNT_A
        assert session.signer is not None
        assert "request_accounts" not in provider.calls
        assert manager.bridge.is_subscribed

        await manager.settle()
        assert provider.calls["get_network"] == 1
        assert provider.calls["get_balance"] == 1
        assert manager.session.network == Network(name="homestead", chain_id=1)
        assert manager.session.balance == "2.0"

    @pytest.mark.asyncio
    async def test_no_authorized_accounts_still_subscribes(self, provider, manager):
        session = await manager.initialize()

        assert session.status == SessionStatus.DISCONNECTED
        assert session.account is None
        assert manager.bridge.is_subscribed
        assert provider.listener_count(ACCOUNTS_CHANGED) == 1
        assert provider.listener_count(CHAIN_CHANGED) == 1
        assert provider.listener_count(DISCONNECT) == 1

    @pytest.mark.asyncio
    async def test_discovery_failure_is_recorded_and_subscription_installed(self, provider, manager):
        async def broken() -> List[str]:
            raise RuntimeError("wallet locked up")

        provider.list_accounts = broken

        session = await manager.initialize()

        assert session.error_kind == WalletErrorKind.CONNECTION_FAILED
        assert session.error == "Error connecting to MetaMask: wallet locked up"
        assert manager.bridge.is_subscribed

    @pytest.mark.asyncio
    async def test_manual_connect_reuses_event_path(self, provider, manager):
        await manager.initialize()
        await manager.connect()
        await manager.settle()

        provider.accounts = [ACCOUNT_B]
        provider.switch_account(ACCOUNT_B)
        await manager.settle()

        assert manager.session.account == ACCOUNT_B
        assert manager.session.balance == "1.0"

    @pytest.mark.asyncio
    async def test_teardown_during_discovery_leaves_no_listeners(self, provider, manager):
        provider.authorized = True
        provider.discovery_gate = asyncio.Event()

        task = asyncio.create_task(manager.initialize())
        await asyncio.sleep(0)
        manager.teardown()
        provider.discovery_gate.set()
        session = await task

        assert session.account is None
        assert not manager.bridge.is_subscribed
        assert manager.bridge.subscribe_count == manager.bridge.unsubscribe_count == 0
        assert listener_total(provider) == 0


# =============================================================================
# Connect
# =============================================================================

class TestConnect:
    @pytest.mark.asyncio
    async def test_connect_success(self, provider, manager):
        await manager.initialize()

        session = await manager.connect()

        assert provider.calls["request_accounts"] == 1
        assert session.status == SessionStatus.CONNECTED
        assert session.account == ACCOUNT_A
        assert session.error is None

        await manager.settle()
        assert manager.session.balance == "2.0"
        assert_invariants(manager.session)

    @pytest.mark.asyncio
    async def test_user_rejection(self, provider, manager):
        provider.reject_requests = True

        session = await manager.connect()

        assert session.error == USER_REJECTED_MESSAGE
        assert session.error == "Connection rejected by user."
        assert session.error_kind == WalletErrorKind.USER_REJECTED
        assert session.account is None
        assert session.status == SessionStatus.DISCONNECTED

    @pytest.mark.asyncio
    async def test_rpc_error_with_rejection_code(self, provider, manager):
        provider.request_error = ProviderRpcError("User denied account authorization", code=4001)

        session = await manager.connect()

        assert session.error == USER_REJECTED_MESSAGE

    @pytest.mark.asyncio
    async def test_other_rpc_error_is_generic(self, provider, manager):
        provider.request_error = ProviderRpcError("Request already pending", code=-32002)

        session = await manager.connect()

        assert session.error_kind == WalletErrorKind.CONNECTION_FAILED
        assert session.error == "Error connecting to MetaMask: Request already pending"
        assert session.account is None

    @pytest.mark.asyncio
    async def test_unexpected_error_is_generic(self, provider, manager):
        provider.request_error = RuntimeError("boom")

        session = await manager.connect()

        assert session.error == "Error connecting to MetaMask: boom"
        assert session.status == SessionStatus.DISCONNECTED

    @pytest.mark.asyncio
    async def test_empty_account_list_is_a_failure(self, provider, manager):
        provider.accounts = []

        session = await manager.connect()

        assert session.error_kind == WalletErrorKind.CONNECTION_FAILED
        assert session.account is None

    @pytest.mark.asyncio
    async def test_success_clears_previous_error(self, provider, manager):
        provider.reject_requests = True
        await manager.connect()
        assert manager.session.error == USER_REJECTED_MESSAGE

        provider.reject_requests = False
        session = await manager.connect()

        assert session.error is None
        assert session.account == ACCOUNT_A
        await manager.settle()

    @pytest.mark.asyncio
    async def test_connect_is_idempotent(self, provider, manager):
        provider.authorized = True
        await manager.initialize()
        await manager.settle()
        first = manager.session

        await manager.connect()
        await manager.connect()
        await manager.settle()

        assert manager.session.account == first.account
        assert manager.session.signer is first.signer
        assert manager.bridge.subscribe_count == 1
        assert provider.listener_count(ACCOUNTS_CHANGED) == 1

    @pytest.mark.asyncio
    async def test_concurrent_connects_are_serialized(self, provider, manager):
        results = await asyncio.gather(manager.connect(), manager.connect())
        await manager.settle()

        assert all(r.account == ACCOUNT_A for r in results)
        assert manager.session.status == SessionStatus.CONNECTED
        assert_invariants(manager.session)


# =============================================================================
# Provider events
# =============================================================================

class TestProviderEvents:
    @pytest.mark.asyncio
    async def test_empty_accounts_disconnects(self, provider, manager):
        provider.authorized = True
        await manager.initialize()
        await manager.settle()
        assert manager.session.balance == "2.0"

        provider.lock()

        session = manager.session
        assert session.status == SessionStatus.DISCONNECTED
        assert session.account is None
        assert session.signer is None
        assert session.network is None
        assert session.balance is None

    @pytest.mark.asyncio
    async def test_account_switch_adopts_first_and_refetches(self, provider, manager):
        provider.authorized = True
        await manager.initialize()
        await manager.settle()

        provider.accounts = [ACCOUNT_A, ACCOUNT_C]
        provider.switch_account(ACCOUNT_C)

        assert manager.session.account == ACCOUNT_C
        assert manager.session.signer.address == ACCOUNT_C
        assert manager.session.balance is None

        await manager.settle()
        assert manager.session.balance == "3.0"
        assert provider.calls["get_balance"] == 2

    @pytest.mark.asyncio
    async def test_chain_change_reloads_exactly_once(self, provider, manager, reloader):
        provider.authorized = True
        await manager.initialize()
        await manager.settle()
        before = manager.session

        provider.switch_chain(137)
        provider.switch_chain(10)
        manager.on_chain_changed(42161)

        assert reloader.reasons == ["chainChanged:137"]
        assert manager.reload_requested
        assert not manager.is_alive
        assert listener_total(provider) == 0

        # No further mutation within this session instance
        assert manager.on_accounts_changed([ACCOUNT_B]) is None
        manager.on_disconnect("gone")
        assert manager.session is before

    @pytest.mark.asyncio
    async def test_chain_change_reloads_even_for_same_chain(self, provider, manager, reloader):
        await manager.initialize()

        provider.switch_chain(1)

        assert reloader.reasons == ["chainChanged:1"]

    @pytest.mark.asyncio
    async def test_disconnect_clears_state_and_reports_reason(self, provider, manager):
        provider.authorized = True
        await manager.initialize()
        await manager.settle()

        provider.drop_connection("Provider disconnected")

        session = manager.session
        assert session.status == SessionStatus.DISCONNECTED
        assert session.account is None
        assert session.network is None
        assert session.balance is None
        assert session.error == "MetaMask disconnected: Provider disconnected"
        assert session.error_kind == WalletErrorKind.DISCONNECTED

    @pytest.mark.asyncio
    async def test_disconnect_is_recoverable(self, provider, manager):
        provider.authorized = True
        await manager.initialize()
        provider.drop_connection()

        session = await manager.connect()

        assert session.status == SessionStatus.CONNECTED
        assert session.error is None
        await manager.settle()


# =============================================================================
# Account info fetch
# =============================================================================

class TestAccountInfo:
    @pytest.mark.asyncio
    async def test_balance_failure_keeps_account_and_network(self, provider, manager):
        provider.balance_error = RuntimeError("rpc down")

        await manager.connect()
        await manager.settle()

        session = manager.session
        assert session.status == SessionStatus.CONNECTED
        assert session.account == ACCOUNT_A
        assert session.signer is not None
        assert session.network == Network(name="homestead", chain_id=1)
        assert session.balance is None
        assert session.error == INFO_FETCH_FAILED_MESSAGE
        assert session.error_kind == WalletErrorKind.INFO_FETCH_FAILED

    @pytest.mark.asyncio
    async def test_network_failure_keeps_balance(self, provider, manager):
        provider.network_error = RuntimeError("rpc down")

        await manager.connect()
        await manager.settle()

        assert manager.session.network is None
        assert manager.session.balance == "2.0"
        assert manager.session.error == "Could not fetch account information."

    @pytest.mark.asyncio
    async def test_no_automatic_retry(self, provider, manager):
        provider.balance_error = RuntimeError("rpc down")

        await manager.connect()
        await manager.settle()
        await asyncio.sleep(0)

        assert provider.calls["get_balance"] == 1

    @pytest.mark.asyncio
    async def test_slow_fetch_for_old_account_is_discarded(self, provider, manager):
        gate = asyncio.Event()
        provider.balance_gates[ACCOUNT_B.lower()] = gate

        slow = manager.on_accounts_changed([ACCOUNT_B])
        fast = manager.on_accounts_changed([ACCOUNT_C])
        await fast

        assert manager.session.account == ACCOUNT_C
        assert manager.session.balance == "3.0"

        gate.set()
        await slow

        assert manager.session.account == ACCOUNT_C
        assert manager.session.balance == "3.0"
        assert manager.session.error is None

    @pytest.mark.asyncio
    async def test_connect_during_inflight_fetch(self, provider, manager):
        gate = asyncio.Event()
        provider.balance_gates[ACCOUNT_B.lower()] = gate

        manager.on_accounts_changed([ACCOUNT_B])
        provider.accounts = [ACCOUNT_C]
        await manager.connect()

        gate.set()
        await manager.settle()

        assert manager.session.account == ACCOUNT_C
        assert manager.session.balance == "3.0"
        assert_invariants(manager.session)

    @pytest.mark.asyncio
    async def test_fetch_after_teardown_does_not_write(self, provider, manager):
        gate = asyncio.Event()
        provider.balance_gates[ACCOUNT_A.lower()] = gate

        task = manager.on_accounts_changed([ACCOUNT_A])
        manager.teardown()
        gate.set()
        await task

        assert manager.session.balance is None
        assert manager.session.network is None


# =============================================================================
# Lifecycle
# =============================================================================

class TestLifecycle:
    @pytest.mark.asyncio
    async def test_mount_unmount_pairs_subscriptions(self, provider, manager):
        await manager.initialize()
        manager.teardown()
        manager.teardown()

        assert manager.bridge.subscribe_count == 1
        assert manager.bridge.unsubscribe_count == 1
        assert listener_total(provider) == 0

    @pytest.mark.asyncio
    async def test_remounts_do_not_leak_listeners(self, provider, reloader):
        for _ in range(3):
            manager = WalletSessionManager(provider, reloader=reloader)
            await manager.initialize()
            manager.teardown()

        assert listener_total(provider) == 0

    @pytest.mark.asyncio
    async def test_listeners_see_every_session(self, provider, manager):
        seen: List[WalletSession] = []
        manager.add_listener(seen.append)

        await manager.connect()
        await manager.settle()

        statuses = [s.status for s in seen]
        assert statuses[0] == SessionStatus.CONNECTING
        assert SessionStatus.CONNECTED in statuses
        for session in seen:
            assert_invariants(session)

    @pytest.mark.asyncio
    async def test_snapshot_reflects_session_and_liveness(self, provider, manager):
        await manager.connect()
        await manager.settle()

        snapshot = manager.snapshot()
        assert snapshot["status"] == "connected"
        assert snapshot["account"] == ACCOUNT_A
        assert snapshot["network"] == {"name": "homestead", "chainId": 1}
        assert snapshot["balance"] == "2.0"
        assert snapshot["alive"] is True

        manager.teardown()
        assert manager.snapshot()["alive"] is False


# =============================================================================
# Signer derivation
# =============================================================================

class TestSignerFailure:
    @pytest.fixture
    def broken_signer(self, provider, monkeypatch):
        def get_signer(account):
            raise RuntimeError("keyring locked")

        monkeypatch.setattr(provider, "get_signer", get_signer)

    @pytest.mark.asyncio
    async def test_discovery_records_connection_failure(self, provider, manager, broken_signer):
        provider.authorized = True

        session = await manager.initialize()

        assert session.status == SessionStatus.DISCONNECTED
        assert session.account is None
        assert session.error_kind == WalletErrorKind.CONNECTION_FAILED
        assert session.error == "Error connecting to MetaMask: keyring locked"
        assert manager.bridge.is_subscribed
        assert "get_balance" not in provider.calls
        manager.teardown()

    @pytest.mark.asyncio
    async def test_connect_keeps_the_failure_visible(self, provider, manager, broken_signer):
        session = await manager.connect()

        assert session.status == SessionStatus.DISCONNECTED
        assert session.account is None
        assert session.error_kind == WalletErrorKind.CONNECTION_FAILED
