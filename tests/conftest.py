"""Shared test fixtures for the eve-deploy test suite.

Provides:
    - A deterministic keyring and signer address
    - Valid deployment messages
    - An in-memory fake node with call recording
    - A fake clock so poll loops run without wall-clock waits
"""

from __future__ import annotations

import asyncio
from decimal import Decimal

import pytest

from eve_deploy.domain.messages import (
    DecCoin,
    GroupSpec,
    MsgCreateDeployment,
    Resource,
    ResourceUnits,
)
from eve_deploy.domain.results import AccountInfo, BroadcastResult
from eve_deploy.keyring import Keyring
from eve_deploy.node.errors import NodeRPCError
from eve_deploy.services.deployment_service import manifest_version, new_create_deployment_msg
from eve_deploy.tx.builder import TxAssembler
from eve_deploy.tx.encoding import tx_hash
from eve_deploy.tx.fees import FeeFactory
from eve_deploy.tx.signing import Signer


def not_found_error(hash_: str) -> NodeRPCError:
    return NodeRPCError("Internal error", code=-32603, data=f"tx ({hash_}) not found")


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeNode:
    """In-memory node recording every call.

    query_responses are consumed in order; each is a BroadcastResult to
    return or an exception to raise. Once exhausted, queries answer
    "not found".
    """

    def __init__(
        self,
        *,
        gas_used: int | Exception = 100_000,
        commit_code: int = 0,
        commit_error: Exception | None = None,
        broadcast_error: Exception | None = None,
        query_responses: list | None = None,
        account: AccountInfo | None = None,
    ) -> None:
        self.gas_used = gas_used
        self.commit_code = commit_code
        self.commit_error = commit_error
        self.broadcast_error = broadcast_error
        self.query_responses = list(query_responses or [])
        self.account = account
        self.calls: list[str] = []
        self.received: list[bytes] = []
        self.simulated: list[bytes] = []
        self.queries: list[str] = []
        self.on_query = None

    async def simulate(self, tx_bytes: bytes) -> int:
        self.calls.append("simulate")
        self.simulated.append(tx_bytes)
        if isinstance(self.gas_used, Exception):
            raise self.gas_used
        return self.gas_used

    async def get_account(self, address: str) -> AccountInfo:
        self.calls.append("get_account")
        return self.account or AccountInfo(address=address, account_number=7, sequence=3)

    async def broadcast_tx_async(self, tx_bytes: bytes) -> BroadcastResult:
        return self._accept("broadcast_tx_async", tx_bytes)

    async def broadcast_tx_sync(self, tx_bytes: bytes) -> BroadcastResult:
        return self._accept("broadcast_tx_sync", tx_bytes)

    async def broadcast_tx_commit(self, tx_bytes: bytes) -> BroadcastResult:
        self.calls.append("broadcast_tx_commit")
        self.received.append(tx_bytes)
        if self.commit_error is not None:
            raise self.commit_error
        return BroadcastResult(
            tx_hash=tx_hash(tx_bytes),
            code=self.commit_code,
            raw_log="[]" if self.commit_code == 0 else "insufficient funds",
            height=42,
        )

    async def query_tx(self, hash_: str) -> BroadcastResult:
        self.calls.append("query_tx")
        self.queries.append(hash_)
        if self.on_query is not None:
            self.on_query(len(self.queries))
        if not self.query_responses:
            raise not_found_error(hash_)
        response = self.query_responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def _accept(self, method: str, tx_bytes: bytes) -> BroadcastResult:
        self.calls.append(method)
        self.received.append(tx_bytes)
        if self.broadcast_error is not None:
            raise self.broadcast_error
        return BroadcastResult(tx_hash=tx_hash(tx_bytes), code=0)


class FakeAccountRetriever:
    def __init__(self, account_number: int = 7, sequence: int = 3) -> None:
        self.account_number = account_number
        self.sequence = sequence
        self.calls = 0

    async def get_account(self, address: str) -> AccountInfo:
        self.calls += 1
        return AccountInfo(
            address=address,
            account_number=self.account_number,
            sequence=self.sequence,
        )


class FakeClock:
    """Monotonic clock that advances instantly when slept on."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def keyring() -> Keyring:
    """Keyring holding one deterministic key named "deploy"."""
    ring = Keyring()
    ring.add_key("deploy", bytes(range(32)))
    return ring


@pytest.fixture
def owner(keyring: Keyring) -> str:
    return keyring.lookup("deploy").address


@pytest.fixture
def group() -> GroupSpec:
    return GroupSpec(
        name="westcoast",
        resources=(
            Resource(
                units=ResourceUnits(
                    cpu_millis=100,
                    memory_bytes=128 * 1024 * 1024,
                    storage_bytes=512 * 1024 * 1024,
                ),
                count=1,
                price=DecCoin(denom="uakt", amount=Decimal("100")),
            ),
        ),
    )


@pytest.fixture
def create_msg(owner: str, group: GroupSpec) -> MsgCreateDeployment:
    return new_create_deployment_msg(
        owner=owner,
        groups=[group],
        version=manifest_version(b"version: '2.0'\nservices: {}\n"),
        dseq=1234,
    )


@pytest.fixture
def accounts() -> FakeAccountRetriever:
    return FakeAccountRetriever()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_node():
    """Factory fixture: make_node(**kwargs) -> FakeNode."""
    return FakeNode


@pytest.fixture
def make_fee_config(keyring: Keyring, accounts: FakeAccountRetriever):
    """Factory fixture for FeeConfig with test defaults."""

    def _make(**overrides):
        params = {
            "gas": "200000",
            "gas_adjustment": "1.5",
            "gas_prices": "0.025uakt",
            "chain_id": "akashnet-2",
            "account_retriever": accounts,
            "keyring": keyring,
            "from_name": "deploy",
        }
        params.update(overrides)
        return FeeFactory.create(**params)

    return _make


@pytest.fixture
def unsigned(create_msg: MsgCreateDeployment, make_fee_config):
    """An UnsignedTx for create_msg at account 7, sequence 3, gas 150000."""
    account = AccountInfo(address=create_msg.id.owner, account_number=7, sequence=3)
    return TxAssembler().build([create_msg], make_fee_config(), 150_000, account)


@pytest.fixture
def signed(keyring: Keyring, unsigned):
    return Signer(keyring).sign(unsigned, "deploy")
