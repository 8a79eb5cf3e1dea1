"""Shared pytest fixtures for erc721n-deployments tests."""

from pathlib import Path

import pytest
import responses

from erc721n_deployments.artifacts import ArtifactStore
from erc721n_deployments.config import NetworkSettings
from erc721n_deployments.context import ExecutionContext
from fake_node import PRIVATE_KEY, RPC_URL, FakeNode


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def artifacts_dir(fixtures_dir: Path) -> Path:
    """Return the path to the sample Hardhat artifacts."""
    return fixtures_dir / "artifacts"


@pytest.fixture
def artifact_store(artifacts_dir: Path) -> ArtifactStore:
    """ArtifactStore over the sample Hardhat artifacts."""
    return ArtifactStore(artifacts_dir)


@pytest.fixture
def settings() -> NetworkSettings:
    """Settings for the fake local node."""
    return NetworkSettings(name="localhost", rpc_url=RPC_URL, private_key=PRIVATE_KEY, chain_id=31337)


@pytest.fixture
def fake_node():
    """A FakeNode answering every POST to RPC_URL."""
    node = FakeNode()
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add_callback(responses.POST, RPC_URL, callback=node)
        yield node


@pytest.fixture
def ctx(settings: NetworkSettings, fake_node: FakeNode) -> ExecutionContext:
    """ExecutionContext connected to the fake node."""
    with ExecutionContext(settings) as context:
        yield context
