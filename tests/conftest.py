from unittest.mock import AsyncMock

import pytest

from usdcindexer.infra.blockchain.solana.rpc_client import SolanaRPCClient


@pytest.fixture()
def rpc():
    return AsyncMock(spec=SolanaRPCClient)
