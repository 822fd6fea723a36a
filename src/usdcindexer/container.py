from dependency_injector import containers, providers

from usdcindexer.config import Settings
from usdcindexer.infra.blockchain.solana.rpc_client import SolanaRPCClient
from usdcindexer.infra.http.rate_limited_client import RateLimitedClient


class Container(containers.DeclarativeContainer):
    settings = providers.Singleton(Settings)

    http_client = providers.Factory(
        RateLimitedClient,
        rate_per_second=settings.provided.rpc_rate_per_second,
        timeout=settings.provided.http_timeout,
    )

    rpc_client = providers.Factory(
        SolanaRPCClient,
        rpc_url=settings.provided.solana_rpc_url,
        http_client=http_client,
    )
