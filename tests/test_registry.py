from app.providers.alldomains import AllDomainsProvider
from app.providers.registry import ProviderRegistry
from app.providers.sns import SnsProvider
from app.services.pipeline import TransactionPipeline


def test_name_providers_try_alldomains_before_sns():
    providers = ProviderRegistry().name_providers()

    assert [type(p) for p in providers] == [AllDomainsProvider, SnsProvider]


def test_pipeline_wires_shared_clients_from_registry():
    registry = ProviderRegistry()
    pipeline = TransactionPipeline.from_registry(registry)

    assert pipeline.jupiter is registry.jupiter
    assert pipeline.builder.rpc is registry.rpc
    assert pipeline.builder.jupiter is registry.jupiter


async def test_close_all_without_initialize_is_quiet():
    await ProviderRegistry().close_all()
