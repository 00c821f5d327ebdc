from fastapi import Depends

from app.providers.registry import provider_registry
from app.services.addresses import AddressResolver
from app.services.pipeline import TransactionPipeline
from app.services.tokens import TokenResolver


def get_pipeline() -> TransactionPipeline:
    # Built per request; only the provider clients underneath are shared
    return TransactionPipeline.from_registry(provider_registry)


def get_token_resolver(pipeline: TransactionPipeline = Depends(get_pipeline)) -> TokenResolver:
    return pipeline.tokens


def get_address_resolver(pipeline: TransactionPipeline = Depends(get_pipeline)) -> AddressResolver:
    return pipeline.addresses
