from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Solana
    solana_rpc_url: str = "https://api.mainnet-beta.solana.com"

    # Jupiter
    jupiter_api_key: str = ""
    jupiter_quote_url: str = "https://lite-api.jup.ag/swap/v1/quote"
    jupiter_swap_url: str = "https://lite-api.jup.ag/swap/v1/swap"
    jupiter_tokens_url: str = "https://lite-api.jup.ag/tokens/v2"
    jupiter_price_url: str = "https://lite-api.jup.ag/price/v3"

    # Name services
    alldomains_api_url: str = "https://api.alldomains.id/domain-owner"
    sns_proxy_url: str = "https://sns-sdk-proxy.bonfida.workers.dev"

    # Pipeline
    default_slippage_bps: int = 50
    http_timeout_seconds: float = 30.0
    token_suggestion_count: int = 10
    min_search_query_length: int = 2

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
