"""
Custom exception hierarchy for the Shopify → Notion mirror.

Exceptions are categorized as:
- RetryableError: transient failures (network, rate limits) that a
  scheduled run may recover from on the next attempt
- NonRetryableError: configuration or query problems that need a fix

Within a sync run every fetch-side exception is fatal; per-record mapping
and upsert failures are caught by the orchestrator and counted.
"""


class ShopifyNotionSyncError(Exception):
    """Base exception for the Shopify → Notion mirror."""
    pass


# ============================================
# RETRYABLE ERRORS
# ============================================
class RetryableError(ShopifyNotionSyncError):
    """
    Base class for transient errors.

    Celery tasks autoretry on this branch.
    """
    pass


class ExternalAPIError(RetryableError):
    """
    Error from an external API (Shopify, Notion).

    Raised for network failures and non-rate-limit HTTP errors.
    """
    def __init__(self, service: str, message: str, status_code: int = None):
        self.service = service
        self.status_code = status_code
        super().__init__(f"{service} API error: {message}")


class RateLimitError(RetryableError):
    """Rate limit response observed; carries the advertised wait."""
    def __init__(self, service: str, retry_after: float = 2.0):
        self.service = service
        self.retry_after = retry_after
        super().__init__(f"{service} rate limited. Retry after {retry_after}s")


# ============================================
# NON-RETRYABLE ERRORS
# ============================================
class NonRetryableError(ShopifyNotionSyncError):
    """Base class for errors where retrying won't help."""
    pass


class ConfigurationError(NonRetryableError):
    """Required settings are missing or invalid."""
    pass


class GraphQLQueryError(NonRetryableError):
    """
    The GraphQL endpoint answered with top-level `errors`.

    Malformed queries and schema mismatches end up here.
    """
    def __init__(self, errors):
        self.errors = errors
        messages = "; ".join(
            str(e.get("message", e)) if isinstance(e, dict) else str(e)
            for e in (errors or [])
        )
        super().__init__(f"GraphQL query failed: {messages}")


class RetriesExhaustedError(NonRetryableError):
    """Rate-limit retries used up."""
    def __init__(self, service: str, attempts: int, waited: float = 0.0):
        self.service = service
        self.attempts = attempts
        self.waited = waited
        super().__init__(f"Max retries reached for {service} API after {attempts} attempts")


class MappingError(NonRetryableError):
    """A source record could not be mapped to Notion properties."""
    pass
