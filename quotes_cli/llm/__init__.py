"""LLM access package.

Architectural role:
    Provides provider configuration, shared request helpers, and transport
    backends used by the acquisition loop to request generated quotes.

Module split:
    - `provider_config`: provider map, credential lookup, settings resolution.
    - `service`: randomized embellishments and response text normalization.
    - `client`: provider-specific HTTP backends and the backend factory.
"""
