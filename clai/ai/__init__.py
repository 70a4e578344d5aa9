"""Model access: request/response types, providers, the provider chain and parsing."""
