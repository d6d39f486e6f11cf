"""gatewayctl - keep the gateway launch agent in sync with its configuration."""

__version__ = "0.1.0"
