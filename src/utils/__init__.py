"""
Utility modules for the consent gateway
"""
from .config_loader import GatewayConfig, load_gateway_config

__all__ = [
    'GatewayConfig',
    'load_gateway_config',
]
