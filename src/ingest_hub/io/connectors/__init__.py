"""Database connection gateways."""

from .gateway import ConnectionGateway, GatewayError, TransactionHandle
from .sqlite_gateway import SQLiteGateway, database_path_from_url

__all__ = [
    "ConnectionGateway",
    "GatewayError",
    "TransactionHandle",
    "SQLiteGateway",
    "database_path_from_url",
]
