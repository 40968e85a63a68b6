"""
StockTA Services

Service layer containing the indicator engine and its collaborators.
Each service has a defined interface (contract) and implementation.
"""

from stockta.services.base import BaseService, ServiceError

__all__ = ["BaseService", "ServiceError"]
