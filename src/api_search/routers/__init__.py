"""Request router implementations."""

from api_search.routers.first_model import FirstModelRouter
from api_search.routers.round_robin import RoundRobinRouter

__all__ = ["FirstModelRouter", "RoundRobinRouter"]
