"""Capability models and the routing facade in front of them."""

from api_search.capabilities.api import ModelAPI
from api_search.capabilities.chat_model import ChatGeneralModel

__all__ = ["ModelAPI", "ChatGeneralModel"]
