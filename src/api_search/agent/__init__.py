"""Browsing agent and its default browser."""

from api_search.agent.browser import BaseBrowser
from api_search.agent.browser_agent import (
    BrowserAction,
    LLMBrowserAgent,
    SolveResult,
    SolveStatus,
)

__all__ = ["BaseBrowser", "BrowserAction", "LLMBrowserAgent", "SolveResult", "SolveStatus"]
