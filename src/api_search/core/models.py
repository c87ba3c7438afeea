"""Data models for the API search engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Any, Optional


class MessageRole(Enum):
    """Roles in a chat conversation."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Capability(Enum):
    """Operations a capability model can serve."""
    BINARY_CLASSIFY = "binary_classify"
    CLASSIFY = "classify"
    SCORE = "score"
    GENERATE = "generate"
    PARSE_FORCE = "parse_force"
    EMBED = "embed"


@dataclass(frozen=True)
class Message:
    """A single chat message exchanged with a model."""
    role: MessageRole
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass
class LLMResponse:
    """Response from an LLM provider."""
    content: str
    model: str
    usage: Dict[str, int] = field(default_factory=dict)
    finish_reason: str = "stop"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "model": self.model,
            "usage": self.usage,
            "finish_reason": self.finish_reason,
        }


@dataclass(frozen=True)
class CatalogueEndpoint:
    """Network location of a catalogue entry's self-description."""
    host: str
    port: int
    protocol: str = "http"
    path: str = "/"

    @property
    def url(self) -> str:
        path = self.path if self.path.startswith("/") else f"/{self.path}"
        return f"{self.protocol}://{self.host}:{self.port}{path}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "protocol": self.protocol,
            "host": self.host,
            "port": self.port,
            "path": self.path,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CatalogueEndpoint":
        """Build an endpoint from snake_case or ``IpAddress``/``Port`` style keys."""
        host = data.get("host", data.get("IpAddress"))
        port = data.get("port", data.get("Port"))
        if not host or port is None:
            raise ValueError(f"Endpoint needs a host and a port: {data}")
        return cls(
            host=host,
            port=int(port),
            protocol=data.get("protocol", data.get("Protocol")) or "http",
            path=data.get("path", data.get("Path")) or "/",
        )


@dataclass(frozen=True)
class Document:
    """An indexed catalogue entry.

    Created once per entry during a refresh and replaced wholesale on the
    next one.
    """
    title: str
    summary: str
    embedding: List[float]
    spec: Dict[str, Any] = field(default_factory=dict)
    endpoint: Optional[CatalogueEndpoint] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "summary": self.summary,
            "embedding": list(self.embedding),
            "spec": self.spec,
            "endpoint": self.endpoint.to_dict() if self.endpoint else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Document":
        endpoint = data.get("endpoint")
        return cls(
            title=data.get("title", ""),
            summary=data.get("summary", ""),
            embedding=[float(v) for v in data.get("embedding") or []],
            spec=data.get("spec") or {},
            endpoint=CatalogueEndpoint.from_dict(endpoint) if endpoint else None,
        )


@dataclass
class SearchResult:
    """A ranked, possibly verified candidate for a query."""
    title: str
    score: float
    summary: str
    endpoint: Optional[CatalogueEndpoint] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "score": self.score,
            "summary": self.summary,
            "endpoint": self.endpoint.to_dict() if self.endpoint else None,
        }


@dataclass
class CacheStats:
    """Statistics about cache performance."""
    lookups: int = 0
    hits: int = 0
    misses: int = 0
    cache_size: int = 0

    @property
    def hit_rate(self) -> float:
        if self.lookups == 0:
            return 0.0
        return self.hits / self.lookups

    @property
    def hit_rate_percent(self) -> float:
        return self.hit_rate * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lookups": self.lookups,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate_percent": self.hit_rate_percent,
            "cache_size": self.cache_size,
        }


@dataclass
class GeoLocation:
    """Approximate location of the caller."""
    latitude: float
    longitude: float
    city: str = ""
    country: str = ""

    def describe(self) -> str:
        place = ", ".join(part for part in (self.city, self.country) if part)
        coords = f"({self.latitude:.4f}, {self.longitude:.4f})"
        return f"{place} {coords}" if place else coords

    def to_dict(self) -> Dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "city": self.city,
            "country": self.country,
        }
