"""LLM Base Classes and Shared Code"""

import http.client
import json
import re
import socket
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

MAX_CANDIDATES = 3

SYSTEM_PROMPT = """You write succinct Git commit message subjects.
Output exactly three lines as requested. Do not include explanations, markdown blocks, or quotes."""

_BULLET = re.compile(r'^\s*[-*]\s*')
_NUMBERING = re.compile(r'^\s*\d+[.)]\s*')
_FENCE = re.compile(r'^\s*```')


def parse_candidates(text: str) -> list[str]:
    """Split a model response into at most three subject lines."""
    candidates = []
    for line in str(text).split('\n'):
        if _FENCE.match(line):
            continue
        line = _NUMBERING.sub('', _BULLET.sub('', line)).strip().strip('"\'`').strip()
        if line:
            candidates.append(line)
    return candidates[:MAX_CANDIDATES]


def validate_candidates(content: str) -> tuple[bool, str]:
    """Validate that a response contains at least one usable subject."""
    if not content or not content.strip():
        return False, "Empty response"
    if not parse_candidates(content):
        return False, "No commit subjects found"
    return True, ""


@dataclass
class LLMResponse:
    """Structured response from any LLM engine."""
    content: str
    model: str = ""
    tokens_used: int = 0
    candidates: list[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.candidates:
            self.candidates = parse_candidates(self.content)


class LLMError(Exception):
    """Raised when LLM operations fail."""
    pass


class LLMClient(ABC):
    """Abstract base for LLM clients."""

    @abstractmethod
    def generate(self, prompt: str) -> LLMResponse:
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass


def remote_model(model: str | None, default: str) -> str:
    """Configured model unless it looks like an Ollama tag (``name:size``)."""
    return model if model and ':' not in model else default


def _error_detail(error: urllib.error.HTTPError) -> str:
    try:
        body = json.loads(error.read().decode('utf-8'))
    except (ValueError, OSError):
        return ""
    message = (body.get("error") or {}).get("message") if isinstance(body, dict) else None
    return f" - {message}" if message else ""


def post_json(engine: str, url: str, payload: dict, headers: dict | None = None, timeout: int = 60,
              status_hints: dict[int, str] | None = None) -> dict:
    """POST a JSON payload to an engine, mapping transport failures to LLMError.

    status_hints maps an HTTP status to a more helpful message for that engine.
    """
    data = json.dumps(payload).encode('utf-8')
    req = urllib.request.Request(
        url, data=data, headers={"Content-Type": "application/json", **(headers or {})}
    )
    try:
        with urllib.request.urlopen(req, timeout=timeout) as response:
            return json.loads(response.read().decode('utf-8'))
    except urllib.error.HTTPError as e:
        if status_hints and e.code in status_hints:
            raise LLMError(status_hints[e.code])
        if e.code in (401, 403):
            raise LLMError(f"{engine} HTTP {e.code}: Unauthorized - check your API key")
        raise LLMError(f"{engine} HTTP {e.code}{_error_detail(e)}")
    except urllib.error.URLError as e:
        if isinstance(e.reason, socket.timeout):
            raise LLMError(f"{engine} request timed out after {timeout}s")
        raise LLMError(f"Network error calling {engine}: {e.reason}")
    except socket.timeout:
        raise LLMError(f"{engine} request timed out after {timeout}s")
    except json.JSONDecodeError:
        raise LLMError(f"Invalid JSON response from {engine}")
    except http.client.HTTPException as e:
        raise LLMError(f"Incomplete response from {engine}: {e}")
    except OSError as e:
        raise LLMError(f"Connection to {engine} lost: {e}")
