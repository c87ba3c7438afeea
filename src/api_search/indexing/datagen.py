"""Synthetic OpenAPI specs for building demo catalogues.

A generate model is asked to write a spec for a named company. The JSON code
block in its reply is written to ``<company>.json``, ready for
``Indexer.index_spec_directory``.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from api_search.capabilities.api import ModelAPI
from api_search.core.cancellation import CancelScope
from api_search.core.concurrency import run_best_effort
from api_search.core.exceptions import MalformedResponseError
from api_search.core.logging import log_duration

logger = logging.getLogger(__name__)

GENERATE_SPEC_INSTRUCTION = (
    "Generate an Open API spec for the company. It should be complete and "
    "comprehensive. Put the entire spec in a JSON code block."
)

_JSON_BLOCK = re.compile(r"```json\s*\n(.*?)\n\s*```", re.DOTALL)
_NOT_FILENAME = re.compile(r"[^a-z0-9]")


def extract_json_block(text: str) -> str:
    """Return the body of the first ```json fenced block in ``text``.

    Raises:
        MalformedResponseError: If there is no such block.
    """
    match = _JSON_BLOCK.search(text)
    if not match:
        raise MalformedResponseError("No JSON code block found in the response")
    return match.group(1)


def spec_filename(company: str) -> str:
    """``"Home Depot"`` -> ``"homedepot.json"``.

    Raises:
        ValueError: If the name has no letters or digits.
    """
    stem = _NOT_FILENAME.sub("", company.lower())
    if not stem:
        raise ValueError(f"Company name {company!r} has no usable characters")
    return f"{stem}.json"


def read_companies(path: Union[str, Path]) -> List[str]:
    """One company per line; blank lines are skipped."""
    with open(Path(path).expanduser(), "r", encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip()]


class SpecGenerator:
    """Writes model-generated OpenAPI specs to a directory.

    Example:
        generator = SpecGenerator(model_api)
        paths = generator.generate_all(["Spotify", "Chase"], "./specs", max_concurrency=5)
    """

    def __init__(self, model_api: ModelAPI):
        self.model_api = model_api

    def generate_spec(self, company: str, scope: Optional[CancelScope] = None) -> Dict[str, Any]:
        """Ask the model for a spec and decode it.

        Raises:
            MalformedResponseError: If the reply holds no JSON object.
        """
        response = self.model_api.generate(GENERATE_SPEC_INSTRUCTION, f"Company: {company}", scope=scope)
        block = extract_json_block(response)
        try:
            spec = json.loads(block)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(f"Invalid JSON received for {company}: {block[:500]}") from e
        if not isinstance(spec, dict):
            raise MalformedResponseError(f"Spec for {company} is not a JSON object")
        return spec

    def write_spec(
        self,
        company: str,
        output_dir: Union[str, Path],
        scope: Optional[CancelScope] = None,
    ) -> Path:
        spec = self.generate_spec(company, scope)
        path = Path(output_dir).expanduser() / spec_filename(company)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(spec, f, indent=2)
        logger.info(f"Spec for {company} saved to {path}")
        return path

    def generate_all(
        self,
        companies: Sequence[str],
        output_dir: Union[str, Path],
        max_concurrency: int = 5,
        scope: Optional[CancelScope] = None,
    ) -> List[Optional[Path]]:
        """Generate a spec per company, skipping the ones that fail.

        Returns:
            The written path per company, in input order, or None where
            generation failed.
        """
        directory = Path(output_dir).expanduser()
        directory.mkdir(parents=True, exist_ok=True)

        def unit(company: str, unit_scope: CancelScope) -> Path:
            return self.write_spec(company, directory, unit_scope)

        def report(company: str, error: BaseException) -> None:
            logger.warning(f"Error processing company {company}: {error}")

        with log_duration(logger, "specs_generated", companies=len(companies)):
            return run_best_effort(unit, companies, max_concurrency, scope, on_error=report)
