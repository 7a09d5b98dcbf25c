"""
Recommendation Service -- asks an LLM which catalog apps fit a free-text request.

Contract:
  - input: user request + catalog snapshot
  - output: ordered app ids (possibly empty, possibly containing unknown ids)
  - never raises: missing key, timeout, API or parse errors all yield []

The engine filters the ids against the live catalog; nothing here does.
"""

import asyncio
import json
import logging
from typing import Any, List, Optional, Sequence

from appvault.config import Settings, get_settings
from appvault.schemas.catalog import AppRecord

logger = logging.getLogger(__name__)

_PROMPT = """You are an intelligent app recommendation engine for "AppVault".
User Request: "{query}"

Available Apps Database:
{apps}

Task: Select the top {limit} apps that best match the user's request.
Return ONLY a JSON object of the form {{"recommendedAppIds": ["<id>", ...]}}."""


def _catalog_listing(apps: Sequence[AppRecord]) -> str:
    return "\n".join(
        f"ID: {a.id}, Name: {a.name}, Description: {a.description}, Category: {a.category.value}"
        for a in apps
    )


def parse_recommended_ids(text: str) -> List[str]:
    """Pull the id list out of the model's JSON reply."""
    data = json.loads(text or "{}")
    if isinstance(data, list):
        ids = data
    else:
        ids = data.get("recommendedAppIds") or data.get("app_ids") or []
    return [str(i) for i in ids if isinstance(i, (str, int))]


class RecommendationService:
    """OpenAI-backed recommender. A client can be injected for tests."""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[Any] = None):
        self.settings = settings or get_settings()
        self._client = client

    def _get_client(self) -> Optional[Any]:
        if self._client is not None:
            return self._client
        key = (self.settings.openai_api_key or "").strip()
        if not key or key.startswith("sk-your-"):
            return None

        from openai import AsyncOpenAI
        self._client = AsyncOpenAI(api_key=key)
        return self._client

    async def recommend(self, query: str, apps: Sequence[AppRecord]) -> List[str]:
        query = (query or "").strip()
        if not query or not apps:
            return []

        client = self._get_client()
        if client is None:
            logger.info("Recommendations disabled: no OpenAI key configured")
            return []

        prompt = _PROMPT.format(
            query=query,
            apps=_catalog_listing(apps),
            limit=self.settings.recommendation_limit,
        )
        try:
            response = await asyncio.wait_for(
                client.chat.completions.create(
                    model=self.settings.recommendation_model,
                    messages=[{"role": "user", "content": prompt}],
                    response_format={"type": "json_object"},
                    max_tokens=200,
                    temperature=0.2,
                ),
                timeout=self.settings.recommendation_timeout_seconds,
            )
            text = (response.choices[0].message.content or "").strip()
            return parse_recommended_ids(text)
        except Exception as exc:
            logger.warning("Recommendation request failed: %s", exc)
            return []
