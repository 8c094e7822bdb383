# src/stages/research.py — v1
"""Topic research: trending headlines from NewsAPI with a fixed fallback pool.

This stage degrades instead of failing. A missing key, HTTP error, network
error, malformed body or empty result all yield a topic from FALLBACK_TOPICS.
"""

from __future__ import annotations

import random
from typing import Any

import httpx

from reelforge.config.settings import Settings
from reelforge.core.models import TopicIdea, TopicSource
from reelforge.stages.base import BaseStage, FailurePolicy, RunContext

TRENDS_ENDPOINT = "https://newsapi.org/v2/everything"
TREND_QUERY_TERMS = [
    "AI",
    "artificial intelligence",
    "robotics",
    "quantum computing",
    "future tech",
]

FALLBACK_TOPICS: tuple[TopicIdea, ...] = (
    TopicIdea(
        title="Robot surgeons now outperform humans in microsurgery tests",
        summary=(
            "Autonomous surgical robots completed 97% of microsuture tasks "
            "faster than leading surgeons."
        ),
        angle="Highlight precision, speed, and what it means when robots master steady hands.",
        sources=[
            TopicSource(title="MIT Technology Review", url="https://www.technologyreview.com/"),
            TopicSource(title="Nature Robotics", url="https://www.nature.com/natmachintell/"),
        ],
    ),
    TopicIdea(
        title="Quantum AI lab announces qubit leap that slashes training power",
        summary="Researchers combined quantum annealing with AI chips to cut energy costs by 37%.",
        angle="Focus on the sustainability angle and the idea of greener AGI.",
        sources=[
            TopicSource(title="IEEE Spectrum", url="https://spectrum.ieee.org/"),
            TopicSource(title="Quantum Magazine", url="https://www.quantamagazine.org/"),
        ],
    ),
    TopicIdea(
        title="Self-healing nanobots designed to patrol human bloodstream",
        summary=(
            "New nanobots repair themselves mid-mission, enabling continuous "
            "internal diagnostics."
        ),
        angle="Lean into the sci-fi visual of nanobot patrols keeping us alive.",
        sources=[
            TopicSource(title="Wired", url="https://www.wired.com/"),
            TopicSource(title="Science Advances", url="https://www.science.org/journal/sciadv"),
        ],
    ),
)


def select_fallback_topic(rng: random.Random) -> TopicIdea:
    """Pick a topic from the internal pool using the given random source."""
    return FALLBACK_TOPICS[rng.randrange(len(FALLBACK_TOPICS))]


def build_topic(articles: list[dict[str, Any]], video_style: str) -> TopicIdea | None:
    """Turn NewsAPI articles into a TopicIdea, or None if none has a title."""
    titled = [a for a in articles if isinstance(a, dict) and a.get("title")]
    if not titled:
        return None

    primary, secondary = titled[0], titled[1:4]
    angle = (
        f"Deliver a futurist hype tone that fits the {video_style} aesthetic. "
        "Highlight why this matters right now and give a forward-looking twist."
    )
    sources = [
        TopicSource(
            title=(primary.get("source") or {}).get("name") or "Primary Source",
            url=primary.get("url") or "",
        )
    ]
    sources.extend(
        TopicSource(
            title=(article.get("source") or {}).get("name") or "Supporting Source",
            url=article.get("url") or "",
        )
        for article in secondary
    )
    return TopicIdea(
        title=primary["title"],
        summary=primary.get("description") or "Latest AI headline summarized.",
        angle=angle,
        sources=sources,
    )


class TopicResearcher(BaseStage):
    """Find today's topic."""

    name = "research"
    policy = FailurePolicy.DEGRADES

    def __init__(
        self,
        settings: Settings,
        rng: random.Random | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = settings.news_api_key
        self._timeout = settings.http_timeout_seconds
        self._rng = rng or random.Random(settings.fallback_seed)
        self._transport = transport

    async def __call__(self, ctx: RunContext) -> TopicIdea:
        if not self._api_key:
            await ctx.logger.warning(
                "NEWS_API_KEY missing. Falling back to internal trending set."
            )
            return self._fallback()

        try:
            articles = await self._fetch_articles()
            topic = build_topic(articles, ctx.config.video_style)
        except Exception as e:  # noqa: BLE001
            await ctx.logger.warning("Trending research failed", error=str(e))
            return self._fallback()

        if topic is None:
            await ctx.logger.warning("No trending topics returned. Using fallback list.")
            return self._fallback()

        await ctx.logger("Trending topic selected", title=topic.title)
        return topic

    async def _fetch_articles(self) -> list[dict[str, Any]]:
        params = {
            "q": " OR ".join(TREND_QUERY_TERMS),
            "language": "en",
            "sortBy": "publishedAt",
            "pageSize": "5",
        }
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.get(
                TRENDS_ENDPOINT, params=params, headers={"X-Api-Key": self._api_key}
            )
            if response.status_code >= 400:
                raise ValueError(f"News API error {response.status_code}")
            data = response.json()

        articles = data.get("articles") if isinstance(data, dict) else None
        return articles if isinstance(articles, list) else []

    def _fallback(self) -> TopicIdea:
        return select_fallback_topic(self._rng)
