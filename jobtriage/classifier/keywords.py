"""Traffic light keyword lists and the cached keyword store.

RED and AMBER keywords are configurable at runtime through a settings
source. The store seeds itself with the compiled-in defaults, loads the live
lists on first use and afterwards refreshes them in the background once the
cached copy is older than the TTL (stale-while-revalidate).
"""

import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from jobtriage.config.loader import read_config

from .errors import KeywordSourceError


# Specialist/complex work that likely needs referral or a site visit
DEFAULT_RED_KEYWORDS: tuple[str, ...] = (
    # Gas work (must be Gas Safe registered)
    "gas", "boiler", "gas boiler", "gas cooker", "gas pipe", "gas hob",
    "combi boiler", "central heating",
    # Electrical (beyond minor works)
    "rewire", "consumer unit", "fuse box", "electrical panel", "new circuit",
    "sockets stopped", "sockets not working", "half the sockets", "electrics",
    "flickering", "tripping", "add sockets", "more sockets", "lights flickering",
    # Structural
    "structural", "load bearing", "foundation", "subsidence", "underpinning",
    "chimney removal", "wall removal", "rsj", "steel beam",
    "big crack", "large crack", "crack getting wider", "bowing", "bulging",
    "floors sloping", "floor sloping", "walls leaning", "wonky", "sloping",
    # Hazardous materials
    "asbestos", "lead paint",
    # Major building works
    "extension", "loft conversion", "basement conversion", "new build",
    # Roofing
    "roof", "tiles off", "roof leak", "chimney stack", "guttering repair",
    "slates", "roof repair",
    # Serious damp needing a specialist diagnosis
    "rising damp", "penetrating damp", "severe damp", "damp survey",
    "mould survey", "mold survey", "walls wet", "wet to the touch",
    "damp coming up", "musty smell", "damp throughout",
)

# Jobs that need video/visual confirmation
DEFAULT_AMBER_KEYWORDS: tuple[str, ...] = (
    # Leaks (could be minor or major)
    "leak", "leaking", "water damage", "flooding",
    # Minor damp
    "damp patch", "damp spot", "condensation", "mould", "mold",
    # Damage assessment
    "damage", "broken", "cracked", "split",
    # Custom/bespoke work
    "custom", "bespoke", "made to measure", "unusual",
    # Multiple jobs
    "few things", "several jobs", "list of jobs", "multiple",
    # Vague descriptions
    "not sure", "don't know", "hard to describe", "difficult to explain",
)

# Terms that could go either way and deserve a second opinion from Tier 2
BORDERLINE_KEYWORDS: tuple[str, ...] = (
    "damp", "leak", "crack", "rot", "damage",
    "old", "original", "historic", "period property",
)

DEFAULT_CACHE_TTL_SECONDS = 60.0


class TrafficLightKeywords(BaseModel):
    """Keyword lists as returned by a settings source."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    red_keywords: list[str] = Field(default_factory=list)
    amber_keywords: list[str] = Field(default_factory=list)


@dataclass(frozen=True)
class KeywordSet:
    """Immutable snapshot of the RED and AMBER keyword lists."""

    red: tuple[str, ...]
    amber: tuple[str, ...]
    loaded_at: Optional[float] = None  # None = never loaded from settings
    source: str = "defaults"

    @classmethod
    def defaults(cls) -> "KeywordSet":
        return cls(red=DEFAULT_RED_KEYWORDS, amber=DEFAULT_AMBER_KEYWORDS)

    @classmethod
    def from_lists(
        cls,
        red: Sequence[str],
        amber: Sequence[str],
        loaded_at: Optional[float] = None,
        source: str = "settings",
    ) -> "KeywordSet":
        return cls(
            red=_normalize(red),
            amber=_normalize(amber),
            loaded_at=loaded_at,
            source=source,
        )

    def is_stale(self, now: float, ttl_seconds: float) -> bool:
        if self.loaded_at is None:
            return True
        return now - self.loaded_at > ttl_seconds


def _coerce_keywords(value: Any) -> TrafficLightKeywords:
    """Accept a model or a raw {redKeywords, amberKeywords} mapping."""
    if isinstance(value, TrafficLightKeywords):
        return value
    try:
        return TrafficLightKeywords.model_validate(value)
    except ValidationError as e:
        raise KeywordSourceError(f"Malformed keyword settings: {e}") from e


def _normalize(keywords: Sequence[str]) -> tuple[str, ...]:
    """Strip blanks and duplicates, keeping first-seen order."""
    seen: set[str] = set()
    result = []
    for keyword in keywords:
        keyword = keyword.strip()
        if not keyword or keyword.lower() in seen:
            continue
        seen.add(keyword.lower())
        result.append(keyword)
    return tuple(result)


class KeywordSource(ABC):
    """Settings collaborator that supplies the live keyword lists."""

    @abstractmethod
    async def get_traffic_light_keywords(self) -> TrafficLightKeywords:
        """Fetch the current RED/AMBER keyword lists.

        May raise any exception; the store treats every failure as non-fatal.
        """
        pass


class StaticKeywordSource(KeywordSource):
    """In-memory keyword source, mostly for tests and fixed deployments."""

    def __init__(
        self,
        red_keywords: Optional[Sequence[str]] = None,
        amber_keywords: Optional[Sequence[str]] = None,
    ):
        self._keywords = TrafficLightKeywords(
            red_keywords=list(red_keywords if red_keywords is not None else DEFAULT_RED_KEYWORDS),
            amber_keywords=list(amber_keywords if amber_keywords is not None else DEFAULT_AMBER_KEYWORDS),
        )
        self.calls = 0

    def update(
        self,
        red_keywords: Optional[Sequence[str]] = None,
        amber_keywords: Optional[Sequence[str]] = None,
    ) -> None:
        """Replace one or both lists; picked up on the store's next refresh."""
        self._keywords = TrafficLightKeywords(
            red_keywords=list(red_keywords) if red_keywords is not None else self._keywords.red_keywords,
            amber_keywords=list(amber_keywords) if amber_keywords is not None else self._keywords.amber_keywords,
        )

    async def get_traffic_light_keywords(self) -> TrafficLightKeywords:
        self.calls += 1
        return self._keywords.model_copy(deep=True)


class ConfigKeywordSource(KeywordSource):
    """
    Reads keyword lists from the ``classifier.keywords`` section of the config file.

    The file is re-read on every call so edits land within one cache TTL.
    A list missing from the file falls back to the compiled-in default; a
    file that cannot be read or parsed raises KeywordSourceError.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path

    async def get_traffic_light_keywords(self) -> TrafficLightKeywords:
        loop = asyncio.get_running_loop()
        try:
            config = await loop.run_in_executor(None, read_config, self.config_path)
        except (OSError, ValueError) as e:
            raise KeywordSourceError(f"Unreadable config file: {e}") from e
        keywords = config.classifier.keywords

        return TrafficLightKeywords(
            red_keywords=(
                keywords.red_keywords
                if keywords.red_keywords is not None
                else list(DEFAULT_RED_KEYWORDS)
            ),
            amber_keywords=(
                keywords.amber_keywords
                if keywords.amber_keywords is not None
                else list(DEFAULT_AMBER_KEYWORDS)
            ),
        )


class KeywordStore:
    """
    Cached RED/AMBER keyword lists backed by a settings source.

    The current lists live in a single immutable ``KeywordSet``. Refreshes
    build a new set and swap the reference, so readers never lock and never
    see a half-updated pair of lists.
    """

    def __init__(
        self,
        source: KeywordSource,
        defaults: Optional[KeywordSet] = None,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the keyword store.

        Args:
            source: Settings collaborator supplying the live keyword lists
            defaults: Lists used until the first successful load
            ttl_seconds: Age after which a read triggers a background refresh
            clock: Monotonic time source (seconds)
        """
        self.source = source
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._snapshot = defaults if defaults is not None else KeywordSet.defaults()
        self._initialized = False
        self._init_lock = asyncio.Lock()
        self._refresh_task: Optional[asyncio.Task] = None

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def ensure_initialized(self) -> None:
        """
        Load keywords from the settings source once.

        Safe to call many times and from concurrent tasks: only the first call
        hits the source. A failed load leaves the defaults in place and still
        marks the store initialized.
        """
        if self._initialized:
            return

        async with self._init_lock:
            if self._initialized:
                return
            logger.info("Initializing job classifier - loading keywords from settings...")
            await self.refresh()

    async def refresh(self) -> KeywordSet:
        """Reload keywords from the settings source. Never raises."""
        try:
            keywords = _coerce_keywords(await self.source.get_traffic_light_keywords())
        except Exception as e:
            logger.warning(
                f"Failed to load keywords from settings, keeping {self._snapshot.source} "
                f"({len(self._snapshot.red)} RED, {len(self._snapshot.amber)} AMBER): {e}"
            )
            self._initialized = True
            return self._snapshot

        snapshot = KeywordSet.from_lists(
            keywords.red_keywords,
            keywords.amber_keywords,
            loaded_at=self._clock(),
        )
        self._snapshot = snapshot
        self._initialized = True
        logger.info(
            f"Loaded keywords from settings: {len(snapshot.red)} RED, "
            f"{len(snapshot.amber)} AMBER"
        )
        return snapshot

    def snapshot(self) -> KeywordSet:
        """Current keyword set; schedules a background refresh when stale."""
        current = self._snapshot
        if current.is_stale(self._clock(), self.ttl_seconds):
            self._schedule_refresh()
        return current

    def get_red_keywords(self) -> tuple[str, ...]:
        return self.snapshot().red

    def get_amber_keywords(self) -> tuple[str, ...]:
        return self.snapshot().amber

    def _schedule_refresh(self) -> None:
        if self._refresh_task is not None and not self._refresh_task.done():
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Sync caller outside an event loop: serve the current set as is
            return

        logger.debug("Keyword cache stale, triggering background refresh...")
        self._refresh_task = loop.create_task(self.refresh())

    async def wait_for_refresh(self) -> None:
        """Wait for an in-flight background refresh, if any."""
        if self._refresh_task is not None:
            await self._refresh_task
