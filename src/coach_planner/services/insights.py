"""Content-hash keyed cache and prompts for generated coaching insights."""

import hashlib
import json
import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass, field, is_dataclass
from datetime import UTC, datetime, timedelta

from coach_planner.domain.errors import ExternalGenerationError
from coach_planner.domain.insights import (
    CoachTone,
    InsightCacheKey,
    InsightCacheRecord,
    InsightCard,
    InsightContext,
    InsightKey,
    InsightResult,
)
from coach_planner.services.cache import InsightCacheStore
from coach_planner.services.generation import TextGenerator

DEFAULT_TTL = timedelta(hours=12)
MAX_SENTENCES = 4
MAX_LENGTH = 680
MAX_INFO_NOTES = 2
INFO_NOTE_LENGTH = 160

INSIGHT_TITLES: dict[InsightKey, str] = {
    InsightKey.TODAY_FOCUS: "Heute im Fokus",
    InsightKey.GOAL_FEEDBACK: "Ziel-Feedback",
    InsightKey.PLAN_SYNC: "Plan-Integration",
    InsightKey.MOMENTUM: "Momentum",
}

TONE_GUIDANCE: dict[CoachTone, str] = {
    CoachTone.SUPPORTIVE: "Warm, ermutigend und lösungsorientiert.",
    CoachTone.DIRECT: "Direkt, klar und ohne Floskeln.",
    CoachTone.PERFORMANCE: "Leistungsorientiert, ambitioniert und fordernd.",
    CoachTone.ANALYTICAL: "Ruhig, strukturiert und analytisch-präzise.",
}

FOCUS_BY_KEY: dict[InsightKey, str] = {
    InsightKey.TODAY_FOCUS: (
        "Formuliere einen präzisen Fokus für heute mit 1-3 direkt "
        "ausführbaren Schritten."
    ),
    InsightKey.GOAL_FEEDBACK: (
        "Interpretiere den Fortschritt Richtung Ziel nachvollziehbar und mit "
        "konkreten Zahlenbezügen."
    ),
    InsightKey.PLAN_SYNC: (
        "Bewerte, wie gut Training, Ernährung und Einkauf gerade zusammenspielen, "
        "und nenne Engpässe."
    ),
    InsightKey.MOMENTUM: (
        "Stärke Konstanz und Momentum mit einem klaren Next-Best-Step für die "
        "nächsten 24 Stunden."
    ),
}

INFO_CATEGORIES_BY_KEY: dict[InsightKey, tuple[str, ...]] = {
    InsightKey.TODAY_FOCUS: ("WORKOUT", "GENERAL"),
    InsightKey.GOAL_FEEDBACK: ("MOTIVATION", "GENERAL"),
    InsightKey.PLAN_SYNC: ("FOOD", "WORKOUT", "GENERAL"),
    InsightKey.MOMENTUM: ("MOTIVATION", "GENERAL"),
}

_GREETING = re.compile(
    r"^(hallo|hi|hey|guten\s+(morgen|tag|abend)|servus|moin)\b[\s,!:.-]*",
    re.IGNORECASE,
)
_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")
_BLOCK_TAGS = re.compile(r"<(style|script)[\s\S]*?</\1>", re.IGNORECASE)
_TAGS = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")

_logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def compute_context_hash(context: object) -> str:
    """Hash a context with canonical JSON so equal inputs hash equally."""
    payload = asdict(context) if is_dataclass(context) else context
    serialized = json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=_json_default,
    )
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()


def _json_default(value: object) -> object:
    if isinstance(value, set | frozenset):
        return sorted(value, key=str)
    return str(value)


def sanitize_insight_text(
    value: str, max_sentences: int = MAX_SENTENCES, max_length: int = MAX_LENGTH
) -> str:
    """Collapse lines, drop a leading greeting and cap sentences and length."""
    compact = " ".join(
        line.strip() for line in value.replace("\r", "").split("\n") if line.strip()
    )
    without_greeting = _GREETING.sub("", compact, count=1)
    sentences = [
        chunk.strip()
        for chunk in _SENTENCE_BREAK.split(without_greeting)
        if chunk.strip()
    ]
    return " ".join(sentences[:max_sentences])[:max_length]


def strip_html(value: str) -> str:
    """Reduce HTML content to plain text."""
    text = _BLOCK_TAGS.sub(" ", value)
    text = _TAGS.sub(" ", text)
    text = re.sub(r"&nbsp;", " ", text, flags=re.IGNORECASE)
    return _WHITESPACE.sub(" ", text).strip()


@dataclass
class InsightCache:
    """Reuses generated text while its context hash and TTL still hold."""

    store: InsightCacheStore
    ttl: timedelta = DEFAULT_TTL
    clock: Callable[[], datetime] = field(default=_utc_now)

    async def get_or_generate(
        self,
        key: InsightCacheKey,
        context: object,
        generate: Callable[[], Awaitable[str]],
        force_refresh: bool = False,
    ) -> InsightResult:
        """Return cached text when valid, otherwise generate and upsert."""
        context_hash = compute_context_hash(context)
        now = self.clock()
        existing = self.store.get(key)
        if (
            existing is not None
            and not force_refresh
            and existing.context_hash == context_hash
            and existing.expires_at > now
        ):
            return InsightResult(
                content=existing.content,
                from_cache=True,
                generated_at=existing.generated_at,
                expires_at=existing.expires_at,
            )

        try:
            content = await generate()
        except ExternalGenerationError:
            raise
        except Exception as exc:
            raise ExternalGenerationError(f"Generation failed for {key}") from exc

        generated_at = self.clock()
        record = InsightCacheRecord(
            content=content,
            context_hash=context_hash,
            generated_at=generated_at,
            expires_at=generated_at + self.ttl,
        )
        self.store.upsert(key, record)
        _logger.info(
            "Insight generated: user=%s week=%s key=%s forced=%s",
            key.user_id,
            key.week,
            key.insight_key,
            force_refresh,
        )
        return InsightResult(
            content=record.content,
            from_cache=False,
            generated_at=record.generated_at,
            expires_at=record.expires_at,
        )


def select_info_notes(context: InsightContext, insight_key: InsightKey) -> list[str]:
    """Pick up to two info-block notes relevant to an insight card."""
    notes: list[str] = []
    for category in INFO_CATEGORIES_BY_KEY[insight_key]:
        for raw in context.info_notes.get(category, []):
            text = strip_html(raw)[:INFO_NOTE_LENGTH]
            if len(text) > 3:
                notes.append(text)
    return notes[:MAX_INFO_NOTES]


def build_prompt(
    context: InsightContext, insight_key: InsightKey, info_notes: list[str]
) -> str:
    """Build the German coaching prompt for one insight card."""
    goal_text = (
        context.goal.strip()
        if context.goal and context.goal.strip()
        else "kein explizites Freitext-Ziel hinterlegt"
    )
    info_text = (
        " | ".join(info_notes) if info_notes else "keine passenden Info-Block-Hinweise"
    )
    lines = [
        "Du bist ein persönlicher Fitness- und Ernährungscoach in einer App.",
        "Sprache: ausschließlich Deutsch.",
        f"Tonfall: {TONE_GUIDANCE[context.tone]}",
        "Schreibe NICHT generisch. Beziehe dich auf konkrete Daten und Namen.",
        "Nutze mindestens zwei konkrete Zahlen aus dem Kontext.",
        "Länge: 2 bis 4 Sätze, kompakt und konkret.",
        "Beginne OHNE Begrüßung (kein Hallo/Hi/Guten Morgen).",
        "Kein medizinischer Rat.",
        f"Modus: {FOCUS_BY_KEY[insight_key]}",
        "",
        "Kontext:",
        f"- Pfad: {context.path_name}",
        f"- Woche: {context.week}/{context.max_week}",
        f"- Ziel (Freitext): {goal_text}",
        f"- Heute: {context.today_label}",
        "- Heutiges Training: "
        f"{context.today_training_name or 'kein Training geplant'}",
        f"- Heutiger Meal-Plan: {context.today_meal_plan_summary}",
        "- Rezept-Alternativen für heute: "
        f"{context.today_recipe_suggestion_summary}",
        f"- Relevante Info-Block Hinweise: {info_text}",
        f"- Pfad-Fortschritt: {round(context.path_progress * 100)}%",
        "- Workout-Fortschritt: "
        f"{context.workout_completed}/{context.workout_planned}",
        f"- Einkauf erledigt: {context.shopping_done}/{context.shopping_total}",
        "- Aktive Session: "
        f"{context.active_session_day_label or 'keine aktive Session'}",
        f"- Tage seit Start: {context.days_since_start}",
        f"- Monday-Check-In Notiz: {context.monday_check_in_note or 'keine'}",
        f"- Sunday-Recap Notiz: {context.sunday_recap_note or 'keine'}",
        "",
        "Antwort: genau ein zusammenhängender Abschnitt, keine Aufzählung.",
    ]
    return "\n".join(lines)


@dataclass
class InsightService:
    """Produces the dashboard insight cards for a user week."""

    cache: InsightCache
    generator: TextGenerator

    async def get_cards(
        self, user_id: str, context: InsightContext, force_refresh: bool = False
    ) -> list[InsightCard]:
        """Return one card per insight key, generating only stale ones."""
        cards: list[InsightCard] = []
        for insight_key in InsightKey:
            info_notes = select_info_notes(context, insight_key)
            card_context = {
                **asdict(context),
                "info_notes": info_notes,
                "insight_key": insight_key,
            }
            prompt = build_prompt(context, insight_key, info_notes)
            result = await self.cache.get_or_generate(
                InsightCacheKey(
                    user_id=user_id, week=context.week, insight_key=insight_key
                ),
                card_context,
                lambda prompt=prompt: self._generate(prompt),
                force_refresh=force_refresh,
            )
            cards.append(
                InsightCard(
                    key=insight_key,
                    title=INSIGHT_TITLES[insight_key],
                    content=result.content,
                    from_cache=result.from_cache,
                    generated_at=result.generated_at,
                    expires_at=result.expires_at,
                )
            )
        return cards

    async def _generate(self, prompt: str) -> str:
        return sanitize_insight_text(await self.generator.generate_text(prompt))
