"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from coach_planner.adapters.gemini_text_client import HttpxGeminiTextClient
from coach_planner.adapters.openai_text_client import OpenAITextClient
from coach_planner.adapters.supabase_assignment_repository import (
    SupabaseAssignmentRepository,
)
from coach_planner.adapters.supabase_enrollment_repository import (
    SupabaseEnrollmentRepository,
)
from coach_planner.adapters.supabase_exercise_position_repository import (
    SupabaseExercisePositionRepository,
)
from coach_planner.adapters.supabase_info_block_repository import (
    SupabaseInfoBlockRepository,
)
from coach_planner.adapters.supabase_insight_cache_repository import (
    SupabaseInsightCacheRepository,
)
from coach_planner.adapters.supabase_meal_entry_repository import (
    SupabaseMealEntryRepository,
)
from coach_planner.adapters.supabase_recipe_repository import SupabaseRecipeRepository
from coach_planner.app_logging import configure_logging
from coach_planner.config import Settings
from coach_planner.services.assignments import AssignmentResolver
from coach_planner.services.enrollments import EnrollmentService
from coach_planner.services.generation import RetryingTextGenerator
from coach_planner.services.info_blocks import InfoBlockService
from coach_planner.services.insights import InsightCache, InsightService
from coach_planner.services.planner import PlannerService
from coach_planner.services.recipes import RecipeNutritionService
from coach_planner.services.suggestions import IngredientSuggestionService
from coach_planner.services.training_order import TrainingOrderService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    assignment_resolver: AssignmentResolver
    planner_service: PlannerService
    recipe_nutrition_service: RecipeNutritionService
    enrollment_service: EnrollmentService
    info_block_service: InfoBlockService
    training_order_service: TrainingOrderService
    insight_service: InsightService
    suggestion_service: IngredientSuggestionService
    close_resources: Callable[[], Awaitable[None]]


def build_text_client(
    settings: Settings,
) -> OpenAITextClient | HttpxGeminiTextClient:
    """Create the text client selected by the provider setting."""
    if settings.text_provider == "gemini":
        if not settings.gemini_api_key:
            raise ValueError("GEMINI_API_KEY is required for the gemini provider")
        return HttpxGeminiTextClient.create(
            api_key=settings.gemini_api_key, model=settings.gemini_model
        )
    if not settings.openai_api_key:
        raise ValueError("OPENAI_API_KEY is required for the openai provider")
    return OpenAITextClient.create(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    configure_logging()
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    assignment_resolver = AssignmentResolver(
        SupabaseAssignmentRepository(supabase_client)
    )
    recipe_repository = SupabaseRecipeRepository(supabase_client)
    planner_service = PlannerService(
        assignment_resolver=assignment_resolver,
        meal_entry_repository=SupabaseMealEntryRepository(supabase_client),
        recipe_repository=recipe_repository,
        tolerance=resolved_settings.match_tolerance,
        match_limit=resolved_settings.match_limit,
    )
    text_client = build_text_client(resolved_settings)
    # The Gemini client retries on its own.
    retry_attempts = (
        0
        if resolved_settings.text_provider == "gemini"
        else resolved_settings.generation_retry_attempts
    )
    generator = RetryingTextGenerator(client=text_client, retry_attempts=retry_attempts)
    insight_service = InsightService(
        cache=InsightCache(
            store=SupabaseInsightCacheRepository(supabase_client),
            ttl=resolved_settings.insight_cache_ttl,
        ),
        generator=generator,
    )

    async def close_resources() -> None:
        await text_client.close()

    return AppContainer(
        settings=resolved_settings,
        assignment_resolver=assignment_resolver,
        planner_service=planner_service,
        recipe_nutrition_service=RecipeNutritionService(recipe_repository),
        enrollment_service=EnrollmentService(
            SupabaseEnrollmentRepository(supabase_client)
        ),
        info_block_service=InfoBlockService(
            assignment_resolver=assignment_resolver,
            repository=SupabaseInfoBlockRepository(supabase_client),
        ),
        training_order_service=TrainingOrderService(
            SupabaseExercisePositionRepository(supabase_client)
        ),
        insight_service=insight_service,
        suggestion_service=IngredientSuggestionService(generator),
        close_resources=close_resources,
    )
