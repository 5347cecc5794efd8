"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime

import pytest

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
from coach_planner.domain.errors import OrderingError
from coach_planner.domain.info_blocks import InfoCategory
from coach_planner.domain.insights import (
    InsightCacheKey,
    InsightCacheRecord,
    InsightKey,
)
from coach_planner.domain.nutrition import (
    MealSlot,
    NutritionTotals,
    RecipeNutritionSnapshot,
)
from coach_planner.domain.paths import AssignmentKind, ExercisePosition


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {
            "select": [],
            "insert": [],
            "update": [],
            "upsert": [],
            "delete": [],
        }
    )
    last_payload: object | None = None
    last_options: dict[str, object] = field(default_factory=dict)
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    executed: list[str] = field(default_factory=list)
    failing_actions: set[str] = field(default_factory=set)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        return self

    def upsert(self, payload, **options) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "upsert"
        self.last_payload = payload
        self.last_options = options
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    @property
    def not_(self) -> "FakeTable":
        self.last_filters.append(("not", None))
        return self

    def in_(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, _column: str, desc: bool = False) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        self.executed.append(action)
        if action in self.failing_actions:
            raise RuntimeError(f"{self.name} {action} failed")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _ingredient_row(**overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "id": "ing-oats",
        "name": "Haferflocken",
        "calories": 370,
        "protein": 13,
        "carbs": 59,
        "fat": 7,
        "fiber": None,
        "grams_per_hand": 40,
        "ml_density_g_per_ml": None,
    }
    row.update(overrides)
    return row


def test_assignment_repository_parses_rows() -> None:
    client = FakeSupabaseClient()
    client.table("path_assignments").queue(
        "select",
        [
            {
                "id": "a-1",
                "path_id": "path-1",
                "kind": "NUTRITION",
                "content_ref_id": "plan-1",
                "week_start": 1,
                "week_end": 4,
                "variant_option_id": None,
            }
        ],
    )

    assignments = SupabaseAssignmentRepository(client).list_path_assignments("path-1")

    assert assignments[0].kind is AssignmentKind.NUTRITION
    assert assignments[0].variant_option_id is None
    assert client.table("path_assignments").last_filters == [("path_id", "path-1")]


def test_meal_entry_repository_embeds_ingredients() -> None:
    client = FakeSupabaseClient()
    client.table("nutrition_plan_meal_entries").queue(
        "select",
        [
            {
                "nutrition_plan_id": "plan-1",
                "slot": "MORNING",
                "amount": "2",
                "unit": "HAND",
                "ingredient": _ingredient_row(),
            },
            {
                "nutrition_plan_id": "plan-1",
                "slot": "LUNCH",
                "amount": 1,
                "unit": "g",
                "ingredient": None,
            },
        ],
    )
    repository = SupabaseMealEntryRepository(client)

    entries = repository.list_meal_entries(["plan-1"])

    assert len(entries) == 1
    assert entries[0].slot is MealSlot.MORNING
    assert entries[0].amount == 2.0
    assert entries[0].ingredient.conversion.grams_per_hand == 40
    assert entries[0].ingredient.nutrition.fiber is None
    assert repository.list_meal_entries([]) == []


def test_recipe_repository_filters_variants_and_incomplete_macros() -> None:
    client = FakeSupabaseClient()
    client.table("recipes").queue(
        "select",
        [
            {
                "id": "r-1",
                "name": "Porridge",
                "variant_option_id": None,
                "nutrition_calories": 400,
                "nutrition_protein": 15,
                "nutrition_carbs": 60,
                "nutrition_fat": 9,
            },
            {
                "id": "r-2",
                "name": "Steak",
                "variant_option_id": "opt-meat",
                "nutrition_calories": 500,
                "nutrition_protein": 40,
                "nutrition_carbs": 0,
                "nutrition_fat": 30,
            },
            {
                "id": "r-3",
                "name": "Neu",
                "variant_option_id": None,
                "nutrition_calories": None,
                "nutrition_protein": None,
                "nutrition_carbs": None,
                "nutrition_fat": None,
            },
        ],
    )

    recipes = SupabaseRecipeRepository(client).list_matchable_recipes(["opt-veggie"])

    assert [recipe.id for recipe in recipes] == ["r-1"]


def test_recipe_repository_ingredients_and_snapshot() -> None:
    client = FakeSupabaseClient()
    client.table("recipe_ingredients").queue(
        "select",
        [
            {
                "recipe_id": "r-1",
                "amount": 50,
                "unit": "g",
                "ingredient": _ingredient_row(),
            }
        ],
    )
    client.table("recipe_ingredients").queue(
        "select", [{"recipe_id": "r-1"}, {"recipe_id": "r-1"}, {"recipe_id": "r-2"}]
    )
    repository = SupabaseRecipeRepository(client)

    rows = repository.list_recipe_ingredients("r-1")
    recipe_ids = repository.list_recipe_ids_for_ingredient("ing-oats")
    repository.save_nutrition_snapshot(
        RecipeNutritionSnapshot(
            recipe_id="r-1",
            totals=NutritionTotals(grams=50, calories=185.0, protein=6.5),
            warning_count=0,
            has_estimated_conversions=False,
        )
    )

    assert rows[0].ingredient.name == "Haferflocken"
    assert recipe_ids == ["r-1", "r-2"]
    payload = client.table("recipes").last_payload
    assert payload["nutrition_calories"] == 185.0
    assert payload["nutrition_has_estimates"] is False
    assert ("id", "r-1") in client.table("recipes").last_filters


def test_insight_cache_repository_roundtrip() -> None:
    client = FakeSupabaseClient()
    table = client.table("dashboard_insight_cache")
    key = InsightCacheKey("user-1", 2, InsightKey.MOMENTUM)
    generated_at = datetime(2024, 1, 8, 9, 0, tzinfo=UTC)
    record = InsightCacheRecord(
        content="Weiter so.",
        context_hash="abc",
        generated_at=generated_at,
        expires_at=datetime(2024, 1, 8, 21, 0, tzinfo=UTC),
    )
    table.queue(
        "select",
        [
            {
                "content": "Weiter so.",
                "context_hash": "abc",
                "generated_at": "2024-01-08T09:00:00+00:00",
                "expires_at": "2024-01-08T21:00:00+00:00",
            }
        ],
    )
    repository = SupabaseInsightCacheRepository(client)

    repository.upsert(key, record)
    fetched = repository.get(key)

    assert table.last_options == {"on_conflict": "user_id,week,insight_key"}
    assert table.last_payload["insight_key"] == "MOMENTUM"
    assert fetched == record
    assert repository.get(key) is None


def _exercise_row(item_id: str, block: str, position: int) -> dict[str, object]:
    return {
        "id": item_id,
        "training_plan_id": "tp-1",
        "exercise_id": f"ex-{item_id}",
        "block": block,
        "position": position,
        "reps": 10,
        "duration_sec": None,
        "rest_sec": 60,
        "info": None,
    }


def test_exercise_positions_upsert_complete_rows() -> None:
    client = FakeSupabaseClient()
    table = client.table("training_plan_exercises")
    table.queue(
        "select", [_exercise_row("a", "SET-1", 1), _exercise_row("b", "SET-1", 2)]
    )
    repository = SupabaseExercisePositionRepository(client)

    repository.apply_positions(
        [
            ExercisePosition("b", "tp-1", "SET-1", 1),
            ExercisePosition("a", "tp-1", "SET-1", 2),
        ]
    )
    repository.apply_positions([])

    assert table.executed == ["select", "upsert"]
    assert table.last_payload == [
        _exercise_row("b", "SET-1", 1),
        _exercise_row("a", "SET-1", 2),
    ]
    assert table.last_options == {"on_conflict": "id"}


def test_exercise_positions_reject_unknown_ids() -> None:
    client = FakeSupabaseClient()
    table = client.table("training_plan_exercises")
    table.queue("select", [_exercise_row("a", "SET-1", 1)])
    repository = SupabaseExercisePositionRepository(client)

    with pytest.raises(OrderingError):
        repository.apply_positions(
            [
                ExercisePosition("a", "tp-1", "SET-1", 1),
                ExercisePosition("gone", "tp-1", "SET-1", 2),
            ]
        )

    assert table.executed == ["select"]


def test_copy_block_inserts_rows_without_ids() -> None:
    client = FakeSupabaseClient()
    table = client.table("training_plan_exercises")
    table.queue(
        "select", [_exercise_row("a", "SET-1", 1), _exercise_row("b", "SET-1", 2)]
    )
    table.queue(
        "insert",
        [_exercise_row("a2", "SET-2", 1), _exercise_row("b2", "SET-2", 2)],
    )
    repository = SupabaseExercisePositionRepository(client)

    copied = repository.copy_block("tp-1", "SET-1", "SET-2")

    assert [item.id for item in copied] == ["a2", "b2"]
    assert table.executed == ["select", "insert"]
    assert all("id" not in row for row in table.last_payload)
    assert table.last_payload[0]["exercise_id"] == "ex-a"
    assert table.last_payload[0]["block"] == "SET-2"


def test_list_plan_blocks_is_distinct() -> None:
    client = FakeSupabaseClient()
    client.table("training_plan_exercises").queue(
        "select", [{"block": "WARMUP"}, {"block": "SET-1"}, {"block": "SET-1"}]
    )
    repository = SupabaseExercisePositionRepository(client)

    assert repository.list_plan_blocks("tp-1") == ["WARMUP", "SET-1"]


def _enrollment_client() -> FakeSupabaseClient:
    client = FakeSupabaseClient()
    client.table("path_enrollments").queue(
        "select",
        [
            {
                "id": "enr-1",
                "user_id": "user-1",
                "path_id": "path-1",
                "start_date": "2024-01-01T00:00:00+00:00",
            }
        ],
    )
    client.table("path_enrollment_variants").queue(
        "select", [{"variant_option_id": "opt-veggie"}]
    )
    return client


def test_enrollment_repository_reads_and_replaces_variants() -> None:
    client = _enrollment_client()
    variants = client.table("path_enrollment_variants")
    repository = SupabaseEnrollmentRepository(client)

    enrollment = repository.get_enrollment("enr-1")
    repository.update_selected_variants("enr-1", ["opt-meat"])

    assert enrollment is not None
    assert enrollment.start_date == date(2024, 1, 1)
    assert enrollment.selected_variant_option_ids == ["opt-veggie"]
    assert variants.executed == ["select", "upsert", "delete"]
    assert variants.last_options == {"on_conflict": "enrollment_id,variant_option_id"}
    assert variants.last_filters[-3:] == [
        ("enrollment_id", "enr-1"),
        ("not", None),
        ("variant_option_id", ["opt-meat"]),
    ]
    assert repository.get_active_enrollment("user-2") is None


def test_enrollment_variants_survive_failed_write() -> None:
    client = _enrollment_client()
    variants = client.table("path_enrollment_variants")
    variants.failing_actions = {"upsert"}
    repository = SupabaseEnrollmentRepository(client)

    with pytest.raises(RuntimeError):
        repository.update_selected_variants("enr-1", ["opt-meat"])

    assert variants.executed == ["upsert"]
    enrollment = repository.get_enrollment("enr-1")
    assert enrollment is not None
    assert enrollment.selected_variant_option_ids == ["opt-veggie"]


def test_clearing_enrollment_variants_deletes_all_rows() -> None:
    client = FakeSupabaseClient()
    variants = client.table("path_enrollment_variants")
    repository = SupabaseEnrollmentRepository(client)

    repository.update_selected_variants("enr-1", [])

    assert variants.executed == ["delete"]
    assert variants.last_filters == [("enrollment_id", "enr-1")]


def test_info_block_repository_parses_rows_and_reads() -> None:
    client = FakeSupabaseClient()
    blocks = client.table("info_blocks")
    blocks.queue(
        "select",
        [
            {
                "id": "ib-1",
                "name": "Schlaf",
                "content_html": "<p>8 Stunden</p>",
                "video_url": None,
                "category": "GENERAL",
                "is_full_path": False,
                "week_start": 2,
                "week_end": 3,
                "created_at": "2024-01-05T10:00:00+00:00",
            }
        ],
    )
    reads = client.table("user_info_block_reads")
    reads.queue("select", [{"info_block_id": "ib-1"}])
    repository = SupabaseInfoBlockRepository(client)

    parsed = repository.list_info_blocks(["ib-1"], [InfoCategory.GENERAL])
    read_ids = repository.list_read_info_block_ids("user-1", ["ib-1"])
    repository.mark_read("user-1", "ib-1", datetime(2024, 3, 1, tzinfo=UTC))

    assert parsed[0].category is InfoCategory.GENERAL
    assert (parsed[0].week_start, parsed[0].week_end) == (2, 3)
    assert parsed[0].created_at == datetime(2024, 1, 5, 10, tzinfo=UTC)
    assert parsed[0].video_url is None
    assert ("category", ["GENERAL"]) in blocks.last_filters
    assert read_ids == {"ib-1"}
    assert reads.last_payload == {
        "user_id": "user-1",
        "info_block_id": "ib-1",
        "read_at": "2024-03-01T00:00:00+00:00",
    }
    assert reads.last_options == {"on_conflict": "user_id,info_block_id"}


def test_info_block_repository_skips_empty_queries() -> None:
    client = FakeSupabaseClient()
    repository = SupabaseInfoBlockRepository(client)

    assert repository.list_info_blocks([], [InfoCategory.FOOD]) == []
    assert repository.list_read_info_block_ids("user-1", []) == set()
    assert client.tables == {}
