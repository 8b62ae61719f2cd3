from __future__ import annotations

from packages.greetings.registry import CategoryRegistry, SubCondition, category, subcase

REGISTRY_VERSION = "2025-01"

# Zero-weight rows are placeholders for greetings without texts yet; weight
# alone keeps them out of the draw.
PLACEHOLDER_SUBCASES = {
    "reminder": (
        "gentle_nudge",
        "motivation_boost",
        "habit_reinforcement",
        "positive_reminder",
        "encouragement",
        "persistence_message",
    ),
    "seasonal": (
        "new_year",
        "valentine_day",
        "spring_cleaning",
        "summer_fresh",
        "back_to_school",
        "holiday_spirit",
    ),
    "mood_boost": (
        "confidence_builder",
        "positive_affirmation",
        "smile_compliment",
        "energy_booster",
        "self_care_praise",
        "progress_celebration",
    ),
    "educational": (
        "brushing_tip",
        "oral_health_fact",
        "technique_advice",
        "product_suggestion",
        "health_benefit",
        "prevention_tip",
    ),
}

INFORMATIVE_SUBCASES = (
    "habit_tip",
    "dental_fact",
    "science_fact",
    "psych_fact",
    "dental_fact_2",
    "dental_fact_3",
    "science_fact_2",
    "psych_fact_2",
    "morning_breath_fact",
    "toothpaste_fact",
    "floss_fact",
    "brushing_too_hard",
    "night_brushing_importance",
    "brushing_angle_fact",
    "dry_brush_fact",
)


def _placeholders(category_id: str):
    return [subcase(name, 0, "never") for name in PLACEHOLDER_SUBCASES[category_id]]


def default_registry() -> CategoryRegistry:
    return CategoryRegistry(
        [
            category(
                "time_context",
                3.0,
                [
                    subcase("morning", 1.0, "is_morning"),
                    subcase("afternoon", 1.0, "is_afternoon"),
                    subcase("evening", 1.0, "is_evening"),
                    subcase("late_night", 0.5, "is_late_night"),
                    subcase("weekday", 1.0, "is_weekday"),
                    subcase("weekend", 1.2, "is_weekend"),
                ],
                name="Time Context",
                description="Greetings based on time of day and week",
            ),
            category(
                "brushing_behaviour",
                0,
                [
                    subcase("first_brush_ever", 5.0, "is_first_brush_ever"),
                    subcase("consistent_habit", 1.5, "is_consistent_habit"),
                    subcase("missed_yesterday", 2.0, "missed_yesterday"),
                    subcase("back_after_break", 2.0, "is_back_after_break"),
                    subcase("perfect_week", 2.0, "is_perfect_week"),
                    subcase("struggling_consistency", 1.5, "is_struggling_consistency"),
                ],
                name="Brushing Behaviour",
                description="Greetings based on user brushing patterns and consistency",
            ),
            category(
                "streak_state",
                2.0,
                [
                    subcase("new_streak_starting", 2.0, "is_new_streak"),
                    subcase("almost_week_streak", 2.5, "is_almost_week_streak"),
                    subcase("over_10_day_streak", 3.0, "is_over_ten_day_streak"),
                    subcase("best_streak_reached", 5.0, "is_best_streak_reached"),
                    subcase("streak_broken", 4.0, "is_streak_broken"),
                ],
                name="Streak State",
                description="Greetings based on current streak status and momentum",
            ),
            category(
                "milestone_enhancements",
                3.0,
                [
                    subcase(
                        "brush_count_milestones",
                        4.0,
                        "is_brush_count_milestone",
                        [
                            SubCondition("exactly_10", 1.0, "is_brush_count_10"),
                            SubCondition("exactly_50", 1.0, "is_brush_count_50"),
                            SubCondition("exactly_100", 1.0, "is_brush_count_100"),
                        ],
                    ),
                    subcase(
                        "monthly_brush_20",
                        4.0,
                        "is_monthly_brush_20",
                        [
                            SubCondition("monthly_brush_20", 1.0, "is_monthly_brush_20"),
                            SubCondition("brushed_7_of_10", 1.0, "is_brushed_7_of_10"),
                        ],
                    ),
                    subcase(
                        "day_7",
                        3.0,
                        "is_day_7_install",
                        [
                            SubCondition("day_7", 1.0, "is_day_7_install"),
                            SubCondition("day_30", 1.0, "is_day_30_install"),
                        ],
                    ),
                    subcase(
                        "returning_user_milestone",
                        5.0,
                        "is_returning_user_milestone",
                        [
                            SubCondition("returning_user_milestone", 1.0, "is_returning_user_milestone"),
                            SubCondition("milestone_streak_recovery", 1.0, "is_milestone_streak_recovery"),
                        ],
                    ),
                ],
                name="Milestone Enhancements",
                description="Special milestone celebrations and user journey markers",
            ),
            category("reminder", 1.0, _placeholders("reminder"), name="Reminder"),
            category("seasonal", 0.5, _placeholders("seasonal"), name="Seasonal"),
            category("mood_boost", 1.2, _placeholders("mood_boost"), name="Mood Boost"),
            category("educational", 0.8, _placeholders("educational"), name="Educational"),
            category(
                "informative",
                1.0,
                [subcase(name, 1.0, "always") for name in INFORMATIVE_SUBCASES],
                name="Informative",
                description="Habit tips, dental facts, science facts, and psychology insights",
            ),
            category(
                "celebration",
                1.8,
                [
                    subcase("session_complete", 0, "brushed_twice_today"),
                    subcase("perfect_timing", 0, "met_target_duration"),
                    subcase("consistency_win", 0, "never"),
                    subcase("improvement_noted", 0, "never"),
                    subcase("milestone_party", 0, "never"),
                    subcase("success_moment", 0, "never"),
                ],
                name="Celebration",
                description="Success moments, completions, and victory messages",
            ),
        ],
        version=REGISTRY_VERSION,
    )
