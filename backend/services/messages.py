"""
messages.py — User-facing notification texts, Spanish and English.
"""

from config import APP_LANGUAGE

TEXTS = {
    "es": {
        "intention_line": "Si {trigger} → {action}",
        "intention_due": "⚡ ¡Es hora de tu intención!",
        "intention_daily": "☀️ Tu intención diaria",
        "intention_weekly": "📅 Tu intención semanal",
        "action_complete": "✅ Completado",
        "action_snooze": "⏰ Más tarde",
        "completion_check_one": "✅ ¿Completaste tu intención de hoy?",
        "completion_check_many": "✅ Verifica tus intenciones del día",
        "completion_check_many_body": "Tienes {count} intenciones pendientes. ¿Las completaste?",
        "action_view_pending": "📋 Ver pendientes",
        "action_all_done": "✓ Todo listo",
        "streak_risk_one": "🔥 ¡Tu racha de {streak} días está en peligro!",
        "streak_risk_many": "🔥 ¡{count} rachas en peligro!",
        "streak_risk_many_body": "Tu racha más larga: {streak} días. ¡No las pierdas!",
        "action_mark": "✅ Marcar hecho",
        "action_view_streaks": "📋 Ver rachas",
        "tasks_pending": "⚠️ Tareas pendientes",
        "tasks_pending_body": "Tienes {overdue} tarea(s) vencida(s) y {due} para hoy",
        "tasks_overdue": "⚠️ Tareas vencidas",
        "tasks_overdue_body": "Tienes {overdue} tarea(s) vencida(s)",
        "tasks_due": "📅 Tareas para hoy",
        "tasks_due_body": "Tienes {due} tarea(s) para completar hoy",
        "already_completed": "Ya completada hoy",
    },
    "en": {
        "intention_line": "If {trigger} → {action}",
        "intention_due": "⚡ Time for your intention!",
        "intention_daily": "☀️ Your daily intention",
        "intention_weekly": "📅 Your weekly intention",
        "action_complete": "✅ Done",
        "action_snooze": "⏰ Later",
        "completion_check_one": "✅ Did you complete today's intention?",
        "completion_check_many": "✅ Check today's intentions",
        "completion_check_many_body": "You have {count} pending intentions. Did you complete them?",
        "action_view_pending": "📋 View pending",
        "action_all_done": "✓ All done",
        "streak_risk_one": "🔥 Your {streak} day streak is at risk!",
        "streak_risk_many": "🔥 {count} streaks at risk!",
        "streak_risk_many_body": "Your longest streak: {streak} days. Don't lose them!",
        "action_mark": "✅ Mark done",
        "action_view_streaks": "📋 View streaks",
        "tasks_pending": "⚠️ Pending tasks",
        "tasks_pending_body": "You have {overdue} overdue task(s) and {due} due today",
        "tasks_overdue": "⚠️ Overdue tasks",
        "tasks_overdue_body": "You have {overdue} overdue task(s)",
        "tasks_due": "📅 Tasks for today",
        "tasks_due_body": "You have {due} task(s) to complete today",
        "already_completed": "Already completed today",
    },
}


def t(key: str, language: str = APP_LANGUAGE, **kwargs) -> str:
    texts = TEXTS.get(language, TEXTS["es"])
    return texts[key].format(**kwargs)


def intention_line(trigger: str | None, action: str | None, language: str = APP_LANGUAGE) -> str:
    return t("intention_line", language, trigger=trigger, action=action)
