from datetime import date

from models.notification import NotificationPayload
from services.notification_service import NotificationService
from services.reminders import UserNotification

from conftest import subscription_row

TUESDAY = date(2024, 5, 7)


def payload(title="hola"):
    return NotificationPayload(title=title, body="body")


def test_one_bad_subscription_does_not_stop_the_others(store, push, webpush):
    subs = [subscription_row("user-1", n) for n in (1, 2, 3)]
    store.seed("push_subscriptions", *subs)
    webpush.statuses[subs[1]["endpoint"]] = 410

    report = NotificationService(store, push).notify_users([UserNotification("user-1", [payload()])])

    assert [endpoint for endpoint, _ in webpush.sent] == [subs[0]["endpoint"], subs[2]["endpoint"]]
    assert report.sent == 2
    assert report.removed == 1
    assert ("delete_in", "push_subscriptions", "id", [subs[1]["id"]]) in store.calls
    assert [s["id"] for s in store.rows("push_subscriptions")] == [subs[0]["id"], subs[2]["id"]]


def test_transient_failures_are_counted_not_pruned(store, push, webpush):
    subs = [subscription_row("user-1", n) for n in (1, 2)]
    store.seed("push_subscriptions", *subs)
    webpush.statuses[subs[0]["endpoint"]] = 500

    report = NotificationService(store, push).notify_users([UserNotification("user-1", [payload()])])

    assert (report.sent, report.failed, report.removed) == (1, 1, 0)
    assert len(store.rows("push_subscriptions")) == 2
    assert not any(call[0] == "delete_in" for call in store.calls)


def test_gone_subscriptions_are_pruned_in_one_call(store, push, webpush):
    subs = [subscription_row("user-1", 1), subscription_row("user-2", 1)]
    store.seed("push_subscriptions", *subs)
    for s in subs:
        webpush.statuses[s["endpoint"]] = 410

    service = NotificationService(store, push)
    report = service.notify_users([
        UserNotification("user-1", [payload("a"), payload("b")]),
        UserNotification("user-2", [payload()]),
    ])

    deletes = [call for call in store.calls if call[0] == "delete_in"]
    assert deletes == [("delete_in", "push_subscriptions", "id", [subs[0]["id"], subs[1]["id"]])]
    assert report.removed == 2
    assert report.sent == 0


def test_storage_failure_for_one_user_does_not_block_the_rest(store, push, webpush):
    store.seed("push_subscriptions", subscription_row("user-1", 1), subscription_row("user-2", 1))
    store.fail("select", "push_subscriptions", when=lambda filters: filters.get("user_id") == "user-1")

    report = NotificationService(store, push).notify_users([
        UserNotification("user-1", [payload()]),
        UserNotification("user-2", [payload()]),
    ])

    assert report.sent == 1
    assert webpush.sent[0][0] == subscription_row("user-2", 1)["endpoint"]


def test_users_without_subscriptions_are_skipped(store, push, webpush):
    report = NotificationService(store, push).notify_users([UserNotification("nobody", [payload()])])
    assert report.sent == 0
    assert webpush.sent == []


def test_prune_failure_is_logged_not_raised(store, push, webpush):
    sub = subscription_row("user-1", 1)
    store.seed("push_subscriptions", sub)
    store.fail("delete_in", "push_subscriptions")
    webpush.statuses[sub["endpoint"]] = 404

    report = NotificationService(store, push).notify_users([UserNotification("user-1", [payload()])])

    assert report.removed == 0


def test_periodicity_check_sends_one_payload_per_due_task(store, push, webpush):
    store.seed("push_subscriptions", subscription_row("user-1", 1))
    store.seed(
        "tasks",
        {"id": "t1", "user_id": "user-1", "title": "Meditar", "trigger_if": "me despierto",
         "action_then": "medito", "periodicity": "daily", "status": "todo", "current_streak": 0},
        {"id": "t2", "user_id": "user-1", "title": "Leer", "trigger_if": "ceno",
         "action_then": "leo", "periodicity": "custom", "custom_days": '["martes"]', "status": "todo"},
        {"id": "t3", "user_id": "user-1", "title": "Semanal", "trigger_if": "es lunes",
         "action_then": "planifico", "periodicity": "weekly", "status": "todo"},
        {"id": "t4", "user_id": "user-1", "title": "Hecho", "trigger_if": "a",
         "action_then": "b", "periodicity": "daily", "status": "completed"},
        {"id": "t5", "user_id": "user-1", "title": "Una vez", "trigger_if": "a",
         "action_then": "b", "periodicity": "one_time", "status": "todo"},
        {"id": "t6", "user_id": "user-1", "title": "Tarea normal", "periodicity": "daily", "status": "todo"},
    )

    report = NotificationService(store, push).periodicity_check(TUESDAY)

    assert report.checked == 3  # t1, t2, t3
    assert report.users_notified == 1
    assert report.sent == 2     # weekly is Monday only


def test_daily_completion_check_skips_tasks_completed_today(store, push, webpush):
    store.seed("push_subscriptions", subscription_row("user-1", 1), subscription_row("user-2", 1))
    store.seed(
        "tasks",
        {"id": "t1", "user_id": "user-1", "trigger_if": "a", "action_then": "b", "periodicity": "daily",
         "status": "todo", "last_completed_at": "2024-05-07T08:00:00+00:00"},
        {"id": "t2", "user_id": "user-2", "trigger_if": "c", "action_then": "d", "periodicity": "daily",
         "status": "todo", "last_completed_at": "2024-05-06T08:00:00+00:00"},
    )

    report = NotificationService(store, push).daily_completion_check(TUESDAY)

    assert report.users_notified == 1
    assert [endpoint for endpoint, _ in webpush.sent] == [subscription_row("user-2", 1)["endpoint"]]


def test_streak_reminder_ignores_streaks_marked_today(store, push, webpush):
    store.seed("push_subscriptions", subscription_row("user-1", 1))
    store.seed(
        "tasks",
        {"id": "t1", "user_id": "user-1", "trigger_if": "a", "action_then": "b", "status": "todo",
         "current_streak": 5},
        {"id": "t2", "user_id": "user-1", "trigger_if": "c", "action_then": "d", "status": "todo",
         "current_streak": 9},
        {"id": "t3", "user_id": "user-1", "trigger_if": "e", "action_then": "f", "status": "todo",
         "current_streak": 2},
    )
    store.seed("habit_day_marks", {"task_id": "t2", "marked_date": "2024-05-07"})

    report = NotificationService(store, push).streak_reminder(TUESDAY)

    assert report.checked == 2
    assert report.sent == 1
    assert "5" in webpush.sent[0][1]


def test_due_task_check_groups_due_and_overdue_per_user(store, push, webpush):
    store.seed("push_subscriptions", subscription_row("user-1", 1))
    store.seed(
        "tasks",
        {"id": "t1", "user_id": "user-1", "title": "hoy", "status": "todo",
         "due_date": "2024-05-07T15:00:00+00:00"},
        {"id": "t2", "user_id": "user-1", "title": "ayer", "status": "in_progress",
         "due_date": "2024-05-06T15:00:00+00:00"},
        {"id": "t3", "user_id": "user-1", "title": "mañana", "status": "todo",
         "due_date": "2024-05-08T15:00:00+00:00"},
        {"id": "t4", "user_id": "user-1", "title": "vieja", "status": "completed",
         "due_date": "2024-05-01T15:00:00+00:00"},
    )

    report = NotificationService(store, push).due_task_check(TUESDAY)

    assert report.checked == 2
    assert report.users_notified == 1
    assert report.sent == 1


def test_malformed_subscription_row_is_skipped(store, push, webpush):
    broken = {**subscription_row("user-1", 1), "p256dh": None}
    store.seed("push_subscriptions", broken, subscription_row("user-1", 2), subscription_row("user-2", 1))

    report = NotificationService(store, push).notify_users([
        UserNotification("user-1", [payload()]),
        UserNotification("user-2", [payload()]),
    ])

    assert report.sent == 2
    assert broken["endpoint"] not in [endpoint for endpoint, _ in webpush.sent]


def test_users_notified_counts_users_with_due_items_even_without_devices(store, push, webpush):
    store.seed("push_subscriptions", subscription_row("user-1", 1))
    store.seed(
        "tasks",
        {"id": "t1", "user_id": "user-1", "trigger_if": "a", "action_then": "b", "periodicity": "daily",
         "status": "todo"},
        {"id": "t2", "user_id": "user-2", "trigger_if": "c", "action_then": "d", "periodicity": "daily",
         "status": "todo"},
    )

    report = NotificationService(store, push).periodicity_check(TUESDAY)

    assert report.users_notified == 2
    assert report.sent == 1
