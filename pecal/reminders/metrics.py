from prometheus_client import Counter


reminder_events_emitted_total = Counter(
    "reminder_events_emitted_total",
    "Total reminder events appended to the stream",
    ["action"],
)

reminder_events_emit_failed_total = Counter(
    "reminder_events_emit_failed_total",
    "Total reminder events dropped because the stream append failed",
)

stream_entries_processed_total = Counter(
    "reminder_stream_entries_processed_total",
    "Total stream entries applied to the schedule",
)

stream_entries_skipped_total = Counter(
    "reminder_stream_entries_skipped_total",
    "Total malformed stream entries skipped",
)

jobs_scheduled_total = Counter(
    "reminder_jobs_scheduled_total",
    "Total reminder jobs written to the schedule",
)

jobs_removed_total = Counter(
    "reminder_jobs_removed_total",
    "Total reminder jobs removed from the schedule by the consumer",
)

dispatcher_scans_total = Counter(
    "reminder_dispatcher_scans_total",
    "Total due-job dispatcher scan cycles",
)

jobs_dispatched_total = Counter(
    "reminder_jobs_dispatched_total",
    "Total due jobs that reached audience resolution",
)

jobs_dropped_total = Counter(
    "reminder_jobs_dropped_total",
    "Total due jobs dropped without delivery",
    ["reason"],
)

notifications_sent_total = Counter(
    "reminder_notifications_sent_total",
    "Total reminder notifications persisted",
)

dedupe_claims_lost_total = Counter(
    "reminder_dedupe_claims_lost_total",
    "Total members skipped because the occurrence was already claimed",
)

push_sent_total = Counter(
    "reminder_push_sent_total",
    "Total push messages accepted by FCM",
)

push_failed_total = Counter(
    "reminder_push_failed_total",
    "Total push messages rejected or not sent",
)

push_tokens_deactivated_total = Counter(
    "reminder_push_tokens_deactivated_total",
    "Total push tokens deactivated after a bounce",
)
