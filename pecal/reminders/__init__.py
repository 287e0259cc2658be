"""Task reminder dispatch pipeline.

Task mutation handlers append events to a Redis stream (producer). A stream
consumer compiles those events into a schedule (sorted set + job hash), and a
due-job dispatcher delivers notifications for jobs whose trigger time passed.
Both procedures are driven by Celery beat or the cron HTTP endpoint.
"""
