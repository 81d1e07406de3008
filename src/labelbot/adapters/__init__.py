"""rq task entry points and the worker process."""
