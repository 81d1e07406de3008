"""Adapters for redis, rq, HTTP, the browser, chat and language models."""
