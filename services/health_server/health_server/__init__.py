"""Health/Ready server with an OpenRouter passthrough ``/chat``."""
