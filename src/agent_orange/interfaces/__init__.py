"""
Interfaces module - Adapters for the outside world
==================================================

- web/:      FastAPI request-producer API, voice webhook, health and metrics
- voice/:    Voice-skill envelope parsing, intent routing and handlers
- telegram/: Telegram chat relay in front of the command guard
"""
