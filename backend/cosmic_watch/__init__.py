"""
Cosmic Watch — near-Earth object telemetry API.

Proxies the NASA NeoWs feed, scores each object's risk at ingest, lets
researchers override scores with manual assessments, and relays chat
messages to CosmoAI.

Usage:
    python -m cosmic_watch

Environment variables:
    NASA_API_KEY        NeoWs API key (defaults to NASA's public DEMO_KEY)
    ANTHROPIC_API_KEY   Key for the CosmoAI chat relay
    COSMIC_STORE_PATH   JSON file backing overrides, watchlists and accounts
"""
