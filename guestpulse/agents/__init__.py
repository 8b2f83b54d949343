"""
Agent implementations for GuestPulse.

Contains the modules that turn feedback records into dashboard output:
- Aggregation (Stats Aggregator + Trend Detector)
- Response Composer (LLM replies, summaries, translations)
- Mock feedback generator for development data
"""
