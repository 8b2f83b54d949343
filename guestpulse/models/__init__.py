"""
Data models for feedback records and derived analytics.
"""
