"""
GuestPulse - guest feedback analytics for the resort admin dashboard.
"""
