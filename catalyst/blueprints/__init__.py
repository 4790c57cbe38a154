"""
AI Catalyst Workshop
Blueprint registry.
"""
