"""
Utilities Module
"""
