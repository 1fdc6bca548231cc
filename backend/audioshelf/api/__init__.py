"""
API Routes Module
"""
