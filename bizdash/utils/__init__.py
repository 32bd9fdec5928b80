"""
BizDash Analytics - Utilities Package

Configuration, logging, and performance timing helpers.
"""
